import sys

from asdf_vals.cli import main

sys.exit(main())
