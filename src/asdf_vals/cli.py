# src/asdf_vals/cli.py

import argparse
import os
import sys
from typing import List, Optional

from asdf_vals import log_utils
from asdf_vals.config import PluginConfig
from asdf_vals.constants import (
    DOWNLOAD_PATH_ENV_VAR,
    INSTALL_PATH_ENV_VAR,
    INSTALL_TYPE_ENV_VAR,
    INSTALL_VERSION_ENV_VAR,
    PLUGIN_NAME,
)
from asdf_vals.exceptions import PluginError
from asdf_vals.fetcher import ReleaseFetcher
from asdf_vals.installer import Installer
from asdf_vals.platform_detect import detect
from asdf_vals.versions import VersionCatalog


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PLUGIN_NAME,
        description="asdf plugin for helmfile/vals release binaries",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list-all", help="List all available versions")

    latest_parser = subparsers.add_parser(
        "latest-stable", help="Print the latest stable version"
    )
    latest_parser.add_argument(
        "query", nargs="?", default="", help="Only consider versions with this prefix"
    )

    download_parser = subparsers.add_parser(
        "download", help="Download and unpack a release into the download path"
    )
    download_parser.add_argument(
        "--version",
        default=os.environ.get(INSTALL_VERSION_ENV_VAR),
        help=f"Version to download (default: ${INSTALL_VERSION_ENV_VAR})",
    )
    download_parser.add_argument(
        "--download-path",
        default=os.environ.get(DOWNLOAD_PATH_ENV_VAR),
        help=f"Directory to download into (default: ${DOWNLOAD_PATH_ENV_VAR})",
    )

    install_parser = subparsers.add_parser(
        "install", help="Install a downloaded release"
    )
    install_parser.add_argument(
        "--install-type",
        default=os.environ.get(INSTALL_TYPE_ENV_VAR),
        help=f"Install type (default: ${INSTALL_TYPE_ENV_VAR})",
    )
    install_parser.add_argument(
        "--version",
        default=os.environ.get(INSTALL_VERSION_ENV_VAR),
        help=f"Version to install (default: ${INSTALL_VERSION_ENV_VAR})",
    )
    install_parser.add_argument(
        "--install-path",
        default=os.environ.get(INSTALL_PATH_ENV_VAR),
        help=f"Installation directory (default: ${INSTALL_PATH_ENV_VAR})",
    )
    install_parser.add_argument(
        "--download-path",
        default=os.environ.get(DOWNLOAD_PATH_ENV_VAR),
        help=f"Directory holding the downloaded release (default: ${DOWNLOAD_PATH_ENV_VAR})",
    )

    return parser


def _require(parser: argparse.ArgumentParser, args: argparse.Namespace, *names: str) -> None:
    missing = [name for name in names if not getattr(args, name)]
    if missing:
        flags = ", ".join("--" + name.replace("_", "-") for name in missing)
        parser.error(f"missing required value(s): {flags}")


def _log_startup(config: PluginConfig) -> None:
    if not config.debug:
        return
    log_utils.logger.debug(f"{PLUGIN_NAME} initialized")
    log_utils.logger.debug(f"Platform: {detect()}")
    log_utils.logger.debug(f"Configuration: {config.describe()}")


def run_command(args: argparse.Namespace, config: PluginConfig) -> int:
    """Execute a parsed subcommand. Plugin errors propagate to `main`."""
    if args.command == "list-all":
        versions = VersionCatalog(config).list_versions()
        print(" ".join(versions))
        return 0

    if args.command == "latest-stable":
        latest = VersionCatalog(config).latest_stable(args.query)
        if latest is None:
            raise PluginError(f"No stable version found matching '{args.query}'")
        print(latest)
        return 0

    if args.command == "download":
        fetcher = ReleaseFetcher(config)
        try:
            fetcher.download_and_extract(args.version, args.download_path)
        finally:
            fetcher.client.close()
        return 0

    if args.command == "install":
        Installer(config, args.download_path).install(
            args.install_type, args.version, args.install_path
        )
        return 0

    raise PluginError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the asdf-vals command-line interface.

    Resolves the configuration from the environment once, dispatches the
    requested subcommand, and converts any plugin error into exit status 1.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "download":
        _require(parser, args, "version", "download_path")
    elif args.command == "install":
        _require(parser, args, "install_type", "version", "install_path", "download_path")

    config = PluginConfig.from_environ()
    log_utils.configure_logging(config.debug)
    _log_startup(config)

    try:
        return run_command(args, config)
    except PluginError as e:
        log_utils.logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        log_utils.logger.error("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
