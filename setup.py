from setuptools import setup, find_packages

setup(
    name='asdf-vals',
    version='0.1.0',
    description='asdf plugin for installing helmfile/vals release binaries',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    python_requires='>=3.9',
    install_requires=[
        'requests',
        'rich',
    ],
    extras_require={
        'test': [
            'pytest<9',
            'pytest-mock',
        ],
    },
    entry_points={
        'console_scripts': [
            'asdf-vals=asdf_vals.cli:main',
        ],
    },
)
