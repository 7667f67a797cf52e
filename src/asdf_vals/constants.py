"""
Constants and configuration values for asdf-vals.

This module contains all hardcoded values, URLs, environment variable names,
and defaults used throughout the plugin.
"""

# Upstream repository
GH_REPO = "https://github.com/helmfile/vals"
TOOL_NAME = "vals"
TOOL_TEST = "vals version"
PLUGIN_NAME = f"asdf-{TOOL_NAME}"

# Release asset naming
ARCHIVE_EXTENSION = ".tar.gz"
RELEASE_ARCHIVE_TEMPLATE = "{tool}_{version}_{os}_{arch}" + ARCHIVE_EXTENSION
CHECKSUM_MANIFEST_TEMPLATE = "{tool}_{version}_checksums.txt"
CHECKSUM_TEMP_SUFFIX = ".checksums"
CHECKSUM_ALGORITHM = "sha256"

# Environment variables
DEBUG_ENV_VAR = "ASDF_VALS_DEBUG"
MAX_RETRIES_ENV_VAR = "ASDF_VALS_MAX_RETRIES"
RETRY_DELAY_ENV_VAR = "ASDF_VALS_RETRY_DELAY"
GITHUB_TOKEN_ENV_VAR = "GITHUB_API_TOKEN"
INSTALL_TYPE_ENV_VAR = "ASDF_INSTALL_TYPE"
INSTALL_VERSION_ENV_VAR = "ASDF_INSTALL_VERSION"
INSTALL_PATH_ENV_VAR = "ASDF_INSTALL_PATH"
DOWNLOAD_PATH_ENV_VAR = "ASDF_DOWNLOAD_PATH"

# Retry defaults
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 2.0  # seconds

# Network settings
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_CHUNK_SIZE = 8192
GIT_LS_REMOTE_TIMEOUT = 60

# Install settings
SUPPORTED_INSTALL_TYPE = "version"
BIN_DIR_NAME = "bin"
EXECUTE_BITS = 0o111

# Version validation regex - MAJOR.MINOR.PATCH with optional prerelease and build metadata
VERSION_REGEX_PATTERN = (
    r"^[0-9]+\.[0-9]+\.[0-9]+"  # core version
    r"(-[a-zA-Z0-9.]+)?"  # optional prerelease (e.g., -rc.1)
    r"(\+[a-zA-Z0-9.]+)?"  # optional build metadata (e.g., +meta)
    r"$"
)

# Tag names containing any of these are not considered stable
PRERELEASE_MARKERS = (
    "-alpha",
    "-beta",
    "-rc",
    "-dev",
    "-pre",
    "-preview",
    "-snapshot",
)

# Logging configuration
LOGGER_NAME = PLUGIN_NAME
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_MESSAGE_FORMAT = f"{PLUGIN_NAME}: %(message)s"
