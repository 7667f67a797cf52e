"""asdf plugin that installs helmfile/vals release binaries."""

from asdf_vals.checksum import ChecksumManifest, ChecksumStatus, ChecksumVerifier
from asdf_vals.config import PluginConfig
from asdf_vals.fetcher import ReleaseArtifact, ReleaseFetcher
from asdf_vals.installer import InstallationTarget, Installer
from asdf_vals.network import NetworkClient
from asdf_vals.platform_detect import PlatformKey, detect
from asdf_vals.retry import with_retry
from asdf_vals.versions import VersionCatalog, sort_versions, validate_version

__all__ = [
    "ChecksumManifest",
    "ChecksumStatus",
    "ChecksumVerifier",
    "InstallationTarget",
    "Installer",
    "NetworkClient",
    "PlatformKey",
    "PluginConfig",
    "ReleaseArtifact",
    "ReleaseFetcher",
    "VersionCatalog",
    "detect",
    "sort_versions",
    "validate_version",
    "with_retry",
]
