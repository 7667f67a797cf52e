"""
Release download for a requested vals version.

Produces a verified archive in the caller's download location. The archive is
owned by the caller; nothing here cleans it up.
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

import requests

from asdf_vals.checksum import ChecksumStatus, ChecksumVerifier
from asdf_vals.config import PluginConfig
from asdf_vals.constants import RELEASE_ARCHIVE_TEMPLATE
from asdf_vals.exceptions import ChecksumMismatch, DownloadFailed
from asdf_vals.files import extract_release
from asdf_vals.log_utils import logger
from asdf_vals.network import NetworkClient
from asdf_vals.platform_detect import PlatformKey, detect
from asdf_vals.versions import validate_version

Pathish = Union[str, Path]


@dataclass(frozen=True)
class ReleaseArtifact:
    """A downloaded release archive."""

    version: str
    platform: PlatformKey
    url: str
    path: Path
    checksum_status: Optional[ChecksumStatus] = None

    @property
    def verified(self) -> bool:
        return self.checksum_status is ChecksumStatus.VERIFIED


def archive_filename(tool_name: str, version: str, key: PlatformKey) -> str:
    """Return e.g. `vals_0.37.0_linux_amd64.tar.gz`."""
    return RELEASE_ARCHIVE_TEMPLATE.format(
        tool=tool_name, version=version, os=key.os, arch=key.arch
    )


def _stderr_is_tty() -> bool:
    try:
        return sys.stderr.isatty()
    except (AttributeError, ValueError):
        return False


class ReleaseFetcher:
    """Downloads and verifies release archives."""

    def __init__(
        self,
        config: PluginConfig,
        client: Optional[NetworkClient] = None,
        verifier: Optional[ChecksumVerifier] = None,
        platform_key: Optional[PlatformKey] = None,
        is_tty: Callable[[], bool] = _stderr_is_tty,
    ):
        self.config = config
        self.client = client if client is not None else NetworkClient(config)
        self.verifier = (
            verifier if verifier is not None else ChecksumVerifier(config, self.client)
        )
        self._platform_key = platform_key
        self._is_tty = is_tty

    @property
    def platform_key(self) -> PlatformKey:
        if self._platform_key is None:
            self._platform_key = detect()
        return self._platform_key

    def archive_url(self, version: str, key: PlatformKey) -> str:
        return (
            f"{self.config.repo_url}/releases/download/v{version}/"
            f"{archive_filename(self.config.tool_name, version, key)}"
        )

    def fetch_release(self, version: str, destination: Pathish) -> ReleaseArtifact:
        """
        Download the release archive for `version` to `destination` and verify it.

        The version is validated before any network access. Partial downloads at
        `destination` are resumed. A progress bar is shown only on an
        interactive stderr outside debug mode.

        Returns:
            ReleaseArtifact: The downloaded archive and its checksum status.

        Raises:
            InvalidVersion: If `version` is malformed.
            DownloadFailed: If the archive cannot be downloaded after all retries.
            ChecksumMismatch: If the archive does not match the published digest.
        """
        validate_version(version)

        key = self.platform_key
        url = self.archive_url(version, key)
        path = Path(destination)

        logger.info(
            f"Downloading {self.config.tool_name} release {version} for {key}..."
        )
        logger.debug(f"Download URL: {url}")

        show_progress = not self.config.debug and self._is_tty()
        try:
            self.client.fetch(url, path, resume=True, progress=show_progress)
        except (requests.RequestException, OSError) as e:
            raise DownloadFailed(
                url, retry_count=self.config.max_retries, details=str(e)
            ) from e

        status = self.verifier.verify(version, path)

        logger.info("Download completed successfully")
        return ReleaseArtifact(
            version=version,
            platform=key,
            url=url,
            path=path,
            checksum_status=status,
        )

    def download_and_extract(self, version: str, download_dir: Pathish) -> ReleaseArtifact:
        """
        Fetch the release into `download_dir`, unpack it there, and delete the archive.

        Leaves `download_dir` in the state the install phase expects.
        """
        validate_version(version)
        target_dir = Path(download_dir)
        target_dir.mkdir(parents=True, exist_ok=True)

        archive = target_dir / archive_filename(
            self.config.tool_name, version, self.platform_key
        )
        try:
            artifact = self.fetch_release(version, archive)
        except ChecksumMismatch:
            # A corrupt archive must not be resumed by the next attempt.
            archive.unlink(missing_ok=True)
            raise

        extract_release(artifact.path, target_dir)
        return artifact
