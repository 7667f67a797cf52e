"""
Checksum verification against the manifest published with each release.

Verification is best effort: a missing manifest, a missing entry, or an
unavailable digest algorithm only skip the check. A digest that is present
and wrong always aborts.
"""

import enum
import hashlib
from pathlib import Path
from typing import Dict, Optional, Union

import requests

from asdf_vals.config import PluginConfig
from asdf_vals.constants import (
    CHECKSUM_ALGORITHM,
    CHECKSUM_MANIFEST_TEMPLATE,
    CHECKSUM_TEMP_SUFFIX,
)
from asdf_vals.exceptions import ChecksumMismatch
from asdf_vals.log_utils import logger
from asdf_vals.network import NetworkClient

Pathish = Union[str, Path]


class ChecksumStatus(enum.Enum):
    VERIFIED = "verified"
    SKIPPED = "skipped"


class ChecksumManifest:
    """Filename to hex digest mapping parsed from `<digest>  <filename>` lines."""

    def __init__(self, entries: Optional[Dict[str, str]] = None):
        self.entries: Dict[str, str] = dict(entries or {})

    @classmethod
    def parse(cls, text: str) -> "ChecksumManifest":
        entries: Dict[str, str] = {}
        for line in text.splitlines():
            parts = line.strip().split(None, 1)
            if len(parts) != 2:
                continue
            digest, filename = parts
            # sha256sum marks binary-mode entries with a leading '*'
            filename = filename.strip().lstrip("*")
            entries.setdefault(filename, digest)
        return cls(entries)

    @classmethod
    def from_file(cls, path: Pathish) -> "ChecksumManifest":
        return cls.parse(Path(path).read_text(encoding="utf-8", errors="replace"))

    def digest_for(self, filename: str) -> Optional[str]:
        return self.entries.get(filename)

    def __len__(self) -> int:
        return len(self.entries)


def manifest_filename(tool_name: str, version: str) -> str:
    return CHECKSUM_MANIFEST_TEMPLATE.format(tool=tool_name, version=version)


def calculate_digest(file_path: Pathish, algorithm: str = CHECKSUM_ALGORITHM) -> str:
    """
    Compute the hex digest of a file, streaming it in chunks.

    Raises:
        ValueError: If `algorithm` is not available in this Python build.
        OSError: If the file cannot be read.
    """
    digest = hashlib.new(algorithm)
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


class ChecksumVerifier:
    """Validates downloaded release archives against the release checksum manifest."""

    def __init__(
        self,
        config: PluginConfig,
        client: NetworkClient,
        algorithm: str = CHECKSUM_ALGORITHM,
    ):
        self.config = config
        self.client = client
        self.algorithm = algorithm

    def manifest_url(self, version: str) -> str:
        return (
            f"{self.config.repo_url}/releases/download/v{version}/"
            f"{manifest_filename(self.config.tool_name, version)}"
        )

    def verify(self, version: str, file_path: Pathish) -> ChecksumStatus:
        """
        Verify `file_path` against the manifest published for `version`.

        Returns:
            ChecksumStatus.VERIFIED when the digest matches, ChecksumStatus.SKIPPED
            when verification could not be performed.

        Raises:
            ChecksumMismatch: If the manifest lists the file with a different digest.
        """
        path = Path(file_path)
        filename = path.name
        manifest_path = path.with_name(filename + CHECKSUM_TEMP_SUFFIX)

        logger.info(f"Verifying checksum for {filename}...")
        try:
            return self._verify(version, path, manifest_path)
        finally:
            manifest_path.unlink(missing_ok=True)

    def _verify(
        self, version: str, path: Path, manifest_path: Path
    ) -> ChecksumStatus:
        filename = path.name
        try:
            self.client.fetch(self.manifest_url(version), manifest_path)
            manifest = ChecksumManifest.from_file(manifest_path)
        except (requests.RequestException, OSError) as e:
            logger.debug(f"Checksum manifest fetch failed: {e}")
            logger.warning(
                f"Checksum file not available for version {version}. Skipping verification."
            )
            return ChecksumStatus.SKIPPED

        expected = manifest.digest_for(filename)
        if not expected:
            logger.warning(f"No checksum found for {filename}. Skipping verification.")
            return ChecksumStatus.SKIPPED

        try:
            actual = calculate_digest(path, self.algorithm)
        except ValueError:
            logger.warning(
                f"No {self.algorithm.upper()} implementation available. Skipping checksum verification."
            )
            return ChecksumStatus.SKIPPED

        if actual != expected:
            raise ChecksumMismatch(str(path), expected=expected, actual=actual)

        logger.info("Checksum verified successfully")
        return ChecksumStatus.VERIFIED
