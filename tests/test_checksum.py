import hashlib
from unittest.mock import MagicMock

import pytest
import requests

from asdf_vals.checksum import (
    ChecksumManifest,
    ChecksumStatus,
    ChecksumVerifier,
    calculate_digest,
    manifest_filename,
)
from asdf_vals.exceptions import ChecksumMismatch

VERSION = "0.37.0"
ARCHIVE_NAME = "vals_0.37.0_linux_amd64.tar.gz"
CONTENT = b"release archive bytes"
DIGEST = hashlib.sha256(CONTENT).hexdigest()


@pytest.fixture
def artifact(tmp_path):
    path = tmp_path / ARCHIVE_NAME
    path.write_bytes(CONTENT)
    return path


def _client_serving(manifest_text):
    """A NetworkClient stand-in that writes `manifest_text` to the destination."""
    client = MagicMock()

    def _fetch(url, destination, **_kwargs):
        destination.write_text(manifest_text)
        return destination

    client.fetch.side_effect = _fetch
    return client


def _leftover_manifests(directory):
    return list(directory.glob("*.checksums"))


@pytest.mark.unit
def test_matching_digest_is_verified(config, artifact):
    client = _client_serving(
        f"{'0' * 64}  vals_0.37.0_darwin_arm64.tar.gz\n{DIGEST}  {ARCHIVE_NAME}\n"
    )

    status = ChecksumVerifier(config, client).verify(VERSION, artifact)

    assert status is ChecksumStatus.VERIFIED
    assert _leftover_manifests(artifact.parent) == []
    url = client.fetch.call_args.args[0]
    assert url == (
        "https://github.com/helmfile/vals/releases/download/v0.37.0/"
        "vals_0.37.0_checksums.txt"
    )


@pytest.mark.unit
def test_mismatch_is_fatal(config, artifact):
    client = _client_serving(f"{'f' * 64}  {ARCHIVE_NAME}\n")

    with pytest.raises(ChecksumMismatch) as excinfo:
        ChecksumVerifier(config, client).verify(VERSION, artifact)

    assert excinfo.value.expected == "f" * 64
    assert excinfo.value.actual == DIGEST
    assert ARCHIVE_NAME in str(excinfo.value)
    assert _leftover_manifests(artifact.parent) == []


@pytest.mark.unit
def test_unreachable_manifest_is_skipped(config, artifact):
    client = MagicMock()
    client.fetch.side_effect = requests.HTTPError("404 Not Found")

    status = ChecksumVerifier(config, client).verify(VERSION, artifact)

    assert status is ChecksumStatus.SKIPPED
    assert _leftover_manifests(artifact.parent) == []


@pytest.mark.unit
def test_partial_manifest_removed_after_fetch_failure(config, artifact):
    client = MagicMock()

    def _fail_midway(url, destination, **_kwargs):
        destination.write_text("partial")
        raise requests.ConnectionError("reset")

    client.fetch.side_effect = _fail_midway

    status = ChecksumVerifier(config, client).verify(VERSION, artifact)

    assert status is ChecksumStatus.SKIPPED
    assert _leftover_manifests(artifact.parent) == []


@pytest.mark.unit
def test_manifest_without_entry_is_skipped(config, artifact):
    client = _client_serving(f"{DIGEST}  vals_0.37.0_windows_amd64.tar.gz\n")

    status = ChecksumVerifier(config, client).verify(VERSION, artifact)

    assert status is ChecksumStatus.SKIPPED
    assert _leftover_manifests(artifact.parent) == []


@pytest.mark.unit
def test_unavailable_algorithm_is_skipped(config, artifact):
    client = _client_serving(f"{DIGEST}  {ARCHIVE_NAME}\n")

    verifier = ChecksumVerifier(config, client, algorithm="no-such-digest")
    status = verifier.verify(VERSION, artifact)

    assert status is ChecksumStatus.SKIPPED
    assert _leftover_manifests(artifact.parent) == []


@pytest.mark.unit
def test_manifest_parse_handles_binary_marker_and_noise():
    manifest = ChecksumManifest.parse(
        f"{DIGEST} *{ARCHIVE_NAME}\n\ngarbage\n{'a' * 64}  other.txt\n"
    )

    assert manifest.digest_for(ARCHIVE_NAME) == DIGEST
    assert manifest.digest_for("other.txt") == "a" * 64
    assert manifest.digest_for("missing") is None
    assert len(manifest) == 2


@pytest.mark.unit
def test_manifest_requires_exact_filename():
    manifest = ChecksumManifest.parse(f"{DIGEST}  {ARCHIVE_NAME}.sbom.json\n")

    assert manifest.digest_for(ARCHIVE_NAME) is None


@pytest.mark.unit
def test_calculate_digest(artifact):
    assert calculate_digest(artifact) == DIGEST


@pytest.mark.unit
def test_manifest_filename():
    assert manifest_filename("vals", VERSION) == "vals_0.37.0_checksums.txt"
