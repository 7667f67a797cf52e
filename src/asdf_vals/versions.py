"""
Version discovery, validation, and ordering for vals releases.

Tags are read with `git ls-remote`, not the GitHub REST API, so listing does
not count against API rate limits.
"""

import re
import subprocess
from typing import Callable, Iterable, List, Optional, Tuple

from asdf_vals.config import PluginConfig
from asdf_vals.constants import (
    GIT_LS_REMOTE_TIMEOUT,
    PRERELEASE_MARKERS,
    VERSION_REGEX_PATTERN,
)
from asdf_vals.exceptions import InvalidVersion, NetworkError
from asdf_vals.log_utils import logger
from asdf_vals.retry import with_retry

VERSION_RX = re.compile(VERSION_REGEX_PATTERN)
TAG_REF_PREFIX = "refs/tags/"

_SEPARATOR_RX = re.compile(r"[+-]")
# `.` is any character here, mirroring the historical sed expression.
_PATCH_SUFFIX_RX = re.compile(r".p([0-9])")
_NUMERIC_FIELD_RX = re.compile(r"^[ \t]*(-?)([0-9]*)")

SortKey = Tuple[bytes, int, int, int, int, bytes]


def is_valid_version(version: Optional[str]) -> bool:
    """Return True if `version` is MAJOR.MINOR.PATCH[-prerelease][+build]."""
    return bool(version) and VERSION_RX.fullmatch(version) is not None


def validate_version(version: Optional[str]) -> str:
    """
    Validate a version string before it is used in a URL or path.

    Returns:
        str: The unchanged version.

    Raises:
        InvalidVersion: If the version is malformed.
    """
    if not is_valid_version(version):
        raise InvalidVersion(str(version))
    return version  # type: ignore[return-value]


def _numeric_field(field: str) -> int:
    """Leading-number value of a field, the way `sort -n` reads it (0 if none)."""
    match = _NUMERIC_FIELD_RX.match(field)
    sign, digits = match.group(1), match.group(2)
    if not digits:
        return 0
    value = int(digits)
    return -value if sign else value


def transform_version(version: str) -> str:
    """
    Rewrite a version into its sortable form.

    `+`/`-` become `.`, the first `<any>p<digit>` becomes `.z<digit>`, and a
    trailing `.z` sentinel is appended.
    """
    transformed = _SEPARATOR_RX.sub(".", version)
    transformed = _PATCH_SUFFIX_RX.sub(r".z\1", transformed, count=1)
    return transformed + ".z"


def version_sort_key(version: str) -> SortKey:
    """
    Build the ordering key for a version.

    The key is computed over the line `<transformed> <original>` split on `.`:
    field 1 compares byte-wise, fields 2-5 numerically, and the whole line
    byte-wise breaks ties.
    """
    line = f"{transform_version(version)} {version}"
    fields = line.split(".")
    fields += [""] * (5 - len(fields))
    return (
        fields[0].encode("utf-8"),
        _numeric_field(fields[1]),
        _numeric_field(fields[2]),
        _numeric_field(fields[3]),
        _numeric_field(fields[4]),
        line.encode("utf-8"),
    )


def sort_versions(versions: Iterable[str]) -> List[str]:
    """Return versions in ascending order; the last element is the latest."""
    return sorted(versions, key=version_sort_key)


def parse_tag_refs(output: str) -> List[str]:
    """
    Extract version names from `git ls-remote --tags --refs` output.

    Each `refs/tags/<name>` reference yields `<name>` with a single leading
    `v` removed. Lines without a tag reference are ignored.
    """
    versions = []
    for line in output.splitlines():
        index = line.find(TAG_REF_PREFIX)
        if index < 0:
            continue
        name = line[index + len(TAG_REF_PREFIX) :].strip()
        if name.startswith("v"):
            name = name[1:]
        if name:
            versions.append(name)
    return versions


def is_prerelease(version: str) -> bool:
    lowered = version.lower()
    return any(marker in lowered for marker in PRERELEASE_MARKERS)


class VersionCatalog:
    """
    Lists published vals versions.

    Tag listing is a single shot by default; pass `attempts` to reuse the
    shared retry combinator.
    """

    def __init__(
        self,
        config: PluginConfig,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        attempts: int = 1,
    ):
        self.config = config
        self._runner = runner
        self.attempts = attempts

    def _ls_remote(self, _attempt: int) -> str:
        cmd = ["git", "ls-remote", "--tags", "--refs", self.config.repo_url]
        logger.debug(f"Fetching tags from {self.config.repo_url}")
        try:
            result = self._runner(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                timeout=GIT_LS_REMOTE_TIMEOUT,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise NetworkError(
                "Failed to fetch tags from GitHub. Check your internet connection and GitHub API limits.",
                url=self.config.repo_url,
                details=str(e),
            ) from e

        if result.returncode != 0:
            raise NetworkError(
                "Failed to fetch tags from GitHub. Check your internet connection and GitHub API limits.",
                url=self.config.repo_url,
                details=(result.stderr or "").strip() or f"git exited with {result.returncode}",
            )
        return result.stdout or ""

    def list_versions(self) -> List[str]:
        """
        Return every published version in ascending order.

        Raises:
            NetworkError: If the remote tag listing cannot be retrieved.
        """
        output = with_retry(
            self._ls_remote,
            max_attempts=self.attempts,
            delay=self.config.retry_delay,
            retry_on=(NetworkError,),
            description="Tag listing",
        )
        versions = sort_versions(parse_tag_refs(output))
        logger.debug(f"Found {len(versions)} versions")
        return versions

    def latest(self, query: str = "") -> Optional[str]:
        """Latest version starting with `query`, prereleases included."""
        matches = [v for v in self.list_versions() if v.startswith(query)]
        return matches[-1] if matches else None

    def latest_stable(self, query: str = "") -> Optional[str]:
        """Latest version starting with `query` that is not a prerelease."""
        matches = [
            v
            for v in self.list_versions()
            if v.startswith(query) and not is_prerelease(v)
        ]
        return matches[-1] if matches else None
