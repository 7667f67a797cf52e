"""
Platform detection.

Maps the running operating system and CPU architecture onto the names used
in vals release artifacts (e.g. ``vals_0.37.0_linux_amd64.tar.gz``).
"""

import fnmatch
import platform
from dataclasses import dataclass
from typing import Optional

from asdf_vals.log_utils import logger

KNOWN_OS = ("linux", "darwin", "windows", "freebsd", "openbsd", "netbsd")
KNOWN_ARCH = ("amd64", "386", "arm64", "arm", "ppc64le", "ppc64", "s390x", "riscv64")

# Ordered: first matching glob wins.
_OS_PATTERNS = (
    ("linux*", "linux"),
    ("darwin*", "darwin"),
    ("msys*", "windows"),
    ("mingw*", "windows"),
    ("cygwin*", "windows"),
    ("windows*", "windows"),
    ("freebsd*", "freebsd"),
    ("openbsd*", "openbsd"),
    ("netbsd*", "netbsd"),
)

_ARCH_PATTERNS = (
    ("x86_64", "amd64"),
    ("x64", "amd64"),
    ("amd64", "amd64"),
    ("i?86", "386"),
    ("x86", "386"),
    ("aarch64", "arm64"),
    ("arm64", "arm64"),
    ("armv7*", "arm"),
    ("armv6*", "arm"),
    ("arm*", "arm"),
    ("ppc64le", "ppc64le"),
    ("ppc64", "ppc64"),
    ("s390x", "s390x"),
    ("riscv64", "riscv64"),
)


@dataclass(frozen=True)
class PlatformKey:
    """An (os, arch) pair in upstream release naming."""

    os: str
    arch: str

    @property
    def is_known(self) -> bool:
        return self.os in KNOWN_OS and self.arch in KNOWN_ARCH

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"


def _match(raw: str, patterns) -> Optional[str]:
    for pattern, name in patterns:
        if fnmatch.fnmatchcase(raw, pattern):
            return name
    return None


def normalize_os(raw: str) -> str:
    """
    Normalize an operating system name to release naming.

    Unknown names are passed through lower-cased, with a warning.
    """
    value = raw.strip().lower()
    name = _match(value, _OS_PATTERNS)
    if name is None:
        logger.warning(f"Unknown operating system: {raw}")
        return value
    return name


def normalize_arch(raw: str) -> str:
    """
    Normalize a CPU architecture name to release naming.

    Collapses aliases (x86_64/x64 -> amd64, aarch64 -> arm64, armv6/armv7/arm* -> arm).
    Unknown names are passed through lower-cased, with a warning.
    """
    value = raw.strip().lower()
    name = _match(value, _ARCH_PATTERNS)
    if name is None:
        logger.warning(f"Unknown architecture: {raw}")
        return value
    return name


def detect(system: Optional[str] = None, machine: Optional[str] = None) -> PlatformKey:
    """
    Detect the platform key for the current process.

    Parameters:
        system: Raw OS name; defaults to `platform.system()`.
        machine: Raw architecture name; defaults to `platform.machine()`.

    Returns:
        PlatformKey: The normalized (os, arch) pair. Never raises.
    """
    raw_os = platform.system() if system is None else system
    raw_arch = platform.machine() if machine is None else machine

    key = PlatformKey(os=normalize_os(raw_os), arch=normalize_arch(raw_arch))
    logger.debug(f"Detected platform {key} (raw: {raw_os}/{raw_arch})")
    return key
