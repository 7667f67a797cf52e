"""
Installation of a downloaded vals release.

The installer never downloads anything itself: it copies what the download
phase left in the download directory, checks the binary runs, and removes the
whole installation if any step fails.
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Union

from asdf_vals.config import PluginConfig
from asdf_vals.constants import BIN_DIR_NAME, EXECUTE_BITS, SUPPORTED_INSTALL_TYPE
from asdf_vals.exceptions import (
    BinaryNotFound,
    DownloadDirectoryMissing,
    InstallationError,
    InstallationFailed,
    InstallationVerificationFailed,
    InvalidInstallType,
)
from asdf_vals.files import copy_tree_contents, ensure_executable, remove_tree
from asdf_vals.log_utils import logger
from asdf_vals.versions import validate_version

Pathish = Union[str, Path]


def resolve_bin_dir(install_path: Pathish) -> Path:
    """
    Return the bin directory for an install path.

    Callers may pass either the install root or its `bin` subdirectory.
    """
    path = Path(install_path)
    if path.name == BIN_DIR_NAME:
        path = path.parent
    return path / BIN_DIR_NAME


@dataclass(frozen=True)
class InstallationTarget:
    bin_dir: Path
    executable_name: str

    @property
    def root(self) -> Path:
        return self.bin_dir.parent

    @property
    def executable_path(self) -> Path:
        return self.bin_dir / self.executable_name


class Installer:
    """Installs a vals release from a populated download directory."""

    def __init__(
        self,
        config: PluginConfig,
        download_path: Pathish,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.config = config
        self.download_path = Path(download_path)
        self._runner = runner

    def install(
        self, install_type: str, version: str, install_path: Pathish
    ) -> InstallationTarget:
        """
        Install `version` into `install_path`.

        Parameters:
            install_type: Must be "version"; ref and path installs are unsupported.
            version: Version being installed.
            install_path: Install root or its `bin` subdirectory.

        Returns:
            InstallationTarget: Where the executable was installed.

        Raises:
            InvalidInstallType: For any install type other than "version".
            InvalidVersion: If `version` is malformed.
            InstallationFailed: After rollback, chained to the failing step's error.
        """
        if install_type != SUPPORTED_INSTALL_TYPE:
            raise InvalidInstallType(install_type)
        validate_version(version)

        target = InstallationTarget(
            bin_dir=resolve_bin_dir(install_path),
            executable_name=self.config.executable_name,
        )
        logger.debug(f"Installing {self.config.tool_name} {version} to {target.bin_dir}")

        try:
            self._stage(target)
            self._verify_binary(target)
        except (InstallationError, OSError) as e:
            logger.error(str(e))
            logger.debug(f"Rolling back installation at {target.root}")
            remove_tree(target.root)
            raise InstallationFailed(
                f"An error occurred while installing {self.config.tool_name} {version}.",
                path=str(target.root),
                details=str(e),
            ) from e

        logger.info(f"{self.config.tool_name} {version} installation was successful!")
        return target

    def _stage(self, target: InstallationTarget) -> None:
        target.bin_dir.mkdir(parents=True, exist_ok=True)

        if not self.download_path.is_dir():
            raise DownloadDirectoryMissing(str(self.download_path))

        copy_tree_contents(self.download_path, target.bin_dir)

    def _verify_binary(self, target: InstallationTarget) -> None:
        executable = target.executable_path
        if not executable.is_file():
            raise BinaryNotFound(str(executable))

        if ensure_executable(executable, EXECUTE_BITS):
            logger.debug(f"Setting execute permission on {target.executable_name}")

        cmd = [str(executable), *self.config.self_test_args]
        try:
            result = self._runner(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as e:
            raise InstallationVerificationFailed(str(executable), details=str(e)) from e

        if result.returncode != 0:
            raise InstallationVerificationFailed(
                str(executable), details=f"exit status {result.returncode}"
            )
