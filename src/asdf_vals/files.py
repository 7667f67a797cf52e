"""
File operations for the download and install phases.

Includes safe tarball extraction, directory copy, and rollback removal.
"""

import os
import shutil
import tarfile
from pathlib import Path
from typing import List, Union

from asdf_vals.exceptions import ExtractionError
from asdf_vals.log_utils import logger

Pathish = Union[str, Path]


def _is_within_base(real_base_dir: str, candidate: str) -> bool:
    """
    Determine whether the candidate path resides within the given base directory.

    Returns:
        True if the candidate path is inside `real_base_dir`, False otherwise.
    """
    try:
        return os.path.commonpath([real_base_dir, candidate]) == real_base_dir
    except ValueError:
        return False


def _is_safe_archive_member(member_name: str) -> bool:
    """
    Determine whether an archive member name is safe to extract.

    Returns:
        `True` if the member name contains no absolute paths, parent-directory
        references, or null bytes, `False` otherwise.
    """
    if not member_name or member_name.startswith("/") or member_name.startswith("\\"):
        return False
    normalized = os.path.normpath(member_name)
    if os.path.isabs(normalized):
        return False
    if normalized == ".." or normalized.startswith(f"..{os.sep}"):
        return False
    if os.altsep and normalized.startswith(f"..{os.altsep}"):
        return False
    if "\x00" in normalized:
        return False
    return True


def safe_extract_path(extract_dir: Pathish, member_name: str) -> str:
    """
    Resolve the absolute extraction path of an archive member.

    Raises:
        ValueError: If the resolved path is outside `extract_dir`.
    """
    real_extract_dir = os.path.realpath(extract_dir)
    normalized_path = os.path.realpath(os.path.join(real_extract_dir, member_name))

    if not _is_within_base(real_extract_dir, normalized_path):
        raise ValueError(
            f"Unsafe extraction path '{member_name}' is outside base '{extract_dir}'"
        )
    return normalized_path


def _safe_members(tar: tarfile.TarFile, extract_dir: Pathish) -> List[tarfile.TarInfo]:
    members = []
    for member in tar.getmembers():
        if not _is_safe_archive_member(member.name):
            logger.warning(
                "Skipping unsafe archive member %s (possible traversal)", member.name
            )
            continue
        try:
            safe_extract_path(extract_dir, member.name)
            if member.issym() or member.islnk():
                link_base = (
                    os.path.dirname(member.name) if member.issym() else ""
                )
                safe_extract_path(
                    extract_dir, os.path.join(link_base, member.linkname)
                )
        except ValueError as e:
            logger.warning(f"Skipping unsafe extraction path: {e}")
            continue
        if member.isdev():
            logger.warning("Skipping device archive member %s", member.name)
            continue
        members.append(member)
    return members


def extract_tarball(archive_path: Pathish, extract_dir: Pathish) -> List[Path]:
    """
    Extract a gzip-compressed tarball into `extract_dir`.

    Members that would land outside the directory (absolute paths, `..`
    components, escaping links) and device nodes are skipped with a warning.

    Returns:
        List[Path]: Paths of extracted regular files.

    Raises:
        ExtractionError: If the archive is missing, corrupt, or cannot be written.
    """
    target = Path(extract_dir)
    target.mkdir(parents=True, exist_ok=True)

    try:
        with tarfile.open(archive_path, "r:gz") as tar:
            members = _safe_members(tar, target)
            tar.extractall(path=target, members=members)
    except (tarfile.TarError, EOFError, OSError) as e:
        raise ExtractionError(
            f"Error extracting archive {Path(archive_path).name}",
            archive_path=str(archive_path),
            details=str(e),
        ) from e

    extracted = [target / m.name for m in members if m.isfile()]
    logger.debug(f"Extracted {len(extracted)} files from {archive_path} to {target}")
    return extracted


def copy_tree_contents(source_dir: Pathish, target_dir: Pathish) -> None:
    """Copy everything inside `source_dir` into `target_dir`, merging directories."""
    source = Path(source_dir)
    target = Path(target_dir)
    for entry in source.iterdir():
        destination = target / entry.name
        if entry.is_dir() and not entry.is_symlink():
            shutil.copytree(entry, destination, symlinks=True, dirs_exist_ok=True)
        else:
            shutil.copy2(entry, destination, follow_symlinks=False)


def remove_tree(path: Pathish) -> bool:
    """
    Remove a directory tree (or file) if it exists.

    Returns:
        bool: `True` if nothing remains at `path`, `False` if removal failed.
    """
    target = Path(path)
    try:
        if target.is_symlink() or target.is_file():
            target.unlink()
        elif target.exists():
            shutil.rmtree(target)
    except OSError as e:
        logger.error(f"Error removing {target}: {e}")
        return False
    return True


def ensure_executable(path: Pathish, bits: int) -> bool:
    """
    Grant execute permission on `path` when it is missing.

    Returns:
        bool: `True` if the mode had to be changed.
    """
    target = Path(path)
    if os.access(target, os.X_OK):
        return False
    target.chmod(target.stat().st_mode | bits)
    return True


def extract_release(archive_path: Pathish, download_dir: Pathish) -> List[Path]:
    """
    Unpack a release archive into `download_dir` and delete the archive.

    The archive is removed whether or not extraction succeeds.
    """
    try:
        return extract_tarball(archive_path, download_dir)
    finally:
        Path(archive_path).unlink(missing_ok=True)
