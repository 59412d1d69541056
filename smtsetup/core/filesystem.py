"""
File system utilities for smtsetup.

This module provides the archive codecs and safe file operations used by the
provisioner and the tool cache:
- Archive extraction by format tag (zip, tar, 7z, xar)
- Directory traversal protection for archive members
- Safe file operations (atomic writes, safe deletion, tree copies)
"""

import os
import shutil
import stat
import subprocess
import sys
import tarfile
import tempfile
import uuid
import zipfile
from pathlib import Path
from typing import Optional, Union

import py7zr

from smtsetup.core.exceptions import (
    ArchiveExtractionError,
    FilesystemError,
    InsecureArchiveError,
    UnsupportedArchiveFormat,
)

IS_WINDOWS = os.name == "nt"

ARCHIVE_FORMATS = ("zip", "tar", "7z", "xar")


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check whether ``path`` is located under ``parent``.

    Example:
        >>> is_relative_to(Path('/a/b/c'), Path('/a'))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def make_executable(path: Union[str, Path]) -> None:
    """Add execute permission for user, group and others (no-op on Windows)."""
    if IS_WINDOWS:
        return
    path = Path(path)
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path],
    archive_format: str,
    destination: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Extract an archive using the codec named by its format tag.

    Release assets are downloaded to extension-less temporary files, so the
    format is given explicitly instead of being guessed from the file name.

    Args:
        archive_path: Path to the archive file
        archive_format: One of ``zip``, ``tar``, ``7z``, ``xar``
        destination: Directory to extract to (default: new temp directory)

    Returns:
        Directory the archive was extracted into

    Raises:
        UnsupportedArchiveFormat: If the format tag is not recognized
        ArchiveExtractionError: If extraction fails
        InsecureArchiveError: If archive contains malicious paths

    Example:
        >>> extract_archive('/tmp/3f2a...', 'zip')
        PosixPath('/tmp/9c1e...')
    """
    archive_path = Path(archive_path)

    if archive_format not in ARCHIVE_FORMATS:
        raise UnsupportedArchiveFormat(
            f"Unsupported archive format: {archive_format}. "
            f"Supported: {', '.join(ARCHIVE_FORMATS)}"
        )

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    if destination is None:
        destination = Path(tempfile.gettempdir()) / str(uuid.uuid4())
    destination = Path(destination)
    destination.mkdir(parents=True, exist_ok=True)

    try:
        if archive_format == "zip":
            _extract_zip(archive_path, destination)
        elif archive_format == "tar":
            _extract_tar(archive_path, destination)
        elif archive_format == "7z":
            _extract_7z(archive_path, destination)
        else:
            _extract_xar(archive_path, destination)
    except ArchiveExtractionError:
        raise
    except Exception as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e

    return destination


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive, keeping unix permission bits."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.infolist()

        for member in members:
            _validate_archive_path(member.filename, destination)

        for member in members:
            extracted = Path(zf.extract(member, destination))
            # zipfile drops the mode bits; solver binaries need +x
            mode = (member.external_attr >> 16) & 0o777
            if mode and not IS_WINDOWS and extracted.is_file():
                extracted.chmod(mode)


def _extract_tar(archive_path: Path, destination: Path) -> None:
    """Extract a tar archive with any supported compression."""
    with tarfile.open(archive_path, "r:*") as tar:
        for member in tar.getmembers():
            _validate_archive_path(member.name, destination)

        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)


def _extract_7z(archive_path: Path, destination: Path) -> None:
    """Extract a .7z archive."""
    with py7zr.SevenZipFile(archive_path, "r") as archive:
        for member in archive.getnames():
            _validate_archive_path(member, destination)

        archive.extractall(destination)


def _extract_xar(archive_path: Path, destination: Path) -> None:
    """Extract a xar archive with the system ``xar`` tool (macOS)."""
    xar = shutil.which("xar")
    if not xar:
        raise UnsupportedArchiveFormat(
            "Extracting xar archives requires the 'xar' command line tool"
        )

    try:
        subprocess.run(
            [xar, "-x", "-C", str(destination), "-f", str(archive_path)],
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        raise ArchiveExtractionError(f"xar extraction failed: {e.stderr}") from e


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    If the write fails, the original file (if any) remains unchanged.

    Example:
        >>> atomic_write('registry.json', '{"version": 1}')
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Same directory keeps the rename on one filesystem
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails

    Example:
        >>> safe_rmtree('/opt/hostedtoolcache/z3/4.14.0', require_prefix='/opt/hostedtoolcache')
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    except Exception as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def copy_tree(source: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Recursively copy a directory tree, preserving symlinks and metadata.

    Raises:
        FilesystemError: If source is missing or not a directory
    """
    source = Path(source)
    destination = Path(destination)

    if not source.exists():
        raise FilesystemError(f"Source does not exist: {source}")

    if not source.is_dir():
        raise FilesystemError(f"Source is not a directory: {source}")

    shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)


def directory_size(path: Union[str, Path]) -> int:
    """Calculate total size of a directory in bytes."""
    return sum(f.stat().st_size for f in Path(path).rglob("*") if f.is_file())


__all__ = [
    "ARCHIVE_FORMATS",
    "is_relative_to",
    "make_executable",
    "extract_archive",
    "atomic_write",
    "safe_rmtree",
    "copy_tree",
    "directory_size",
]
