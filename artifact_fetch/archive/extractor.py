"""
Zip archive extraction with path traversal protection.

Entries are expanded in archive order. Each entry's target path is checked
lexically against the destination root before anything is written for it,
so names such as ``../../etc/passwd`` or ``/etc/passwd`` abort the
extraction. Files written by earlier entries are left in place on failure.
"""

import io
import os
import shutil
import stat
import zipfile
import zlib
from pathlib import Path
from typing import Callable, List, Optional, Union

from artifact_fetch.config import get_settings
from artifact_fetch.utils.errors import (
    ArchiveFormatError,
    CopyError,
    ExtractionError,
    PathTraversalError,
)
from artifact_fetch.utils.logging import get_logger, log_performance

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int, str], None]

# Raised by zipfile while opening or decompressing a damaged, encrypted or
# unsupported entry
ENTRY_READ_ERRORS = (
    OSError,
    EOFError,
    RuntimeError,
    NotImplementedError,
    zipfile.BadZipFile,
    zlib.error,
)


def resolve_entry_path(destination: Union[str, Path], entry_name: str) -> Path:
    """
    Join an archive entry name onto the destination root.

    The check is lexical: ``..`` segments are collapsed without touching
    the filesystem, and the result must be the root itself or lie strictly
    inside it.

    Args:
        destination: Destination root directory
        entry_name: Entry name as stored in the archive

    Returns:
        Path the entry should be written to

    Raises:
        PathTraversalError: If the entry would land outside the root
    """
    root = os.path.abspath(destination)
    candidate = os.path.abspath(os.path.join(root, entry_name))
    prefix = root.rstrip(os.sep) + os.sep

    if candidate != root and not candidate.startswith(prefix):
        raise PathTraversalError(entry_name, str(destination))

    return Path(candidate)


def _entry_mode(info: zipfile.ZipInfo) -> int:
    """Permission bits stored for an entry, with a default for archives without them."""
    mode = stat.S_IMODE(info.external_attr >> 16)
    return mode or get_settings().default_file_mode


def _make_dirs(path: Path, entry_name: str) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExtractionError(
            f"Failed to create directory '{path}': {e}",
            {"entry": entry_name, "path": str(path)},
        )


def _write_entry(archive: zipfile.ZipFile, info: zipfile.ZipInfo, target: Path) -> None:
    """Copy one file entry to ``target`` with the entry's stored mode."""
    _make_dirs(target.parent, info.filename)

    try:
        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _entry_mode(info))
    except OSError as e:
        raise ExtractionError(
            f"Failed to create file '{target}': {e}",
            {"entry": info.filename, "path": str(target)},
        )

    with os.fdopen(fd, "wb") as dst:
        try:
            with archive.open(info) as src:
                shutil.copyfileobj(src, dst)
        except ENTRY_READ_ERRORS as e:
            raise CopyError(info.filename, str(e))


@log_performance
def extract_archive(
    data: bytes,
    destination: Union[str, Path],
    progress_callback: Optional[ProgressCallback] = None,
) -> List[Path]:
    """
    Extract zip archive bytes under a destination directory.

    Args:
        data: Raw zip archive content
        destination: Destination root directory
        progress_callback: Optional callback receiving
            (entries done, total entries, entry name) after each entry

    Returns:
        Paths created for the archive entries, in archive order

    Raises:
        ArchiveFormatError: If the data is not a zip archive
        PathTraversalError: If an entry escapes the destination
        ExtractionError: If a directory or file cannot be created
        CopyError: If copying an entry's content fails
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise ArchiveFormatError(f"Failed to read zip archive: {e}")

    extracted: List[Path] = []

    with archive:
        entries = archive.infolist()
        total = len(entries)

        for index, info in enumerate(entries, start=1):
            target = resolve_entry_path(destination, info.filename)
            logger.debug(f"Unzipping {target}")

            if info.is_dir():
                _make_dirs(target, info.filename)
            else:
                _write_entry(archive, info, target)

            extracted.append(target)
            if progress_callback:
                progress_callback(index, total, info.filename)

    logger.info(f"Extracted {len(extracted)} entries to {destination}")
    return extracted
