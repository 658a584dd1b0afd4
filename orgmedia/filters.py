"""
Media selection: extension filtering, input tree traversal and tag inference.

These functions only read the filesystem, never modify it.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Collection, Iterable, Iterator, List, Optional


@dataclass(frozen=True)
class MediaFile:
    """An eligible file found under the input root."""

    path: Path
    ext: str  # lowercase, without the dot


def normalize_extensions(exts: Iterable[str]) -> List[str]:
    """
    Normalize file extensions to a consistent format.

    Args:
        exts: Extensions as given by the user, e.g. ["JPG", ".png", " mp4 "]

    Returns:
        list: Lowercase extensions without a leading dot, empties and repeats
        dropped, in first-seen order
    """
    normalized = []
    for ext in exts:
        ext = ext.strip().lstrip(".").lower()
        if ext and ext not in normalized:
            normalized.append(ext)
    return normalized


def file_extension(path: Path) -> Optional[str]:
    """Return the lowercase extension of `path` without the dot, or None."""
    suffix = Path(path).suffix
    if not suffix or suffix == ".":
        return None
    return suffix[1:].lower()


def is_supported(path: Path, extensions: Collection[str]) -> bool:
    """
    Check whether a file has one of the allowed extensions.

    Args:
        path: File to check
        extensions: Allowed extensions, lowercase and without dots

    Returns:
        bool: True if the extension is allowed. A path without an extension
        is never supported.
    """
    ext = file_extension(path)
    return ext is not None and ext in extensions


def infer_tag(input_root: Path, path: Path) -> Optional[str]:
    """
    Infer the tag of a file from its location under the input root.

    The tag is the first directory between the input root and the file:
    ``depot/Vacation/IMG.jpg`` has tag ``Vacation`` and so does
    ``depot/Vacation/day1/IMG.jpg``. A file directly inside the input root
    has no tag.
    """
    try:
        rel = Path(path).relative_to(input_root)
    except ValueError:
        return None
    if len(rel.parts) < 2:
        return None
    return rel.parts[0]


def iter_media_files(input_root: Path, extensions: Collection[str], logger=None) -> Iterator[MediaFile]:
    """
    Walk the input tree once and yield every supported file.

    Directories are only descended into, symlinked directories are not
    followed. Entries are visited in sorted order so runs log the same way.

    Args:
        input_root: Directory to scan recursively
        extensions: Allowed extensions, lowercase and without dots
        logger: Optional logger for unreadable directories

    Yields:
        MediaFile: One per supported file
    """

    def on_error(err: OSError):
        if logger:
            logger.warning(f"Cannot read directory {err.filename}: {err}")

    for folder, dirnames, filenames in os.walk(input_root, onerror=on_error):
        dirnames.sort()
        for filename in sorted(filenames):
            path = Path(folder) / filename
            ext = file_extension(path)
            if ext is not None and ext in extensions:
                yield MediaFile(path=path, ext=ext)


def contains_supported_media(root: Path, extensions: Collection[str], ignore: Collection[Path] = ()) -> bool:
    """
    Return True if any supported file exists anywhere beneath `root`.

    Files listed in `ignore` (sources a dry run has planned to move away)
    do not count.
    """
    for folder, _, filenames in os.walk(root):
        for name in filenames:
            if is_supported(Path(name), extensions) and Path(folder) / name not in ignore:
                return True
    return False
