"""
Destination naming. Pure functions, they never touch the filesystem.

Layout:
    output_root/YYYY/MM/YYYY-MM-DD HH.MM.SS.ext
    output_root/YYYY/MM TAG/YYYY-MM-DD HH.MM.SS.ext
    output_root/YYYY/MM TAG/YYYY-MM-DD HH.MM.SS SUFFIX.ext   (on collision)
"""

import datetime
from pathlib import Path
from typing import Optional


def build_target_dir(output_root: Path, timestamp: datetime.datetime, tag: Optional[str]) -> Path:
    """
    Build the destination directory for a timestamp and an optional tag.

    Args:
        output_root (Path): Root of the organized tree
        timestamp (datetime.datetime): Capture time of the file
        tag (str or None): Name of the top-level input folder, if any

    Returns:
        Path: ``output_root/YYYY/MM`` or ``output_root/YYYY/MM TAG`` when the
        tag is non-empty after trimming
    """
    year = f"{timestamp.year:04d}"
    month = f"{timestamp.month:02d}"

    if tag is not None and tag.strip():
        month = f"{month} {tag.strip()}"

    return Path(output_root) / year / month


def format_filename(timestamp: datetime.datetime, ext: str, suffix: Optional[str] = None) -> str:
    """
    Format the destination filename for a timestamp.

    Example:
        >>> format_filename(datetime.datetime(2024, 7, 1, 10, 0, 0), "jpg")
        '2024-07-01 10.00.00.jpg'
        >>> format_filename(datetime.datetime(2024, 7, 1, 10, 0, 0), "jpg", "A1B2C3D4")
        '2024-07-01 10.00.00 A1B2C3D4.jpg'
    """
    base = (
        f"{timestamp.year:04d}-{timestamp.month:02d}-{timestamp.day:02d} "
        f"{timestamp.hour:02d}.{timestamp.minute:02d}.{timestamp.second:02d}"
    )
    if suffix:
        base = f"{base} {suffix}"
    return f"{base}.{ext}"
