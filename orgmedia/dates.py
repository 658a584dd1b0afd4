"""
Capture date resolution.

A file's date comes from the first extractor that knows it, in order:

1. exiftool (external executable), asking for the most specific tags first;
2. hachoir (in-process parser) for files exiftool has nothing for;
3. the file system modification time.

Extractors are plain callables ``path -> datetime or None`` so tests can
swap in deterministic stubs.
"""

import datetime
import logging
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Sequence

# Third-party library imports for metadata extraction
from hachoir.parser import createParser
from hachoir.metadata import extractMetadata
from hachoir.core import config as hachoir_config

from .errors import ConfigurationError, FileProcessingError, MetadataError

# Suppress hachoir warnings to keep console output clean
hachoir_config.quiet = True

DateExtractor = Callable[[Path], Optional[datetime.datetime]]

EXIFTOOL = "exiftool"
EXIFTOOL_TIMEOUT = 60  # seconds per file
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Most semantically specific first; covers photos and QuickTime/MP4 videos
EXIFTOOL_TAGS = [
    "DateTimeOriginal",
    "CreateDate",
    "MediaCreateDate",
    "TrackCreateDate",
    "ModifyDate",
]

_log = logging.getLogger(__name__)


def ensure_exiftool_available() -> str:
    """
    Check that exiftool can be executed.

    Returns:
        str: The exiftool version string

    Raises:
        ConfigurationError: If exiftool is missing or `exiftool -ver` fails
    """
    try:
        out = subprocess.run(
            [EXIFTOOL, "-ver"], capture_output=True, text=True, timeout=EXIFTOOL_TIMEOUT
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise ConfigurationError(f"Unable to execute {EXIFTOOL}. Is it installed and on PATH? ({e})") from e

    if out.returncode != 0:
        raise ConfigurationError(f"{EXIFTOOL} exists but returns an error ({EXIFTOOL} -ver)")
    return out.stdout.strip()


def exiftool_command(path: Path) -> List[str]:
    """Build the exiftool invocation for one file."""
    # -s -s -s: raw values without labels, one line per tag found
    cmd = [EXIFTOOL, "-s", "-s", "-s", "-api", "QuickTimeUTC=1", "-d", DATE_FORMAT]
    cmd += [f"-{tag}" for tag in EXIFTOOL_TAGS]
    cmd.append(str(path))
    return cmd


def parse_exiftool_output(stdout: str) -> Optional[datetime.datetime]:
    """Return the first line of exiftool output that parses as a date."""
    for line in stdout.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            return datetime.datetime.strptime(line, DATE_FORMAT)
        except ValueError:
            continue
    return None


def exiftool_datetime(path: Path) -> Optional[datetime.datetime]:
    """
    Extract the capture date of a file with exiftool.

    Args:
        path (Path): Media file

    Returns:
        datetime.datetime or None: First tag that holds a valid date

    Raises:
        MetadataError: If exiftool cannot run or exits with an error
    """
    try:
        out = subprocess.run(
            exiftool_command(path),
            capture_output=True,
            text=True,
            errors="replace",
            timeout=EXIFTOOL_TIMEOUT,
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise MetadataError(f"{EXIFTOOL} failed to run on {path}: {e}") from e

    if out.returncode != 0:
        raise MetadataError(f"{EXIFTOOL} error: {out.stderr.strip()}")

    return parse_exiftool_output(out.stdout)


def hachoir_datetime(path: Path) -> Optional[datetime.datetime]:
    """
    Attempt to extract the creation date from the file's metadata with hachoir.

    Returns None whenever hachoir cannot parse the file or finds no
    `creation_date` value.
    """
    try:
        parser = createParser(str(path))
    except Exception as e:
        _log.debug(f"Failed to create parser for {path}: {e}")
        return None

    if not parser:
        _log.debug(f"Unable to parse file for created date: {path}")
        return None

    try:
        with parser:  # Ensure parser is properly closed
            metadata = extractMetadata(parser)
    except Exception as e:
        _log.debug(f"Metadata extraction error for {path}: {e}")
        return None

    if not metadata:
        return None

    values = metadata.getValues("creation_date")
    if not values:
        return None

    value = values[0]
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(datetime.timezone.utc)
        return value.replace(tzinfo=None)
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    return None


def default_extractors() -> List[DateExtractor]:
    return [exiftool_datetime, hachoir_datetime]


def mtime_datetime(path: Path) -> datetime.datetime:
    """
    Return the file system modification time as a naive UTC datetime.

    Raises:
        FileProcessingError: If the modification time cannot be read
    """
    try:
        mtime = Path(path).stat().st_mtime
        stamp = datetime.datetime.fromtimestamp(mtime, tz=datetime.timezone.utc)
        return stamp.replace(tzinfo=None, microsecond=0)
    except (OSError, OverflowError, ValueError) as e:
        raise FileProcessingError(f"Cannot get modification time for {path}: {e}") from e


def resolve_datetime(
    path: Path, logger, extractors: Optional[Sequence[DateExtractor]] = None
) -> datetime.datetime:
    """
    Resolve the timestamp used to file `path`.

    Args:
        path (Path): Media file
        logger (logging.Logger): Logger for fallback notices
        extractors: Metadata extractors to try in order
            (default: exiftool, then hachoir)

    Returns:
        datetime.datetime: Naive timestamp with second precision

    Raises:
        FileProcessingError: If no extractor finds a date and the
            modification time is unavailable too
    """
    if extractors is None:
        extractors = default_extractors()

    reasons = []
    for extractor in extractors:
        try:
            found = extractor(path)
        except MetadataError as e:
            reasons.append(str(e))
            continue
        if found is not None:
            return found.replace(microsecond=0)

    reason = "; ".join(reasons) if reasons else "no date in metadata"
    logger.info(f"Metadata date unavailable for {path} ({reason}), using file mtime")
    return mtime_datetime(path)
