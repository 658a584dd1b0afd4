"""
Naming collision handling.

When the date-derived destination of a file is already taken, the content
decides what happens:

- same bytes: the incoming file is a duplicate, its source is deleted and
  the existing file stays as it is;
- different bytes: the incoming file gets a suffix made of the first 8 hex
  characters of its own SHA-256 digest, grown by 4 while that name is taken
  too, up to 20. Past that the file fails instead of looping on.
"""

import datetime
import enum
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import HASH_PREFIX_INCREMENT, HASH_PREFIX_INITIAL_LEN, HASH_PREFIX_MAX_LEN
from .errors import FileProcessingError, PersistentCollisionError
from .hashing import calculate_file_hash, hash_prefix
from .naming import format_filename
from .plan import DryRunPlan


class ProcessingOutcome(enum.Enum):
    MOVED = "moved"
    RENAMED_ON_COLLISION = "renamed"
    SKIPPED_DUPLICATE = "duplicate"
    ERROR = "error"


@dataclass(frozen=True)
class Resolution:
    """Decision taken for a colliding file.

    `destination` is None for a duplicate: nothing is left to move.
    """

    outcome: ProcessingOutcome
    destination: Optional[Path] = None


def find_free_suffixed_path(
    target_dir: Path, timestamp: datetime.datetime, ext: str, digest: str, plan: Optional[DryRunPlan] = None
) -> Path:
    """
    Probe hash-suffixed names of growing length until one is free.

    Args:
        target_dir (Path): Directory the file is headed to
        timestamp (datetime.datetime): Timestamp the name is built from
        ext (str): Lowercase extension without the dot
        digest (str): Hex digest of the incoming file
        plan (DryRunPlan): Names claimed earlier in a dry run count as taken

    Returns:
        Path: First free path, using the shortest prefix possible

    Raises:
        PersistentCollisionError: If the names for prefix lengths 8, 12, 16
            and 20 are all taken
    """
    is_taken = plan.is_taken if plan is not None else os.path.lexists

    n = HASH_PREFIX_INITIAL_LEN
    while n <= HASH_PREFIX_MAX_LEN:
        candidate = target_dir / format_filename(timestamp, ext, hash_prefix(digest, n))
        if not is_taken(candidate):
            return candidate
        n += HASH_PREFIX_INCREMENT

    raise PersistentCollisionError(
        f"Persistent collision in {target_dir}: hash-suffixed names up to "
        f"{HASH_PREFIX_MAX_LEN} characters are all taken"
    )


def resolve_conflict(
    src: Path,
    dest: Path,
    timestamp: datetime.datetime,
    ext: str,
    dry_run: bool,
    logger,
    plan: Optional[DryRunPlan] = None,
) -> Resolution:
    """
    Decide what to do with `src` whose naive destination `dest` already exists.

    Deletes `src` when it is a byte-identical duplicate of `dest` (not under
    dry-run). Never modifies `dest`. Under a dry run, `plan` stands in for
    the files earlier moves would have put in place.

    Raises:
        FileProcessingError: If hashing or deleting the duplicate fails
        PersistentCollisionError: If no suffixed name is free
    """
    logger.warning(f"[CONFLICT] {src} -> {dest}")

    try:
        src_hash = calculate_file_hash(src)
    except OSError as e:
        raise FileProcessingError(f"hash source: {e}") from e
    planned = plan.claimed_source(dest) if plan is not None else None
    try:
        dest_hash = calculate_file_hash(planned or dest)
    except OSError as e:
        raise FileProcessingError(f"hash destination {dest}: {e}") from e

    if src_hash == dest_hash:
        logger.warning(
            f"[SKIP-DUP] same hash as {dest}, delete source: {src}" + (" [DRY RUN]" if dry_run else "")
        )
        if not dry_run:
            try:
                os.remove(src)
            except OSError as e:
                raise FileProcessingError(f"delete source (duplicate): {e}") from e
        return Resolution(ProcessingOutcome.SKIPPED_DUPLICATE)

    alt_dest = find_free_suffixed_path(dest.parent, timestamp, ext, src_hash, plan)
    logger.warning(f"[RENAME] destination exists with different content, using: {alt_dest}")
    return Resolution(ProcessingOutcome.RENAMED_ON_COLLISION, alt_dest)
