"""
Physical relocation of files.

A rename is tried first (atomic, same filesystem). When it fails, typically
across devices, the file is copied and only then removed from its source, so
an interrupted run never loses the only copy.
"""

import os
import shutil
from pathlib import Path

from .errors import MoveError, SourceRetainedError

RENAMED = "renamed"
COPIED = "copied"
DRY_RUN = "dry-run"


def move_or_copy(src: Path, dest: Path, dry_run: bool, logger) -> str:
    """
    Move `src` to `dest`, creating missing parent directories.

    Args:
        src (Path): File to move
        dest (Path): Final path, expected not to exist yet
        dry_run (bool): Log the action without touching the filesystem
        logger (logging.Logger): Logger for the action

    Returns:
        str: RENAMED, COPIED or DRY_RUN

    Raises:
        MoveError: If the directory cannot be created, or both the rename and
            the copy failed. The source is left in place.
        SourceRetainedError: If the copy succeeded but the source could not
            be removed. The content then exists at both paths.
    """
    if not dry_run:
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MoveError(f"Failed to create destination subdir {dest.parent}: {e}") from e

    logger.info(f"[MOVE] {src} -> {dest}" + (" [DRY RUN]" if dry_run else ""))

    if dry_run:
        return DRY_RUN

    try:
        os.rename(src, dest)
        return RENAMED
    except OSError as rename_err:
        logger.debug(f"rename failed for {src} ({rename_err}), falling back to copy")
        return _copy_then_remove(src, dest, rename_err, logger)


def _copy_then_remove(src: Path, dest: Path, rename_err: OSError, logger) -> str:
    try:
        shutil.copy2(src, dest)
    except OSError as copy_err:
        _discard_partial_copy(dest, logger)
        raise MoveError(
            f"rename failed ({rename_err}) and copy failed ({copy_err}): {src} -> {dest}"
        ) from copy_err

    try:
        os.remove(src)
    except OSError as remove_err:
        raise SourceRetainedError(
            f"rename failed ({rename_err}), copied to {dest} but could not remove source "
            f"({remove_err}); content now exists at both paths: {src}"
        ) from remove_err

    return COPIED


def _discard_partial_copy(dest: Path, logger):
    if not dest.exists():
        return
    try:
        dest.unlink()
    except OSError as e:
        logger.error(f"Could not remove partial copy {dest}: {e}")
