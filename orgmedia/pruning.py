"""
Cleanup of the input tree after a run.

Tag folders that no longer hold any supported media lose their empty
subdirectories, and are removed themselves once empty. A directory is only
ever removed after checking, right before the removal, that it is empty.
"""

import os
import threading
from pathlib import Path
from typing import Collection, Iterable, Set

from .errors import PruneError
from .filters import contains_supported_media


class TagTracker:
    """Thread-safe set of the tags seen during a run."""

    def __init__(self):
        self._lock = threading.Lock()
        self._tags: Set[str] = set()

    def add(self, tag: str):
        with self._lock:
            self._tags.add(tag)

    def snapshot(self) -> Set[str]:
        """Copy of the tags; call once every worker has finished."""
        with self._lock:
            return set(self._tags)

    def __len__(self):
        with self._lock:
            return len(self._tags)


def is_dir_empty(directory: Path) -> bool:
    try:
        with os.scandir(directory) as entries:
            return next(entries, None) is None
    except OSError as e:
        raise PruneError(f"read_dir {directory}: {e}") from e


def _remove_empty_dir(directory: Path, logger):
    try:
        directory.rmdir()
    except OSError as e:
        raise PruneError(f"remove empty dir {directory}: {e}") from e
    logger.debug(f"removed empty dir: {directory}")


def prune_empty_dirs(root: Path, logger) -> int:
    """
    Remove empty directories below `root`, children before parents.

    `root` itself is kept. Symlinks are never followed or removed.

    Returns:
        int: Number of directories removed

    Raises:
        PruneError: If a directory cannot be listed or removed
    """
    removed = 0
    try:
        with os.scandir(root) as it:
            subdirs = [Path(e.path) for e in it if e.is_dir(follow_symlinks=False)]
    except OSError as e:
        raise PruneError(f"read_dir {root}: {e}") from e

    for subdir in sorted(subdirs):
        removed += prune_empty_dirs(subdir, logger)
        if is_dir_empty(subdir):
            _remove_empty_dir(subdir, logger)
            removed += 1
    return removed


def prune_tag_dirs(
    input_root: Path,
    tags: Iterable[str],
    extensions: Collection[str],
    dry_run: bool,
    logger,
    departed: Collection[Path] = (),
) -> int:
    """
    Prune the tag folders of the input tree that hold no media anymore.

    Args:
        input_root (Path): Root of the input tree
        tags: Tags seen during the run
        extensions: Supported extensions, lowercase without dots
        dry_run (bool): Only log which folders would be pruned
        logger (logging.Logger): Logger for prune actions
        departed: Sources a dry run would have moved or deleted; they do
            not count as media left behind

    Returns:
        int: Number of tag folders removed entirely

    Raises:
        PruneError: If a directory cannot be listed or removed
    """
    removed_tags = 0
    for tag in sorted(tags):
        tag_dir = Path(input_root) / tag
        if not tag_dir.is_dir() or tag_dir.is_symlink():
            continue

        # Media still there (errors, other runs): leave the folder alone
        if contains_supported_media(tag_dir, extensions, departed):
            continue

        logger.info(
            f"[PRUNE] no media left in tag dir, pruning empties: {tag_dir}"
            + (" [DRY RUN]" if dry_run else "")
        )
        if dry_run:
            continue

        prune_empty_dirs(tag_dir, logger)

        if is_dir_empty(tag_dir):
            _remove_empty_dir(tag_dir, logger)
            removed_tags += 1
    return removed_tags
