"""
Orchestration of a run: enumerate the input tree once, process every file
as an independent task on a thread pool, then prune emptied tag folders.
"""

import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Sequence, Tuple

from .config import PROGRESS_EVERY, Config
from .conflicts import ProcessingOutcome, resolve_conflict
from .dates import DateExtractor, resolve_datetime
from .filters import MediaFile, infer_tag, iter_media_files
from .mover import move_or_copy
from .naming import build_target_dir, format_filename
from .plan import DryRunPlan
from .pruning import TagTracker, prune_tag_dirs
from .stats import Stats


class DestinationLocks:
    """
    One lock per naive destination path.

    Holding it across the existence check, the conflict resolution and the
    move makes that sequence atomic with respect to the other workers of the
    run. Hash-suffixed names are derived from the naive name, so every file
    that can compete for a name waits on the same lock.

    An entry only lives while some worker holds or waits for it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}  # dest -> [lock, number of holders and waiters]

    @contextmanager
    def hold(self, dest: Path):
        with self._guard:
            entry = self._locks.get(dest)
            if entry is None:
                entry = self._locks[dest] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[dest]

    def __len__(self):
        with self._guard:
            return len(self._locks)


def process_file(
    media: MediaFile,
    config: Config,
    logger,
    extractors: Optional[Sequence[DateExtractor]] = None,
    locks: Optional[DestinationLocks] = None,
    plan: Optional[DryRunPlan] = None,
) -> Tuple[ProcessingOutcome, Optional[str]]:
    """
    Date, name and move a single file.

    Args:
        media (MediaFile): File to process
        config (Config): Run configuration
        logger (logging.Logger): Logger for actions
        extractors: Date extractors (default: exiftool, then hachoir)
        locks (DestinationLocks): Shared per-destination locks
        plan (DryRunPlan): Shared record of a dry run's moves; a private one
            is used if omitted under dry-run

    Returns:
        tuple: (outcome, tag) where tag is None for untagged files

    Raises:
        FileProcessingError: On any per-file failure
        OSError: On unexpected filesystem failures
    """
    if locks is None:
        locks = DestinationLocks()
    if not config.dry_run:
        plan = None
    elif plan is None:
        plan = DryRunPlan()

    tag = infer_tag(config.input, media.path)
    timestamp = resolve_datetime(media.path, logger, extractors)

    target_dir = build_target_dir(config.output, timestamp, tag)
    dest = target_dir / format_filename(timestamp, media.ext)
    is_taken = plan.is_taken if plan is not None else os.path.lexists

    with locks.hold(dest):
        if not is_taken(dest):
            move_or_copy(media.path, dest, config.dry_run, logger)
            if plan is not None:
                plan.claim(dest, media.path)
            return ProcessingOutcome.MOVED, tag

        resolution = resolve_conflict(media.path, dest, timestamp, media.ext, config.dry_run, logger, plan)
        if resolution.outcome is ProcessingOutcome.SKIPPED_DUPLICATE:
            if plan is not None:
                plan.depart(media.path)
            return resolution.outcome, tag

        move_or_copy(media.path, resolution.destination, config.dry_run, logger)
        if plan is not None:
            plan.claim(resolution.destination, media.path)
        return resolution.outcome, tag


def _process_and_record(media, config, logger, extractors, locks, plan, stats, tags) -> ProcessingOutcome:
    try:
        outcome, tag = process_file(media, config, logger, extractors, locks, plan)
    except Exception as e:
        logger.error(f"{media.path}: {e}")
        stats.record(ProcessingOutcome.ERROR)
        return ProcessingOutcome.ERROR

    if tag is not None:
        tags.add(tag)
    stats.record(outcome)
    return outcome


def organize(
    config: Config,
    logger,
    extractors: Optional[Sequence[DateExtractor]] = None,
    stats: Optional[Stats] = None,
) -> Stats:
    """
    Run the whole pipeline over `config.input`.

    A dry run takes the same decisions and logs the same actions as the
    live run would, without touching the filesystem.

    Args:
        config (Config): Validated run configuration
        logger (logging.Logger): Logger for progress and actions
        extractors: Date extractors, injectable for tests
        stats (Stats): Aggregator to fill; a new one is created if omitted

    Returns:
        Stats: Outcome counters of the run

    Raises:
        PruneError: If cleaning up the input tree fails. Moves already done
            are kept and `stats` is complete at that point.
    """
    if stats is None:
        stats = Stats()

    files = list(iter_media_files(config.input, config.extensions, logger))
    if not files:
        logger.info("No supported files found in input directory")
        return stats

    logger.info(f"Found {len(files)} files to process")

    tags = TagTracker()
    locks = DestinationLocks()
    plan = DryRunPlan() if config.dry_run else None

    with ThreadPoolExecutor(max_workers=config.jobs) as pool:
        futures = [
            pool.submit(_process_and_record, media, config, logger, extractors, locks, plan, stats, tags)
            for media in files
        ]
        for done, future in enumerate(as_completed(futures), start=1):
            future.result()
            if done % PROGRESS_EVERY == 0:
                logger.info(f"Processed {done}/{len(files)} files so far...")

    # Every worker has joined: the tag set is final
    prune_tag_dirs(
        config.input,
        tags.snapshot(),
        config.extensions,
        config.dry_run,
        logger,
        departed=plan.departed() if plan is not None else (),
    )
    return stats
