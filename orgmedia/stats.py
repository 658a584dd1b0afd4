"""Run statistics shared by the worker threads."""

import threading

from .conflicts import ProcessingOutcome


class Stats:
    """
    Outcome counters for one run.

    Workers only call `record()`, once per file. Increments commute, so the
    order in which threads report does not matter; the lock only makes each
    increment exact.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.processed = 0
        self.moved = 0
        self.duplicates = 0
        self.renamed = 0
        self.errors = 0

    def record(self, outcome: ProcessingOutcome):
        with self._lock:
            if outcome is ProcessingOutcome.ERROR:
                self.errors += 1
                return
            self.processed += 1
            if outcome is ProcessingOutcome.MOVED:
                self.moved += 1
            elif outcome is ProcessingOutcome.SKIPPED_DUPLICATE:
                self.duplicates += 1
            elif outcome is ProcessingOutcome.RENAMED_ON_COLLISION:
                self.renamed += 1

    @property
    def total(self) -> int:
        return self.processed + self.errors

    def summary_lines(self):
        return [
            "",
            "=== Summary ===",
            f"Files processed: {self.processed}",
            f"Moved: {self.moved}",
            f"Duplicates skipped: {self.duplicates}",
            f"Files renamed (hash collision): {self.renamed}",
            f"Errors: {self.errors}",
        ]

    def print_summary(self):
        print("\n".join(self.summary_lines()))
