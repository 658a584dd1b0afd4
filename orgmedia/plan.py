"""
Bookkeeping for dry runs.

A dry run leaves the filesystem alone, so later files of the same run would
not see the destinations taken by earlier ones, nor the sources they moved
away. `DryRunPlan` records both so the preview takes the same decisions as
a live run would.
"""

import os
import threading
from pathlib import Path
from typing import Dict, Optional, Set


class DryRunPlan:
    """Destinations claimed and sources vacated by a dry run, thread-safe."""

    def __init__(self):
        self._lock = threading.Lock()
        self._claims: Dict[Path, Path] = {}
        self._departed: Set[Path] = set()

    def claim(self, dest: Path, src: Path):
        """Record that `src` would have been moved to `dest`."""
        with self._lock:
            self._claims[dest] = src
            self._departed.add(src)

    def depart(self, src: Path):
        """Record that `src` would have been deleted (duplicate)."""
        with self._lock:
            self._departed.add(src)

    def claimed_source(self, dest: Path) -> Optional[Path]:
        """File whose bytes would sit at `dest`, if the plan put one there."""
        with self._lock:
            return self._claims.get(dest)

    def is_taken(self, path: Path) -> bool:
        return self.claimed_source(path) is not None or os.path.lexists(path)

    def departed(self) -> Set[Path]:
        with self._lock:
            return set(self._departed)
