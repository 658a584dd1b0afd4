"""
orgmedia - Move photos and videos into a YYYY/MM date tree.

Capture dates come from exiftool (with hachoir and the file modification time
as fallbacks). Name collisions are settled by content: identical files are
deduplicated, different ones get a hash-derived suffix.
"""

from .config import Config
from .conflicts import ProcessingOutcome
from .core import organize, process_file
from .stats import Stats

__version__ = "1.0.0"
__all__ = [
    "Config",
    "ProcessingOutcome",
    "Stats",
    "organize",
    "process_file",
]
