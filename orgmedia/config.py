"""
Configuration for orgmedia.

Holds the tuning constants of the pipeline and the validated run
configuration built from command line arguments.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .errors import ConfigurationError
from .filters import normalize_extensions

# Collision suffixes: hex prefix of the source digest, grown 8 -> 12 -> 16 -> 20
HASH_PREFIX_INITIAL_LEN = 8
HASH_PREFIX_INCREMENT = 4
HASH_PREFIX_MAX_LEN = 20

FILE_READ_BUFFER_SIZE = 1024 * 1024  # 1 MiB

DEFAULT_EXTENSIONS = [
    "jpg", "jpeg", "png", "heic", "gif", "tif", "tiff",  # images
    "mp4", "mov", "m4v", "avi", "mkv", "3gp", "mpo",  # videos
]

# --log choices mapped to the threshold of the console handler
LOG_LEVELS = {
    "all": logging.INFO,
    "conflicts": logging.WARNING,
    "errors": logging.ERROR,
}
DEFAULT_LOG_MODE = "conflicts"

# Progress is logged every N completed files
PROGRESS_EVERY = 100


@dataclass
class Config:
    """
    Validated settings for one run.

    Build it with `Config.from_args()` from the CLI, or directly in tests:

        config = Config(input=src, output=dst, dry_run=True)
    """

    input: Path
    output: Path
    dry_run: bool = False
    log_mode: str = DEFAULT_LOG_MODE
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    jobs: int = field(default_factory=lambda: os.cpu_count() or 1)
    log_file: Optional[Path] = None

    @classmethod
    def from_args(cls, args, logger=None) -> "Config":
        """
        Create and validate a configuration from parsed arguments.

        Args:
            args: argparse.Namespace with input, output, dry_run, log, ext,
                jobs and log_file attributes
            logger: Logger used to report the default extension set

        Returns:
            Config: Validated configuration

        Raises:
            ConfigurationError: If a path is missing or invalid, the output is
                nested inside the input, or the output cannot be created
        """
        if not args.input or not args.output:
            raise ConfigurationError("--input and --output are required")

        try:
            input_dir = Path(args.input).expanduser().resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise ConfigurationError(f"Unable to resolve --input {args.input!r}: {e}") from e

        if args.ext:
            extensions = normalize_extensions(args.ext)
            if not extensions:
                raise ConfigurationError("--ext was given but no usable extension remains")
        else:
            extensions = list(DEFAULT_EXTENSIONS)
            if logger:
                logger.info(f"No extensions provided, using defaults: {', '.join(extensions)}")

        jobs = args.jobs if args.jobs is not None else (os.cpu_count() or 1)
        if jobs < 1:
            raise ConfigurationError(f"--jobs must be at least 1, got {jobs}")

        config = cls(
            input=input_dir,
            output=Path(args.output).expanduser().resolve(),
            dry_run=args.dry_run,
            log_mode=args.log,
            extensions=extensions,
            jobs=jobs,
            log_file=Path(args.log_file).expanduser() if args.log_file else None,
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Check the directory layout and create the output root unless dry-run."""
        if not self.input.is_dir():
            raise ConfigurationError(f"--input must be a directory: {self.input}")

        if self.output == self.input or self.input in self.output.parents:
            raise ConfigurationError("Output directory cannot be inside input directory")

        if self.log_mode not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log mode: {self.log_mode!r}")

        if not self.dry_run and not self.output.exists():
            try:
                self.output.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ConfigurationError(f"Cannot create output directory {self.output}: {e}") from e

        if self.output.exists() and not self.output.is_dir():
            raise ConfigurationError(f"--output exists and is not a directory: {self.output}")
