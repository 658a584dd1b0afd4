r"""
orgmedia - Move photos and videos into a date tree

SUMMARY:
--------
Scans an input directory ("depot") recursively for media files, reads their
capture date with exiftool (falling back to hachoir, then to the file system
modification time), and moves them to OUTPUT/YYYY/MM/ renamed
"YYYY-MM-DD HH.MM.SS.ext". Files inside a top-level folder of the input keep
that folder's name as a tag: OUTPUT/YYYY/MM TAG/.

When the destination name is already taken, the content decides: a
byte-identical file is a duplicate and its source is deleted; a different
file gets a suffix from its SHA-256 digest ("... 10.00.00 A1B2C3D4.jpg").
Tag folders left without media are pruned at the end of the run.

USAGE EXAMPLES:
---------------
1. Preview what would happen, without touching anything:
    orgmedia --input ~/_depot --output ~/Photos --dry-run

2. Move everything with the default photo/video extensions:
    orgmedia --input ~/_depot --output ~/Photos

3. Only JPEG and MP4, logging every move:
    orgmedia --input ~/_depot --output ~/Photos --ext jpg --ext jpeg --ext mp4 --log all

4. Only report errors, four worker threads, full log kept in a file:
    orgmedia --input ~/_depot --output ~/Photos --log errors --jobs 4 --log-file ~/orgmedia.log

See --help for all options.
"""

import argparse
import datetime
import logging
import sys
from pathlib import Path

from . import __version__
from .config import DEFAULT_EXTENSIONS, DEFAULT_LOG_MODE, LOG_LEVELS, Config
from .core import organize
from .dates import ensure_exiftool_available
from .errors import ConfigurationError, PruneError
from .stats import Stats

LOGGER_NAME = "orgmedia"


def set_up_logging(log_mode: str = DEFAULT_LOG_MODE, log_file=None):
    """
    Set up console logging, plus an optional log file.

    Args:
        log_mode (str): One of "all", "conflicts" or "errors"; sets the
            console threshold. Errors are always shown.
        log_file (Path, optional): File that receives every INFO message

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    level = LOG_LEVELS[log_mode]

    # Repeated main() calls (tests) must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter("%(message)s")

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to open log file {log_file}: {e}")
        else:
            fh.setLevel(logging.INFO)
            fh.setFormatter(formatter)
            logger.addHandler(fh)
            level = min(level, logging.INFO)

    logger.setLevel(level)
    return logger


def print_examples():
    """Print the examples section of the module docstring."""
    doc_lines = __doc__.split("\n")
    examples_start = doc_lines.index("USAGE EXAMPLES:")
    examples_end = next(
        (
            i
            for i, line in enumerate(doc_lines[examples_start:], examples_start)
            if line.startswith("See --help")
        ),
        len(doc_lines),
    )
    print("\n".join(doc_lines[examples_start : examples_end + 1]))


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orgmedia",
        description="Move media files into OUTPUT/YYYY/MM or OUTPUT/YYYY/MM TAG, named after their "
        "capture date (exiftool metadata, file date as fallback). Name collisions are settled by "
        "SHA-256 content: identical files are deduplicated, different ones get a hash suffix.",
        epilog="""
IMPORTANT NOTES:
• exiftool must be installed and on PATH
• Sources are MOVED: use --dry-run first to preview
• Nothing is written besides the moved files (no journal, no cache); re-running is safe
• Use --examples to see usage scenarios""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--input",
        required=True,
        metavar="DIR",
        help="Input directory scanned recursively, e.g. /path/_depot. Its top-level folders become tags.",
    )
    parser.add_argument(
        "--output",
        required=True,
        metavar="DIR",
        help="Output directory where YYYY/MM folders are created. Must not be inside --input. "
        "Created if missing (unless --dry-run).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="Do not modify anything, only log the actions that would be taken.",
    )
    parser.add_argument(
        "--log",
        choices=sorted(LOG_LEVELS),
        default=DEFAULT_LOG_MODE,
        help="Console verbosity: 'all' = every move; 'conflicts' = collisions, duplicates and "
        "errors; 'errors' = errors only [default: %(default)s]",
    )
    parser.add_argument(
        "--ext",
        action="append",
        metavar="EXT",
        help="Supported extension, repeatable (--ext jpg --ext mp4). Case-insensitive, leading dot "
        f"optional [default: {' '.join(DEFAULT_EXTENSIONS)}]",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=None,
        metavar="N",
        help="Number of worker threads [default: number of CPUs]",
    )
    parser.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        metavar="PATH",
        help="Also write the full log (INFO and above) to this file.",
    )
    parser.add_argument(
        "--examples",
        action="store_true",
        help="Display usage examples and exit.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show program version and exit",
    )
    return parser


def parse_arguments(args=None):
    """
    Parse command line arguments.

    --examples is handled before regular parsing so it works without the
    required options.
    """
    if args is None:
        args = sys.argv[1:]

    if "--examples" in args:
        print_examples()
        sys.exit(0)

    return create_parser().parse_args(args)


def main(args=None) -> int:
    """
    Main entry point.

    Returns:
        int: 0 when the run completed (individual file errors included),
        1 on configuration errors, missing exiftool or a pruning failure
    """
    parsed_args = parse_arguments(args)

    log_file = Path(parsed_args.log_file).expanduser() if parsed_args.log_file else None
    logger = set_up_logging(parsed_args.log, log_file)
    logger.debug("Command-line options: %s", vars(parsed_args))

    try:
        exiftool_version = ensure_exiftool_available()
        config = Config.from_args(parsed_args, logger)
    except ConfigurationError as e:
        logger.error(f"Error: {e}")
        return 1

    start_time = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    logger.info("=" * 80)
    logger.info("orgmedia - Media Organization Tool")
    logger.info(f"Version: {__version__} (exiftool {exiftool_version})")
    logger.info(f"Session Started: {start_time}")
    logger.info(f"Input: {config.input}")
    logger.info(f"Output: {config.output}" + (" [DRY RUN]" if config.dry_run else ""))
    logger.info(f"Extensions: {', '.join(config.extensions)}")
    logger.info("=" * 80)

    stats = Stats()
    exit_code = 0
    try:
        organize(config, logger, stats=stats)
    except PruneError as e:
        logger.error(f"Pruning failed: {e}")
        exit_code = 1

    end_time = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    logger.info("=" * 80)
    logger.info(f"Session Ended: {end_time}")
    logger.info("=" * 80)

    stats.print_summary()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
