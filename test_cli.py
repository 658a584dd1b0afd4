#!/usr/bin/env python3
"""
test_cli.py - Tests for argument parsing, logging setup and main()

exiftool is patched out; the date extractors are replaced with a stub.
"""

import datetime
import logging
import shutil
import sys
import tempfile
import unittest
from io import StringIO
from pathlib import Path
from unittest.mock import patch

from orgmedia import cli
from orgmedia.errors import ConfigurationError, PruneError

TS = datetime.datetime(2023, 5, 15, 8, 30, 0)


def _make_file(path: Path, content: bytes = b"default content") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


class TestCreateParser(unittest.TestCase):
    def test_input_and_output_required(self):
        parser = cli.create_parser()
        with patch("sys.stderr", new_callable=StringIO):
            with self.assertRaises(SystemExit):
                parser.parse_args([])
            with self.assertRaises(SystemExit):
                parser.parse_args(["--input", "/tmp/in"])

    def test_defaults(self):
        args = cli.create_parser().parse_args(["--input", "in", "--output", "out"])
        self.assertFalse(args.dry_run)
        self.assertEqual(args.log, "conflicts")
        self.assertIsNone(args.ext)
        self.assertIsNone(args.jobs)
        self.assertIsNone(args.log_file)

    def test_repeatable_ext(self):
        args = cli.create_parser().parse_args(
            ["--input", "in", "--output", "out", "--ext", "jpg", "--ext", "MP4"]
        )
        self.assertEqual(args.ext, ["jpg", "MP4"])

    def test_log_choices(self):
        parser = cli.create_parser()
        for mode in ("all", "conflicts", "errors"):
            self.assertEqual(parser.parse_args(["--input", "i", "--output", "o", "--log", mode]).log, mode)
        with patch("sys.stderr", new_callable=StringIO):
            with self.assertRaises(SystemExit):
                parser.parse_args(["--input", "i", "--output", "o", "--log", "loud"])

    def test_dry_run_and_jobs(self):
        args = cli.create_parser().parse_args(["--input", "i", "--output", "o", "--dry-run", "--jobs", "3"])
        self.assertTrue(args.dry_run)
        self.assertEqual(args.jobs, 3)

    def test_examples_exit_without_required_args(self):
        with patch("sys.stdout", new_callable=StringIO) as out:
            with self.assertRaises(SystemExit) as ctx:
                cli.parse_arguments(["--examples"])
        self.assertEqual(ctx.exception.code, 0)
        self.assertIn("USAGE EXAMPLES:", out.getvalue())
        self.assertIn("--dry-run", out.getvalue())


class TestSetUpLogging(unittest.TestCase):
    def tearDown(self):
        logger = logging.getLogger(cli.LOGGER_NAME)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def test_levels_by_mode(self):
        self.assertEqual(cli.set_up_logging("all").handlers[0].level, logging.INFO)
        self.assertEqual(cli.set_up_logging("conflicts").handlers[0].level, logging.WARNING)
        self.assertEqual(cli.set_up_logging("errors").handlers[0].level, logging.ERROR)

    def test_handlers_not_stacked(self):
        cli.set_up_logging("all")
        logger = cli.set_up_logging("all")
        self.assertEqual(len(logger.handlers), 1)

    def test_log_file(self):
        tmp = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, tmp, ignore_errors=True)
        logfile = tmp / "logs" / "run.log"

        logger = cli.set_up_logging("errors", logfile)
        logger.info("[MOVE] a -> b")
        for handler in logger.handlers:
            handler.flush()

        self.assertIn("[MOVE] a -> b", logfile.read_text(encoding="utf-8"))


class TestMain(unittest.TestCase):
    def setUp(self):
        self.tmp = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.tmp, ignore_errors=True)
        self.depot = self.tmp / "depot"
        self.out = self.tmp / "out"
        self.depot.mkdir()

        patches = [
            patch("orgmedia.cli.ensure_exiftool_available", return_value="12.76"),
            patch("orgmedia.dates.default_extractors", return_value=[lambda path: TS]),
            patch("sys.stdout", new_callable=StringIO),
            patch("sys.stderr", new_callable=StringIO),
        ]
        for p in patches:
            p.start()
            self.addCleanup(p.stop)

    def tearDown(self):
        logger = logging.getLogger(cli.LOGGER_NAME)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def run_main(self, *extra):
        return cli.main(["--input", str(self.depot), "--output", str(self.out), *extra])

    def test_moves_files_and_prints_summary(self):
        _make_file(self.depot / "Birthday" / "IMG_1.jpg", b"cake")

        self.assertEqual(self.run_main(), 0)

        self.assertEqual(
            (self.out / "2023" / "05 Birthday" / "2023-05-15 08.30.00.jpg").read_bytes(), b"cake"
        )
        self.assertIn("Files processed: 1", sys.stdout.getvalue())

    def test_dry_run(self):
        src = _make_file(self.depot / "IMG_1.jpg", b"cake")
        self.assertEqual(self.run_main("--dry-run", "--log", "all"), 0)
        self.assertTrue(src.exists())
        self.assertFalse(self.out.exists())

    def test_file_errors_still_exit_zero(self):
        _make_file(self.depot / "IMG_1.jpg", b"cake")
        with patch("orgmedia.core.resolve_datetime", side_effect=OSError(5, "Input/output error")):
            self.assertEqual(self.run_main("--log", "errors"), 0)
        self.assertIn("Errors: 1", sys.stdout.getvalue())
        self.assertIn("Input/output error", sys.stderr.getvalue())

    def test_missing_input_exits_one(self):
        code = cli.main(["--input", str(self.tmp / "missing"), "--output", str(self.out)])
        self.assertEqual(code, 1)
        self.assertFalse(self.out.exists())

    def test_nested_output_exits_one(self):
        _make_file(self.depot / "IMG_1.jpg", b"cake")
        code = cli.main(["--input", str(self.depot), "--output", str(self.depot / "sorted")])
        self.assertEqual(code, 1)
        self.assertTrue((self.depot / "IMG_1.jpg").exists())

    def test_missing_exiftool_exits_one(self):
        src = _make_file(self.depot / "IMG_1.jpg", b"cake")
        with patch("orgmedia.cli.ensure_exiftool_available", side_effect=ConfigurationError("no exiftool")):
            self.assertEqual(self.run_main(), 1)
        self.assertTrue(src.exists())
        self.assertFalse(self.out.exists())

    def test_prune_failure_exits_one_after_moves(self):
        _make_file(self.depot / "Trip" / "IMG_1.jpg", b"cake")
        with patch("orgmedia.core.prune_tag_dirs", side_effect=PruneError("remove empty dir: denied")):
            self.assertEqual(self.run_main(), 1)
        self.assertTrue((self.out / "2023" / "05 Trip" / "2023-05-15 08.30.00.jpg").exists())
        self.assertIn("Files processed: 1", sys.stdout.getvalue())

    def test_errors_shown_in_errors_mode_only(self):
        _make_file(self.depot / "IMG_1.jpg", b"cake")
        self.assertEqual(self.run_main("--log", "errors"), 0)
        self.assertNotIn("[MOVE]", sys.stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
