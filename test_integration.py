#!/usr/bin/env python3
"""
test_integration.py - Integration tests for the orgmedia command line

Creates real test data and runs `python -m orgmedia` as a subprocess, with
the real exiftool. Skipped when exiftool is not installed.
"""

import datetime
import os
import shutil
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent


@unittest.skipUnless(shutil.which("exiftool"), "exiftool not installed")
class TestCommandLine(unittest.TestCase):
    """Full runs against files exiftool cannot date, so mtime decides."""

    def setUp(self):
        self.test_root = Path(tempfile.mkdtemp(prefix="orgmedia_test_"))
        self.addCleanup(shutil.rmtree, self.test_root, ignore_errors=True)
        self.source_dir = self.test_root / "depot"
        self.dest_dir = self.test_root / "sorted"
        self.source_dir.mkdir()

    def create_test_image(self, path: Path, content: str, when: datetime.datetime) -> Path:
        """Create a fake image (no metadata) with a given UTC modification time."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content.encode())
        ts = when.replace(tzinfo=datetime.timezone.utc).timestamp()
        os.utime(path, (ts, ts))
        return path

    def run_orgmedia(self, *args):
        cmd = [sys.executable, "-m", "orgmedia", "--input", str(self.source_dir), "--output", str(self.dest_dir)]
        return subprocess.run(
            cmd + list(args), capture_output=True, text=True, timeout=120, cwd=PROJECT_ROOT
        )

    def test_move_collision_and_duplicate(self):
        when = datetime.datetime(2022, 8, 9, 18, 45, 12)
        self.create_test_image(self.source_dir / "Summer" / "a.jpg", "photo A", when)
        self.create_test_image(self.source_dir / "Summer" / "b.jpg", "photo B", when)
        self.create_test_image(self.source_dir / "Summer" / "c.jpg", "photo A", when)

        result = self.run_orgmedia("--log", "all", "--jobs", "2")

        self.assertEqual(result.returncode, 0, result.stderr)
        target = self.dest_dir / "2022" / "08 Summer"
        files = sorted(p.name for p in target.iterdir())
        self.assertEqual(len(files), 2)
        self.assertIn("2022-08-09 18.45.12.jpg", files)
        self.assertEqual(sorted(p.read_bytes() for p in target.iterdir()), [b"photo A", b"photo B"])
        self.assertFalse((self.source_dir / "Summer").exists())
        self.assertIn("Duplicates skipped: 1", result.stdout)
        self.assertIn("Files renamed (hash collision): 1", result.stdout)

    def test_dry_run(self):
        when = datetime.datetime(2021, 1, 2, 3, 4, 5)
        src = self.create_test_image(self.source_dir / "x.jpg", "photo X", when)

        result = self.run_orgmedia("--dry-run", "--log", "all")

        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertTrue(src.exists())
        self.assertFalse(self.dest_dir.exists())
        self.assertIn("[DRY RUN]", result.stderr)

    def test_output_inside_input_refused(self):
        self.create_test_image(self.source_dir / "x.jpg", "photo X", datetime.datetime(2021, 1, 2))
        cmd = [sys.executable, "-m", "orgmedia", "--input", str(self.source_dir),
               "--output", str(self.source_dir / "sorted")]
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=60, cwd=PROJECT_ROOT)
        self.assertEqual(result.returncode, 1)
        self.assertIn("inside input", result.stderr)


if __name__ == "__main__":
    unittest.main()
