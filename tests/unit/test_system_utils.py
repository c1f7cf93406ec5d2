"""
Unit tests for system_utils module.

Tests size formatting, file name trimming, file helpers and the command
runner.
"""

import shutil
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from auto_sub.core.modules.system.system_utils import (
    TRIM_LENGTH, file_exists, format_command, get_file_size, readable_size, run_command,
    trim_string
)


class TestReadableSize(unittest.TestCase):
    """Test binary-prefixed size formatting."""

    def test_bytes(self):
        self.assertEqual(readable_size(0), "0.00 B")
        self.assertEqual(readable_size(1000), "1000.00 B")

    def test_kib(self):
        self.assertEqual(readable_size(1024), "1.00 KiB")
        self.assertEqual(readable_size(1536), "1.50 KiB")

    def test_large_values(self):
        self.assertEqual(readable_size(1572864), "1.50 MiB")
        self.assertEqual(readable_size(1855425871872), "1.69 TiB")

    def test_negative_raises(self):
        with self.assertRaises(ValueError):
            readable_size(-1)


class TestTrimString(unittest.TestCase):
    """Test middle truncation of long file names."""

    def test_short_text_unchanged(self):
        self.assertEqual(trim_string("movie.mkv"), "movie.mkv")
        self.assertEqual(trim_string("x" * TRIM_LENGTH), "x" * TRIM_LENGTH)

    def test_long_text_trimmed(self):
        text = "this string exceeds limit and will be truncated to fit in length"

        trimmed = trim_string(text)

        self.assertEqual(trimmed, "this string exceeds li....cated to fit in length")
        self.assertEqual(len(trimmed), TRIM_LENGTH)

    def test_custom_limit_and_marker(self):
        self.assertEqual(trim_string("abcdefghijkl", limit=8, marker=".."), "abc..jkl")

    def test_odd_limit_keeps_exact_length(self):
        trimmed = trim_string("a" * 40 + "b" * 20, limit=31)

        self.assertEqual(len(trimmed), 31)
        self.assertEqual(trimmed, "a" * 13 + "...." + "b" * 14)

    def test_limit_shorter_than_marker(self):
        self.assertEqual(trim_string("abcdefghijkl", limit=3), "abc")
        self.assertEqual(trim_string("abcdefghijkl", limit=0), "")


class TestFileHelpers(unittest.TestCase):
    """Test file existence and size helpers."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def test_get_file_size(self):
        path = self.test_dir / "out.mkv"
        path.write_bytes(b"x" * 2048)

        self.assertEqual(get_file_size(path), 2048)

    def test_get_file_size_missing(self):
        self.assertIsNone(get_file_size(self.test_dir / "missing.mkv"))

    def test_get_file_size_directory(self):
        self.assertIsNone(get_file_size(self.test_dir))

    def test_file_exists(self):
        path = self.test_dir / "a.srt"
        self.assertFalse(file_exists(path))
        path.write_text("1")
        self.assertTrue(file_exists(path))


class TestRunCommand(unittest.TestCase):
    """Test the subprocess wrapper."""

    @patch('auto_sub.core.modules.system.system_utils.subprocess.run')
    def test_run_command_defaults(self, mock_run):
        mock_run.return_value = Mock(returncode=0, stdout="ok", stderr="")

        result = run_command(["ffmpeg", "-version"])

        self.assertEqual(result.returncode, 0)
        mock_run.assert_called_once_with(
            ["ffmpeg", "-version"], capture_output=True, text=True, encoding="utf-8",
            errors="replace", timeout=None, check=False
        )

    @patch('auto_sub.core.modules.system.system_utils.subprocess.run')
    def test_run_command_timeout_propagates(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="ffmpeg", timeout=5)

        with self.assertRaises(subprocess.TimeoutExpired):
            run_command(["ffmpeg", "-i", "movie.mkv"], timeout=5)

    def test_format_command_quotes(self):
        self.assertEqual(
            format_command(["ffmpeg", "-i", "/videos/My Show/ep 01.mkv"]),
            "ffmpeg -i '/videos/My Show/ep 01.mkv'",
        )


if __name__ == '__main__':
    unittest.main()
