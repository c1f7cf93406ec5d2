"""
System utilities for auto_sub.

This module provides system-level utilities including:
- Process management
- File system helpers
- Human readable formatting for sizes and file names
"""

import os
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from ....utils.logging import get_logger

logger = get_logger("system_utils")

DEBUG = False  # Set by --debug flag

SIZE_UNITS = ('B', 'KiB', 'MiB', 'GiB', 'TiB', 'PiB')

# Longest file name shown in the progress display
TRIM_LENGTH = 48
TRIM_MARKER = "...."


def file_exists(path: "str | os.PathLike[str] | Path") -> bool:
    """Thin existence wrapper to provide a stable patch point for tests."""
    try:
        return Path(path).exists()
    except OSError:
        return False


def get_file_size(path: "str | os.PathLike[str] | Path") -> Optional[int]:
    """
    Size of a regular file in bytes.

    Returns None when the path is missing or points to a directory, so callers
    never feed a sentinel negative value into readable_size().
    """
    try:
        stat = Path(path).stat()
    except OSError as e:
        logger.debug(f"failed to get file size for {path}: {e}")
        return None
    if not Path(path).is_file():
        logger.debug(f"path belongs to a directory: {path}")
        return None
    return stat.st_size


def readable_size(bytes_size: float) -> str:
    """Convert bytes to binary-prefixed units with two decimals.

    >>> readable_size(1024)
    '1.00 KiB'
    >>> readable_size(1855425871872)
    '1.69 TiB'

    Negative sizes are a caller bug and raise ValueError.
    """
    if bytes_size < 0:
        raise ValueError(f"negative file size passed to readable_size: {bytes_size}")

    size = float(bytes_size)
    unit_index = 0
    while size >= 1024.0 and unit_index < len(SIZE_UNITS) - 1:
        size /= 1024.0
        unit_index += 1
    return f"{size:.2f} {SIZE_UNITS[unit_index]}"


def trim_string(text: str, limit: int = TRIM_LENGTH, marker: str = TRIM_MARKER) -> str:
    """
    Shorten text to `limit` characters by cutting out its middle.

    "this string exceeds limit and will be truncated to fit in length" becomes
    "this string exceeds li....cated to fit in length".
    """
    if len(text) <= limit:
        return text
    if limit <= len(marker):
        return text[:limit]

    head = (limit - len(marker)) // 2
    # odd remainders go to the tail so the result is exactly `limit` long
    tail = limit - len(marker) - head
    return f"{text[:head]}{marker}{text[len(text) - tail:]}"


def find_executable(name: str) -> Optional[str]:
    """Locate an executable on PATH, returning None if absent."""
    path = shutil.which(name)
    if path:
        logger.debug(f"{name} binary found at: {path}")
    else:
        logger.debug(f"unable to locate {name} on PATH")
    return path


def format_command(cmd: list[str]) -> str:
    """Shell-quoted rendition of a command for logs and dry runs."""
    return " ".join(shlex.quote(str(c)) for c in cmd)


def run_command(cmd: list[str], timeout: Optional[int] = None, capture_output: bool = True,
                text: bool = True, check: bool = False,
                errors: Optional[str] = "replace") -> subprocess.CompletedProcess:
    """
    Standardized subprocess command runner with consistent error handling.

    Args:
        cmd: Command as list of strings
        timeout: Timeout in seconds (default: no timeout)
        capture_output: Whether to capture stdout/stderr (default: True)
        text: Whether to use text mode (default: True)
        check: Whether to raise exception on non-zero exit (default: False)
        errors: Decoding error handler in text mode (default: "replace")

    Returns:
        CompletedProcess object
    """
    logger.cmd(format_command(cmd))
    try:
        return subprocess.run(
            cmd,
            capture_output=capture_output,
            text=text,
            encoding="utf-8" if text else None,
            errors=errors if text else None,
            timeout=timeout,
            check=check
        )
    except subprocess.TimeoutExpired:
        logger.error(f"Command timed out after {timeout}s: {' '.join(cmd[:3])}...")
        raise
    except subprocess.CalledProcessError as e:
        if DEBUG:
            logger.error(f"Command failed: {' '.join(cmd[:3])}... (exit code: {e.returncode})")
        raise
