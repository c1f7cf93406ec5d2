"""
Centralized logging utilities for auto_sub

Provides consistent logging patterns with configurable debug levels:
- [INFO] for general information
- [WARN] for warnings
- [ERROR] for errors
- [RESULT] for final results
- [DEBUG] for debug information
- [DISCOVERY] for source directory / file classification messages
- [MUX] for muxing runs
- [PROBE] for frame count and version probes
- [CMD] for the exact commands being fired

Usage:
    from auto_sub.utils.logging import get_logger, set_debug_mode

    set_debug_mode(True)  # Enable debug messages

    logger = get_logger("muxing_engine")
    logger.info("This is an info message")
    logger.debug("This is a debug message")  # Only shows if debug enabled
    logger.mux("Muxing message")
"""

import os
import sys
from enum import Enum

from tqdm import tqdm

# Global logging configuration
_DEBUG_ENABLED = False
_QUIET_MODE = False
_LOG_LEVEL = "INFO"


class LogLevel(Enum):
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3


def _init_debug_mode():
    global _DEBUG_ENABLED
    if os.getenv('DEBUG', '').lower() in ('1', 'true', 'yes'):
        _DEBUG_ENABLED = True


_init_debug_mode()


def set_debug_mode(enabled: bool):
    """Enable or disable debug mode globally"""
    global _DEBUG_ENABLED
    _DEBUG_ENABLED = enabled


def set_quiet_mode(enabled: bool):
    """Enable or disable quiet mode (suppress INFO and DEBUG messages)"""
    global _QUIET_MODE
    _QUIET_MODE = enabled


def set_log_level(level: str):
    """Set the global log level: DEBUG, INFO, WARN, ERROR"""
    global _LOG_LEVEL
    _LOG_LEVEL = level.upper()


def get_debug_mode() -> bool:
    """Get current debug mode setting"""
    return _DEBUG_ENABLED


def _emit(line: str, error: bool = False):
    # tqdm.write keeps any active tqdm bar intact while printing above it
    tqdm.write(line, file=sys.stderr if error else sys.stdout)


class Logger:
    """Centralized logger with consistent formatting and configurable output"""

    def __init__(self, module_name: str = ""):
        self.module_name = module_name
        self.prefix = f"[{module_name}] " if module_name else ""

    def _should_log(self, level: LogLevel) -> bool:
        """Check if message should be logged based on current settings"""
        if _QUIET_MODE and level in (LogLevel.DEBUG, LogLevel.INFO):
            return False
        if level is LogLevel.DEBUG:
            return _DEBUG_ENABLED

        level_hierarchy = {
            "DEBUG": LogLevel.DEBUG,
            "INFO": LogLevel.INFO,
            "WARN": LogLevel.WARN,
            "ERROR": LogLevel.ERROR
        }

        current_level = level_hierarchy.get(_LOG_LEVEL, LogLevel.INFO)
        return level.value >= current_level.value

    def _log(self, level: str, message: str):
        log_level = LogLevel.INFO
        if level == "DEBUG":
            log_level = LogLevel.DEBUG
        elif level == "WARN":
            log_level = LogLevel.WARN
        elif level == "ERROR":
            log_level = LogLevel.ERROR

        if not self._should_log(log_level):
            return

        _emit(f"[{level}] {self.prefix}{message}", error=log_level is LogLevel.ERROR)

    def _tagged(self, tag: str, message: str, level: LogLevel = LogLevel.INFO):
        if self._should_log(level):
            _emit(f"[{tag}] {message}", error=level is LogLevel.ERROR)

    def debug(self, message: str):
        """Log debug message (only if debug mode enabled)"""
        self._log("DEBUG", message)

    def info(self, message: str):
        """Log informational message"""
        self._log("INFO", message)

    def warn(self, message: str):
        """Log warning message"""
        self._log("WARN", message)

    def error(self, message: str):
        """Log error message"""
        self._log("ERROR", message)

    def result(self, message: str):
        """Log result message"""
        self._tagged("RESULT", f"{self.prefix}{message}")

    # Domain-specific logging methods
    def discovery(self, message: str):
        """Log source directory discovery / classification message"""
        self._tagged("DISCOVERY", message)

    def mux(self, message: str):
        """Log muxing message"""
        self._tagged("MUX", message)

    def mux_error(self, message: str):
        """Log muxing failure message"""
        self._tagged("MUX-ERROR", message, LogLevel.ERROR)

    def probe(self, message: str):
        """Log frame/version probe message"""
        self._tagged("PROBE", message, LogLevel.DEBUG)

    def cmd(self, message: str):
        """Log command execution message"""
        self._tagged("CMD", message, LogLevel.DEBUG)

    def output(self, message: str):
        """Log output directory message"""
        self._tagged("OUTPUT", message)

    def mode(self, message: str):
        """Log mode selection message"""
        self._tagged("MODE", message)


def get_logger(module_name: str = "") -> Logger:
    """Get a logger instance for a module"""
    return Logger(module_name)


def print_section_header(title: str, width: int = 72):
    """Print a section header with consistent formatting"""
    print("=" * width)
    print(title)
    print("=" * width)


def format_duration(seconds: float) -> str:
    """Format duration in seconds to a human-readable string"""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{seconds/60:.1f}m"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return f"{hours}h {minutes}m"
