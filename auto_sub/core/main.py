"""
Main orchestration module for auto_sub.

Parses the command line, validates the input and hands the run to the
MuxingEngine:
- Argument parsing and config merging
- Dependency check (--test)
- Exit status mapping
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .. import __version__
from ..config import get_config
from .modules.analysis.media_utils import get_tool_version
from .modules.errors import AutoSubError, STATUS_OK, UNEXPECTED_ERROR
from .modules.interface.user_input import UserInput, parse_exclusions
from .modules.processing.muxing_engine import MuxingEngine
from .modules.system import system_utils
from ..utils.logging import (get_debug_mode, get_logger, print_section_header, set_debug_mode,
                             set_log_level, set_quiet_mode)

# Module logger
logger = get_logger("auto_sub")

TITLE = "auto-sub"


def build_parser(config: dict) -> argparse.ArgumentParser:
    """Argument parser with defaults taken from the config."""
    parser = argparse.ArgumentParser(
        prog=TITLE,
        description="Command line utility to simplify soft-subbing videos",
    )

    # Input/output
    parser.add_argument("root", nargs="?", help="Path to the root directory")
    parser.add_argument("--root", dest="root_flag", metavar="PATH",
                        help="Path to the root directory (alternative to the positional argument)")
    parser.add_argument("-o", "--output", metavar="DIR",
                        help=f"Output directory (default: <root>/{config['output_dir_name']})")

    # Executables
    parser.add_argument("--ffmpeg", default=config['ffmpeg_path'], metavar="PATH",
                        help="Path to ffmpeg executable")
    parser.add_argument("--ffprobe", default=config['ffprobe_path'], metavar="PATH",
                        help="Path to ffprobe executable")

    # Modes
    parser.add_argument("--direct", action="store_true",
                        help="Use the root directory as the source directory")
    parser.add_argument("--test", action="store_true",
                        help="Run a check to verify dependencies")
    parser.add_argument("--dry-run", action="store_true",
                        help="Print the ffmpeg commands without running them")

    # File selection
    parser.add_argument("-E", "--exclude", action="append", default=[], metavar="NAMES",
                        help="Comma separated list of files to be ignored (repeatable)")
    parser.add_argument("--rexclude", default="", metavar="REGEX",
                        help="Regex pattern to dictate files to be ignored")

    # Subtitle metadata
    parser.add_argument("-T", "--subtitle", metavar="TITLE",
                        help="Custom title for subtitle files (default: file name)")
    parser.add_argument("-L", "--language", default=config['subtitle_language'], metavar="CODE",
                        help=f"Subtitle language (default: {config['subtitle_language']})")

    # Output control
    parser.add_argument("--display", choices=["auto", "terminal", "bar", "none"], default="auto",
                        help="Progress display (default: terminal on a tty, tqdm bar otherwise)")
    parser.add_argument("--log", "--debug", dest="debug", action="store_true",
                        default=config['debug'], help="Enable debug output for the current run")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print warnings and errors")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARN", "ERROR"], type=str.upper,
                        default=config['log_level'],
                        help=f"Minimum message level (default: {config['log_level']})")
    parser.add_argument("-v", "--version", action="version",
                        version=f"\n{TITLE} v{__version__}\nLicensed under MIT\n")
    return parser


def user_input_from_args(args: argparse.Namespace, config: dict) -> UserInput:
    exclusions: List[str] = []
    for raw in args.exclude:
        exclusions.extend(parse_exclusions(raw))

    root = args.root_flag or args.root
    return UserInput(
        root_path=Path(root) if root else None,
        ffmpeg_path=args.ffmpeg,
        ffprobe_path=args.ffprobe,
        logging=args.debug,
        is_direct=args.direct,
        is_test=args.test,
        dry_run=args.dry_run,
        exclusions=exclusions,
        regex_exclude=args.rexclude,
        subtitle_title=args.subtitle,
        subtitle_language=args.language,
        output_dir_name=config['output_dir_name'],
        output_dir=Path(args.output) if args.output else None,
        display=args.display,
        refresh_interval=config['refresh_interval'],
    )


def run_dependency_check(user_input: UserInput) -> int:
    """Print ffmpeg/ffprobe versions; non-zero when ffmpeg is unusable."""
    print_section_header(f"{TITLE} v{__version__} - dependency check")
    status = STATUS_OK
    for name, path in (("ffmpeg", user_input.ffmpeg_path), ("ffprobe", user_input.ffprobe_path)):
        version = get_tool_version(path) if path else None
        if version:
            print(f"  {name:<8} {version:<20} {path}")
        else:
            print(f"  {name:<8} {'not found':<20} {path or '-'}")
            if name == "ffmpeg":
                status = UNEXPECTED_ERROR
    return status


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the soft-subbing application."""
    config = get_config()
    parser = build_parser(config)
    args = parser.parse_args(argv)

    if args.root and args.root_flag:
        parser.error("root directory given both as argument and via --root")

    set_debug_mode(args.debug)
    system_utils.DEBUG = get_debug_mode()
    set_quiet_mode(args.quiet)
    set_log_level(args.log_level)
    if args.debug:
        logger.info("Logging enabled")

    try:
        user_input = user_input_from_args(args, config).initialize()

        if user_input.is_test:
            return run_dependency_check(user_input)

        engine = MuxingEngine(user_input)
        try:
            batch = engine.run()
        except KeyboardInterrupt:
            engine.cancel()
            logger.warn("Interrupted by user")
            return UNEXPECTED_ERROR

        for failure in batch.failed:
            logger.error(f"Failed: {failure.directory}")
        return batch.exit_code

    except AutoSubError as e:
        logger.error(str(e))
        return e.exit_code


if __name__ == "__main__":
    sys.exit(main())
