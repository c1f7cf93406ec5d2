"""
User input handling for auto_sub.

Holds the values collected from the command line / config, validates them and
provides the per-file ignore predicate consumed by the classifier.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Pattern

from ..errors import ExecutableNotFoundError, RegexPatternError, RootDirectoryError
from ..system.system_utils import find_executable
from ....utils.logging import get_logger

logger = get_logger("user_input")


def parse_exclusions(raw: Optional[str]) -> List[str]:
    """Split a comma separated exclusion list.

    Spaces and trailing slashes are trimmed and empty entries dropped. Case is
    kept; comparison against file names is case-insensitive.
    """
    if not raw:
        return []
    values = []
    for value in raw.split(","):
        value = value.strip().rstrip("/\\")
        if value:
            values.append(value)
    return values


@dataclass
class UserInput:
    """Values supplied by the user for the current run."""
    root_path: Optional[Path] = None
    ffmpeg_path: Optional[str] = None
    ffprobe_path: Optional[str] = None
    logging: bool = False
    is_direct: bool = False
    is_test: bool = False
    dry_run: bool = False
    exclusions: List[str] = field(default_factory=list)
    regex_exclude: str = ""
    subtitle_title: Optional[str] = None
    subtitle_language: Optional[str] = "eng"
    output_dir_name: str = "result"
    output_dir: Optional[Path] = None
    display: str = "auto"
    refresh_interval: float = 1.0
    regex_rule: Optional[Pattern[str]] = field(default=None, repr=False)

    def initialize(self) -> "UserInput":
        """
        Validate the input and prepare derived values.

        Raises:
            RegexPatternError: the exclusion pattern does not compile
            RootDirectoryError: root path missing or not a directory
            ExecutableNotFoundError: ffmpeg cannot be located
        """
        self.exclusions = [e.strip().rstrip("/\\") for e in self.exclusions if e.strip()]

        if self.regex_exclude:
            try:
                self.regex_rule = re.compile(self.regex_exclude)
            except re.error as e:
                raise RegexPatternError(f"Failed to compile regex pattern `{self.regex_exclude}`: {e}") from e
        else:
            self.regex_rule = None

        self.log()

        if self.root_path is None or str(self.root_path) == "":
            # --test can run without a root directory
            if not self.is_test:
                raise RootDirectoryError("path to root directory not specified")
        else:
            self.root_path = Path(self.root_path).expanduser()
            if not self.root_path.exists():
                raise RootDirectoryError(f"Root directory does not exist: {self.root_path}")
            if not self.root_path.is_dir():
                raise RootDirectoryError(f"Path to root directory is not a directory: {self.root_path}")

        self.ffmpeg_path = self._resolve_executable("ffmpeg", self.ffmpeg_path)
        self.ffprobe_path = self._resolve_executable("ffprobe", self.ffprobe_path)
        if self.ffmpeg_path is None and not self.is_test:
            raise ExecutableNotFoundError("unable to locate ffmpeg; use --ffmpeg to point at it")

        return self

    @staticmethod
    def _resolve_executable(name: str, configured: Optional[str]) -> Optional[str]:
        if configured:
            path = Path(configured).expanduser()
            if path.is_file():
                return str(path)
            # Bare names like "ffmpeg" go through PATH lookup
            found = find_executable(configured)
            if found:
                return found
            raise ExecutableNotFoundError(f"{name} path invalid: `{configured}`")
        return find_executable(name)

    def resolve_output_dir(self) -> Path:
        if self.output_dir is not None:
            return Path(self.output_dir)
        return Path(self.root_path) / self.output_dir_name

    def ignore_file(self, source_dir: Path, file_name: str) -> bool:
        """True when the file matches the regex rule or an exclusion name."""
        if self.regex_rule is not None and self.regex_rule.search(file_name):
            logger.debug(f"skip file; match against regex exclusion: {Path(source_dir) / file_name}")
            return True

        lowered = file_name.lower()
        for exclude in self.exclusions:
            if lowered == exclude.lower():
                logger.debug(f"skip file; exclusion rule `{exclude}`: {Path(source_dir) / file_name}")
                return True

        return False

    def log(self):
        logger.debug(
            "user input:\n"
            f"  Root path: `{self.root_path}`\n"
            f"  FFmpeg executable: `{self.ffmpeg_path}`\n"
            f"  FFprobe executable: `{self.ffprobe_path}`\n"
            f"  Direct mode: {self.is_direct}\n"
            f"  Test mode: {self.is_test}\n"
            f"  Exclusions: {self.exclusions}\n"
            f"  Regex exclusion: `{self.regex_exclude}`"
        )
