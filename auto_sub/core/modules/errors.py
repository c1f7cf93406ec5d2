"""
Exception hierarchy for auto_sub.

Lower layers (classifier, prober, engine) raise these; only the CLI decides
how they are reported and which exit code they map to.
"""

from pathlib import Path
from typing import Sequence

# Exit codes
STATUS_OK = 0
ROOT_DIRECTORY_INCORRECT = 11
REGEX_ERROR = 12
UNEXPECTED_ERROR = 13
EXEC_NOT_FOUND = 14


class AutoSubError(Exception):
    """Base class for every expected failure mode."""
    exit_code = UNEXPECTED_ERROR


class ClassificationError(AutoSubError):
    """A source directory does not hold one media file plus extras."""

    def __init__(self, directory: Path, files: Sequence[str], message: str):
        self.directory = Path(directory)
        self.files = list(files)
        super().__init__(message)

    def __str__(self):
        listing = ", ".join(f"`{name}`" for name in self.files) or "(none)"
        return f"{self.args[0]}\nDirectory: {self.directory}\nFiles: [{listing}]"


class NoMediaFileError(ClassificationError):
    def __init__(self, directory: Path, files: Sequence[str]):
        super().__init__(directory, files, "Failed to locate media file in the source directory")


class MultipleMediaFilesError(ClassificationError):
    def __init__(self, directory: Path, files: Sequence[str], media_files: Sequence[str]):
        self.media_files = list(media_files)
        super().__init__(directory, files, "Multiple media files found in a source directory")


class NoExtraFilesError(ClassificationError):
    def __init__(self, directory: Path, files: Sequence[str]):
        super().__init__(directory, files, "Could not detect any additional file in the source directory")


class FrameProbeError(AutoSubError):
    """Total frame count could not be determined."""


class MuxError(AutoSubError):
    """ffmpeg exited non-zero or could not be started."""

    def __init__(self, directory: Path, returncode: int | None, log: str = ""):
        self.directory = Path(directory)
        self.returncode = returncode
        self.log = log
        if returncode is None:
            message = f"ffmpeg could not be started for {self.directory}"
        else:
            message = f"ffmpeg exited with code {returncode} for {self.directory}"
        super().__init__(message)

    def log_tail(self, lines: int = 20) -> str:
        return "\n".join(self.log.splitlines()[-lines:])


class MuxCancelledError(MuxError):
    """The running ffmpeg process was aborted on request."""

    def __init__(self, directory: Path, log: str = ""):
        super().__init__(directory, None, log)
        self.args = (f"ffmpeg cancelled for {self.directory}",)


class OutputDirectoryError(AutoSubError):
    """The destination directory could not be created."""


class UserInputError(AutoSubError):
    """Invalid command-line input."""


class RootDirectoryError(UserInputError):
    exit_code = ROOT_DIRECTORY_INCORRECT


class RegexPatternError(UserInputError):
    exit_code = REGEX_ERROR


class ExecutableNotFoundError(UserInputError):
    exit_code = EXEC_NOT_FOUND
