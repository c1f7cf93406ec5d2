"""
Source directory classification.

Buckets the immediate entries of a source directory into media, subtitle,
attachment and chapter files by extension. Classification never fails on its
own; ClassifiedFileSet.validate() enforces the one media file / at least one
extra file rule for the caller.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple

from ..errors import MultipleMediaFilesError, NoExtraFilesError, NoMediaFileError
from ....utils.logging import get_logger

logger = get_logger("file_classifier")

# Recognized extensions. Entries may be written with or without the leading dot.
MEDIA_EXTENSIONS = ("mkv", "mp4", "webm", "m2ts")
SUBTITLE_EXTENSIONS = ("srt", "ass", "sup", "pgs", "vtt")
ATTACHMENT_EXTENSIONS = ("ttf", "otf")
CHAPTER_EXTENSIONS = ("xml",)

# ignore(directory, file_name) -> True to skip the file
IgnorePredicate = Callable[[Path, str], bool]


@dataclass(frozen=True)
class FileRef:
    """A recognized file inside a source directory."""
    name: str
    extension: str
    path: Path

    @property
    def stem(self) -> str:
        return Path(self.name).stem

    @classmethod
    def from_path(cls, path: Path) -> "FileRef":
        return cls(name=path.name, extension=path.suffix.lstrip(".").lower(), path=path)


@dataclass(frozen=True)
class ClassifiedFileSet:
    """Files of one source directory grouped by role."""
    directory: Path
    media_files: Tuple[FileRef, ...] = ()
    subtitles: Tuple[FileRef, ...] = ()
    attachments: Tuple[FileRef, ...] = ()
    chapters: Tuple[FileRef, ...] = ()

    @property
    def media_file(self) -> Optional[FileRef]:
        return self.media_files[0] if len(self.media_files) == 1 else None

    @property
    def extras(self) -> Tuple[FileRef, ...]:
        return self.subtitles + self.attachments + self.chapters

    @property
    def file_names(self) -> list[str]:
        return sorted(f.name for f in self.media_files + self.extras)

    def is_valid(self) -> bool:
        return len(self.media_files) == 1 and len(self.extras) > 0

    def validate(self) -> "ClassifiedFileSet":
        """Raise a ClassificationError unless the set can be muxed."""
        if self.is_valid():
            return self
        if not self.media_files:
            raise NoMediaFileError(self.directory, self.file_names)
        if len(self.media_files) > 1:
            raise MultipleMediaFilesError(
                self.directory, self.file_names, [f.name for f in self.media_files]
            )
        if not self.extras:
            raise NoExtraFilesError(self.directory, self.file_names)

    def describe(self) -> str:
        def stringify(files: Iterable[FileRef]) -> str:
            return ", ".join(f"`{f.name}`" for f in files)

        return (f"Source Directory: {self.directory}\n"
                f"MediaFile: {stringify(self.media_files)}\n"
                f"Subtitles: {stringify(self.subtitles)}\n"
                f"Chapters: {stringify(self.chapters)}\n"
                f"Attachments: {stringify(self.attachments)}")


def has_extension(file_name: str, extensions: Iterable[str]) -> bool:
    """Check whether file_name ends with one of the extensions, ignoring case."""
    lowered = file_name.lower()
    for ext in extensions:
        # `mp4`, `.mp4` and `..mp4` all become `.mp4`
        if lowered.endswith("." + ext.lstrip(".").lower()):
            return True
    return False


def classify(directory: Path, ignore: Optional[IgnorePredicate] = None) -> ClassifiedFileSet:
    """
    Classify the immediate (non-recursive) entries of a directory.

    Args:
        directory: Source directory to scan
        ignore: Optional predicate deciding whether a file is skipped

    Returns:
        ClassifiedFileSet with entries sorted by file name inside each group

    Raises:
        OSError: if the directory cannot be listed
    """
    directory = Path(directory)
    media: list[FileRef] = []
    subtitles: list[FileRef] = []
    attachments: list[FileRef] = []
    chapters: list[FileRef] = []

    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            continue

        if ignore is not None and ignore(directory, entry.name):
            logger.debug(f"skip file `{entry.name}` in {directory} - exclusion rule")
            continue

        ref = FileRef.from_path(entry)
        if has_extension(entry.name, MEDIA_EXTENSIONS):
            media.append(ref)
        elif has_extension(entry.name, SUBTITLE_EXTENSIONS):
            subtitles.append(ref)
        elif has_extension(entry.name, ATTACHMENT_EXTENSIONS):
            attachments.append(ref)
        elif has_extension(entry.name, CHAPTER_EXTENSIONS):
            chapters.append(ref)

    file_set = ClassifiedFileSet(
        directory=directory,
        media_files=tuple(media),
        subtitles=tuple(subtitles),
        attachments=tuple(attachments),
        chapters=tuple(chapters),
    )
    logger.debug(file_set.describe())
    return file_set
