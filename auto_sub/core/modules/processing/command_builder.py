"""
FFmpeg command building for soft-subbing.

Turns a validated ClassifiedFileSet into the ordered argument vector that
muxes the media file with its subtitles, chapters and attachments into a
Matroska container. ffmpeg is positional, so the order of every group below
matters.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .file_classifier import ClassifiedFileSet

OUTPUT_EXTENSION = ".mkv"
CHAPTER_MIMETYPE = "text/xml"
ATTACHMENT_MIMETYPE = "application/x-truetype-font"

# Flags placed before the synthesized arguments when ffmpeg is fired
FFMPEG_GLOBAL_FLAGS = ["-hide_banner", "-y"]


@dataclass(frozen=True)
class MuxOptions:
    """User controlled metadata applied to every subtitle stream."""
    subtitle_title: Optional[str] = None
    subtitle_language: Optional[str] = "eng"


@dataclass(frozen=True)
class RenderJob:
    """A ready-to-run mux for one source directory."""
    source_dir: Path
    file_set: ClassifiedFileSet
    args: tuple
    output_file: Path

    def command(self, ffmpeg: str = "ffmpeg") -> List[str]:
        return [ffmpeg, *FFMPEG_GLOBAL_FLAGS, *self.args]


def output_path_for(file_set: ClassifiedFileSet, output_dir: Path) -> Path:
    """Output file keeps the media file's base name with a forced .mkv extension."""
    media = file_set.media_files[0]
    return Path(output_dir) / f"{media.stem}{OUTPUT_EXTENSION}"


def build_mux_cmd(file_set: ClassifiedFileSet, options: MuxOptions, output_dir: Path) -> List[str]:
    """Build the ffmpeg argument vector (without the executable).

    Assumes file_set already passed validate().
    """
    media = file_set.media_files[0]

    # Inputs: media file is stream 0, subtitles follow in classifier order
    cmd = ["-i", str(media.path)]
    for sub in file_set.subtitles:
        cmd.extend(["-i", str(sub.path)])

    # Copy every stream verbatim; without this ffmpeg picks one stream per type
    cmd.extend(["-c", "copy"])

    for index in range(len(file_set.subtitles) + 1):
        cmd.extend(["-map", str(index)])

    # Subtitle metadata is indexed among subtitle streams only
    for index, sub in enumerate(file_set.subtitles):
        title = options.subtitle_title or sub.stem
        cmd.extend([f"-metadata:s:s:{index}", f"title={title}"])
        if options.subtitle_language:
            cmd.extend([f"-metadata:s:s:{index}", f"language={options.subtitle_language}"])

    # Chapters first, then attachments, sharing one attachment stream counter
    streams = 0
    for chapter in file_set.chapters:
        cmd.extend([
            "-attach", str(chapter.path),
            f"-metadata:s:t:{streams}", f"mimetype={CHAPTER_MIMETYPE}",
        ])
        streams += 1

    for attachment in file_set.attachments:
        cmd.extend([
            "-attach", str(attachment.path),
            f"-metadata:s:t:{streams}", f"mimetype={ATTACHMENT_MIMETYPE}",
        ])
        streams += 1

    cmd.append(str(output_path_for(file_set, output_dir)))
    return cmd


def build_render_job(file_set: ClassifiedFileSet, options: MuxOptions, output_dir: Path) -> RenderJob:
    """Wrap build_mux_cmd() output together with its resolved output path."""
    return RenderJob(
        source_dir=file_set.directory,
        file_set=file_set,
        args=tuple(build_mux_cmd(file_set, options, output_dir)),
        output_file=output_path_for(file_set, output_dir),
    )
