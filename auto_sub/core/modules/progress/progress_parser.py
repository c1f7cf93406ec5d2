"""
Progress extraction from ffmpeg's stderr.

ffmpeg reports progress as free text, e.g.

    frame= 1200 fps=240 q=-1.0 size=   10240kB time=00:00:50.00 bitrate=...

The patterns below pull out the counters. Each has exactly one capture group
holding digits only; the last match in a chunk of text wins.
"""

import re
from dataclasses import dataclass
from typing import Optional, Pattern

FRAME_PATTERN = re.compile(r"(?:^|\s)frame=\s*(\d+)")
FPS_PATTERN = re.compile(r"(?:^|\s)fps=\s*(\d+)")
SIZE_PATTERN = re.compile(r"(?:^|\s)L?size=\s*(\d+)")
VERSION_PATTERN = re.compile(r"version (\S*)")

# ffmpeg reports size in kB
SIZE_MULTIPLIER = 1000


@dataclass(frozen=True)
class ProgressSample:
    """Counters scraped from one tick worth of diagnostics. None means not found."""
    frames: Optional[int] = None
    fps: Optional[int] = None
    size_bytes: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.frames is None and self.fps is None and self.size_bytes is None


def last_int(pattern: Pattern[str], text: str) -> Optional[int]:
    """Integer value of the pattern's capture group in its last match."""
    value = None
    for match in pattern.finditer(text):
        value = match.group(1)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class ProgressParser:
    """Extracts a ProgressSample out of a chunk of ffmpeg diagnostics."""

    def __init__(self, frame_pattern: Pattern[str] = FRAME_PATTERN,
                 fps_pattern: Pattern[str] = FPS_PATTERN,
                 size_pattern: Pattern[str] = SIZE_PATTERN):
        self.frame_pattern = frame_pattern
        self.fps_pattern = fps_pattern
        self.size_pattern = size_pattern

    def parse(self, text: str) -> ProgressSample:
        frames = last_int(self.frame_pattern, text)
        fps = last_int(self.fps_pattern, text)
        size = last_int(self.size_pattern, text)
        return ProgressSample(
            frames=frames,
            fps=fps,
            size_bytes=size * SIZE_MULTIPLIER if size is not None else None,
        )

    def parse_frames(self, text: str) -> Optional[int]:
        return last_int(self.frame_pattern, text)


def parse_version(output: str) -> Optional[str]:
    """Token that follows the word `version` in `<tool> -version` output."""
    match = VERSION_PATTERN.search(output)
    return match.group(1) if match else None
