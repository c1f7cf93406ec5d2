"""
Media utilities for auto_sub.

This module provides the two read-only ffmpeg invocations the tool needs:
- Frame probing (total frame count used as the progress denominator)
- Version probing for the --test flag
"""

import subprocess
from pathlib import Path
from typing import Optional

from ..errors import FrameProbeError
from ..progress.progress_parser import ProgressParser, parse_version
from ..system.system_utils import run_command
from ....utils.logging import get_logger

logger = get_logger("media_utils")


def build_frame_probe_cmd(media_file: Path, ffmpeg: str = "ffmpeg") -> list[str]:
    """Copy the first video stream into a null sink; ffmpeg still reports every frame."""
    return [ffmpeg, "-i", str(media_file), "-map", "0:v:0", "-c", "copy", "-f", "null", "-"]


def probe_total_frames(media_file: Path, ffmpeg: str = "ffmpeg") -> int:
    """
    Count the frames of the first video stream of a media file.

    Raises:
        FrameProbeError: ffmpeg could not run, exited non-zero, or printed no
            parseable frame count
    """
    cmd = build_frame_probe_cmd(media_file, ffmpeg)
    try:
        result = run_command(cmd)
    except (OSError, subprocess.SubprocessError) as e:
        raise FrameProbeError(f"failed to run frame probe for {media_file}: {e}") from e

    if result.returncode != 0:
        raise FrameProbeError(
            f"frame probe exited with code {result.returncode} for {media_file}"
        )

    frames = ProgressParser().parse_frames(result.stderr or "")
    if frames is None:
        logger.debug(f"frame pattern did not match for {media_file}\noutput: {result.stderr}")
        raise FrameProbeError(f"regex pattern match failed for {media_file}")

    logger.probe(f"found {frames} frames in {Path(media_file).name}")
    return frames


def get_tool_version(executable: str) -> Optional[str]:
    """Version string of ffmpeg/ffprobe, or None if it cannot be fetched."""
    try:
        result = run_command([executable, "-version"])
    except (OSError, subprocess.SubprocessError) as e:
        logger.warn(f"failed to fetch version for {executable}: {e}")
        return None

    if result.returncode != 0:
        logger.warn(f"failed to fetch version for {executable} (exit code {result.returncode})")
        return None

    version = parse_version(result.stdout or "")
    logger.probe(f"{executable} version: {version}")
    return version
