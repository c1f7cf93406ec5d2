"""
Muxing engine for auto_sub.

This module drives one run across the source directories:
- Output directory preparation
- Source directory discovery (normal and direct mode)
- Classification, validation and command building per directory
- Running ffmpeg with the live progress monitor
- Aggregating per-directory results into an exit status
"""

import subprocess
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .command_builder import MuxOptions, RenderJob, build_render_job
from .file_classifier import classify
from ..analysis.media_utils import probe_total_frames
from ..errors import (AutoSubError, FrameProbeError, MuxCancelledError, MuxError,
                      OutputDirectoryError, STATUS_OK, UNEXPECTED_ERROR)
from ..interface.user_input import UserInput
from ..progress.progress_monitor import (DEFAULT_INTERVAL, DiagnosticBuffer, ProgressMonitor,
                                         ProgressRenderer, create_renderer, start_pump)
from ..system.system_utils import file_exists, format_command, readable_size, get_file_size
from ....utils.logging import get_logger, format_duration

logger = get_logger("muxing_engine")

# (file name, total frames) -> renderer
RendererFactory = Callable[[str, int], ProgressRenderer]

TERMINATE_GRACE_SECONDS = 5
POLL_INTERVAL = 0.25


@dataclass
class DirectoryResult:
    """Outcome of processing one source directory."""
    directory: Path
    output_file: Optional[Path] = None
    command: Optional[List[str]] = None
    error: Optional[AutoSubError] = None
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    """Outcome of a whole run."""
    results: List[DirectoryResult] = field(default_factory=list)

    @property
    def succeeded(self) -> List[DirectoryResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[DirectoryResult]:
        return [r for r in self.results if not r.success]

    @property
    def exit_code(self) -> int:
        return UNEXPECTED_ERROR if self.failed else STATUS_OK


def terminate_process(process: subprocess.Popen, grace: float = TERMINATE_GRACE_SECONDS) -> None:
    """Terminate a process, escalating to kill if it ignores the request."""
    if process.poll() is not None:
        return
    process.terminate()
    try:
        process.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()


def wait_for_process(process: subprocess.Popen, cancel: Optional[threading.Event] = None,
                     poll_interval: float = POLL_INTERVAL) -> Optional[int]:
    """Block until the process exits and return its exit code.

    Returns None when the cancel event was set and the process got terminated.
    """
    if cancel is None:
        return process.wait()

    while True:
        try:
            return process.wait(timeout=poll_interval)
        except subprocess.TimeoutExpired:
            if cancel.is_set():
                terminate_process(process)
                return None


def run_render(job: RenderJob, ffmpeg: str, total_frames: int,
               renderer: Optional[ProgressRenderer] = None,
               cancel: Optional[threading.Event] = None,
               interval: float = DEFAULT_INTERVAL) -> int:
    """
    Run ffmpeg for a RenderJob while the progress monitor redraws the display.

    The monitor is started right before ffmpeg and stopped only after ffmpeg
    has exited, so its final frame is drawn after the process is gone.

    Returns:
        ffmpeg's exit code (always 0; failures raise)

    Raises:
        MuxError: ffmpeg could not be started or exited non-zero
        MuxCancelledError: the cancel event was set
    """
    buffer = DiagnosticBuffer()
    monitor = ProgressMonitor(
        file_name=job.file_set.media_files[0].name,
        output_file=job.output_file,
        total_frames=total_frames,
        buffer=buffer,
        renderer=renderer,
        interval=interval,
    )

    cmd = job.command(ffmpeg)
    logger.cmd(format_command(cmd))

    monitor.start()
    try:
        process = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )
    except OSError as e:
        monitor.stop(completed=False)
        raise MuxError(job.source_dir, None, str(e)) from e

    pump = start_pump(process.stderr, buffer)
    returncode = None
    try:
        returncode = wait_for_process(process, cancel)
    finally:
        # Also reached on KeyboardInterrupt: never leave ffmpeg or the monitor behind
        terminate_process(process)
        pump.join()
        process.stderr.close()
        monitor.stop(completed=returncode == 0)

    if returncode is None:
        raise MuxCancelledError(job.source_dir, buffer.full_log())
    if returncode != 0:
        raise MuxError(job.source_dir, returncode, buffer.full_log())
    return returncode


class MuxingEngine:
    """Processes every source directory of a run, one at a time."""

    def __init__(self, user_input: UserInput, renderer_factory: Optional[RendererFactory] = None):
        self.user_input = user_input
        self.output_dir = user_input.resolve_output_dir()
        self.options = MuxOptions(
            subtitle_title=user_input.subtitle_title or None,
            subtitle_language=user_input.subtitle_language or None,
        )
        self.renderer_factory = renderer_factory or self._default_renderer
        self.cancel_event = threading.Event()

    def _default_renderer(self, file_name: str, total_frames: int) -> ProgressRenderer:
        return create_renderer(self.user_input.display, file_name, total_frames)

    def cancel(self) -> None:
        """Abort the running ffmpeg process (if any) and skip what is left."""
        self.cancel_event.set()

    def prepare_output_dir(self) -> Path:
        """Create the output directory if needed.

        Raises:
            OutputDirectoryError: the directory cannot be created
        """
        if not file_exists(self.output_dir):
            logger.debug(f"creating result directory: {self.output_dir}")
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputDirectoryError(
                f"Failed to create destination directory `{self.output_dir}`: {e}"
            ) from e
        if not self.output_dir.is_dir():
            raise OutputDirectoryError(f"Destination path is not a directory: `{self.output_dir}`")
        logger.output(f"Writing results to {self.output_dir}")
        return self.output_dir

    def discover_source_dirs(self) -> List[Path]:
        """Source directories of the run, sorted by name."""
        root = Path(self.user_input.root_path)
        if self.user_input.is_direct:
            logger.mode("Direct mode: root directory is the source directory")
            return [root]

        output_dir = self.output_dir.resolve()
        dirs = [
            d for d in sorted(root.iterdir(), key=lambda p: p.name)
            if d.is_dir() and not d.name.startswith('.') and d.resolve() != output_dir
        ]
        logger.discovery(f"Found {len(dirs)} source director{'y' if len(dirs) == 1 else 'ies'} in {root}")
        return dirs

    def build_job(self, directory: Path) -> RenderJob:
        """Classify and validate a directory, then synthesize its command.

        Raises:
            ClassificationError: the directory cannot be muxed
        """
        file_set = classify(directory, self.user_input.ignore_file).validate()
        return build_render_job(file_set, self.options, self.output_dir)

    def probe_frames(self, job: RenderJob) -> int:
        """Total frame count, or 0 so the display falls back to the unknown bar."""
        try:
            return probe_total_frames(job.file_set.media_files[0].path, self.user_input.ffmpeg_path)
        except FrameProbeError as e:
            logger.debug(f"unable to fetch frame count: {e}")
            return 0

    def process_directory(self, directory: Path) -> DirectoryResult:
        """Mux one source directory; expected failures end up in the result."""
        start = time.time()
        result = DirectoryResult(directory=directory)
        try:
            job = self.build_job(directory)
            result.output_file = job.output_file
            result.command = job.command(self.user_input.ffmpeg_path or "ffmpeg")

            if self.user_input.dry_run:
                print(format_command(result.command))
                return result

            logger.mux(f"Muxing {job.file_set.media_files[0].name} "
                       f"({len(job.file_set.subtitles)} subtitle(s), "
                       f"{len(job.file_set.chapters)} chapter file(s), "
                       f"{len(job.file_set.attachments)} attachment(s))")
            total_frames = self.probe_frames(job)
            renderer = self.renderer_factory(job.file_set.media_files[0].name, total_frames)
            run_render(job, self.user_input.ffmpeg_path, total_frames, renderer,
                       cancel=self.cancel_event, interval=self.user_input.refresh_interval)
        except MuxError as e:
            result.error = e
            logger.mux_error(str(e))
            if e.log:
                logger.mux_error(f"ffmpeg output (tail):\n{e.log_tail()}")
        except AutoSubError as e:
            result.error = e
            logger.error(str(e))
        except OSError as e:
            result.error = AutoSubError(f"Ran into an unexpected error reading {directory}: {e}")
            logger.error(str(result.error))
        finally:
            result.duration = time.time() - start

        if result.success and not self.user_input.dry_run:
            size = get_file_size(result.output_file)
            size_text = readable_size(size) if size is not None else "unknown size"
            logger.result(f"{result.output_file.name} ({size_text}) in {format_duration(result.duration)}")
        return result

    def run(self) -> BatchResult:
        """Process every source directory, continuing past failures."""
        if not self.user_input.dry_run:
            self.prepare_output_dir()

        batch = BatchResult()
        for directory in self.discover_source_dirs():
            if self.cancel_event.is_set():
                logger.warn("Cancelled; skipping remaining directories")
                break
            batch.results.append(self.process_directory(directory))

        if batch.failed:
            logger.warn(f"{len(batch.failed)} of {len(batch.results)} director"
                        f"{'y' if len(batch.results) == 1 else 'ies'} failed")
        else:
            logger.result(f"Processed {len(batch.results)} director"
                          f"{'y' if len(batch.results) == 1 else 'ies'}")
        return batch
