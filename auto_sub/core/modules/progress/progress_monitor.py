"""
Live progress display for a running ffmpeg mux.

Pieces:
- DiagnosticBuffer: lock-guarded line buffer fed by the stderr pump thread
- pump_stream(): splits ffmpeg's stderr on CR/LF and pushes complete lines
- ProgressMonitor: background thread sampling the buffer once per interval
- Renderers: in-place terminal display or a tqdm bar for non-tty output

The owner starts the monitor right before ffmpeg, calls stop() once the
process has exited and gets control back only after the final (100%) frame
has been drawn.
"""

import codecs
import re
import sys
import threading
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import IO, Optional

from tqdm import tqdm

from .progress_parser import ProgressParser, ProgressSample
from ..system.system_utils import get_file_size, readable_size, trim_string
from ....utils.logging import get_logger

logger = get_logger("progress_monitor")

DEFAULT_INTERVAL = 1.0
FULL_LOG_LINES = 5000

BAR_WIDTH = 40
BAR_START = "["
BAR_END = "]"
BAR_COMPLETE = "="
BAR_HEAD = ">"
BAR_INCOMPLETE = " "
BAR_UNKNOWN = "?"
BAR_WAITING = "~"
ANIMATION_STEP = 5

PAD_LEFT = "  "
CURSOR_UP = "\x1b[A"
CLEAR_LINE = "\x1b[K"

_LINE_SPLIT = re.compile(r"[\r\n]")


class DiagnosticBuffer:
    """
    Lines scraped from ffmpeg's stderr.

    `drain()` hands the monitor everything pushed since the previous drain and
    clears it under the same lock, so a tick never sees stale lines or half a
    line. A bounded copy of every line is kept for failure reports.
    """

    def __init__(self, full_log_lines: int = FULL_LOG_LINES):
        self._lock = threading.Lock()
        self._pending: list[str] = []
        self._full: deque[str] = deque(maxlen=full_log_lines)

    def push(self, line: str) -> None:
        with self._lock:
            self._pending.append(line)
            self._full.append(line)

    def drain(self) -> str:
        with self._lock:
            text = "\n".join(self._pending)
            self._pending.clear()
        return text

    def full_log(self) -> str:
        with self._lock:
            return "\n".join(self._full)


def pump_stream(stream: IO[bytes], buffer: DiagnosticBuffer, chunk_size: int = 4096) -> None:
    """Copy a binary stream into the buffer line by line until EOF.

    ffmpeg terminates its progress lines with a bare carriage return, so both
    CR and LF end a line.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    read = getattr(stream, "read1", None) or stream.read
    pending = ""

    while True:
        chunk = read(chunk_size)
        if not chunk:
            break
        pending += decoder.decode(chunk)
        *lines, pending = _LINE_SPLIT.split(pending)
        for line in lines:
            if line.strip():
                buffer.push(line)

    pending += decoder.decode(b"", final=True)
    if pending.strip():
        buffer.push(pending)


def start_pump(stream: IO[bytes], buffer: DiagnosticBuffer) -> threading.Thread:
    thread = threading.Thread(target=pump_stream, args=(stream, buffer),
                              name="ffmpeg-stderr-pump", daemon=True)
    thread.start()
    return thread


class MonitorState(Enum):
    SAMPLING = "sampling"
    DRAINING = "draining"
    TERMINATED = "terminated"


@dataclass
class ProgressState:
    """Everything the monitor knows about one mux."""
    total_frames: int = 0
    last_sample: ProgressSample = field(default_factory=ProgressSample)
    frames: int = 0
    fps: int = 0
    size_bytes: int = 0
    animation_counter: int = 0
    unknown_counter: int = 0

    def apply(self, sample: ProgressSample) -> None:
        """Fold a tick's sample into the running counters."""
        self.last_sample = sample
        if sample.frames is not None:
            # ffmpeg's frame counter only grows; keep the percentage monotonic
            self.frames = max(self.frames, sample.frames)
        if sample.fps is not None:
            self.fps = sample.fps
        if sample.size_bytes is not None:
            self.size_bytes = sample.size_bytes

    @property
    def waiting(self) -> bool:
        """Nothing was scraped on the latest tick."""
        return self.last_sample.is_empty

    @property
    def percent(self) -> Optional[float]:
        if self.total_frames <= 0:
            return None
        return self.frames * 100 / self.total_frames


def progress_bar(state: ProgressState, width: int = BAR_WIDTH) -> str:
    """Bar for the current percentage, or the `?` bar when it cannot be trusted."""
    percent = state.percent
    fills = -1 if percent is None else (width * int(percent)) // 100
    if fills == 0:
        fills = 1

    if fills < 0 or width - fills < 0:
        state.unknown_counter += ANIMATION_STEP
        if width - state.unknown_counter <= 0:
            state.unknown_counter = 0
        return (f"{BAR_START} {BAR_UNKNOWN * state.unknown_counter}"
                f"{BAR_INCOMPLETE * (width - state.unknown_counter)} {BAR_END}")

    return (f"{BAR_START} {BAR_COMPLETE * (fills - 1)}{BAR_HEAD}"
            f"{BAR_INCOMPLETE * (width - fills)} {BAR_END}")


def waiting_bar(state: ProgressState, width: int = BAR_WIDTH) -> str:
    """Filler animation shown while ffmpeg has not reported anything yet."""
    state.animation_counter += ANIMATION_STEP
    if width - state.animation_counter <= 0:
        state.animation_counter = 0
    return (f"{BAR_START} {BAR_WAITING * state.animation_counter}"
            f"{BAR_INCOMPLETE * (width - state.animation_counter)} {BAR_END}")


def format_progress(file_name: str, state: ProgressState) -> list[str]:
    """Lines of the terminal progress dialog."""
    if state.waiting:
        bar = f"{waiting_bar(state)}\tworking..."
    else:
        bar = progress_bar(state)
        percent = state.percent
        bar += "\t--.--%" if percent is None else f"\t{percent:.2f}%"

    return [
        f'File: "{trim_string(file_name)}"',
        "",
        f"\t{bar}",
        "",
        f"Frames Processed: {state.frames}",
        f"Average FPS: {state.fps}",
        f"Output Size: {readable_size(state.size_bytes)}",
    ]


class ProgressRenderer:
    """Draws ProgressState updates somewhere."""

    def draw(self, state: ProgressState, final: bool = False) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class NullRenderer(ProgressRenderer):
    def draw(self, state: ProgressState, final: bool = False) -> None:
        pass


class TerminalRenderer(ProgressRenderer):
    """Redraws a multi-line dialog in place using relative cursor movement."""

    def __init__(self, file_name: str, stream: Optional[IO[str]] = None):
        self.file_name = file_name
        self.stream = stream or sys.stdout
        self.lines_drawn = 0

    def draw(self, state: ProgressState, final: bool = False) -> None:
        lines = format_progress(self.file_name, state)
        # Back to column 0 of the first line drawn last time
        jump = "\r" + CURSOR_UP * self.lines_drawn
        body = "\n".join(f"{PAD_LEFT}{line}{CLEAR_LINE}" for line in lines)
        self.stream.write(jump + body + ("\n\n" if final else ""))
        self.stream.flush()
        self.lines_drawn = len(lines) - 1


class TqdmRenderer(ProgressRenderer):
    """Feeds the progress into a tqdm bar; used when output is not a terminal."""

    def __init__(self, file_name: str, total_frames: int, stream: Optional[IO[str]] = None):
        self.bar = tqdm(
            total=total_frames if total_frames > 0 else None,
            desc=trim_string(file_name, limit=30),
            unit="frame",
            file=stream,
            leave=True,
        )

    def draw(self, state: ProgressState, final: bool = False) -> None:
        if state.frames > self.bar.n:
            self.bar.update(state.frames - self.bar.n)
        self.bar.set_postfix(fps=state.fps, size=readable_size(state.size_bytes))

    def close(self) -> None:
        self.bar.close()


def create_renderer(mode: str, file_name: str, total_frames: int,
                    stream: Optional[IO[str]] = None) -> ProgressRenderer:
    """Pick a renderer for --display: auto, terminal, bar or none."""
    stream = stream or sys.stdout
    if mode == "none":
        return NullRenderer()
    if mode == "auto":
        mode = "terminal" if hasattr(stream, "isatty") and stream.isatty() else "bar"
    if mode == "terminal":
        return TerminalRenderer(file_name, stream)
    if mode == "bar":
        return TqdmRenderer(file_name, total_frames, stream)
    raise ValueError(f"unknown display mode: {mode}")


class ProgressMonitor(threading.Thread):
    """
    Background sampler for one source directory's mux.

    SAMPLING: every `interval` seconds drain the buffer, parse and redraw.
    DRAINING: after stop() is requested, draw the final sample using the total
    frame count and the real output size, then signal `done`.
    TERMINATED: thread finished.
    """

    def __init__(self, file_name: str, output_file: Path, total_frames: int,
                 buffer: DiagnosticBuffer, renderer: Optional[ProgressRenderer] = None,
                 parser: Optional[ProgressParser] = None, interval: float = DEFAULT_INTERVAL):
        super().__init__(name=f"progress-{file_name}", daemon=True)
        self.file_name = file_name
        self.output_file = Path(output_file)
        self.buffer = buffer
        self.renderer = renderer or NullRenderer()
        self.parser = parser or ProgressParser()
        self.interval = interval
        self.state = ProgressState(total_frames=max(total_frames, 0))
        self.status = MonitorState.SAMPLING
        self.error: Optional[BaseException] = None
        self.completed = False
        self._stop_requested = threading.Event()
        self._done = threading.Event()

    def run(self) -> None:
        try:
            while not self._stop_requested.wait(self.interval):
                self.tick()
            self.status = MonitorState.DRAINING
            logger.debug("received signal to stop the progress monitor")
            self.finish()
        except Exception as e:  # keep the owner's stop() from hanging
            self.error = e
            logger.debug(f"progress monitor failed: {e}")
        finally:
            self.renderer.close()
            self.status = MonitorState.TERMINATED
            self._done.set()

    def tick(self) -> ProgressSample:
        """Sample everything pumped since the previous tick and redraw."""
        sample = self.parser.parse(self.buffer.drain())
        self.state.apply(sample)
        self.renderer.draw(self.state)
        return sample

    def finish(self) -> None:
        """Final frame: authoritative frame count and on-disk output size.

        The bar is only forced to 100% when the owner reported a successful run.
        """
        self.state.apply(self.parser.parse(self.buffer.drain()))
        if self.completed and self.state.total_frames > 0:
            self.state.frames = self.state.total_frames
        size = get_file_size(self.output_file)
        if size is not None:
            self.state.size_bytes = size
        self.state.last_sample = ProgressSample(
            frames=self.state.frames,
            fps=self.state.fps,
            size_bytes=self.state.size_bytes,
        )
        self.renderer.draw(self.state, final=True)

    def stop(self, completed: bool = True, timeout: Optional[float] = None) -> bool:
        """Request the final draw and wait for the acknowledgement."""
        self.completed = completed
        self._stop_requested.set()
        acknowledged = self._done.wait(timeout)
        if acknowledged:
            self.join(timeout)
        return acknowledged
