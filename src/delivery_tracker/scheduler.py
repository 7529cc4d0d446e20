from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from .exceptions import InvalidInputError
from .models import PixelBuffer
from .session import AnalysisSession

DEFAULT_FPS = 30.0


class FrameScheduler(Protocol):
    """Drives an analysis session one frame per tick."""

    def tick(self) -> bool:
        """Process the next frame; return False once no frames remain."""
        ...


class SequenceScheduler:
    """Feeds in-memory ``(buffer, timestamp_ms)`` pairs to a session."""

    def __init__(
        self,
        session: AnalysisSession,
        frames: Iterable[tuple[PixelBuffer, float]],
    ) -> None:
        self.session = session
        self._frames: Iterator[tuple[PixelBuffer, float]] = iter(frames)
        self._stopped = False

    def tick(self) -> bool:
        if self._stopped:
            return False
        try:
            buffer, timestamp_ms = next(self._frames)
        except StopIteration:
            self._stopped = True
            return False
        self.session.process_frame(buffer, timestamp_ms)
        return True

    def stop(self) -> None:
        self._stopped = True


class CaptureScheduler:
    """Feeds BGR frames from an OpenCV-style capture to a session.

    ``capture`` needs ``read() -> (ok, frame)`` and ``release()``. Frames that
    cannot be converted to a pixel buffer are counted as skipped and the run
    continues with the next frame.
    """

    def __init__(self, session: AnalysisSession, capture: Any, fps: float = DEFAULT_FPS) -> None:
        if fps <= 0:
            raise InvalidInputError(f"fps must be positive (got {fps})", field="fps")
        self.session = session
        self.fps = float(fps)
        self._capture: Any = capture
        self._frame_index = 0

    @property
    def frames_read(self) -> int:
        return self._frame_index

    def tick(self) -> bool:
        if self._capture is None:
            return False

        ok, frame = self._capture.read()
        if not ok:
            self.stop()
            return False

        timestamp_ms = self._frame_index * 1000.0 / self.fps
        self._frame_index += 1
        try:
            buffer = PixelBuffer.from_bgr_frame(frame)
        except InvalidInputError as error:
            self.session.skip_frame(error)
            return True
        self.session.process_frame(buffer, timestamp_ms)
        return True

    def stop(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None


class VideoFileScheduler(CaptureScheduler):
    """Decodes a video file with OpenCV and feeds each frame to a session."""

    def __init__(self, session: AnalysisSession, video_path: str | Path) -> None:
        try:
            import cv2
        except ModuleNotFoundError as error:
            raise RuntimeError(
                "opencv-python is required for video analysis. "
                "Install with: pip install -e '.[video]'"
            ) from error

        path = Path(video_path)
        if not path.exists():
            raise FileNotFoundError(path)

        capture = cv2.VideoCapture(str(path))
        if not capture.isOpened():
            raise RuntimeError(f"failed to open video: {path}")

        fps = capture.get(cv2.CAP_PROP_FPS)
        if fps <= 0:
            logger.warning("video {} reports no fps; assuming {}", path, DEFAULT_FPS)
            fps = DEFAULT_FPS

        super().__init__(session, capture, fps)
        self.video_path = path


def run_to_completion(scheduler: FrameScheduler, max_frames: int | None = None) -> int:
    """Tick until the scheduler is exhausted or ``max_frames`` ticks have run."""

    ticks = 0
    while max_frames is None or ticks < max_frames:
        if not scheduler.tick():
            break
        ticks += 1
    logger.info("scheduler finished after {} frames", ticks)
    return ticks
