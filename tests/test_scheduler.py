from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from delivery_tracker.exceptions import InvalidInputError
from delivery_tracker.scheduler import (
    CaptureScheduler,
    SequenceScheduler,
    VideoFileScheduler,
    run_to_completion,
)
from delivery_tracker.session import AnalysisSession
from delivery_tracker.synthetic import SyntheticDeliveryConfig, generate_delivery_frames


def test_sequence_scheduler_ticks_once_per_frame() -> None:
    session = AnalysisSession()
    scheduler = SequenceScheduler(
        session, generate_delivery_frames(SyntheticDeliveryConfig(frame_count=3))
    )

    assert scheduler.tick() is True
    assert session.frames_processed == 1
    assert scheduler.tick() is True
    assert scheduler.tick() is True
    assert scheduler.tick() is False
    assert scheduler.tick() is False
    assert session.frames_processed == 3


def test_stop_aborts_further_ticks() -> None:
    session = AnalysisSession()
    scheduler = SequenceScheduler(session, generate_delivery_frames())

    scheduler.tick()
    scheduler.stop()

    assert scheduler.tick() is False
    assert session.frames_processed == 1


def test_run_to_completion_honours_max_frames() -> None:
    session = AnalysisSession()
    frames = generate_delivery_frames(SyntheticDeliveryConfig(frame_count=10))

    assert run_to_completion(SequenceScheduler(session, frames), max_frames=4) == 4
    assert session.frames_processed == 4

    session.reset()
    assert run_to_completion(SequenceScheduler(session, frames)) == 10
    assert session.detections == 10


def test_video_scheduler_requires_existing_file(tmp_path: Path) -> None:
    pytest.importorskip("cv2")

    with pytest.raises(FileNotFoundError):
        VideoFileScheduler(AnalysisSession(), tmp_path / "missing.mp4")


def test_video_scheduler_reads_written_clip(tmp_path: Path) -> None:
    cv2 = pytest.importorskip("cv2")
    synthetic = SyntheticDeliveryConfig(frame_count=8)
    video_path = tmp_path / "delivery.avi"

    writer = cv2.VideoWriter(
        str(video_path),
        cv2.VideoWriter_fourcc(*"MJPG"),
        synthetic.fps,
        (synthetic.width, synthetic.height),
    )
    if not writer.isOpened():
        pytest.skip("MJPG writer unavailable")
    for buffer, _ in generate_delivery_frames(synthetic):
        writer.write(np.ascontiguousarray(buffer.pixels[:, :, ::-1]))
    writer.release()

    session = AnalysisSession()
    scheduler = VideoFileScheduler(session, video_path)
    ticks = run_to_completion(scheduler)

    assert ticks == 8
    assert scheduler.frames_read == 8
    assert scheduler.tick() is False
    assert session.detections > 0
    timestamps = [point.timestamp_ms for point in session.trajectory]
    assert timestamps == sorted(timestamps)


class _FakeCapture:
    def __init__(self, frames: list[object]) -> None:
        self._frames = list(frames)
        self.released = False

    def read(self) -> tuple[bool, object]:
        if not self._frames:
            return False, None
        return True, self._frames.pop(0)

    def release(self) -> None:
        self.released = True


def _bgr_frames(count: int) -> list[np.ndarray]:
    return [
        np.ascontiguousarray(buffer.pixels[:, :, ::-1])
        for buffer, _ in generate_delivery_frames(SyntheticDeliveryConfig(frame_count=count))
    ]


def test_capture_scheduler_skips_malformed_frame_and_continues() -> None:
    valid = _bgr_frames(2)
    capture = _FakeCapture([valid[0], np.zeros((4, 4), dtype=np.uint8), None, valid[1]])
    session = AnalysisSession()
    scheduler = CaptureScheduler(session, capture, fps=25.0)

    ticks = run_to_completion(scheduler)

    assert ticks == 4
    assert scheduler.frames_read == 4
    assert capture.released is True
    assert session.frames_processed == 4
    assert session.frames_skipped == 2
    assert session.detections == 2
    assert [point.frame for point in session.trajectory] == [1, 4]
    assert session.trajectory[-1].timestamp_ms == pytest.approx(120.0)


def test_capture_scheduler_rejects_non_positive_fps() -> None:
    with pytest.raises(InvalidInputError):
        CaptureScheduler(AnalysisSession(), _FakeCapture([]), fps=0.0)
