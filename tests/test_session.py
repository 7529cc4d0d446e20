from __future__ import annotations

import numpy as np
import pytest

from delivery_tracker.config import DEFAULT_PITCH_LENGTH_M, DetectionSettings, SessionConfig
from delivery_tracker.metrics import classify_length, estimate_metrics
from delivery_tracker.models import PixelBuffer
from delivery_tracker.session import AnalysisSession
from delivery_tracker.synthetic import SyntheticDeliveryConfig, generate_delivery_frames


def _empty_pitch(width: int = 32, height: int = 32) -> PixelBuffer:
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[:, :] = (40, 140, 60)
    return PixelBuffer(width=width, height=height, pixels=pixels)


def test_session_tracks_synthetic_delivery() -> None:
    frames = generate_delivery_frames(SyntheticDeliveryConfig(frame_count=12))
    session = AnalysisSession(SessionConfig(smoothing_width=3))

    for buffer, timestamp_ms in frames:
        session.process_frame(buffer, timestamp_ms)

    assert session.frames_processed == 12
    assert session.detections == 12
    assert len(session.trajectory) == 12
    assert [point.frame for point in session.trajectory] == list(range(1, 13))
    assert session.metrics == estimate_metrics(session.trajectory)


def test_frames_without_ball_leave_gaps() -> None:
    frames = generate_delivery_frames(SyntheticDeliveryConfig(frame_count=6))
    session = AnalysisSession()

    results = []
    for index, (buffer, timestamp_ms) in enumerate(frames):
        if index == 2:
            buffer = _empty_pitch(buffer.width, buffer.height)
        results.append(session.process_frame(buffer, timestamp_ms))

    assert results[2].detection is None
    assert results[2].point is None
    assert results[2].frame == 3
    assert session.frames_processed == 6
    assert session.detections == 5
    assert [point.frame for point in session.trajectory] == [1, 2, 4, 5, 6]


def test_no_detection_keeps_metrics_empty() -> None:
    session = AnalysisSession()

    result = session.process_frame(_empty_pitch(), 0.0)

    assert result.detection is None
    assert session.metrics is None
    assert session.trajectory == ()


def test_malformed_frame_is_skipped_and_run_continues() -> None:
    frames = generate_delivery_frames(SyntheticDeliveryConfig(frame_count=4))
    session = AnalysisSession()
    broken = PixelBuffer(width=0, height=0, pixels=np.zeros((0, 0, 3), dtype=np.uint8))

    session.process_frame(*frames[0])
    skipped = session.process_frame(broken, 20.0)
    session.process_frame(*frames[2])

    assert skipped.skipped is True
    assert session.frames_skipped == 1
    assert session.detections == 2
    assert [point.frame for point in session.trajectory] == [1, 3]


def test_skip_frame_advances_frame_counter() -> None:
    frames = generate_delivery_frames(SyntheticDeliveryConfig(frame_count=3))
    session = AnalysisSession()

    session.process_frame(*frames[0])
    skipped = session.skip_frame("undecodable frame")
    session.process_frame(*frames[2])

    assert skipped.frame == 2
    assert skipped.skipped is True
    assert session.frames_processed == 3
    assert session.frames_skipped == 1
    assert [point.frame for point in session.trajectory] == [1, 3]


def test_reset_matches_fresh_session() -> None:
    config = SessionConfig(detection=DetectionSettings(sample_step=1), smoothing_width=4)
    fresh = AnalysisSession(config).snapshot()
    session = AnalysisSession(config)
    session.reset()
    assert session.snapshot() == fresh

    for buffer, timestamp_ms in generate_delivery_frames(SyntheticDeliveryConfig(frame_count=5)):
        session.process_frame(buffer, timestamp_ms)
    assert session.metrics is not None

    session.reset()
    session.reset()

    assert session.snapshot() == fresh
    assert session.frames_processed == 0


def test_frame_numbers_restart_after_reset() -> None:
    frames = generate_delivery_frames(SyntheticDeliveryConfig(frame_count=3))
    session = AnalysisSession()
    for buffer, timestamp_ms in frames:
        session.process_frame(buffer, timestamp_ms)

    session.reset()
    result = session.process_frame(*frames[0])

    assert result.frame == 1
    assert result.point is not None


def test_frame_height_calibration() -> None:
    synthetic = SyntheticDeliveryConfig(frame_count=20)
    session = AnalysisSession(SessionConfig(calibrate_to_frame_height=True))

    for buffer, timestamp_ms in generate_delivery_frames(synthetic):
        session.process_frame(buffer, timestamp_ms)

    metrics = session.metrics
    assert metrics is not None
    trajectory = session.trajectory
    expected = abs(trajectory[-1].y - trajectory[0].y) * DEFAULT_PITCH_LENGTH_M / synthetic.height
    assert metrics.projected_pitch_meters == pytest.approx(expected, abs=0.01)
    assert metrics.projected_pitch_meters < DEFAULT_PITCH_LENGTH_M
    assert metrics.length_category is classify_length(metrics.projected_pitch_meters)
