from __future__ import annotations

from dataclasses import dataclass, replace

from loguru import logger

from .config import SessionConfig
from .detection import BallDetector
from .exceptions import InvalidInputError
from .metrics import MetricsEstimator
from .models import Detection, DerivedMetrics, PixelBuffer, RawPoint, TrajectoryPoint
from .smoothing import TrajectoryAccumulator


@dataclass(frozen=True)
class FrameResult:
    """Outcome of one detect -> push -> estimate tick."""

    frame: int
    detection: Detection | None
    point: TrajectoryPoint | None
    skipped: bool = False


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view handed to the presentation layer."""

    trajectory: tuple[TrajectoryPoint, ...]
    metrics: DerivedMetrics | None
    frames_processed: int
    detections: int
    frames_skipped: int


class AnalysisSession:
    """One analysis run: frame counter, detector, smoothed trajectory and metrics.

    The scheduler calls :meth:`process_frame` once per decoded frame. Metrics
    are recomputed from the whole trajectory after every detection.
    """

    def __init__(self, config: SessionConfig | None = None) -> None:
        self.config = config or SessionConfig()
        self._detector = BallDetector(self.config.detection)
        self._accumulator = TrajectoryAccumulator(self.config.smoothing_width)
        self._estimator = MetricsEstimator(self.config.calibration)
        self._frame_counter = 0
        self._detections = 0
        self._skipped = 0
        self._metrics: DerivedMetrics | None = None
        logger.info(
            "analysis session ready (smoothing_width={}, sample_step={})",
            self._accumulator.smoothing_width,
            self.config.detection.sample_step,
        )

    @property
    def frames_processed(self) -> int:
        return self._frame_counter

    @property
    def detections(self) -> int:
        return self._detections

    @property
    def frames_skipped(self) -> int:
        return self._skipped

    @property
    def trajectory(self) -> tuple[TrajectoryPoint, ...]:
        return self._accumulator.snapshot()

    @property
    def metrics(self) -> DerivedMetrics | None:
        return self._metrics

    def _calibrate_to_frame(self, buffer: PixelBuffer) -> None:
        if not self.config.calibrate_to_frame_height:
            return
        if self._estimator.calibration.reference_extent_px is not None:
            return
        self._estimator = MetricsEstimator(
            replace(self.config.calibration, reference_extent_px=float(buffer.height))
        )

    def skip_frame(self, reason: object) -> FrameResult:
        """Count a frame that could not be decoded or analysed and move on."""

        self._frame_counter += 1
        return self._skip(self._frame_counter, reason)

    def _skip(self, frame: int, reason: object) -> FrameResult:
        self._skipped += 1
        logger.warning("skipping frame {}: {}", frame, reason)
        return FrameResult(frame=frame, detection=None, point=None, skipped=True)

    def process_frame(self, buffer: PixelBuffer, timestamp_ms: float) -> FrameResult:
        self._frame_counter += 1
        frame = self._frame_counter

        try:
            detection = self._detector.detect(buffer)
            if detection is None:
                return FrameResult(frame=frame, detection=None, point=None)

            point = self._accumulator.push(
                RawPoint(
                    frame=frame,
                    timestamp_ms=timestamp_ms,
                    x=detection.x,
                    y=detection.y,
                    confidence=detection.confidence,
                )
            )
        except InvalidInputError as error:
            return self._skip(frame, error)

        self._detections += 1
        self._calibrate_to_frame(buffer)
        self._metrics = self._estimator.estimate(self._accumulator.snapshot())
        return FrameResult(frame=frame, detection=detection, point=point)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            trajectory=self._accumulator.snapshot(),
            metrics=self._metrics,
            frames_processed=self._frame_counter,
            detections=self._detections,
            frames_skipped=self._skipped,
        )

    def reset(self) -> None:
        self._accumulator.reset()
        self._estimator = MetricsEstimator(self.config.calibration)
        self._frame_counter = 0
        self._detections = 0
        self._skipped = 0
        self._metrics = None
        logger.info("analysis session reset")
