"""Cricket delivery tracking: colour-based ball detection, smoothing and metrics."""

from .config import (
    DEFAULT_MAX_BLUE,
    DEFAULT_MAX_GREEN,
    DEFAULT_PITCH_LENGTH_M,
    DEFAULT_RED_THRESHOLD,
    DEFAULT_SAMPLE_STEP,
    DEFAULT_SMOOTHING_WIDTH,
    CalibrationConfig,
    DetectionSettings,
    SessionConfig,
)
from .detection import BallDetector, detect_ball_position
from .exceptions import DeliveryTrackerError, InvalidInputError
from .metrics import LENGTH_BOUNDARIES_M, MetricsEstimator, classify_length, estimate_metrics
from .models import (
    Detection,
    DerivedMetrics,
    LengthCategory,
    PixelBuffer,
    RawPoint,
    TrajectoryPoint,
)
from .pipeline import DeliveryVideoPipeline, PipelineArtifacts
from .scheduler import (
    CaptureScheduler,
    FrameScheduler,
    SequenceScheduler,
    VideoFileScheduler,
    run_to_completion,
)
from .session import AnalysisSession, FrameResult, SessionSnapshot
from .smoothing import TrajectoryAccumulator, smooth_raw_points
from .synthetic import SyntheticDeliveryConfig, ball_path, generate_delivery_frames

__all__ = [
    "DEFAULT_RED_THRESHOLD",
    "DEFAULT_MAX_GREEN",
    "DEFAULT_MAX_BLUE",
    "DEFAULT_SAMPLE_STEP",
    "DEFAULT_SMOOTHING_WIDTH",
    "DEFAULT_PITCH_LENGTH_M",
    "DetectionSettings",
    "CalibrationConfig",
    "SessionConfig",
    "DeliveryTrackerError",
    "InvalidInputError",
    "PixelBuffer",
    "Detection",
    "RawPoint",
    "TrajectoryPoint",
    "LengthCategory",
    "DerivedMetrics",
    "BallDetector",
    "detect_ball_position",
    "TrajectoryAccumulator",
    "smooth_raw_points",
    "MetricsEstimator",
    "estimate_metrics",
    "classify_length",
    "LENGTH_BOUNDARIES_M",
    "AnalysisSession",
    "FrameResult",
    "SessionSnapshot",
    "FrameScheduler",
    "SequenceScheduler",
    "CaptureScheduler",
    "VideoFileScheduler",
    "run_to_completion",
    "SyntheticDeliveryConfig",
    "ball_path",
    "generate_delivery_frames",
    "DeliveryVideoPipeline",
    "PipelineArtifacts",
]
