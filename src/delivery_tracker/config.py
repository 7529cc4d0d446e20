from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from loguru import logger

from .exceptions import InvalidInputError

DEFAULT_RED_THRESHOLD = 150
DEFAULT_MAX_GREEN = 110
DEFAULT_MAX_BLUE = 110
DEFAULT_SAMPLE_STEP = 2
DEFAULT_SMOOTHING_WIDTH = 5

# Stumps to stumps.
DEFAULT_PITCH_LENGTH_M = 20.12

CHANNEL_MIN = 0
CHANNEL_MAX = 255


def _require_channel(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a number in [0,255]", field=name)
    if value < CHANNEL_MIN or value > CHANNEL_MAX:
        raise InvalidInputError(f"{name} must be in [0,255] (got {value})", field=name)


@dataclass(frozen=True)
class DetectionSettings:
    """Colour thresholds and sampling stride for the ball detector."""

    red_threshold: int = DEFAULT_RED_THRESHOLD
    max_green: int = DEFAULT_MAX_GREEN
    max_blue: int = DEFAULT_MAX_BLUE
    sample_step: int = DEFAULT_SAMPLE_STEP

    def __post_init__(self) -> None:
        _require_channel(self.red_threshold, "red_threshold")
        _require_channel(self.max_green, "max_green")
        _require_channel(self.max_blue, "max_blue")
        if isinstance(self.sample_step, bool) or not isinstance(self.sample_step, int):
            raise InvalidInputError("sample_step must be an integer", field="sample_step")
        if self.sample_step < 1:
            raise InvalidInputError(
                f"sample_step must be >= 1 (got {self.sample_step})", field="sample_step"
            )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> DetectionSettings:
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise InvalidInputError("unknown detection settings: " + ", ".join(unknown))
        return cls(**dict(values))


@dataclass(frozen=True)
class CalibrationConfig:
    """Pixel-to-metre calibration for trajectory metrics.

    The physical pitch length is mapped onto ``reference_extent_px`` when it is
    set, otherwise onto the trajectory's own vertical pixel extent.
    """

    pitch_length_m: float = DEFAULT_PITCH_LENGTH_M
    reference_extent_px: float | None = None

    def __post_init__(self) -> None:
        if not self.pitch_length_m > 0:
            raise InvalidInputError("pitch_length_m must be positive", field="pitch_length_m")
        if self.reference_extent_px is not None and not self.reference_extent_px > 0:
            raise InvalidInputError(
                "reference_extent_px must be positive", field="reference_extent_px"
            )


def normalize_smoothing_width(width: int) -> int:
    if isinstance(width, bool) or not isinstance(width, int):
        raise InvalidInputError("smoothing_width must be an integer", field="smoothing_width")
    if width < 1:
        logger.debug("smoothing width {} normalized to 1", width)
        return 1
    return width


@dataclass(frozen=True)
class SessionConfig:
    """Configuration for one analysis run, fixed for the lifetime of a session."""

    detection: DetectionSettings = field(default_factory=DetectionSettings)
    smoothing_width: int = DEFAULT_SMOOTHING_WIDTH
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)
    calibrate_to_frame_height: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "smoothing_width", normalize_smoothing_width(self.smoothing_width))
