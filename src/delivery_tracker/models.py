from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from .exceptions import InvalidInputError


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """One decoded frame: RGB(A) samples shaped (height, width, channels)."""

    width: int
    height: int
    pixels: np.ndarray

    @classmethod
    def from_rgba_bytes(cls, width: int, height: int, data: bytes | bytearray) -> PixelBuffer:
        if width <= 0 or height <= 0:
            raise InvalidInputError(f"buffer dimensions must be positive ({width}x{height})")
        flat = np.frombuffer(bytes(data), dtype=np.uint8)
        if flat.size != width * height * 4:
            raise InvalidInputError(
                f"expected {width * height * 4} RGBA bytes, got {flat.size}", field="pixels"
            )
        return cls(width=width, height=height, pixels=flat.reshape(height, width, 4))

    @classmethod
    def from_bgr_frame(cls, frame: np.ndarray) -> PixelBuffer:
        if getattr(frame, "ndim", None) != 3 or frame.shape[2] < 3:
            raise InvalidInputError("frame must have shape (height, width, 3)", field="pixels")
        rgb = np.ascontiguousarray(frame[:, :, 2::-1])
        height, width = rgb.shape[:2]
        return cls(width=width, height=height, pixels=rgb)

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidInputError(
                f"buffer dimensions must be positive ({self.width}x{self.height})"
            )
        shape = getattr(self.pixels, "shape", None)
        if shape is None or len(shape) != 3 or shape[2] not in (3, 4):
            raise InvalidInputError(
                "pixels must have shape (height, width, 3|4)", field="pixels"
            )
        if shape[0] != self.height or shape[1] != self.width:
            raise InvalidInputError(
                f"pixel array {shape[1]}x{shape[0]} does not match "
                f"declared size {self.width}x{self.height}",
                field="pixels",
            )


@dataclass(frozen=True)
class Detection:
    """Best-guess ball position in one frame."""

    x: float
    y: float
    confidence: float


@dataclass(frozen=True)
class RawPoint:
    """Unsmoothed detection stamped with its frame number and time."""

    frame: int
    timestamp_ms: float
    x: float
    y: float
    confidence: float


@dataclass(frozen=True)
class TrajectoryPoint:
    frame: int
    timestamp_ms: float
    x: float
    y: float
    confidence: float


class LengthCategory(str, Enum):
    SHORT = "short"
    GOOD = "good"
    FULL = "full"
    YORKER = "yorker"
    INSUFFICIENT = "insufficient"


@dataclass(frozen=True)
class DerivedMetrics:
    """Delivery metrics derived from a smoothed trajectory."""

    release_velocity_kph: float
    length_category: LengthCategory
    projected_pitch_meters: float
    apex_height_meters: float
    predicted_impact: str
