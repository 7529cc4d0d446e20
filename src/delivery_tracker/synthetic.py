from __future__ import annotations

import random
from dataclasses import dataclass

import numpy as np

from .exceptions import InvalidInputError
from .models import PixelBuffer

PITCH_GREEN = (40, 140, 60)
BALL_RED = (220, 30, 35)


@dataclass(frozen=True)
class SyntheticDeliveryConfig:
    """Configuration for a synthetic broadcast-angle delivery clip."""

    width: int = 160
    height: int = 240
    frame_count: int = 24
    fps: float = 30.0
    release_x: float = 80.0
    release_y: float = 220.0
    end_y: float = 30.0
    drift_px: float = 6.0
    swing_px: float = 10.0
    ball_radius_px: int = 4
    dropout_probability: float = 0.0
    seed: int = 42


def _validate(config: SyntheticDeliveryConfig) -> None:
    if config.width <= 0 or config.height <= 0:
        raise InvalidInputError("frame size must be positive")
    if config.frame_count < 2:
        raise InvalidInputError("at least two frames are required", field="frame_count")
    if config.fps <= 0:
        raise InvalidInputError("fps must be positive", field="fps")
    if config.ball_radius_px < 1:
        raise InvalidInputError("ball_radius_px must be >= 1", field="ball_radius_px")
    if not 0.0 <= config.dropout_probability < 1.0:
        raise InvalidInputError(
            "dropout_probability must be in [0,1)", field="dropout_probability"
        )


def ball_path(config: SyntheticDeliveryConfig) -> list[tuple[float, float]]:
    """True ball centre per frame: linear travel plus a lateral swing arc."""

    _validate(config)
    path: list[tuple[float, float]] = []
    last = config.frame_count - 1
    for index in range(config.frame_count):
        t = index / last
        x = config.release_x + config.drift_px * t + config.swing_px * 4.0 * t * (1.0 - t)
        y = config.release_y + (config.end_y - config.release_y) * t
        path.append((x, y))
    return path


def render_frame(
    config: SyntheticDeliveryConfig, center: tuple[float, float] | None
) -> PixelBuffer:
    pixels = np.empty((config.height, config.width, 3), dtype=np.uint8)
    pixels[:, :] = PITCH_GREEN
    if center is not None:
        cx, cy = center
        rows, cols = np.ogrid[: config.height, : config.width]
        disc = (cols - cx) ** 2 + (rows - cy) ** 2 <= config.ball_radius_px**2
        pixels[disc] = BALL_RED
    return PixelBuffer(width=config.width, height=config.height, pixels=pixels)


def generate_delivery_frames(
    config: SyntheticDeliveryConfig | None = None,
) -> list[tuple[PixelBuffer, float]]:
    """Render a delivery as ``(buffer, timestamp_ms)`` pairs.

    Frames chosen by the seeded dropout draw show an empty pitch.
    """

    cfg = config or SyntheticDeliveryConfig()
    rng = random.Random(cfg.seed)
    frame_ms = 1000.0 / cfg.fps

    frames: list[tuple[PixelBuffer, float]] = []
    for index, center in enumerate(ball_path(cfg)):
        visible = rng.random() >= cfg.dropout_probability
        frames.append((render_frame(cfg, center if visible else None), index * frame_ms))
    return frames
