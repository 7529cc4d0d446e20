from __future__ import annotations

import numpy as np
from loguru import logger

from .config import DetectionSettings
from .models import Detection, PixelBuffer


def ball_color_mask(pixels: np.ndarray, settings: DetectionSettings) -> np.ndarray:
    """Boolean mask over the sampled grid marking ball-coloured pixels."""

    step = settings.sample_step
    sampled = pixels[::step, ::step]
    red = sampled[:, :, 0]
    green = sampled[:, :, 1]
    blue = sampled[:, :, 2]
    return (
        (red >= settings.red_threshold)
        & (green <= settings.max_green)
        & (blue <= settings.max_blue)
    )


def detect_ball_position(
    buffer: PixelBuffer, settings: DetectionSettings | None = None
) -> Detection | None:
    """Locate the ball as the centroid of ball-coloured pixels.

    Only pixels on a ``sample_step`` grid are inspected. Confidence is the share
    of sampled pixels that matched. Returns None when nothing matched.
    """

    cfg = settings or DetectionSettings()
    buffer.validate()

    mask = ball_color_mask(buffer.pixels, cfg)
    sampled_count = int(mask.size)
    match_count = int(np.count_nonzero(mask))
    if match_count == 0:
        return None

    rows, cols = np.nonzero(mask)
    step = cfg.sample_step
    x = float(cols.mean()) * step
    y = float(rows.mean()) * step
    confidence = min(max(match_count / sampled_count, 0.0), 1.0)

    logger.debug(
        "ball at ({:.1f}, {:.1f}) from {}/{} sampled pixels",
        x,
        y,
        match_count,
        sampled_count,
    )
    return Detection(x=x, y=y, confidence=confidence)


class BallDetector:
    """Single-frame colour-threshold ball detector.

    Holds only its default settings, so one instance can serve any number of
    frames in any order.
    """

    def __init__(self, settings: DetectionSettings | None = None) -> None:
        self.settings = settings or DetectionSettings()

    def detect(
        self, buffer: PixelBuffer, settings: DetectionSettings | None = None
    ) -> Detection | None:
        return detect_ball_position(buffer, settings or self.settings)
