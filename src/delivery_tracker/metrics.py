from __future__ import annotations

import math
from collections.abc import Sequence

from .config import CalibrationConfig
from .models import DerivedMetrics, LengthCategory, TrajectoryPoint

MS_PER_S = 1000.0
MPS_TO_KPH = 3.6

# Release speed is measured over the first few samples after release.
VELOCITY_SAMPLE_SPAN = 4

# Upper bounds (exclusive) of projected pitch distance from release, in metres.
LENGTH_BOUNDARIES_M: tuple[tuple[float, LengthCategory], ...] = (
    (13.0, LengthCategory.SHORT),
    (15.5, LengthCategory.GOOD),
    (18.0, LengthCategory.FULL),
)

# Half of the 22.86 cm stump width.
STUMPS_HALF_WIDTH_M = 0.1143

INSUFFICIENT_IMPACT_LABEL = "Insufficient data"

_LENGTH_LABELS = {
    LengthCategory.SHORT: "Short",
    LengthCategory.GOOD: "Good length",
    LengthCategory.FULL: "Full",
    LengthCategory.YORKER: "Yorker",
}


def _insufficient() -> DerivedMetrics:
    return DerivedMetrics(
        release_velocity_kph=0.0,
        length_category=LengthCategory.INSUFFICIENT,
        projected_pitch_meters=0.0,
        apex_height_meters=0.0,
        predicted_impact=INSUFFICIENT_IMPACT_LABEL,
    )


def meters_per_pixel(
    trajectory: Sequence[TrajectoryPoint], calibration: CalibrationConfig
) -> float | None:
    """Scale mapping the pitch length onto the reference or observed vertical extent."""

    if calibration.reference_extent_px is not None:
        extent = calibration.reference_extent_px
    else:
        ys = [point.y for point in trajectory]
        extent = max(ys) - min(ys)
    if extent <= 0:
        return None
    return calibration.pitch_length_m / extent


def release_velocity_kph(trajectory: Sequence[TrajectoryPoint], scale_m_per_px: float) -> float:
    first = trajectory[0]
    later = trajectory[min(VELOCITY_SAMPLE_SPAN, len(trajectory) - 1)]
    elapsed_s = (later.timestamp_ms - first.timestamp_ms) / MS_PER_S
    if elapsed_s <= 0:
        return 0.0
    distance_m = math.hypot(later.x - first.x, later.y - first.y) * scale_m_per_px
    return distance_m / elapsed_s * MPS_TO_KPH


def max_chord_deviation_px(trajectory: Sequence[TrajectoryPoint]) -> float:
    """Largest perpendicular distance of any point from the first-to-last chord."""

    first = trajectory[0]
    last = trajectory[-1]
    dx = last.x - first.x
    dy = last.y - first.y
    chord = math.hypot(dx, dy)

    deviation = 0.0
    for point in trajectory:
        if chord == 0:
            distance = math.hypot(point.x - first.x, point.y - first.y)
        else:
            distance = abs(dx * (point.y - first.y) - dy * (point.x - first.x)) / chord
        deviation = max(deviation, distance)
    return deviation


def classify_length(projected_pitch_m: float) -> LengthCategory:
    for upper_bound, category in LENGTH_BOUNDARIES_M:
        if projected_pitch_m < upper_bound:
            return category
    return LengthCategory.YORKER


def describe_impact(category: LengthCategory, lateral_offset_m: float) -> str:
    if category is LengthCategory.INSUFFICIENT:
        return INSUFFICIENT_IMPACT_LABEL

    if abs(lateral_offset_m) <= STUMPS_HALF_WIDTH_M:
        line = "in line with stumps"
    elif lateral_offset_m < 0:
        line = "left of stumps"
    else:
        line = "right of stumps"
    return f"{_LENGTH_LABELS[category]}, {line}"


def estimate_metrics(
    trajectory: Sequence[TrajectoryPoint],
    calibration: CalibrationConfig | None = None,
) -> DerivedMetrics | None:
    """Derive delivery metrics from a smoothed trajectory.

    Returns None for an empty trajectory. A single point, or a trajectory with
    no vertical extent to calibrate against, yields zeroed metrics with the
    ``insufficient`` length category.
    """

    points = list(trajectory)
    if not points:
        return None

    cfg = calibration or CalibrationConfig()
    if len(points) < 2:
        return _insufficient()

    scale = meters_per_pixel(points, cfg)
    if scale is None:
        return _insufficient()

    first = points[0]
    last = points[-1]

    velocity_kph = release_velocity_kph(points, scale)
    apex_m = max_chord_deviation_px(points) * scale
    projected_m = abs(last.y - first.y) * scale
    category = classify_length(projected_m)
    lateral_offset_m = (last.x - first.x) * scale

    return DerivedMetrics(
        release_velocity_kph=round(velocity_kph, 1),
        length_category=category,
        projected_pitch_meters=round(projected_m, 2),
        apex_height_meters=round(apex_m, 2),
        predicted_impact=describe_impact(category, lateral_offset_m),
    )


class MetricsEstimator:
    """Stateless wrapper binding a calibration to :func:`estimate_metrics`."""

    def __init__(self, calibration: CalibrationConfig | None = None) -> None:
        self.calibration = calibration or CalibrationConfig()

    def estimate(self, trajectory: Sequence[TrajectoryPoint]) -> DerivedMetrics | None:
        return estimate_metrics(trajectory, self.calibration)
