from __future__ import annotations

import csv
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .config import SessionConfig
from .exceptions import InvalidInputError
from .models import DerivedMetrics, RawPoint, TrajectoryPoint
from .session import SessionSnapshot

TRAJECTORY_COLUMNS = ("frame", "timestamp_ms", "x", "y", "confidence")


def metrics_to_dict(metrics: DerivedMetrics | None) -> dict[str, float | str] | None:
    if metrics is None:
        return None
    return {
        "release_velocity_kph": metrics.release_velocity_kph,
        "length_category": metrics.length_category.value,
        "projected_pitch_meters": metrics.projected_pitch_meters,
        "apex_height_meters": metrics.apex_height_meters,
        "predicted_impact": metrics.predicted_impact,
    }


def config_to_dict(config: SessionConfig) -> dict[str, Any]:
    return {
        "red_threshold": config.detection.red_threshold,
        "max_green": config.detection.max_green,
        "max_blue": config.detection.max_blue,
        "sample_step": config.detection.sample_step,
        "smoothing_width": config.smoothing_width,
        "pitch_length_m": config.calibration.pitch_length_m,
        "reference_extent_px": config.calibration.reference_extent_px,
        "calibrate_to_frame_height": config.calibrate_to_frame_height,
    }


def trajectory_to_rows(
    trajectory: Sequence[TrajectoryPoint | RawPoint],
) -> list[list[str]]:
    return [
        [
            str(point.frame),
            f"{point.timestamp_ms:.6f}",
            f"{point.x:.6f}",
            f"{point.y:.6f}",
            f"{point.confidence:.6f}",
        ]
        for point in trajectory
    ]


def write_trajectory_csv(path: Path, trajectory: Sequence[TrajectoryPoint | RawPoint]) -> None:
    with path.open("w", newline="", encoding="utf-8") as file:
        writer = csv.writer(file)
        writer.writerow(TRAJECTORY_COLUMNS)
        writer.writerows(trajectory_to_rows(trajectory))


def load_raw_points_csv(path: Path) -> list[RawPoint]:
    """Read a track CSV with the trajectory columns back into raw points."""

    with path.open(newline="", encoding="utf-8") as file:
        reader = csv.DictReader(file)
        missing = [name for name in TRAJECTORY_COLUMNS if name not in (reader.fieldnames or [])]
        if missing:
            raise InvalidInputError(f"{path} is missing columns: " + ", ".join(missing))

        points: list[RawPoint] = []
        for index, row in enumerate(reader):
            try:
                points.append(
                    RawPoint(
                        frame=int(row["frame"]),
                        timestamp_ms=float(row["timestamp_ms"]),
                        x=float(row["x"]),
                        y=float(row["y"]),
                        confidence=float(row["confidence"]),
                    )
                )
            except (TypeError, ValueError) as error:
                raise InvalidInputError(f"row {index} is not numeric") from error
    return points


def session_report(
    snapshot: SessionSnapshot,
    config: SessionConfig,
    source: str | None = None,
    processing_time_s: float | None = None,
) -> dict[str, Any]:
    return {
        "source": source,
        "config": config_to_dict(config),
        "frames_processed": snapshot.frames_processed,
        "detections": snapshot.detections,
        "frames_skipped": snapshot.frames_skipped,
        "processing_time_s": (
            round(processing_time_s, 3) if processing_time_s is not None else None
        ),
        "trajectory_points": len(snapshot.trajectory),
        "metrics": metrics_to_dict(snapshot.metrics),
    }
