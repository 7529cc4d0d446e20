from __future__ import annotations

from collections import deque
from collections.abc import Sequence

from .config import DEFAULT_SMOOTHING_WIDTH, normalize_smoothing_width
from .exceptions import InvalidInputError
from .models import RawPoint, TrajectoryPoint


def check_point_order(point: RawPoint, previous: RawPoint | TrajectoryPoint | None) -> None:
    if point.frame < 1:
        raise InvalidInputError(f"frame must be >= 1 (got {point.frame})", field="frame")
    if not 0.0 <= point.confidence <= 1.0:
        raise InvalidInputError(
            f"confidence must be in [0,1] (got {point.confidence})", field="confidence"
        )
    if previous is None:
        return
    if point.frame <= previous.frame:
        raise InvalidInputError(
            f"frame must be strictly increasing ({point.frame} after {previous.frame})",
            field="frame",
        )
    if point.timestamp_ms < previous.timestamp_ms:
        raise InvalidInputError(
            f"timestamp went backwards ({point.timestamp_ms} after {previous.timestamp_ms})",
            field="timestamp_ms",
        )


class TrajectoryAccumulator:
    """Owns the raw smoothing window and the smoothed trajectory of one run.

    Every push emits one trajectory point stamped with the pushed frame and
    timestamp, positioned at the mean of the points currently in the window.
    The output trails true motion by roughly half the window width.
    """

    def __init__(self, smoothing_width: int = DEFAULT_SMOOTHING_WIDTH) -> None:
        self._smoothing_width = normalize_smoothing_width(smoothing_width)
        self._window: deque[RawPoint] = deque(maxlen=self._smoothing_width)
        self._trajectory: list[TrajectoryPoint] = []

    @property
    def smoothing_width(self) -> int:
        return self._smoothing_width

    @property
    def window_size(self) -> int:
        return len(self._window)

    def __len__(self) -> int:
        return len(self._trajectory)

    def push(self, point: RawPoint) -> TrajectoryPoint:
        check_point_order(point, self._trajectory[-1] if self._trajectory else None)
        self._window.append(point)

        count = len(self._window)
        smoothed = TrajectoryPoint(
            frame=point.frame,
            timestamp_ms=point.timestamp_ms,
            x=sum(item.x for item in self._window) / count,
            y=sum(item.y for item in self._window) / count,
            confidence=sum(item.confidence for item in self._window) / count,
        )
        self._trajectory.append(smoothed)
        return smoothed

    def reset(self) -> None:
        self._window.clear()
        self._trajectory.clear()

    def snapshot(self) -> tuple[TrajectoryPoint, ...]:
        return tuple(self._trajectory)


def smooth_raw_points(points: Sequence[RawPoint], width: int) -> list[TrajectoryPoint]:
    """Smooth a recorded raw track exactly as a live run would."""

    accumulator = TrajectoryAccumulator(width)
    return [accumulator.push(point) for point in points]
