"""Exception hierarchy for the delivery tracker."""

from __future__ import annotations


class DeliveryTrackerError(Exception):
    """Base exception for all delivery tracker errors."""

    pass


class InvalidInputError(DeliveryTrackerError, ValueError):
    """Raised for malformed pixel buffers, trajectory points or configuration."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)
