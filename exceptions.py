"""Custom exception classes for the rover localization stack."""

from __future__ import annotations

from typing import Optional


class LocalizationError(Exception):
    """Base exception for all localization errors."""

    pass


class EstimationError(LocalizationError):
    """Base exception for state-estimation errors."""

    pass


class NumericalError(EstimationError):
    """Raised when a required matrix inverse does not exist."""

    pass


class NotInitializedError(EstimationError):
    """Raised when an operation needs a seeded track but the track is empty."""

    pass


class OutOfOrderMeasurementError(EstimationError):
    """Raised when a measurement is older than the latest waypoint."""

    def __init__(self, message: str, timestamp: Optional[float] = None, latest: Optional[float] = None):
        self.timestamp = timestamp
        self.latest = latest
        super().__init__(message)


class TrackAlreadySmoothedError(EstimationError):
    """Raised when a smoothed track is smoothed again or extended."""

    pass


class WorkerError(LocalizationError):
    """Base exception for background worker errors."""

    pass


class WorkerShutdownError(WorkerError):
    """Raised when a worker thread cannot be joined during teardown."""

    def __init__(self, message: str, worker_name: Optional[str] = None):
        self.worker_name = worker_name
        super().__init__(message)


class RequesterClosedError(WorkerError):
    """Raised when a request is submitted after the worker terminated."""

    pass


class ConfigError(LocalizationError):
    """Base exception for configuration errors."""

    pass


class InvalidConfigError(ConfigError):
    """Raised when configuration file is invalid or corrupted."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when configuration fails schema validation."""

    def __init__(self, message: str, validation_errors: Optional[list] = None):
        self.validation_errors = validation_errors or []
        super().__init__(message)


class MotorControllerError(LocalizationError):
    """Raised when the motor controller rejects a command."""

    pass
