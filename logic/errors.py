"""Domain errors shared by the decision logic, stores and collaborators."""

from __future__ import annotations


class BarnError(Exception):
    """Base class for every error raised by the barn tracker."""


class InvalidInput(BarnError, ValueError):
    """A numeric input to the decision logic is missing, non-finite or out of range."""

    def __init__(self, field: str, value: object, reason: str = "must be a finite number") -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")


class InvalidCoatCategory(InvalidInput):
    """Hair length is not one of the known coat categories."""

    def __init__(self, value: object) -> None:
        super().__init__(
            "hair_length",
            value,
            "expected one of clipped, short, medium, long",
        )


class WeatherUnavailable(BarnError):
    """The weather collaborator could not produce a snapshot."""

    def __init__(self, reason: str, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or f"Weather unavailable: {reason}")


class RecordNotFound(BarnError, LookupError):
    """A stored record required by an operation does not exist."""

    def __init__(self, kind: str, record_id: str) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class NotAuthorized(BarnError, PermissionError):
    """The record exists but belongs to another user."""

    def __init__(self, kind: str, record_id: str) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"Not authorized to access {kind} {record_id}")


class PhotoAnalysisError(BarnError):
    """The hosted vision model failed to analyse a photo."""


__all__ = [
    "BarnError",
    "InvalidInput",
    "InvalidCoatCategory",
    "WeatherUnavailable",
    "RecordNotFound",
    "NotAuthorized",
    "PhotoAnalysisError",
]
