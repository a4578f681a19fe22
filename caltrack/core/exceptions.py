"""
Error taxonomy.

Only ValidationError and EstimatorUnavailable reach callers of the
estimation service. The other types are raised internally and recovered
from: parse and remote-call failures fall back to the formula, storage
read failures degrade to an empty history.
"""
from typing import Any, Optional


class CaltrackError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        """Error body as sent over HTTP."""
        payload: dict[str, Any] = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ValidationError(CaltrackError):
    """Malformed or missing estimation input. Rejected before any remote call."""


class EstimatorUnavailable(CaltrackError):
    """The remote estimator cannot be configured (e.g. missing credentials)."""


class EstimationParseFailure(CaltrackError):
    """Estimator response is not a single non-negative integer."""


class RemoteCallFailure(CaltrackError):
    """Network, timeout or provider error while calling the estimator."""


class StorageReadFailure(CaltrackError):
    """Persisted workout history could not be read or parsed."""
