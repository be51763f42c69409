"""Exception taxonomy for MEVGuard."""
from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence

__all__ = [
    "MEVGuardError",
    "ValidationReason",
    "ValidationError",
    "ChannelError",
    "DispatchError",
    "INVALID_INPUT_MESSAGE",
    "ANALYSIS_FAILED_MESSAGE",
]

INVALID_INPUT_MESSAGE = "Invalid input."
ANALYSIS_FAILED_MESSAGE = "Failed to analyze transaction. Please try again."


class MEVGuardError(Exception):
    """Base class for errors raised by MEVGuard."""


class ValidationReason(str, Enum):
    UNKNOWN_KIND = "unknown_kind"
    FIELD_INVALID = "field_invalid"
    LENGTH_MISMATCH = "length_mismatch"


class ValidationError(MEVGuardError):
    """Raised when a request is structurally invalid. Client-correctable."""

    def __init__(
        self,
        reason: ValidationReason,
        message: str = INVALID_INPUT_MESSAGE,
        *,
        field: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.field = field


class ChannelError(MEVGuardError):
    """Raised when a single dispatch channel fails to produce a result."""

    def __init__(self, channel: str, message: str) -> None:
        super().__init__(f"{channel} channel failed: {message}")
        self.channel = channel


class DispatchError(MEVGuardError):
    """Raised when every dispatch channel has failed."""

    reason = "unavailable"

    def __init__(self, failures: Sequence[ChannelError]) -> None:
        self.failures = tuple(failures)
        detail = "; ".join(str(failure) for failure in self.failures) or "no channel available"
        super().__init__(f"Classification unavailable ({detail})")
