"""Custom exceptions for the exit readiness engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from exit_readiness.validation import FieldError


class ExitReadinessError(Exception):
    """Base exception for exit readiness engine errors."""

    pass


class ValidationError(ExitReadinessError):
    """Raised when a single input value is invalid (e.g. a malformed life event)."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class ProfileValidationError(ExitReadinessError):
    """Raised by the entry points when a profile fails validation."""

    def __init__(self, errors: "list[FieldError]") -> None:
        self.errors = list(errors)
        messages = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(f"Profile validation failed: {messages}")


class SimulationError(ExitReadinessError):
    """Raised when simulation encounters numerical or logical issues."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
