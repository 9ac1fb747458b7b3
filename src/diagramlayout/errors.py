"""Exception types raised by the layout engine."""
from __future__ import annotations


class LayoutError(Exception):
    """Base error with a stable code for callers that branch on it."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message


class ConfigurationError(LayoutError, ValueError):
    """Raised when user-supplied sizes, units or tree edits are invalid."""


class InvariantViolation(LayoutError, RuntimeError):
    """Raised when the engine observes a state it should never produce."""


def check_invariant(condition: bool, code: str, message: str) -> None:
    if not condition:
        raise InvariantViolation(code, message)
