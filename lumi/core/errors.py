"""
Error types shared by the personalization engine.

The engines are exception-light: unmatched rules and empty candidate pools
are ordinary results. Only malformed caller input is raised.
"""

from __future__ import annotations


class LumiError(Exception):
    """Base class for engine errors."""
    pass


class InvalidInputError(LumiError, ValueError):
    """Raised when a caller passes a value outside its documented domain."""

    def __init__(self, field: str, value: object, expected: str):
        self.field = field
        self.value = value
        self.expected = expected
        super().__init__(f"Invalid {field}={value!r}: expected {expected}")


class RuleTableError(LumiError):
    """Raised when a configured rule table cannot be loaded or validated."""
    pass


def require_non_negative(field: str, value: float) -> None:
    """Reject negative counts, durations and amounts."""
    if value < 0:
        raise InvalidInputError(field, value, ">= 0")
