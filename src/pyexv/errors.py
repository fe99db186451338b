"""Error handling utilities for pyexv.

Provides exception classes and validation helpers. The layout engine and
the state store absorb degenerate input themselves; these exceptions are
raised only at setup boundaries (scene descriptions and configuration).
"""

from pathlib import Path


class PyexvError(Exception):
    """Base exception for pyexv errors."""

    pass


class SceneError(PyexvError):
    """Exception raised when a scene description cannot be loaded."""

    def __init__(self, source: Path | str, reason: str) -> None:
        """Initialize scene error.

        Args:
            source: File path or node identifier that failed to load
            reason: Reason for failure
        """
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load scene {source}: {reason}")


class LayoutError(PyexvError):
    """Exception raised when layout calculation is misused."""

    def __init__(self, reason: str) -> None:
        """Initialize layout error.

        Args:
            reason: Reason for failure
        """
        self.reason = reason
        super().__init__(f"Layout calculation failed: {reason}")


class ValidationError(PyexvError):
    """Exception raised when input validation fails."""

    def __init__(self, field: str, value: object, expected: str) -> None:
        """Initialize validation error.

        Args:
            field: Field name that failed validation
            value: Invalid value
            expected: Expected type/description
        """
        self.field = field
        self.value = value
        self.expected = expected
        super().__init__(f"Validation failed for '{field}': expected {expected}, got {value!r}")


def validate_range(value: int | float, min_val: int | float, max_val: int | float, name: str = "value") -> None:
    """Validate that a value is within range.

    Args:
        value: Value to validate
        min_val: Minimum allowed value
        max_val: Maximum allowed value
        name: Name of the value for error messages

    Raises:
        ValidationError: If value is out of range
    """
    if not (min_val <= value <= max_val):
        raise ValidationError(name, value, f"value between {min_val} and {max_val}")


def validate_positive(value: int | float, name: str = "value") -> None:
    """Validate that a value is strictly positive.

    Args:
        value: Value to validate
        name: Name of the value for error messages

    Raises:
        ValidationError: If value is zero or negative
    """
    if not value > 0:
        raise ValidationError(name, value, "positive value")
