"""
Input validation shared by the registry and the API layer.
"""

from typing import Any

from .enums import MIN_GRADE, MAX_GRADE
from .exceptions import InvalidCapacityError, InvalidGradeRangeError, ValidationError


def validate_grade(value: Any) -> float:
    """Return ``value`` as a float, raising when it is not a grade in [0, 100]."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidGradeRangeError(
            f"Grade must be a number, got {type(value).__name__}",
            error_code="invalid_grade_range",
        )
    # NaN fails the comparison. Huge ints compare exactly and never reach float().
    if not MIN_GRADE <= value <= MAX_GRADE:
        raise InvalidGradeRangeError(
            f"Grade must be between {MIN_GRADE} and {MAX_GRADE}",
            error_code="invalid_grade_range",
            details={'grade': value},
        )
    return float(value)


def validate_capacity(value: Any) -> int:
    """Return ``value`` when it is a positive integer capacity."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidCapacityError(
            "Maximum capacity must be greater than 0",
            error_code="invalid_capacity",
            details={'max_capacity': value},
        )
    return value


def require_identifier(value: Any, field_name: str) -> str:
    # Missing identifiers are caller bugs, not business outcomes.
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{field_name} is required", error_code="missing_identifier")
    return value
