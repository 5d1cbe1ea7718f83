"""Unit tests for input validation."""

import math

import pytest

from coursebook.core.exceptions import InvalidCapacityError, InvalidGradeRangeError, ValidationError
from coursebook.core.validation import validate_capacity, validate_grade


@pytest.mark.parametrize("grade", [0.0, 0, 55.5, 100.0, 100])
def test_grade_boundaries_are_inclusive(grade):
    assert validate_grade(grade) == float(grade)


@pytest.mark.parametrize("grade", [-0.01, 100.01, 105.0, math.nan, math.inf])
def test_out_of_range_grade_is_rejected(grade):
    with pytest.raises(InvalidGradeRangeError) as exc_info:
        validate_grade(grade)
    assert exc_info.value.error_code == "invalid_grade_range"


@pytest.mark.parametrize("grade", ["90", None, True])
def test_non_numeric_grade_is_rejected(grade):
    with pytest.raises(InvalidGradeRangeError):
        validate_grade(grade)


def test_grade_error_is_a_validation_error():
    assert issubclass(InvalidGradeRangeError, ValidationError)


@pytest.mark.parametrize("capacity", [0, -5, 1.0, "3", None, False])
def test_invalid_capacity(capacity):
    with pytest.raises(InvalidCapacityError):
        validate_capacity(capacity)


def test_valid_capacity():
    assert validate_capacity(30) == 30


@pytest.mark.parametrize("grade", [10 ** 400, -(10 ** 400)])
def test_int_beyond_float_range_is_rejected(grade):
    with pytest.raises(InvalidGradeRangeError):
        validate_grade(grade)
