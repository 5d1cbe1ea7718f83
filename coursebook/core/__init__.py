"""
Core module containing the entity model, enums and exceptions.
"""

from .entities import *
from .interfaces import *
from .exceptions import *
from .enums import *
from .validation import validate_grade, validate_capacity

__all__ = [
    # Entities
    "AbstractEntity",
    "Course",
    "Student",
    "Event",

    # Interfaces
    "EventHandler",

    # Enums
    "EventType",
    "EnrollmentState",
    "RegistryOutcome",
    "MIN_GRADE",
    "MAX_GRADE",

    # Exceptions
    "CoursebookException",
    "ValidationError",
    "InvalidCapacityError",
    "InvalidGradeRangeError",
    "ConfigurationError",

    # Validation
    "validate_grade",
    "validate_capacity",
]
