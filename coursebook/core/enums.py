"""
Enumerations and constants for the Coursebook engine.
"""

from enum import Enum


MIN_GRADE = 0.0
MAX_GRADE = 100.0


class EventType(Enum):
    """Types of events published by the registry."""
    COURSE_CREATED = "course_created"
    STUDENT_REGISTERED = "student_registered"
    ENROLLMENT = "enrollment"
    GRADING = "grading"
    WITHDRAWAL = "withdrawal"


class EnrollmentState(Enum):
    """Lifecycle of a single student/course pair."""
    UNENROLLED = "unenrolled"
    ENROLLED = "enrolled"
    GRADED = "graded"


class RegistryOutcome(Enum):
    """Outcome of a registry operation."""
    SUCCESS = "success"
    DUPLICATE_COURSE_CODE = "duplicate_course_code"
    DUPLICATE_STUDENT_ID = "duplicate_student_id"
    COURSE_FULL = "course_full"
    ALREADY_ENROLLED = "already_enrolled"
    UNKNOWN_COURSE = "unknown_course"
    UNKNOWN_STUDENT = "unknown_student"
    NOT_ENROLLED = "not_enrolled"
    NO_GRADES_ASSIGNED = "no_grades_assigned"
    INVALID_CAPACITY = "invalid_capacity"
    INVALID_GRADE_RANGE = "invalid_grade_range"
