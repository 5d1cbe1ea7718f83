"""
Core entities for the Coursebook engine.
"""

import uuid
from abc import ABC
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

from .enums import EventType
from .exceptions import ValidationError
from .validation import require_identifier, validate_capacity


class AbstractEntity(ABC):
    """Base abstract entity with a surrogate ID, timestamps and versioning."""

    # Identity fields. update() refuses to change them.
    _frozen_fields = frozenset({'entity_id'})

    def __init__(self, entity_id: Optional[str] = None):
        self._entity_id = entity_id or str(uuid.uuid4())
        self._created_at = datetime.now(timezone.utc)
        self._updated_at = self._created_at
        self._version = 1

    @property
    def entity_id(self) -> str:
        """Get the surrogate entity ID."""
        return self._entity_id

    @property
    def created_at(self) -> datetime:
        """Get creation timestamp."""
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        """Get last update timestamp."""
        return self._updated_at

    @property
    def version(self) -> int:
        """Get current version."""
        return self._version

    def update(self, **kwargs) -> None:
        """Update entity with new data."""
        frozen = sorted(self._frozen_fields.intersection(kwargs))
        if frozen:
            raise ValidationError(
                f"Cannot update {', '.join(frozen)} on {self.__class__.__name__}",
                error_code="immutable_field",
                details={'fields': frozen},
            )
        for key, value in kwargs.items():
            if hasattr(self, f"_{key}"):
                setattr(self, f"_{key}", value)
        self._updated_at = datetime.now(timezone.utc)
        self._version += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert entity to dictionary."""
        return {
            'entity_id': self._entity_id,
            'created_at': self._created_at.isoformat(),
            'updated_at': self._updated_at.isoformat(),
            'version': self._version,
        }

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(entity_id={self._entity_id})"


class Course(AbstractEntity):
    """Course with a fixed capacity and a running enrollment count.

    Two courses compare equal, and hash the same, when their codes match,
    regardless of name or capacity.
    """

    _frozen_fields = AbstractEntity._frozen_fields | {'code'}

    def __init__(self, code: str, name: str, max_capacity: int, **kwargs):
        super().__init__(**kwargs)
        self._code = require_identifier(code, "Course code")
        self._name = name
        self._max_capacity = validate_capacity(max_capacity)
        self._current_enrollment = 0

    @property
    def code(self) -> str:
        return self._code

    @property
    def name(self) -> str:
        return self._name

    @property
    def max_capacity(self) -> int:
        return self._max_capacity

    @property
    def current_enrollment(self) -> int:
        return self._current_enrollment

    @property
    def available_spots(self) -> int:
        return self._max_capacity - self._current_enrollment

    def has_available_spot(self) -> bool:
        """Check whether another student fits."""
        return self._current_enrollment < self._max_capacity

    def increment_enrollment(self) -> bool:
        """Take one seat. Does nothing and returns False when the course is full."""
        if not self.has_available_spot():
            return False
        self._current_enrollment += 1
        self.update()
        return True

    def decrement_enrollment(self) -> bool:
        """Release one seat. Does nothing and returns False when nobody is enrolled."""
        if self._current_enrollment == 0:
            return False
        self._current_enrollment -= 1
        self.update()
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert course to dictionary."""
        base_dict = super().to_dict()
        base_dict.update({
            'code': self._code,
            'name': self._name,
            'max_capacity': self._max_capacity,
            'current_enrollment': self._current_enrollment,
            'available_spots': self.available_spots,
        })
        return base_dict

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Course):
            return NotImplemented
        return self._code == other._code

    def __hash__(self) -> int:
        return hash(self._code)

    def __repr__(self) -> str:
        return (f"Course(code={self._code!r}, name={self._name!r}, "
                f"enrollment={self._current_enrollment}/{self._max_capacity})")


class Student(AbstractEntity):
    """Student with its own enrollment set and per-course grade map.

    The student does not check capacity or enrollment before accepting a
    course or a grade; ``EnrollmentRegistry`` is responsible for that.
    """

    def __init__(self, name: str, student_id: str, **kwargs):
        super().__init__(**kwargs)
        self._name = name
        self._student_id = require_identifier(student_id, "Student ID")
        self._enrolled_courses: Set[Course] = set()
        self._grades: Dict[Course, float] = {}

    @property
    def id(self) -> str:
        return self._student_id

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value
        self.update()

    @property
    def enrolled_courses(self) -> Set[Course]:
        return self._enrolled_courses.copy()

    @property
    def grades(self) -> Dict[Course, float]:
        return self._grades.copy()

    def enroll_in(self, course: Course) -> None:
        """Add a course to the enrollment set. Re-adding is a no-op."""
        if course not in self._enrolled_courses:
            self._enrolled_courses.add(course)
            self.update()

    def is_enrolled_in(self, course: Course) -> bool:
        return course in self._enrolled_courses

    def assign_grade(self, course: Course, grade: float) -> None:
        """Set the grade for a course, replacing any previous one."""
        self._grades[course] = grade
        self.update()

    def grade_for(self, course: Course) -> Optional[float]:
        return self._grades.get(course)

    def withdraw_from(self, course: Course) -> None:
        """Drop a course together with its grade."""
        self._enrolled_courses.discard(course)
        self._grades.pop(course, None)
        self.update()

    def to_dict(self) -> Dict[str, Any]:
        """Convert student to dictionary."""
        base_dict = super().to_dict()
        base_dict.update({
            'id': self._student_id,
            'name': self._name,
            'enrolled_courses': sorted(course.code for course in self._enrolled_courses),
            'grades': {course.code: grade for course, grade in sorted(
                self._grades.items(), key=lambda item: item[0].code)},
        })
        return base_dict

    def __repr__(self) -> str:
        return f"Student(id={self._student_id!r}, name={self._name!r})"


class Event(AbstractEntity):
    """Immutable record of something the registry did."""

    def __init__(self, event_type: EventType, stream_id: str,
                 event_data: Dict[str, Any], **kwargs):
        super().__init__(**kwargs)
        self._event_type = event_type
        self._stream_id = stream_id
        self._event_data = event_data

    @property
    def event_type(self) -> EventType:
        return self._event_type

    @property
    def stream_id(self) -> str:
        return self._stream_id

    @property
    def event_data(self) -> Dict[str, Any]:
        return self._event_data.copy()

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            'event_type': self._event_type.value,
            'stream_id': self._stream_id,
            'event_data': self._event_data.copy(),
        })
        return base_dict
