"""
Enrollment registry: the single coordinator of courses, enrollments and grades.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from ..core.entities import Course, Event, Student
from ..core.enums import EnrollmentState, EventType, RegistryOutcome
from ..core.exceptions import InvalidCapacityError, InvalidGradeRangeError, ValidationError
from ..core.interfaces import EventHandler
from ..core.validation import require_identifier, validate_grade

logger = logging.getLogger(__name__)

CourseRef = Union[Course, str]


@dataclass
class RegistryResult:
    """Result of a registry operation."""
    success: bool
    outcome: RegistryOutcome
    message: str
    value: Any = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, value: Any = None, **metadata) -> "RegistryResult":
        return cls(True, RegistryOutcome.SUCCESS, message, value, metadata)

    @classmethod
    def fail(cls, outcome: RegistryOutcome, message: str, **metadata) -> "RegistryResult":
        return cls(False, outcome, message, None, metadata)

    def __bool__(self) -> bool:
        return self.success


class EnrollmentRegistry:
    """Owns courses, the student roster and every cross-entity mutation.

    Business rule rejections (full course, duplicate code, missing enrollment
    and so on) come back as a failed ``RegistryResult``. Only contract
    violations such as a missing student or course identifier raise
    ``ValidationError``.

    Each public operation runs under a single re-entrant lock, so an
    enrollment's capacity check and seat update never interleave with another
    enrollment on the same registry.
    """

    def __init__(self):
        self._courses: Dict[str, Course] = {}
        self._students: Dict[str, Student] = {}
        self._total_enrolled_students = 0
        self._event_handlers: List[EventHandler] = []
        self._lock = threading.RLock()

    # Courses

    def add_course(self, code: str, name: str, max_capacity: int) -> RegistryResult:
        """Create and register a course with a unique code."""
        require_identifier(code, "Course code")
        with self._lock:
            if self.find_course(code) is not None:
                logger.info("Rejected course %s: code already exists", code)
                return RegistryResult.fail(
                    RegistryOutcome.DUPLICATE_COURSE_CODE,
                    f"Course code {code} already exists",
                    code=code
                )

            try:
                course = Course(code, name, max_capacity)
            except InvalidCapacityError as e:
                logger.info("Rejected course %s: %s", code, e.message)
                return RegistryResult.fail(
                    RegistryOutcome.INVALID_CAPACITY, e.message, code=code, max_capacity=max_capacity
                )

            self._courses[code] = course
            logger.info("Added course %s (%s) with capacity %d", code, name, max_capacity)
            self._publish_event(EventType.COURSE_CREATED, f"course_{code}", {
                'code': code,
                'name': name,
                'max_capacity': max_capacity,
            })
            return RegistryResult.ok("Course added successfully", course)

    def find_course(self, code: str) -> Optional[Course]:
        """Find a course by exact, case-sensitive code."""
        with self._lock:
            return self._courses.get(code)

    @property
    def courses(self) -> List[Course]:
        with self._lock:
            return list(self._courses.values())

    @property
    def total_enrolled_students(self) -> int:
        """Number of seats taken across every course in this registry."""
        return self._total_enrolled_students

    # Students

    def register_student(self, name: str, student_id: str) -> RegistryResult:
        """Add a new student to the roster."""
        require_identifier(student_id, "Student ID")
        with self._lock:
            if student_id in self._students:
                return RegistryResult.fail(
                    RegistryOutcome.DUPLICATE_STUDENT_ID,
                    f"Student ID {student_id} already exists",
                    student_id=student_id
                )

            student = Student(name, student_id)
            self._students[student_id] = student
            logger.info("Registered student %s (%s)", student_id, name)
            self._publish_event(EventType.STUDENT_REGISTERED, f"student_{student_id}", {
                'student_id': student_id,
                'name': name,
            })
            return RegistryResult.ok("Student registered successfully", student)

    def get_or_create_student(self, name: str, student_id: str) -> Student:
        """Return the rostered student with this ID, registering one if absent."""
        with self._lock:
            student = self.get_student(student_id)
            if student is None:
                student = self.register_student(name, student_id).value
            return student

    def get_student(self, student_id: str) -> Optional[Student]:
        with self._lock:
            return self._students.get(student_id)

    @staticmethod
    def find_student(students: Iterable[Student], student_id: str) -> Optional[Student]:
        """Find a student by exact, case-sensitive ID in any collection."""
        for student in students:
            if student.id == student_id:
                return student
        return None

    @property
    def students(self) -> List[Student]:
        with self._lock:
            return list(self._students.values())

    def rename_student(self, student_id: str, new_id: str) -> RegistryResult:
        """Change a rostered student's ID and re-index the roster."""
        require_identifier(new_id, "Student ID")
        with self._lock:
            student = self._students.get(student_id)
            if student is None:
                return RegistryResult.fail(
                    RegistryOutcome.UNKNOWN_STUDENT,
                    f"Student {student_id} not found",
                    student_id=student_id
                )
            if new_id == student_id:
                return RegistryResult.ok("Student ID unchanged", student)
            if new_id in self._students:
                return RegistryResult.fail(
                    RegistryOutcome.DUPLICATE_STUDENT_ID,
                    f"Student ID {new_id} already exists",
                    student_id=new_id
                )

            del self._students[student_id]
            student.update(student_id=new_id)
            self._students[new_id] = student
            logger.info("Renamed student %s to %s", student_id, new_id)
            return RegistryResult.ok("Student ID changed", student, previous_id=student_id)

    # Enrollment

    def enroll(self, student: Student, course: CourseRef) -> RegistryResult:
        """Enroll a student in a registered course.

        Preconditions are checked in a fixed order so the first failing one is
        reported: the course must be registered, it must have a free seat, and
        the student must not already hold a seat in it.
        """
        self._require_student(student)
        with self._lock:
            registered = self._resolve_course(course)
            if registered is None:
                logger.debug("Enrollment of %s rejected: unknown course %s", student.id, course)
                return RegistryResult.fail(
                    RegistryOutcome.UNKNOWN_COURSE,
                    "Course not found",
                    student_id=student.id
                )

            if not registered.has_available_spot():
                logger.info("Enrollment of %s rejected: %s is full", student.id, registered.code)
                return RegistryResult.fail(
                    RegistryOutcome.COURSE_FULL,
                    "Course has reached maximum capacity",
                    student_id=student.id,
                    code=registered.code
                )

            if student.is_enrolled_in(registered):
                logger.debug("Enrollment of %s rejected: already in %s", student.id, registered.code)
                return RegistryResult.fail(
                    RegistryOutcome.ALREADY_ENROLLED,
                    "Student is already enrolled in this course",
                    student_id=student.id,
                    code=registered.code
                )

            student.enroll_in(registered)
            registered.increment_enrollment()
            self._total_enrolled_students += 1

            logger.info("Enrolled %s in %s (%d/%d)", student.id, registered.code,
                        registered.current_enrollment, registered.max_capacity)
            self._publish_event(EventType.ENROLLMENT, f"course_{registered.code}", {
                'student_id': student.id,
                'code': registered.code,
                'current_enrollment': registered.current_enrollment,
            })
            return RegistryResult.ok(
                "Student enrolled successfully",
                registered,
                current_enrollment=registered.current_enrollment,
                max_capacity=registered.max_capacity
            )

    def withdraw(self, student: Student, course: CourseRef) -> RegistryResult:
        """Remove an enrollment, freeing the seat and discarding any grade."""
        self._require_student(student)
        with self._lock:
            registered = self._resolve_course(course)
            if registered is None:
                return RegistryResult.fail(
                    RegistryOutcome.UNKNOWN_COURSE,
                    "Course not found",
                    student_id=student.id
                )

            if not student.is_enrolled_in(registered):
                return RegistryResult.fail(
                    RegistryOutcome.NOT_ENROLLED,
                    "Student is not enrolled in this course",
                    student_id=student.id,
                    code=registered.code
                )

            dropped_grade = student.grade_for(registered)
            student.withdraw_from(registered)
            if registered.decrement_enrollment():
                self._total_enrolled_students -= 1

            logger.info("Withdrew %s from %s", student.id, registered.code)
            self._publish_event(EventType.WITHDRAWAL, f"course_{registered.code}", {
                'student_id': student.id,
                'code': registered.code,
                'dropped_grade': dropped_grade,
            })
            return RegistryResult.ok(
                "Student withdrawn successfully",
                registered,
                dropped_grade=dropped_grade
            )

    def enrollment_state(self, student: Student, course: CourseRef) -> EnrollmentState:
        """Where the student/course pair sits in Unenrolled -> Enrolled -> Graded."""
        self._require_student(student)
        with self._lock:
            registered = self._resolve_course(course)
            if registered is None or not student.is_enrolled_in(registered):
                return EnrollmentState.UNENROLLED
            if student.grade_for(registered) is None:
                return EnrollmentState.ENROLLED
            return EnrollmentState.GRADED

    # Grades

    def assign_grade(self, student: Student, course: CourseRef, grade: float) -> RegistryResult:
        """Record or overwrite the student's grade for an enrolled course."""
        self._require_student(student)
        try:
            value = validate_grade(grade)
        except InvalidGradeRangeError as e:
            return RegistryResult.fail(
                RegistryOutcome.INVALID_GRADE_RANGE, e.message, student_id=student.id, grade=grade
            )

        with self._lock:
            registered = self._resolve_course(course)
            if registered is None:
                if isinstance(course, Course):
                    # Nobody can be enrolled through this registry in a course it never added.
                    return RegistryResult.fail(
                        RegistryOutcome.NOT_ENROLLED,
                        "Student is not enrolled in this course",
                        student_id=student.id,
                        code=course.code
                    )
                return RegistryResult.fail(
                    RegistryOutcome.UNKNOWN_COURSE,
                    "Course not found",
                    student_id=student.id
                )

            if not student.is_enrolled_in(registered):
                logger.debug("Grade for %s rejected: not enrolled in %s", student.id, registered.code)
                return RegistryResult.fail(
                    RegistryOutcome.NOT_ENROLLED,
                    "Student is not enrolled in this course",
                    student_id=student.id,
                    code=registered.code
                )

            previous = student.grade_for(registered)
            student.assign_grade(registered, value)

            logger.info("Assigned grade %.2f to %s for %s", value, student.id, registered.code)
            self._publish_event(EventType.GRADING, f"course_{registered.code}", {
                'student_id': student.id,
                'code': registered.code,
                'grade': value,
                'previous_grade': previous,
            })
            return RegistryResult.ok(
                "Grade assigned successfully", value, previous_grade=previous
            )

    def overall_grade(self, student: Student) -> RegistryResult:
        """Unweighted mean of the grades recorded for the student.

        Enrolled but ungraded courses are left out entirely.
        """
        self._require_student(student)
        with self._lock:
            grades = list(student.grades.values())
            if not grades:
                return RegistryResult.fail(
                    RegistryOutcome.NO_GRADES_ASSIGNED,
                    "No grades have been assigned to this student",
                    student_id=student.id
                )

            average = sum(grades) / len(grades)
            return RegistryResult.ok(
                "Overall grade calculated", average, graded_courses=len(grades)
            )

    # Events and statistics

    def add_event_handler(self, handler: EventHandler) -> None:
        """Add an event handler."""
        with self._lock:
            self._event_handlers.append(handler)

    def get_statistics(self) -> Dict[str, Any]:
        """Get enrollment statistics."""
        with self._lock:
            return {
                'total_enrolled_students': self._total_enrolled_students,
                'total_courses': len(self._courses),
                'total_registered_students': len(self._students),
                'total_grades_recorded': sum(len(s.grades) for s in self._students.values()),
            }

    def _resolve_course(self, course: CourseRef) -> Optional[Course]:
        if isinstance(course, Course):
            return self._courses.get(course.code)
        return self.find_course(require_identifier(course, "Course code"))

    @staticmethod
    def _require_student(student: Optional[Student]) -> None:
        if student is None:
            raise ValidationError("Student is required", error_code="missing_identifier")

    def _publish_event(self, event_type: EventType, stream_id: str, event_data: Dict[str, Any]) -> None:
        """Publish an event to all handlers."""
        event = Event(
            event_type=event_type,
            stream_id=stream_id,
            event_data=event_data
        )

        for handler in self._event_handlers:
            if handler.can_handle(event_type.value):
                try:
                    handler.handle_event(event)
                except Exception:
                    logger.exception("Error in event handler %s", handler.__class__.__name__)
