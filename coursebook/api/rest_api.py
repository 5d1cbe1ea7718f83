"""
REST API implementation for the Coursebook engine using FastAPI.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .. import __version__
from ..core.entities import Course, Student
from ..core.enums import EventType, MAX_GRADE, MIN_GRADE, RegistryOutcome
from ..services import EnrollmentRegistry, EventService, RegistryResult

logger = logging.getLogger(__name__)


# Pydantic models for API
class CourseCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=200)
    max_capacity: int = Field(..., ge=1)


class CourseResponse(BaseModel):
    code: str
    name: str
    max_capacity: int
    current_enrollment: int
    available_spots: int


class StudentCreate(BaseModel):
    student_id: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=100)


class StudentResponse(BaseModel):
    id: str
    name: str
    enrolled_courses: List[str] = []
    grades: Dict[str, float] = {}


class EnrollmentRequest(BaseModel):
    student_id: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1)


class EnrollmentResponse(BaseModel):
    success: bool
    message: str
    outcome: str
    course: CourseResponse


class GradeRequest(BaseModel):
    student_id: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1)
    grade: float = Field(..., ge=MIN_GRADE, le=MAX_GRADE)


class GradeResponse(BaseModel):
    success: bool
    message: str
    grade: float
    previous_grade: Optional[float] = None


class OverallGradeResponse(BaseModel):
    student_id: str
    overall_grade: float
    graded_courses: int


class StatisticsResponse(BaseModel):
    success: bool
    message: str
    statistics: Dict[str, Any]


class EventResponse(BaseModel):
    event_type: str
    stream_id: str
    event_data: Dict[str, Any]
    created_at: datetime


OUTCOME_STATUS = {
    RegistryOutcome.DUPLICATE_COURSE_CODE: status.HTTP_409_CONFLICT,
    RegistryOutcome.DUPLICATE_STUDENT_ID: status.HTTP_409_CONFLICT,
    RegistryOutcome.COURSE_FULL: status.HTTP_409_CONFLICT,
    RegistryOutcome.ALREADY_ENROLLED: status.HTTP_409_CONFLICT,
    RegistryOutcome.NOT_ENROLLED: status.HTTP_409_CONFLICT,
    RegistryOutcome.UNKNOWN_COURSE: status.HTTP_404_NOT_FOUND,
    RegistryOutcome.UNKNOWN_STUDENT: status.HTTP_404_NOT_FOUND,
    RegistryOutcome.NO_GRADES_ASSIGNED: status.HTTP_404_NOT_FOUND,
    RegistryOutcome.INVALID_CAPACITY: 422,
    RegistryOutcome.INVALID_GRADE_RANGE: 422,
}


class CoursebookRestAPI:
    """REST API over an ``EnrollmentRegistry``."""

    def __init__(self, registry: EnrollmentRegistry, event_service: Optional[EventService] = None):
        self._registry = registry
        self._event_service = event_service

        self.app = FastAPI(
            title="Coursebook API",
            description="Course enrollment and grade management",
            version=__version__,
            docs_url="/docs",
            redoc_url="/redoc"
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/", response_model=Dict[str, str])
        async def root():
            """Root endpoint."""
            return {
                "message": "Coursebook API",
                "version": __version__,
                "docs": "/docs"
            }

        @self.app.get("/health", response_model=Dict[str, str])
        async def health_check():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

        # Course endpoints
        @self.app.post("/courses", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
        async def create_course(course_data: CourseCreate):
            """Create a new course."""
            result = self._registry.add_course(course_data.code, course_data.name, course_data.max_capacity)
            self._raise_for_outcome(result)
            return self._course_to_response(result.value)

        @self.app.get("/courses", response_model=List[CourseResponse])
        async def list_courses(skip: int = 0, limit: int = 100):
            """List all courses."""
            courses = self._registry.courses[skip:skip + limit]
            return [self._course_to_response(course) for course in courses]

        @self.app.get("/courses/{code}", response_model=CourseResponse)
        async def get_course(code: str):
            """Get a course by code."""
            return self._course_to_response(self._require_course(code))

        # Student endpoints
        @self.app.post("/students", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
        async def create_student(student_data: StudentCreate):
            """Register a new student."""
            result = self._registry.register_student(student_data.name, student_data.student_id)
            self._raise_for_outcome(result)
            return self._student_to_response(result.value)

        @self.app.get("/students", response_model=List[StudentResponse])
        async def list_students(skip: int = 0, limit: int = 100):
            """List all students."""
            students = self._registry.students[skip:skip + limit]
            return [self._student_to_response(student) for student in students]

        @self.app.get("/students/{student_id}", response_model=StudentResponse)
        async def get_student(student_id: str):
            """Get a student by ID."""
            return self._student_to_response(self._require_student(student_id))

        @self.app.get("/students/{student_id}/overall-grade", response_model=OverallGradeResponse)
        async def get_overall_grade(student_id: str):
            """Average of the student's recorded grades."""
            student = self._require_student(student_id)
            result = self._registry.overall_grade(student)
            self._raise_for_outcome(result)
            return OverallGradeResponse(
                student_id=student.id,
                overall_grade=result.value,
                graded_courses=result.metadata['graded_courses']
            )

        # Enrollment endpoints
        @self.app.post("/enrollments", response_model=EnrollmentResponse)
        async def enroll_student(enrollment_data: EnrollmentRequest):
            """Enroll a student in a course."""
            student = self._require_student(enrollment_data.student_id)
            result = self._registry.enroll(student, enrollment_data.course_code)
            self._raise_for_outcome(result)
            return EnrollmentResponse(
                success=result.success,
                message=result.message,
                outcome=result.outcome.value,
                course=self._course_to_response(result.value)
            )

        @self.app.delete("/enrollments/{student_id}/{code}", response_model=EnrollmentResponse)
        async def withdraw_student(student_id: str, code: str):
            """Withdraw a student from a course."""
            student = self._require_student(student_id)
            result = self._registry.withdraw(student, code)
            self._raise_for_outcome(result)
            return EnrollmentResponse(
                success=result.success,
                message=result.message,
                outcome=result.outcome.value,
                course=self._course_to_response(result.value)
            )

        # Grade endpoints
        @self.app.put("/grades", response_model=GradeResponse)
        async def assign_grade(grade_data: GradeRequest):
            """Assign or overwrite a grade."""
            student = self._require_student(grade_data.student_id)
            result = self._registry.assign_grade(student, grade_data.course_code, grade_data.grade)
            self._raise_for_outcome(result)
            return GradeResponse(
                success=result.success,
                message=result.message,
                grade=result.value,
                previous_grade=result.metadata.get('previous_grade')
            )

        # Statistics and events
        @self.app.get("/statistics", response_model=StatisticsResponse)
        async def get_statistics():
            """Get system statistics."""
            statistics = {"enrollment": self._registry.get_statistics()}
            if self._event_service is not None:
                statistics["events"] = self._event_service.get_processing_statistics()
            return StatisticsResponse(
                success=True,
                message="Statistics retrieved successfully",
                statistics=statistics
            )

        @self.app.get("/events", response_model=List[EventResponse])
        async def list_events(stream_id: Optional[str] = None, event_type: Optional[str] = None):
            """List recorded registry events."""
            if self._event_service is None:
                return []
            try:
                kind = EventType(event_type) if event_type else None
            except ValueError:
                raise HTTPException(status_code=400, detail=f"Unknown event type: {event_type}")
            return [
                EventResponse(
                    event_type=event.event_type.value,
                    stream_id=event.stream_id,
                    event_data=event.event_data,
                    created_at=event.created_at
                )
                for event in self._event_service.get_events(stream_id=stream_id, event_type=kind)
            ]

    def _require_course(self, code: str) -> Course:
        course = self._registry.find_course(code)
        if course is None:
            raise HTTPException(status_code=404, detail="Course not found")
        return course

    def _require_student(self, student_id: str) -> Student:
        student = self._registry.get_student(student_id)
        if student is None:
            raise HTTPException(status_code=404, detail="Student not found")
        return student

    @staticmethod
    def _raise_for_outcome(result: RegistryResult) -> None:
        if result.success:
            return
        logger.debug("Request rejected: %s (%s)", result.outcome.value, result.message)
        raise HTTPException(
            status_code=OUTCOME_STATUS.get(result.outcome, status.HTTP_400_BAD_REQUEST),
            detail={"outcome": result.outcome.value, "message": result.message}
        )

    def _course_to_response(self, course: Course) -> CourseResponse:
        """Convert Course entity to response model."""
        return CourseResponse(
            code=course.code,
            name=course.name,
            max_capacity=course.max_capacity,
            current_enrollment=course.current_enrollment,
            available_spots=course.available_spots
        )

    def _student_to_response(self, student: Student) -> StudentResponse:
        """Convert Student entity to response model."""
        data = student.to_dict()
        return StudentResponse(
            id=data['id'],
            name=data['name'],
            enrolled_courses=data['enrolled_courses'],
            grades=data['grades']
        )
