"""
Coursebook: Course Enrollment and Grade Management

An in-memory engine for creating capacity-bounded courses, enrolling students,
recording per-course grades and deriving a student's overall grade, with a thin
REST surface on top.
"""

__version__ = "1.0.0"
__author__ = "Coursebook Development Team"
__description__ = "Course Enrollment and Grade Management engine"
