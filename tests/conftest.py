"""Pytest configuration and shared fixtures."""

import pytest

from coursebook.core.entities import Course, Student
from coursebook.services import EnrollmentRegistry, EventService


@pytest.fixture
def registry():
    """Create an empty registry."""
    return EnrollmentRegistry()


@pytest.fixture
def event_service():
    """Create an event service."""
    return EventService()


@pytest.fixture
def wired_registry(registry, event_service):
    """Registry that publishes to the event service."""
    registry.add_event_handler(event_service)
    return registry


@pytest.fixture
def cs101(registry):
    """Register a two-seat CS101 course."""
    return registry.add_course("CS101", "Intro", 2).value


@pytest.fixture
def alice():
    return Student("Alice", "S1")


@pytest.fixture
def bob():
    return Student("Bob", "S2")


@pytest.fixture
def make_course():
    """Build an unregistered course."""
    def _make(code="CS101", name="Intro", max_capacity=2):
        return Course(code, name, max_capacity)
    return _make
