"""
Services module containing the enrollment registry and the event service.
"""

from .enrollment_registry import EnrollmentRegistry, RegistryResult
from .event_service import EventService

__all__ = [
    "EnrollmentRegistry",
    "RegistryResult",
    "EventService",
]
