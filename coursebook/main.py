"""
Main entry point for the Coursebook engine.
"""

import argparse
import logging
from typing import Optional

from .api.rest_api import CoursebookRestAPI
from .config import configure_logging, load_config
from .core.exceptions import ConfigurationError
from .services import EnrollmentRegistry, EventService

logger = logging.getLogger(__name__)


class CoursebookPlatform:
    """Wires the registry, the event service and the REST API together."""

    def __init__(self, config: Optional[dict] = None):
        self._config = config or {}
        self._event_service = EventService()
        self._registry = EnrollmentRegistry()
        self._registry.add_event_handler(self._event_service)
        self._rest_api = CoursebookRestAPI(self._registry, self._event_service)
        logger.info("Coursebook platform initialized")

        if self._config.get('sample_data', False):
            self.create_sample_data()

    @property
    def registry(self) -> EnrollmentRegistry:
        return self._registry

    @property
    def event_service(self) -> EventService:
        return self._event_service

    @property
    def app(self):
        return self._rest_api.app

    def start_rest_server(self, host: Optional[str] = None, port: Optional[int] = None):
        """Run the REST server until interrupted."""
        import uvicorn

        host = host or self._config.get('rest_host', '0.0.0.0')
        port = port or self._config.get('rest_port', 8000)
        logger.info("Starting REST server on %s:%s", host, port)
        uvicorn.run(
            self._rest_api.app,
            host=host,
            port=port,
            log_level=str(self._config.get('log_level', 'info')).lower()
        )

    def create_sample_data(self):
        """Create sample data for demonstration."""
        registry = self._registry
        registry.add_course("CS101", "Introduction to Computer Science", 3)
        registry.add_course("MATH201", "Linear Algebra", 2)
        registry.add_course("HIST110", "World History", 1)

        alice = registry.get_or_create_student("Alice Johnson", "S001")
        bob = registry.get_or_create_student("Bob Smith", "S002")
        carol = registry.get_or_create_student("Carol Davis", "S003")

        for student in (alice, bob, carol):
            registry.enroll(student, "CS101")
        registry.enroll(alice, "MATH201")
        registry.enroll(bob, "HIST110")

        registry.assign_grade(alice, "CS101", 92.5)
        registry.assign_grade(alice, "MATH201", 88.0)
        registry.assign_grade(bob, "CS101", 75.25)
        logger.info("Sample data created")

    def run_demo(self):
        """Run a demonstration of the engine and print a report."""
        # Seeding is idempotent: existing courses and students are kept.
        if self._registry.get_student("S003") is None:
            self.create_sample_data()

        registry = self._registry
        carol = registry.get_student("S003")

        print("=== Courses ===")
        for course in registry.courses:
            print(f"{course.code}: {course.name} "
                  f"({course.current_enrollment}/{course.max_capacity}, "
                  f"{course.available_spots} spots left)")

        print("\n=== Capacity check ===")
        result = registry.enroll(carol, "HIST110")
        print(f"Enroll {carol.id} in HIST110: {result.outcome.value} - {result.message}")

        print("\n=== Overall grades ===")
        for student in registry.students:
            overall = registry.overall_grade(student)
            if overall.success:
                print(f"{student.name} ({student.id}): {overall.value:.2f}")
                for course, grade in sorted(student.grades.items(), key=lambda item: item[0].code):
                    print(f"  - {course.code}: {course.name} - {grade:.2f}")
            else:
                print(f"{student.name} ({student.id}): {overall.message}")

        print("\n=== Enrollment statistics ===")
        for key, value in registry.get_statistics().items():
            print(f"{key}: {value}")
        print(f"events: {self._event_service.get_processing_statistics()['total_events']}")


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Coursebook enrollment and grade management")
    parser.add_argument("--rest-port", type=int, help="REST server port")
    parser.add_argument("--host", type=str, help="REST server host")
    parser.add_argument("--demo", action="store_true", help="Run demo mode")
    parser.add_argument("--config", type=str, help="Configuration file path")
    parser.add_argument("--log-level", type=str, help="Logging level")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config, {
            'rest_port': args.rest_port,
            'rest_host': args.host,
            'log_level': args.log_level,
        })
    except ConfigurationError as e:
        parser.error(e.message)

    configure_logging(config['log_level'])
    platform = CoursebookPlatform(config)

    if args.demo:
        platform.run_demo()
    else:
        try:
            platform.start_rest_server()
        except KeyboardInterrupt:
            logger.info("Shutting down")


if __name__ == "__main__":
    main()
