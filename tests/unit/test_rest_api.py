"""Unit tests for the REST API."""

import pytest
from fastapi.testclient import TestClient

from coursebook.api import CoursebookRestAPI


@pytest.fixture
def client(wired_registry, event_service):
    api = CoursebookRestAPI(wired_registry, event_service)
    return TestClient(api.app)


@pytest.fixture
def seeded(client):
    client.post("/courses", json={"code": "CS101", "name": "Intro", "max_capacity": 1})
    client.post("/students", json={"student_id": "S1", "name": "Alice"})
    client.post("/students", json={"student_id": "S2", "name": "Bob"})
    return client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_create_course(client):
    response = client.post("/courses", json={"code": "CS101", "name": "Intro", "max_capacity": 3})

    assert response.status_code == 201
    assert response.json() == {
        "code": "CS101",
        "name": "Intro",
        "max_capacity": 3,
        "current_enrollment": 0,
        "available_spots": 3,
    }


def test_duplicate_course_conflicts(seeded):
    response = seeded.post("/courses", json={"code": "CS101", "name": "Again", "max_capacity": 3})

    assert response.status_code == 409
    assert response.json()["detail"]["outcome"] == "duplicate_course_code"
    assert len(seeded.get("/courses").json()) == 1


def test_zero_capacity_is_unprocessable(client):
    response = client.post("/courses", json={"code": "CS101", "name": "Intro", "max_capacity": 0})

    assert response.status_code == 422


def test_unknown_course_404(client):
    assert client.get("/courses/NOPE").status_code == 404


def test_enrollment_flow(seeded):
    first = seeded.post("/enrollments", json={"student_id": "S1", "course_code": "CS101"})
    second = seeded.post("/enrollments", json={"student_id": "S2", "course_code": "CS101"})

    assert first.status_code == 200
    assert first.json()["course"]["current_enrollment"] == 1
    assert second.status_code == 409
    assert second.json()["detail"]["outcome"] == "course_full"

    grade = seeded.put("/grades", json={"student_id": "S1", "course_code": "CS101", "grade": 90.0})
    assert grade.status_code == 200

    overall = seeded.get("/students/S1/overall-grade")
    assert overall.json() == {"student_id": "S1", "overall_grade": 90.0, "graded_courses": 1}

    student = seeded.get("/students/S1").json()
    assert student["enrolled_courses"] == ["CS101"]
    assert student["grades"] == {"CS101": 90.0}


def test_grade_out_of_range_rejected_by_validation(seeded):
    seeded.post("/enrollments", json={"student_id": "S1", "course_code": "CS101"})

    response = seeded.put("/grades", json={"student_id": "S1", "course_code": "CS101", "grade": 105.0})

    assert response.status_code == 422
    assert seeded.get("/students/S1").json()["grades"] == {}


def test_grade_without_enrollment(seeded):
    response = seeded.put("/grades", json={"student_id": "S1", "course_code": "CS101", "grade": 50.0})

    assert response.status_code == 409
    assert response.json()["detail"]["outcome"] == "not_enrolled"


def test_overall_grade_without_grades(seeded):
    response = seeded.get("/students/S1/overall-grade")

    assert response.status_code == 404
    assert response.json()["detail"]["outcome"] == "no_grades_assigned"


def test_unknown_student(seeded):
    response = seeded.post("/enrollments", json={"student_id": "S404", "course_code": "CS101"})

    assert response.status_code == 404


def test_withdraw(seeded):
    seeded.post("/enrollments", json={"student_id": "S1", "course_code": "CS101"})

    response = seeded.delete("/enrollments/S1/CS101")

    assert response.status_code == 200
    assert response.json()["course"]["available_spots"] == 1
    assert seeded.post("/enrollments", json={"student_id": "S2", "course_code": "CS101"}).status_code == 200


def test_statistics_and_events(seeded):
    seeded.post("/enrollments", json={"student_id": "S1", "course_code": "CS101"})

    statistics = seeded.get("/statistics").json()["statistics"]
    events = seeded.get("/events", params={"event_type": "enrollment"}).json()

    assert statistics["enrollment"]["total_enrolled_students"] == 1
    assert statistics["events"]["total_events"] == 4
    assert [event["event_data"]["student_id"] for event in events] == ["S1"]


def test_unknown_event_type(seeded):
    assert seeded.get("/events", params={"event_type": "nope"}).status_code == 400
