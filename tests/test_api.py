# tests/test_api.py
import json
import os

import pytest
from fastapi.testclient import TestClient

from enrollment_service.config import Settings
from enrollment_service.exceptions import StoreUnavailable
from enrollment_service.main import create_app


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to the Online Student Enrollment System API!!!"}


def test_list_courses(client):
    response = client.get("/api/courses")
    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == ["c1", "c2", "c3", 4]


def test_enroll_and_list_enrollments(client):
    response = client.post("/api/enroll", json={"studentName": "Alice", "courseId": "c1"})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Student Alice successfully enrolled in course Algebra!"
    assert body["enrollment"] == {"id": 1, "studentName": "Alice", "courseId": "c1"}

    enrollments = client.get("/api/enrollments").json()
    assert enrollments == [{"id": 1, "studentName": "Alice", "courseId": "c1"}]

    algebra = client.get("/api/courses").json()[0]
    assert algebra["availableSlots"] == 0
    assert algebra["enrolledStudents"] == 1


@pytest.mark.parametrize(
    "payload, status_code, error",
    [
        ({"studentName": "Alice"}, 400, "InvalidRequest"),
        ({"studentName": "Alice", "courseId": "missing"}, 404, "NotFound"),
        ({"studentName": "Alice", "courseId": "c3"}, 400, "CapacityExceeded"),
    ],
)
def test_enroll_errors(client, payload, status_code, error):
    response = client.post("/api/enroll", json=payload)
    assert response.status_code == status_code
    body = response.json()
    assert body["error"] == error
    assert body["path"] == "/api/enroll"


def test_duplicate_enrollment(client):
    client.post("/api/enroll", json={"studentName": "Alice", "courseId": "c2"})
    response = client.post("/api/enroll", json={"studentName": "Alice", "courseId": "c2"})
    assert response.status_code == 400
    assert response.json()["error"] == "DuplicateEnrollment"


def test_malformed_body_is_bad_request(client):
    response = client.post(
        "/api/enroll", content="not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidRequest"


def test_sort_popularity(client):
    response = client.get("/api/courses/sort-popularity")
    assert response.status_code == 200
    assert [c["popularity"] for c in response.json()] == [10, 5, 5, 3]


def test_search(client):
    response = client.get("/api/courses/search", params={"name": "math"})
    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["Intro to Math"]


def test_search_errors(client):
    assert client.get("/api/courses/search").status_code == 400
    assert client.get("/api/courses/search", params={"name": ""}).status_code == 400
    response = client.get("/api/courses/search", params={"name": "zzz"})
    assert response.status_code == 404
    assert response.json()["message"] == "No courses found matching the query."


def test_upload(client, settings):
    response = client.post("/api/upload", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert response.status_code == 200
    path = response.json()["path"]
    assert os.path.dirname(path) == settings.upload_dir
    prefix, _, name = os.path.basename(path).partition("-")
    assert prefix.isdigit()
    assert name == "notes.txt"
    with open(path, "rb") as f:
        assert f.read() == b"hello"
    assert response.json()["message"] == f"File uploaded successfully: {path}"


def test_upload_strips_directories(client, settings):
    response = client.post("/api/upload", files={"file": ("../../evil.txt", b"x", "text/plain")})
    assert response.status_code == 200
    assert os.path.dirname(response.json()["path"]) == settings.upload_dir


def test_upload_requires_file(client):
    response = client.post("/api/upload")
    assert response.status_code == 400


def test_unknown_route(client):
    response = client.get("/api/nothing")
    assert response.status_code == 404
    assert response.json()["path"] == "/api/nothing"


def test_requests_are_logged(client, settings):
    client.get("/api/courses")
    client.get("/api/courses/search", params={"name": "math"})
    with open(settings.request_log_file) as f:
        lines = f.read().splitlines()
    assert lines[-2].endswith(" - GET /api/courses")
    assert lines[-1].endswith(" - GET /api/courses/search?name=math")


def test_startup_fails_without_courses_file(tmp_path):
    settings = Settings(
        courses_file=str(tmp_path / "courses.json"),
        enrollments_file=str(tmp_path / "enrollments.json"),
        request_log_file=str(tmp_path / "server.log"),
        upload_dir=str(tmp_path / "uploads"),
    )
    with pytest.raises(StoreUnavailable):
        with TestClient(create_app(settings)):
            pass


def test_failed_save_returns_server_error_without_rollback(settings, monkeypatch):
    def fail_save():
        raise OSError("disk full")

    with TestClient(create_app(settings), raise_server_exceptions=False) as client:
        store = client.app.state.course_service.data_service
        monkeypatch.setattr(store, "save_enrollments", fail_save)

        response = client.post("/api/enroll", json={"studentName": "Alice", "courseId": "c2"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
            "status_code": 500,
            "path": "/api/enroll",
        }
        assert len(store.enrollments) == 1
        assert store.get_course_by_id("c2").availableSlots == 2

    with open(settings.courses_file) as f:
        course = next(c for c in json.load(f) if c["id"] == "c2")
    with open(settings.enrollments_file) as f:
        enrollments = json.load(f)
    assert course["availableSlots"] == 2
    assert course["enrolledStudents"] == 1
    assert enrollments == []
