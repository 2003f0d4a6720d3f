# tests/conftest.py
import json

import pytest
from fastapi.testclient import TestClient

from enrollment_service.config import Settings
from enrollment_service.data_service import CourseDataService
from enrollment_service.main import create_app
from enrollment_service.service import CourseService

COURSES = [
    {"id": "c1", "name": "Algebra", "availableSlots": 1, "popularity": 10},
    {"id": "c2", "name": "Intro to Math", "availableSlots": 3, "popularity": 5},
    {"id": "c3", "name": "World History", "availableSlots": 0, "popularity": 5},
    {"id": 4, "name": "Organic Chemistry", "availableSlots": 2, "popularity": 3},
]


@pytest.fixture
def settings(tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "courses.json").write_text(json.dumps(COURSES, indent=4))
    return Settings(
        courses_file=str(data_dir / "courses.json"),
        enrollments_file=str(data_dir / "enrollments.json"),
        request_log_file=str(tmp_path / "server.log"),
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def store(settings):
    data_service = CourseDataService(settings.courses_file, settings.enrollments_file)
    data_service.load()
    return data_service


@pytest.fixture
def course_service(store):
    return CourseService(store)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client
