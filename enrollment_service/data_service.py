# enrollment_service/data_service.py
import json
import logging
import os
import tempfile
import threading
from collections import Counter
from typing import List, Optional

from pydantic import ValidationError

from .exceptions import StoreUnavailable
from .models import Course, CourseId, Enrollment

logger = logging.getLogger("enrollment_service.store")


def read_snapshot(path: str) -> list:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array in {path}")
    return data


def write_snapshot(path: str, records: list) -> None:
    """Overwrite path with records, via a temp file and an atomic rename"""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=4)
            f.write("\n")
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


class CourseDataService:
    """Owns the course and enrollment collections and their JSON snapshots.

    Callers that read-then-write either collection must hold ``lock`` for the
    whole sequence.
    """

    def __init__(self, courses_file: str, enrollments_file: str):
        self.courses_file = courses_file
        self.enrollments_file = enrollments_file
        self.courses: List[Course] = []
        self.enrollments: List[Enrollment] = []
        self.lock = threading.RLock()

    def load(self):
        with self.lock:
            self.courses = self._load_courses()
            self.enrollments = self._load_enrollments()
            self._check_counts()
        logger.info(
            f"Loaded {len(self.courses)} courses from {self.courses_file} and "
            f"{len(self.enrollments)} enrollments from {self.enrollments_file}"
        )

    def _load_courses(self) -> List[Course]:
        if not os.path.exists(self.courses_file):
            raise StoreUnavailable(f"Courses file not found: {self.courses_file}")
        try:
            return [Course.model_validate(r) for r in read_snapshot(self.courses_file)]
        except (OSError, ValueError, ValidationError) as e:
            raise StoreUnavailable(f"Could not read courses file {self.courses_file}: {e}") from e

    def _load_enrollments(self) -> List[Enrollment]:
        if not os.path.exists(self.enrollments_file):
            logger.warning(f"Enrollments file not found, creating empty {self.enrollments_file}")
            write_snapshot(self.enrollments_file, [])
            return []
        try:
            return [Enrollment.model_validate(r) for r in read_snapshot(self.enrollments_file)]
        except (OSError, ValueError, ValidationError) as e:
            raise StoreUnavailable(
                f"Could not read enrollments file {self.enrollments_file}: {e}"
            ) from e

    def _check_counts(self):
        counts = Counter(e.courseId for e in self.enrollments)
        for course in self.courses:
            if course.enrolledStudents != counts.get(course.id, 0):
                logger.warning(
                    f"Course {course.id!r} records {course.enrolledStudents} enrolled students "
                    f"but has {counts.get(course.id, 0)} enrollment records"
                )

    def save_courses(self):
        write_snapshot(self.courses_file, [c.model_dump() for c in self.courses])

    def save_enrollments(self):
        write_snapshot(self.enrollments_file, [e.model_dump() for e in self.enrollments])

    def get_all_courses(self) -> List[Course]:
        with self.lock:
            return [c.model_copy() for c in self.courses]

    def get_all_enrollments(self) -> List[Enrollment]:
        with self.lock:
            return [e.model_copy() for e in self.enrollments]

    def get_course_by_id(self, course_id: CourseId) -> Optional[Course]:
        return next((c for c in self.courses if c.id == course_id), None)

    def find_enrollment(self, student_name: str, course_id: CourseId) -> Optional[Enrollment]:
        return next(
            (e for e in self.enrollments if e.studentName == student_name and e.courseId == course_id),
            None,
        )

    def add_enrollment(self, student_name: str, course_id: CourseId) -> Enrollment:
        new_enrollment = Enrollment(
            id=len(self.enrollments) + 1, studentName=student_name, courseId=course_id
        )
        self.enrollments.append(new_enrollment)
        return new_enrollment
