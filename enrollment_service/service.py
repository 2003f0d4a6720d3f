# enrollment_service/service.py
import logging
from typing import List, Optional, Tuple

from .data_service import CourseDataService
from .exceptions import CapacityExceeded, DuplicateEnrollment, InvalidRequest, NotFound
from .models import Course, CourseId, Enrollment

logger = logging.getLogger("enrollment_service.service")


class CourseService:
    def __init__(self, data_service: CourseDataService):
        self.data_service = data_service

    def get_all(self) -> List[Course]:
        return self.data_service.get_all_courses()

    def get_enrollments(self) -> List[Enrollment]:
        return self.data_service.get_all_enrollments()

    def enroll(self, student_name: Optional[str], course_id: Optional[CourseId]) -> Tuple[Enrollment, Course]:
        """Enroll a student into a course and persist both collections.

        Checks run in order: required fields, course exists, free slot,
        not already enrolled. Nothing changes unless all of them pass.
        """
        if not student_name or course_id is None or course_id == "":
            raise InvalidRequest("Student name and course ID are required.")

        store = self.data_service
        with store.lock:
            course = store.get_course_by_id(course_id)
            if not course:
                raise NotFound("Course not found.")

            if course.availableSlots <= 0:
                raise CapacityExceeded("No available slots for this course.")

            if store.find_enrollment(student_name, course_id):
                raise DuplicateEnrollment("Student is already enrolled in this course.")

            enrollment = store.add_enrollment(student_name, course_id)
            course.availableSlots -= 1
            if not course.enrolledStudents:
                course.enrolledStudents = 1
            else:
                course.enrolledStudents += 1

            store.save_courses()
            store.save_enrollments()

            logger.info(
                f"Enrollment {enrollment.id}: {student_name!r} -> course {course_id!r} "
                f"({course.availableSlots} slots left)"
            )
            return enrollment.model_copy(), course.model_copy()

    def search(self, query: Optional[str]) -> List[Course]:
        if not query:
            raise InvalidRequest("Please provide a course name to search.")
        needle = query.lower()
        matches = [c for c in self.get_all() if needle in c.name.lower()]
        if not matches:
            raise NotFound("No courses found matching the query.")
        return matches

    def sort_by_popularity(self) -> List[Course]:
        # sorted() is stable, so equal popularity keeps catalog order
        return sorted(self.get_all(), key=lambda c: c.popularity, reverse=True)
