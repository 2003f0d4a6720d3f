# enrollment_service/models.py
from pydantic import BaseModel, ConfigDict, model_validator
from typing import Optional, Union

CourseId = Union[int, str]


class Course(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: CourseId
    name: str
    availableSlots: int
    enrolledStudents: int = 0
    popularity: Union[int, float] = 0
    capacity: Optional[int] = None

    @model_validator(mode="after")
    def fill_capacity(self):
        if self.capacity is None:
            self.capacity = self.availableSlots + self.enrolledStudents
        return self


class Enrollment(BaseModel):
    id: int
    studentName: str
    courseId: CourseId


class EnrollRequest(BaseModel):
    studentName: Optional[str] = None
    courseId: Optional[CourseId] = None


class EnrollResponse(BaseModel):
    message: str
    enrollment: Enrollment


class UploadResponse(BaseModel):
    message: str
    path: str
