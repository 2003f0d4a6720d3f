# enrollment_service/main.py
import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

import uvicorn
from fastapi import Depends, FastAPI, File, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, get_settings
from .data_service import CourseDataService
from .exceptions import EnrollmentServiceError, InvalidRequest, StoreUnavailable
from .middleware import LoggingMiddleware
from .models import Course, Enrollment, EnrollRequest, EnrollResponse, UploadResponse
from .service import CourseService
from .uploads import save_upload

logger = logging.getLogger("enrollment_service")


def configure_logging(level: str):
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def error_body(request: Request, error: str, message, status_code: int) -> dict:
    return {
        "error": error,
        "message": message,
        "status_code": status_code,
        "path": str(request.url.path),
    }


def get_course_service(request: Request) -> CourseService:
    return request.app.state.course_service


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        data_service = CourseDataService(settings.courses_file, settings.enrollments_file)
        try:
            data_service.load()
        except StoreUnavailable as e:
            logger.critical(f"Cannot start: {e.message}")
            raise
        app.state.course_service = CourseService(data_service)
        logger.info("Enrollment service started")
        yield
        logger.info("Enrollment service stopped")

    log_dir = os.path.dirname(settings.request_log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    app = FastAPI(title="Student Enrollment Service", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(LoggingMiddleware, log_file=settings.request_log_file)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def read_root():
        return {"message": "Welcome to the Online Student Enrollment System API!!!"}

    @app.get("/api/courses", response_model=List[Course])
    def get_all_courses(service: CourseService = Depends(get_course_service)):
        """Get all courses"""
        return service.get_all()

    @app.post("/api/enroll", response_model=EnrollResponse)
    def enroll_student(payload: EnrollRequest, service: CourseService = Depends(get_course_service)):
        """Enroll a student in a course"""
        enrollment, course = service.enroll(payload.studentName, payload.courseId)
        return EnrollResponse(
            message=f"Student {enrollment.studentName} successfully enrolled in course {course.name}!",
            enrollment=enrollment,
        )

    @app.get("/api/enrollments", response_model=List[Enrollment])
    def get_all_enrollments(service: CourseService = Depends(get_course_service)):
        """Get all enrollments"""
        return service.get_enrollments()

    @app.get("/api/courses/sort-popularity", response_model=List[Course])
    def sort_courses_by_popularity(service: CourseService = Depends(get_course_service)):
        """Get courses ordered by popularity, most popular first"""
        return service.sort_by_popularity()

    @app.get("/api/courses/search", response_model=List[Course])
    def search_courses(name: Optional[str] = None, service: CourseService = Depends(get_course_service)):
        """Search courses by a case-insensitive name fragment"""
        return service.search(name)

    @app.post("/api/upload", response_model=UploadResponse)
    def upload_file(file: Optional[UploadFile] = File(None)):
        """Store an uploaded file under the upload directory"""
        if file is None:
            raise InvalidRequest("A file is required in the 'file' field.")
        path = save_upload(settings.upload_dir, file.filename, file.file)
        return UploadResponse(message=f"File uploaded successfully: {path}", path=path)

    @app.exception_handler(EnrollmentServiceError)
    async def service_error_handler(request: Request, exc: EnrollmentServiceError):
        logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(request, type(exc).__name__, exc.message, exc.status_code),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Malformed request on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(request, "InvalidRequest", "Malformed request body or parameters.", 400),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.error(f"HTTP Exception: {exc.status_code} - {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(request, "Error", exc.detail, exc.status_code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {str(exc)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(request, "Internal Server Error", "An unexpected error occurred", 500),
        )

    return app


app = create_app()


def run():
    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
