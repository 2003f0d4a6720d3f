# enrollment_service/exceptions.py
"""Errors raised by the store and services, each bound to an HTTP status."""


class EnrollmentServiceError(Exception):
    """Base error for the enrollment service"""
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidRequest(EnrollmentServiceError):
    status_code = 400


class NotFound(EnrollmentServiceError):
    status_code = 404


class CapacityExceeded(EnrollmentServiceError):
    status_code = 400


class DuplicateEnrollment(EnrollmentServiceError):
    status_code = 400


class StoreUnavailable(EnrollmentServiceError):
    """A required data file is missing or unreadable"""
    status_code = 503
