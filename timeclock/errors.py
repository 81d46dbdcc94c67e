from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message


class NonWorkDayError(ApiError):
    def __init__(self, message: str = "Expected work hours cannot be computed for a non-work day (Sunday)."):
        super().__init__(400, "NON_WORK_DAY", message)


class DuplicateRecordError(ApiError):
    def __init__(self, message: str = "An attendance record already exists for this employee on that date."):
        super().__init__(409, "DUPLICATE_RECORD", message)


class NotFoundError(ApiError):
    def __init__(self, code: str = "RECORD_NOT_FOUND", message: str = "Attendance record not found."):
        super().__init__(404, code, message)


class AlreadyClosedError(ApiError):
    def __init__(self, message: str = "Check-out was already registered today."):
        super().__init__(400, "ALREADY_CLOSED", message)


class ConflictError(ApiError):
    def __init__(
        self,
        message: str = "A record (holiday or otherwise) already exists for one or more employees on that date.",
    ):
        super().__init__(409, "HOLIDAY_CONFLICT", message)


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return str(request_id)
    return "unknown"


def error_response(request: Request, *, status_code: int, code: str, message: str) -> JSONResponse:
    payload = {
        "error": {
            "code": code,
            "message": message,
            "request_id": get_request_id(request),
        }
    }
    return JSONResponse(status_code=status_code, content=payload)
