from typing import Any

from coursehub.core.error_codes import ErrorCode


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str, fields: list[dict[str, Any]] | None = None):
        self.status_code = status_code
        self.code = str(code)
        self.message = message
        self.fields = fields
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.fields:
            error["fields"] = self.fields
        return {"error": error}


class ValidationError(ApiError):
    def __init__(self, message: str, code: str = ErrorCode.VALIDATION_ERROR, fields: list[dict[str, Any]] | None = None):
        super().__init__(400, code, message, fields)


class NotFound(ApiError):
    def __init__(self, message: str, code: str = ErrorCode.NOT_FOUND):
        super().__init__(404, code, message)


class Conflict(ApiError):
    def __init__(self, message: str, code: str = ErrorCode.CONFLICT):
        super().__init__(409, code, message)


class Forbidden(ApiError):
    def __init__(self, message: str, code: str = ErrorCode.FORBIDDEN):
        super().__init__(403, code, message)


class Unauthenticated(ApiError):
    def __init__(self, message: str, code: str = ErrorCode.UNAUTHENTICATED):
        super().__init__(401, code, message)


class InternalError(ApiError):
    def __init__(self, message: str = "Internal server error"):
        super().__init__(500, ErrorCode.INTERNAL, message)


def field_error(field: str, message: str) -> ValidationError:
    return ValidationError(message, fields=[{"field": field, "message": message}])
