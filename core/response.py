# core/response.py

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    # === Not Found ===
    # referenced section, student, row, or column does not exist
    NOT_FOUND = "NOT_FOUND"

    # === Validation Failures ===
    # referenced records exist, but the operation is semantically invalid
    # (unenrolled student, out-of-range score, unknown aggregate function)
    BAD_CONTENT = "BAD_CONTENT"

    # === Storage Faults ===
    # storage round trip failed; detail carries the underlying message
    DB = "DB"

    # === Internal Faults ===
    INTERNAL_ERROR = "INTERNAL_ERROR"


STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.BAD_CONTENT: 422,
    ErrorCode.DB: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}


class Response:
    """
    Standard Response object for Grades manipulator and lookup methods.

    Attributes:
        success (bool): Indicates whether the operation succeeded.
        detail (str | None): Optional human-readable explanation.
        error (ErrorCode | str | None): Optional machine-readable error identifier.
        status_code (int | None): Optional HTTP response code.
        data (dict): Optional payload, varies by operation.
        trace (str | None): Optional exception traceback when errors occur.
    """

    def __init__(
        self,
        success: bool,
        detail: str | None = None,
        error: ErrorCode | str | None = None,
        status_code: int | None = None,
        data: dict | None = None,
        trace: str | None = None,
    ):
        self._success = success
        self._detail = detail
        self._error = error
        self._status_code = status_code
        self._data = data or {}
        self._trace = trace

    # === properties ===

    @property
    def success(self) -> bool:
        return self._success

    @property
    def detail(self) -> str | None:
        return self._detail

    @property
    def error(self) -> ErrorCode | str | None:
        return self._error

    @property
    def status_code(self) -> int | None:
        return self._status_code

    @property
    def data(self) -> dict:
        return self._data or {}

    @property
    def trace(self) -> str | None:
        return self._trace

    # === public classmethods ===

    @classmethod
    def succeed(
        cls,
        detail: str | None = None,
        status_code: int | None = 200,
        data: dict | None = None,
    ) -> Response:
        return cls(
            success=True,
            detail=detail,
            error=None,
            status_code=status_code,
            data=data,
        )

    @classmethod
    def fail(
        cls,
        detail: str | None = None,
        error: ErrorCode | str | None = None,
        status_code: int | None = None,
        data: dict | None = None,
        trace: str | None = None,
    ) -> Response:
        if status_code is None:
            status_code = STATUS_CODES.get(error, 400) if isinstance(error, ErrorCode) else 400

        return cls(
            success=False,
            detail=detail,
            error=error,
            status_code=status_code,
            data=data,
            trace=trace,
        )

    @classmethod
    def not_found(cls, detail: str) -> Response:
        return cls.fail(detail=detail, error=ErrorCode.NOT_FOUND)

    @classmethod
    def bad_content(cls, detail: str) -> Response:
        return cls.fail(detail=detail, error=ErrorCode.BAD_CONTENT)

    @classmethod
    def db_error(cls, detail: str) -> Response:
        return cls.fail(detail=detail, error=ErrorCode.DB)

    # === dunder methods ===

    def __str__(self) -> str:
        if self.success:
            return f"Success: {self.detail or ''}"
        else:
            error_str = (
                self.error.value if isinstance(self.error, Enum) else self.error or ""
            )
            return f"Error: {error_str}"
