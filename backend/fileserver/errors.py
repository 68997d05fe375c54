"""Error taxonomy for filesystem operations and the single translator to HTTP responses."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class ErrorKind(StrEnum):
    not_found = "not_found"
    conflict = "conflict"
    invalid_argument = "invalid_argument"
    internal = "internal"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.not_found: status.HTTP_404_NOT_FOUND,
    ErrorKind.conflict: status.HTTP_409_CONFLICT,
    ErrorKind.invalid_argument: status.HTTP_400_BAD_REQUEST,
    ErrorKind.internal: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class FileServiceError(Exception):
    """A failure the handlers anticipated, tagged with its kind."""

    kind: ErrorKind = ErrorKind.internal

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class NotFoundError(FileServiceError):
    kind = ErrorKind.not_found


class ConflictError(FileServiceError):
    kind = ErrorKind.conflict


class InvalidArgumentError(FileServiceError):
    kind = ErrorKind.invalid_argument


def translate_os_error(exc: OSError, path: str) -> FileServiceError | None:
    """Map an OSError from a filesystem primitive to a tagged error.

    Only the conditions callers anticipate are translated. Anything else maps to
    None and should propagate so it reaches the top-level handler as Internal.
    """
    if isinstance(exc, FileNotFoundError):
        return NotFoundError(f"Path not found: {path}")
    if isinstance(exc, FileExistsError):
        return ConflictError(f"Path already exists and is not a directory: {path}")
    if isinstance(exc, IsADirectoryError):
        return InvalidArgumentError(f"Path is a directory: {path}")
    if isinstance(exc, NotADirectoryError):
        return InvalidArgumentError(f"Path is not a directory: {path}")
    return None


@contextmanager
def os_errors_mapped(path: str) -> Iterator[None]:
    """Re-raise anticipated OSErrors inside the block as FileServiceError."""
    try:
        yield
    except OSError as exc:
        mapped = translate_os_error(exc, path)
        if mapped is None:
            raise
        raise mapped from exc


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
    if first.get("type") == "missing":
        return f"Missing required field: {field}"
    return f"Invalid value for {field}: {first.get('msg', 'invalid')}"


async def handle_file_service_error(request: Request, exc: FileServiceError) -> JSONResponse:
    logger.info(
        "request_failed",
        method=request.method,
        path=request.url.path,
        kind=str(exc.kind),
        status=exc.status_code,
        error=exc.message,
    )
    return _error_response(exc.status_code, exc.message)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _describe_validation_error(exc)
    logger.info(
        "request_failed",
        method=request.method,
        path=request.url.path,
        kind=str(ErrorKind.invalid_argument),
        status=status.HTTP_400_BAD_REQUEST,
        error=message,
    )
    return _error_response(STATUS_BY_KIND[ErrorKind.invalid_argument], message)


async def translate_unexpected_errors(request: Request, call_next):
    """Turn any failure the handlers did not anticipate into an Internal response.

    Runs as middleware rather than as an ``Exception`` handler so the response still
    passes back through the CORS layer on its way out.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        logger.error("unhandled_error", method=request.method, path=request.url.path, exc_info=exc)
        return _error_response(STATUS_BY_KIND[ErrorKind.internal], str(exc))


def install_error_handlers(app: FastAPI) -> None:
    """Register the one translator that owns the kind → status mapping.

    Call before adding CORS middleware so CORS wraps every error response.
    """
    app.add_exception_handler(FileServiceError, handle_file_service_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.middleware("http")(translate_unexpected_errors)
