import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


class AppError(Exception):
    def __init__(self, status_code: int, detail: str, details: str | None = None) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.details = details


class AuthError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=401, detail=detail)


class RateLimitError(AppError):
    def __init__(self, detail: str = "Too many requests") -> None:
        super().__init__(status_code=429, detail=detail)


class ValidationError(AppError):
    def __init__(self, detail: str, details: str | None = None) -> None:
        super().__init__(status_code=400, detail=detail, details=details)


class PayloadTooLarge(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=400, detail=detail)


class MalformedRequestError(AppError):
    def __init__(self, detail: str, details: str | None = None) -> None:
        super().__init__(status_code=400, detail=detail, details=details)


class NotFoundError(AppError):
    def __init__(self, detail: str = "File not found") -> None:
        super().__init__(status_code=404, detail=detail)


class ProcessingError(AppError):
    def __init__(self, detail: str, details: str | None = None) -> None:
        super().__init__(status_code=500, detail=detail, details=details)


class StorageError(AppError):
    def __init__(self, detail: str, details: str | None = None) -> None:
        super().__init__(status_code=500, detail=detail, details=details)


def error_body(error: str, details: str | None = None) -> dict[str, str]:
    body = {"error": error}
    if details:
        body["details"] = details
    return body


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    @app.exception_handler(AppError)
    async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("request_failed", path=request.url.path, error=exc.detail, details=exc.details)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.detail, exc.details))

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=error_body("Invalid request", _format_validation_errors(exc)),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "Not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content=error_body(message), headers=exc.headers)

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", path=request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_body("Internal server error", str(exc) if debug else None),
        )
