"""Map exceptions to the {ok: false, message} JSON envelope"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from minbar.utils.exceptions import MinbarError
from minbar.utils.logger import get_logger

logger = get_logger(__name__)

SERVER_ERROR_MESSAGE = "Server error"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "message": message})


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "header")]
    field = ".".join(location)
    if first.get("type") == "missing":
        return f"Missing required field: {field}" if field else "Missing request body"
    message = first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(MinbarError)
    async def minbar_error_handler(request: Request, exc: MinbarError):
        if exc.status_code >= 500:
            logger.error("Request failed", path=request.url.path, status=exc.status_code, error=exc.message)
        else:
            logger.info("Request rejected", path=request.url.path, status=exc.status_code, error=exc.message)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return error_response(400, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path, method=request.method, error=str(exc))
        return error_response(500, SERVER_ERROR_MESSAGE)
