"""Map exceptions to the `{"success": false, "message": ...}` error envelope."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.exceptions import AccessDenied, AuthenticationRequired
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def error_message(exc: Exception) -> str:
    """Flatten an exception into one human-readable line.

    Protean's ValidationError carries `{"field": ["message", ...]}`; only the
    messages are kept.
    """
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        flat = []
        for value in messages.values():
            if isinstance(value, (list, tuple)):
                flat.extend(str(v) for v in value)
            else:
                flat.append(str(value))
        if flat:
            return "; ".join(flat)
    if isinstance(messages, str) and messages:
        return messages
    if exc.args and isinstance(exc.args[0], str):
        return exc.args[0]
    return str(exc) or exc.__class__.__name__


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        return _envelope(400, error_message(exc))

    @app.exception_handler(ObjectNotFoundError)
    async def not_found(request: Request, exc: ObjectNotFoundError):
        return _envelope(404, error_message(exc))

    @app.exception_handler(AuthenticationRequired)
    async def authentication_required(request: Request, exc: AuthenticationRequired):
        return _envelope(401, error_message(exc))

    @app.exception_handler(AccessDenied)
    async def access_denied(request: Request, exc: AccessDenied):
        return _envelope(403, error_message(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0]["msg"] if errors else "Invalid request"
        return _envelope(400, message)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path)
        return _envelope(500, str(exc) or "Internal server error")
