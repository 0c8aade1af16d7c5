"""Map storefront and Protean exceptions to JSON error responses.

Every error body has the shape ``{"message": str, "errors": ...}``, with
``errors`` omitted when there is nothing beyond the message.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers
from starlette.exceptions import HTTPException

from storefront.errors import AuthorizationError, summarize
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _error_response(status_code, messages=None, message=None) -> JSONResponse:
    content = {"message": message or summarize(messages)}
    if messages:
        content["errors"] = messages
    return JSONResponse(status_code=status_code, content=content)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(400, exc.messages)


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    messages = getattr(exc, "messages", None) or (exc.args[0] if exc.args else None)
    if isinstance(messages, dict):
        return _error_response(404, messages)
    return _error_response(404, message=str(messages) if messages else "Resource not found")


async def authorization_error_handler(request: Request, exc: AuthorizationError) -> JSONResponse:
    return _error_response(403, exc.messages)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = {}
    for error in exc.errors():
        # Drop the leading "body"/"query"/"path" segment
        location = [str(part) for part in error["loc"][1:]] or [str(part) for part in error["loc"]]
        errors.setdefault(".".join(location), []).append(error["msg"])
    return _error_response(400, errors)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unexpected_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's defaults, then the storefront's own response shapes on top."""
    register_exception_handlers(app)

    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(AuthorizationError, authorization_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
