"""Translate domain exceptions into ``{"message": ...}`` responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from marketplace.exceptions import AuthorizationError

logger = structlog.get_logger(__name__)


def validation_message(exc: ValidationError) -> str:
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        parts = []
        for field_name, errors in messages.items():
            errors = errors if isinstance(errors, list) else [errors]
            parts.extend(f"{field_name}: {error}" for error in errors)
        if parts:
            return "; ".join(parts)
    return str(exc)


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    messages = getattr(exc, "messages", None)
    return JSONResponse(
        status_code=400,
        content={"message": validation_message(exc), "errors": messages if isinstance(messages, dict) else {}},
    )


async def _authorization_error(request: Request, exc: AuthorizationError) -> JSONResponse:
    logger.info("Request not authorized", path=request.url.path, reason=exc.message)
    return JSONResponse(status_code=403, content={"message": exc.message})


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    message = exc.args[0] if exc.args and isinstance(exc.args[0], str) else "Not found"
    return JSONResponse(status_code=404, content={"message": message})


def register_error_handlers(app: FastAPI) -> None:
    """Protean's handlers for everything else, ours for the errors clients act on."""
    register_exception_handlers(app)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(AuthorizationError, _authorization_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
