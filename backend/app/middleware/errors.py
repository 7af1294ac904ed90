"""Exception handlers that give every failure a JSON body with an "error" key."""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.services.errors import classify_upstream_error

logger = logging.getLogger(__name__)


def field_errors(errors: list[dict]) -> list[dict]:
    """Flatten pydantic error dicts into {field, message, type}."""
    details = []
    for err in errors:
        # Drop the leading "body"/"query" segment so the field reads like the payload key
        loc = [str(part) for part in err.get("loc", ())]
        if len(loc) > 1 and loc[0] in ("body", "query", "path", "form"):
            loc = loc[1:]
        details.append({
            "field": ".".join(loc),
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        })
    return details


def invalid_payload(error: str, exc: ValidationError) -> HTTPException:
    """400 for a payload validated inside a route rather than by FastAPI."""
    return HTTPException(
        status_code=400,
        detail={"error": error, "details": field_errors(exc.errors())},
    )


def upstream_failure(
    exc: Exception,
    service_name: str,
    failure_prefix: str,
    check_audio_format: bool = False,
) -> HTTPException:
    """500 carrying a classified, user-facing message for a vendor failure."""
    detail: dict = {
        "error": classify_upstream_error(exc, service_name, failure_prefix, check_audio_format),
    }
    if settings.is_development:
        detail["details"] = str(exc)
    return HTTPException(status_code=500, detail=detail)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = field_errors(exc.errors())
    logger.info("Rejected %s %s: %s", request.method, request.url.path, details)
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request data", "details": details},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTPException(detail=str | dict) as {"error": ...}.

    A dict detail is passed through, so routes can add "details"/"message".
    """
    if isinstance(exc.detail, dict):
        content = dict(exc.detail)
    else:
        content = {"error": str(exc.detail)}
    headers: Optional[dict] = getattr(exc, "headers", None)
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
