"""Exception handlers that keep every error in the ``{"detail": {...}}`` envelope."""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import DomainException, RepositoryException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An error occurred processing your request"


def _code_from_status(status_code: int) -> str:
    mapping = {
        400: "BAD_REQUEST",
        401: "NOT_AUTHENTICATED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        422: "VALIDATION_ERROR",
        429: "TOO_MANY_REQUESTS",
        500: "INTERNAL_ERROR",
    }
    return mapping.get(status_code, "ERROR")


def _envelope(message: str, code: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"detail": {"message": message, "code": code, "details": details or {}}}


def _normalize_detail(status_code: int, detail: Any) -> Dict[str, Any]:
    """Coerce an HTTPException detail into the message/code/details shape."""
    if isinstance(detail, dict) and isinstance(detail.get("code"), str):
        message = detail.get("message")
        details = detail.get("details")
        return _envelope(
            message if isinstance(message, str) else "",
            detail["code"],
            jsonable_encoder(details) if isinstance(details, dict) else None,
        )
    if isinstance(detail, str):
        return _envelope(detail, _code_from_status(status_code))
    if detail is None:
        return _envelope("", _code_from_status(status_code))
    return _envelope(
        str(detail), _code_from_status(status_code), {"raw": jsonable_encoder(detail)}
    )


def _validation_response(message: str, errors: Any) -> JSONResponse:
    return JSONResponse(
        _envelope(message, "VALIDATION_ERROR", {"errors": jsonable_encoder(errors)}),
        status_code=422,
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        # Routes convert their own domain errors; this catches the ones raised in dependencies.
        http_exc = exc.to_http_exception()
        if http_exc.status_code >= 500:
            logger.error("Unhandled %s on %s: %s", exc.code, request.url.path, exc.message)
        return JSONResponse(
            {"detail": http_exc.detail},
            status_code=http_exc.status_code,
            headers=http_exc.headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            _normalize_detail(exc.status_code, exc.detail),
            status_code=exc.status_code,
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _validation_response("Request validation failed", exc.errors())

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _validation_response("Validation failed", exc.errors())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        if isinstance(exc, RepositoryException):
            logger.error("Data access failure on %s: %s", request.url.path, exc)
        else:
            logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(_envelope(INTERNAL_ERROR_MESSAGE, "INTERNAL_ERROR"), status_code=500)
