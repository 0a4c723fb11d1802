"""
Error handlers for exceptions that escape the route layer.

Routes convert DomainException themselves; these handlers cover calls
made outside a route's try block and store errors raised by plain reads.
Responses keep FastAPI's ``{"detail": ...}`` envelope.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .core.exceptions import DomainException, RepositoryException, TransientStoreException
from .core.request_context import get_request_id

logger = logging.getLogger(__name__)


def _domain_response(exc: DomainException) -> JSONResponse:
    http_exc = exc.to_http_exception()
    return JSONResponse(
        status_code=http_exc.status_code,
        content=jsonable_encoder({"detail": http_exc.detail}),
        headers=http_exc.headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        logger.info(
            "Domain error %s on %s %s (request_id=%s)",
            exc.code,
            request.method,
            request.url.path,
            get_request_id("-"),
        )
        return _domain_response(exc)

    @app.exception_handler(RepositoryException)
    async def repository_exception_handler(
        request: Request, exc: RepositoryException
    ) -> JSONResponse:
        logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
        if exc.transient:
            return _domain_response(
                TransientStoreException(
                    "The catalog store is temporarily unavailable", code="STORE_UNAVAILABLE"
                )
            )
        return JSONResponse(
            status_code=500,
            content={
                "detail": {
                    "message": "An error occurred processing your request",
                    "code": "STORE_ERROR",
                    "details": {},
                }
            },
        )
