"""
FastAPI application entry point for the blog service.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.config import get_settings
from backend.routes import router
from backend.schemas import classify_validation_errors, describe_validation_errors
from shared.api import PostOperationError
from shared.types import ErrorCode

logger = logging.getLogger(__name__)


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    error = PostOperationError(
        code=ErrorCode.INVALID_ARGUMENT,
        message=describe_validation_errors(errors),
        reason=classify_validation_errors(errors),
    )
    logger.warning("Rejected request to %s: %s", request.url.path, error.message)
    return JSONResponse(status_code=error.http_status, content=error.as_dict())


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Blog Backend (FastAPI)", version="0.1.0")
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
