"""Exception handlers that give every error response the ``{"error": ...}`` shape.

Handler Map
===========
::
    RequestValidationError  ──► 400 {"error": "Wrong url format"}
    HTTPException           ──► <status> {"error": <detail>}
    Exception (unhandled)   ──► 500 {"error": "Internal Server Error"}

How to Use
===========
::
    app = FastAPI()
    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.results import INTERNAL_SERVER_ERROR_MESSAGE, ShortenerError

__all__ = ["error_response", "register_exception_handlers"]

logger = logging.getLogger("urlshortener")


def error_response(error: ShortenerError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content={"error": error.public_message})


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
    return error_response(ShortenerError.validation())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": INTERNAL_SERVER_ERROR_MESSAGE})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
