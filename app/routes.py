"""FastAPI route definitions for the URL shortener REST API.

API Endpoint Overview
=====================
::
    GET  /health
        └─ HealthResponse (200)

    POST /api/url
        ├─ URLCreate (request body)
        └─ ShortURLResponse (201) or 400/500

    GET  /:short_id
        └─ 301 Redirect or 404

Request Flow Diagram
====================
::
    ┌─────────────┐
    │  HTTP       │
    │  Request    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Validate &  │──── invalid ───► 400 Wrong url format
    │ Parse       │
    │ (Pydantic)  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Call Service│
    │ Layer       │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Allocation /│──── ShortenerError ──► error_response()
    │ Resolution  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ 201 / 301   │
    └─────────────┘

Key Behaviours
===============
- Service outcomes are values; routes map them to responses without try/except.
- Everything after the leading slash, including decoded "/", is the short id
  and is passed to the resolver verbatim.
- 301 redirects: short URLs are permanent.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, RedirectResponse

from app.dependencies import RequestContext, get_request_context, get_url_service
from app.enums import HealthStatus
from app.handlers import error_response
from app.results import ShortenerError
from app.schemas import ErrorResponse, HealthResponse, ShortURLResponse, URLCreate
from app.url_service import URLShorteningService

__all__ = ["router"]

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(
    ctx: RequestContext = Depends(get_request_context),
    service: URLShorteningService = Depends(get_url_service),
) -> HealthResponse:
    db_status = HealthStatus.HEALTHY if await service.check_store() else HealthStatus.UNHEALTHY
    ctx.logger.info(f"Health check completed: {db_status.value}")
    return HealthResponse(status=db_status, database=db_status)


@router.post(
    "/api/url",
    response_model=ShortURLResponse,
    status_code=201,
    tags=["urls"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def shorten_url(
    payload: URLCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: URLShorteningService = Depends(get_url_service),
) -> ShortURLResponse | JSONResponse:
    ctx.logger.info(f"URL shortening requested: {payload.url}")

    outcome = await service.shorten_url(payload.url)
    if isinstance(outcome, ShortenerError):
        return error_response(outcome)

    return ShortURLResponse(short_url=service.short_url_for(outcome.short_code))


@router.get(
    "/{short_id:path}",
    response_model=None,
    status_code=301,
    tags=["redirect"],
    responses={404: {"model": ErrorResponse}},
)
async def redirect_to_url(
    short_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: URLShorteningService = Depends(get_url_service),
) -> RedirectResponse | JSONResponse:
    outcome = await service.resolve_short_code(short_id)
    if isinstance(outcome, ShortenerError):
        return error_response(outcome)

    ctx.logger.info(f"Redirect: {short_id} -> {outcome.long_url} ({ctx.get_duration():.1f}ms)")
    return RedirectResponse(url=outcome.long_url, status_code=outcome.status_code)
