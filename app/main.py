"""FastAPI application entry point for the URL shortener service.

This module configures and initializes the FastAPI application with exception
handlers, metrics, lifecycle management, and route registration.

Application Lifecycle Diagram
=============================
::
    ┌──────────────┐
    │  uvicorn     │
    │  startup     │
    └──────┬───────┘
           ▼
    ┌──────────────┐
    │ Create FastAPI│
    │ app instance │
    └──────┬───────┘
           ▼
    ┌──────────────┐
    │ Exception    │
    │ handlers     │
    └──────┬───────┘
           ▼
    ┌──────────────┐
    │ /metrics +   │
    │ routes       │
    └──────┬───────┘
           ▼
    ┌──────────────┐
    │ lifespan()   │
    │ startup:     │
    │ init_db()    │
    └──────┬───────┘
           ▼
    ┌──────────────┐
    │ Serve HTTP   │
    │ requests     │
    └──────┬───────┘
           ▼
    ┌──────────────┐
    │ lifespan()   │
    │ shutdown:    │
    │ close_db()   │
    └──────────────┘

How to Use
===========
**Step 1 — Run with uvicorn**::
    uvicorn app.main:app --host 0.0.0.0 --port 3000 --reload

**Step 2 — Make API calls**::
    # Shorten URL
    curl -X POST http://localhost:3000/api/url \\
         -H "Content-Type: application/json" \\
         -d '{"url": "https://example.com"}'

    # Follow it
    curl -i http://localhost:3000/k3x9q0ab

Configuration:
    The app uses environment variables for configuration.
    See app/config.py for all available settings.
"""

__all__ = ["app", "main"]

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from app.config import get_settings
from app.database import close_db, init_db
from app.dependencies import _service_manager
from app.handlers import register_exception_handlers
from app.routes import router

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    await _service_manager.initialize()
    await init_db()
    _service_manager.logger.info(f"{settings.APP_NAME} started ({settings.APP_ENV})")
    yield
    # Shutdown
    await close_db()
    await _service_manager.cleanup()


_docs_enabled = settings.APP_ENV == "development"

app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="URL shortener with store-enforced unique short codes",
    lifespan=lifespan,
    docs_url="/docs" if _docs_enabled else None,
    redoc_url="/redoc" if _docs_enabled else None,
    openapi_url="/openapi.json" if _docs_enabled else None,
)

register_exception_handlers(app)

Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=False,
    should_respect_env_var=False,
).instrument(app).expose(app)

app.include_router(router)


def main() -> None:
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
