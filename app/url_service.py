"""URL Shortener Service Layer - Core Business Logic

This module holds the write path (short code allocation) and the read path
(short code resolution), plus the request-scoped facade the routes call.

Architecture Overview
=====================
::
    ┌─────────────────────────────────────────────────────────────┐
    │                    Service Layer                            │
    │  ┌──────────────────┐  ┌─────────────────┐  ┌────────────┐ │
    │  │ URLShortening-   │  │ ShortCode-      │  │ URL-       │ │
    │  │ Service          │──│ Allocator       │  │ Resolver   │ │
    │  │ • logging        │  │ • generate      │  │ • lookup   │ │
    │  │ • metrics        │  │ • insert/retry  │  │ • 301/404  │ │
    │  └──────────────────┘  └────────┬────────┘  └─────┬──────┘ │
    └─────────────────────────────────┼─────────────────┼────────┘
                                      ▼                 ▼
                              ┌─────────────────────────────┐
                              │  URLStore (PostgreSQL)      │
                              │  UNIQUE INDEX (short_code)  │
                              └─────────────────────────────┘

Allocation State Machine
========================
::
    Received ─► Validating ─┬─► Rejected                      (400, routes)
                            └─► Allocating
                                  │
                                  ▼
                            Attempting(i) ──collision, i+1 < 10──► Attempting(i+1)
                                  │
                 ┌────────────────┼─────────────────────┐
                 ▼                ▼                     ▼
              Stored        ExhaustedRetries        StoreError
                 │                │                     │
                 ▼                ▼                     ▼
             Succeeded          Failed                Failed

Key Behaviours
===============
- Attempts are strictly sequential; each one is a single INSERT + COMMIT.
- Only a uniqueness violation on short_code is retried. Any other store error
  ends the allocation on the spot with the original exception attached.
- Ten collisions in a row end the allocation with ALLOCATION_EXHAUSTED.
- No issued codes are remembered in process memory; the unique index decides.
- Lookup failures of any kind resolve to NOT_FOUND.
"""

import logging
import time
from typing import TYPE_CHECKING, Callable

from prometheus_client import Counter, Histogram

from app.config import Settings
from app.enums import ErrorKind, RequestStatus
from app.results import Allocation, Resolution, ShortenerError
from app.shortcode import generate_short_code
from app.store import URLStore

if TYPE_CHECKING:
    from app.dependencies import RequestContext

__all__ = [
    "MAX_ALLOCATION_ATTEMPTS",
    "ShortCodeAllocator",
    "URLResolver",
    "URLShorteningService",
]

MAX_ALLOCATION_ATTEMPTS = 10

_logger = logging.getLogger("urlshortener")


# ============================================================================
# PROMETHEUS METRICS
# ============================================================================

ALLOCATIONS_TOTAL = Counter(
    "url_shortener_allocations_total",
    "Short code allocation requests by outcome",
    ["status"],
)
ALLOCATION_ATTEMPTS = Histogram(
    "url_shortener_allocation_attempts",
    "Insert attempts needed per allocation",
    buckets=list(range(1, MAX_ALLOCATION_ATTEMPTS + 1)),
)
COLLISIONS_TOTAL = Counter(
    "url_shortener_collisions_total",
    "Inserts rejected by the short_code uniqueness constraint",
)
ALLOCATION_DURATION = Histogram(
    "url_shortener_allocation_duration_seconds",
    "Time taken to allocate short codes",
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)
LOOKUPS_TOTAL = Counter(
    "url_shortener_lookups_total",
    "Short code lookups by outcome",
    ["status"],
)
LOOKUP_DURATION = Histogram(
    "url_shortener_lookup_duration_seconds",
    "Time taken to resolve short codes",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25],
)


# ============================================================================
# WRITE PATH
# ============================================================================


class ShortCodeAllocator:
    """Reserve a fresh short code for a long URL.

    Args:
        store: Store the mapping is inserted into.
        code_length: Length of generated codes.
        max_attempts: Upper bound on insert attempts.
        generator: Candidate generator, ``generate_short_code`` by default.
        logger: Logger for collision and failure reporting.
    """

    def __init__(
        self,
        store: URLStore,
        code_length: int,
        max_attempts: int = MAX_ALLOCATION_ATTEMPTS,
        generator: Callable[[int], str] | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {max_attempts!r}")
        self._store = store
        self._code_length = code_length
        self._max_attempts = max_attempts
        self._generate = generator or generate_short_code
        self._logger = logger or _logger

    async def allocate(self, long_url: str) -> Allocation | ShortenerError:
        attempt = 0
        while attempt < self._max_attempts:
            candidate = self._generate(self._code_length)
            try:
                await self._store.insert(long_url, candidate)
            except Exception as exc:
                if not self._store.is_short_code_conflict(exc):
                    return ShortenerError.store(exc, attempts=attempt + 1)
                attempt += 1
                COLLISIONS_TOTAL.inc()
                self._logger.warning(
                    f"Short code collision on attempt {attempt}/{self._max_attempts}: {candidate}",
                    extra={"error_kind": ErrorKind.COLLISION, "short_code": candidate},
                )
                continue
            return Allocation(short_code=candidate, long_url=long_url, attempts=attempt + 1)

        return ShortenerError.exhausted(attempt)


# ============================================================================
# READ PATH
# ============================================================================


class URLResolver:
    def __init__(self, store: URLStore, logger: logging.Logger | logging.LoggerAdapter | None = None):
        self._store = store
        self._logger = logger or _logger

    async def resolve(self, short_code: str) -> Resolution | ShortenerError:
        """Look up ``short_code`` verbatim.

        Store errors are logged and reported as NOT_FOUND: a failed read is
        indistinguishable from a missing code for the caller.
        """
        try:
            long_url = await self._store.find_long_url(short_code)
        except Exception as exc:
            self._logger.error(f"Lookup failed for {short_code!r}: {exc}", exc_info=exc)
            return ShortenerError.not_found(short_code, cause=exc)

        if long_url is None:
            return ShortenerError.not_found(short_code)
        return Resolution(long_url=long_url)


# ============================================================================
# CORE SERVICE CLASS
# ============================================================================


class URLShorteningService:
    """Request-scoped facade over the allocator and resolver.

    Example:
        >>> service = URLShorteningService.from_context(ctx)
        >>> outcome = await service.shorten_url("https://example.com")
        >>> if isinstance(outcome, Allocation):
        ...     print(service.short_url_for(outcome.short_code))
    """

    def __init__(
        self,
        store: URLStore,
        settings: Settings,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
        generator: Callable[[int], str] | None = None,
    ):
        self._store = store
        self._settings = settings
        self._logger = logger or _logger
        self._allocator = ShortCodeAllocator(
            store,
            code_length=settings.SHORT_CODE_LENGTH,
            generator=generator,
            logger=self._logger,
        )
        self._resolver = URLResolver(store, logger=self._logger)

    @classmethod
    def from_context(cls, ctx: "RequestContext") -> "URLShorteningService":
        return cls(URLStore(ctx.database), settings=ctx.settings, logger=ctx.logger)

    def short_url_for(self, short_code: str) -> str:
        return f"{self._settings.BASE_URL}/{short_code}"

    async def shorten_url(self, long_url: str) -> Allocation | ShortenerError:
        start_time = time.perf_counter()
        outcome = await self._allocator.allocate(long_url)
        duration = time.perf_counter() - start_time
        ALLOCATION_DURATION.observe(duration)

        if isinstance(outcome, Allocation):
            ALLOCATIONS_TOTAL.labels(status=RequestStatus.SUCCESS).inc()
            ALLOCATION_ATTEMPTS.observe(outcome.attempts)
            self._logger.info(
                f"URL shortened: {outcome.short_code} -> {long_url} "
                f"({outcome.attempts} attempt(s), {duration:.3f}s)"
            )
            return outcome

        ALLOCATIONS_TOTAL.labels(status=RequestStatus.from_error_kind(outcome.kind)).inc()
        self._logger.error(
            f"URL shortening failed ({outcome.kind}) after {outcome.attempts} attempt(s): {outcome.message}",
            exc_info=outcome.cause,
            extra={"error_kind": outcome.kind},
        )
        return outcome

    async def resolve_short_code(self, short_code: str) -> Resolution | ShortenerError:
        start_time = time.perf_counter()
        outcome = await self._resolver.resolve(short_code)
        LOOKUP_DURATION.observe(time.perf_counter() - start_time)

        if isinstance(outcome, Resolution):
            LOOKUPS_TOTAL.labels(status=RequestStatus.SUCCESS).inc()
            self._logger.debug(f"Resolved {short_code} -> {outcome.long_url}")
        else:
            LOOKUPS_TOTAL.labels(status=RequestStatus.from_error_kind(outcome.kind)).inc()
            self._logger.info(f"Short code not found: {short_code}")
        return outcome

    async def check_store(self) -> bool:
        try:
            await self._store.ping()
        except Exception as exc:
            self._logger.error(f"Database health check failed: {exc}")
            return False
        return True
