"""Shared enums for the URL shortener application.

This module defines all status and state enums used across the codebase.
Using enums instead of string literals provides type safety and prevents typos.
"""

from enum import StrEnum

__all__ = ["ErrorKind", "HealthStatus", "RequestStatus"]


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class ErrorKind(StrEnum):
    """Closed set of failure kinds produced by the allocator and resolver."""

    VALIDATION = "validation_error"
    COLLISION = "collision_error"
    ALLOCATION_EXHAUSTED = "allocation_exhausted_error"
    STORE = "store_error"
    NOT_FOUND = "not_found_error"


class RequestStatus(StrEnum):
    """Request status values for metrics and logging."""

    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    EXHAUSTED = "exhausted"
    ERROR = "error"
    NOT_FOUND = "not_found"

    @classmethod
    def from_error_kind(cls, kind: ErrorKind) -> "RequestStatus":
        return {
            ErrorKind.VALIDATION: cls.VALIDATION_ERROR,
            ErrorKind.ALLOCATION_EXHAUSTED: cls.EXHAUSTED,
            ErrorKind.NOT_FOUND: cls.NOT_FOUND,
        }.get(kind, cls.ERROR)
