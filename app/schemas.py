"""Pydantic schemas for request/response validation in the URL shortener.

This module defines Pydantic models for API input validation and output serialization,
and the validation contract every long URL passes before allocation.

Schema Hierarchy
=================
::
    URLCreate (Input)
    └─ url: str (http/https, validators.url, <= 2048 chars)

    ShortURLResponse (Output)
    └─ shortUrl: str ("<BASE_URL>/<short_code>")

    ErrorResponse (Output)
    └─ error: str

    HealthResponse (Output)
    ├─ status: HealthStatus
    └─ database: HealthStatus

Key Behaviours
===============
- url must be a JSON string; numbers, objects and null are rejected, not coerced.
- Every rejection surfaces to clients as "Wrong url format" (see app.handlers).
- Only http and https URLs are accepted.
- Bare query flags (``?flag``) and single-label hosts (``http://localhost:3000``) pass.

Classes:
    URLCreate:  Input schema for URL shortening requests.
    ShortURLResponse:  Output schema for created short URLs.
    ErrorResponse:  Body of every error response.
    HealthResponse:  Output schema for health checks.
"""

from urllib.parse import urlsplit

import validators
from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from app.enums import HealthStatus
from app.models import LONG_URL_MAX_LENGTH
from app.results import WRONG_URL_FORMAT_MESSAGE

__all__ = [
    "ALLOWED_SCHEMES",
    "ErrorResponse",
    "HealthResponse",
    "ShortURLResponse",
    "URLCreate",
    "is_valid_long_url",
]

ALLOWED_SCHEMES = frozenset({"http", "https"})


def is_valid_long_url(value: str) -> bool:
    if not value or len(value) > LONG_URL_MAX_LENGTH:
        return False
    if urlsplit(value).scheme.lower() not in ALLOWED_SCHEMES:
        return False
    # Query items without "=" and single-label hosts such as localhost are valid URLs.
    return bool(validators.url(value, strict_query=False, simple_host=True))


class URLCreate(BaseModel):
    url: StrictStr

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not is_valid_long_url(v):
            raise ValueError(WRONG_URL_FORMAT_MESSAGE)
        return v


class ShortURLResponse(BaseModel):
    short_url: str = Field(..., alias="shortUrl")

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: HealthStatus
    database: HealthStatus
