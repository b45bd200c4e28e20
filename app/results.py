"""Result values returned by the allocation and resolution paths.

Expected outcomes (not found, exhausted retries, store faults) are returned as
values instead of raised, so routes translate them with a single lookup on
``ErrorKind`` and nothing falls through unclassified.

Outcome Overview
================
::
    ShortCodeAllocator.allocate()  ──►  Allocation | ShortenerError
    URLResolver.resolve()          ──►  Resolution | ShortenerError

    ErrorKind              HTTP   body["error"]
    ─────────────────────  ────   ───────────────────────────────────────────────
    VALIDATION             400    Wrong url format
    NOT_FOUND              404    Short URL not found
    ALLOCATION_EXHAUSTED   500    An unexpected error occurred, please try again
    STORE                  500    An unexpected error occurred, please try again
    COLLISION              500    An unexpected error occurred, please try again

Classes:
    Allocation:  A short code durably reserved for a long URL.
    Resolution:  A long URL to redirect to.
    ShortenerError:  A classified failure.
"""

from dataclasses import dataclass

from app.enums import ErrorKind

__all__ = [
    "Allocation",
    "Resolution",
    "ShortenerError",
    "WRONG_URL_FORMAT_MESSAGE",
    "NOT_FOUND_MESSAGE",
    "UNEXPECTED_ERROR_MESSAGE",
    "INTERNAL_SERVER_ERROR_MESSAGE",
]

WRONG_URL_FORMAT_MESSAGE = "Wrong url format"
NOT_FOUND_MESSAGE = "Short URL not found"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred, please try again"
INTERNAL_SERVER_ERROR_MESSAGE = "Internal Server Error"

_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.COLLISION: 500,
    ErrorKind.ALLOCATION_EXHAUSTED: 500,
    ErrorKind.STORE: 500,
}

_PUBLIC_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.VALIDATION: WRONG_URL_FORMAT_MESSAGE,
    ErrorKind.NOT_FOUND: NOT_FOUND_MESSAGE,
    ErrorKind.COLLISION: UNEXPECTED_ERROR_MESSAGE,
    ErrorKind.ALLOCATION_EXHAUSTED: UNEXPECTED_ERROR_MESSAGE,
    ErrorKind.STORE: UNEXPECTED_ERROR_MESSAGE,
}


@dataclass(frozen=True)
class Allocation:
    short_code: str
    long_url: str
    attempts: int


@dataclass(frozen=True)
class Resolution:
    long_url: str
    status_code: int = 301


@dataclass(frozen=True)
class ShortenerError:
    """A classified failure of the allocation or resolution path.

    Attributes:
        kind: Which member of the closed taxonomy this failure belongs to.
        message: Detail for logs. Never sent to clients for operational kinds.
        cause: The store exception, carried unmodified for STORE failures.
        attempts: Insert attempts made before the failure (allocation only).
    """

    kind: ErrorKind
    message: str
    cause: BaseException | None = None
    attempts: int = 0

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.kind]

    @property
    def public_message(self) -> str:
        return _PUBLIC_MESSAGES[self.kind]

    @classmethod
    def validation(cls, message: str = WRONG_URL_FORMAT_MESSAGE) -> "ShortenerError":
        return cls(kind=ErrorKind.VALIDATION, message=message)

    @classmethod
    def not_found(cls, short_code: str, cause: BaseException | None = None) -> "ShortenerError":
        return cls(kind=ErrorKind.NOT_FOUND, message=f"{NOT_FOUND_MESSAGE}: {short_code!r}", cause=cause)

    @classmethod
    def exhausted(cls, attempts: int) -> "ShortenerError":
        return cls(
            kind=ErrorKind.ALLOCATION_EXHAUSTED,
            message=f"No free short code after {attempts} attempts",
            attempts=attempts,
        )

    @classmethod
    def store(cls, cause: BaseException, attempts: int = 0) -> "ShortenerError":
        return cls(kind=ErrorKind.STORE, message=str(cause), cause=cause, attempts=attempts)
