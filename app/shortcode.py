"""Short code generation.

Candidates are drawn uniformly at random from ``[a-z0-9]`` by nanoid, which
reads from ``os.urandom``. Every call is independent of the previous one, so
two service instances never walk the same sequence of candidates.
"""

import string

from nanoid import generate

from app.config import MIN_SHORT_CODE_LENGTH, get_settings

__all__ = ["ALPHABET", "generate_short_code"]

ALPHABET = string.ascii_lowercase + string.digits


def generate_short_code(length: int | None = None) -> str:
    if length is None:
        length = get_settings().SHORT_CODE_LENGTH
    if not isinstance(length, int) or length < MIN_SHORT_CODE_LENGTH:
        raise ValueError(f"length must be an integer >= {MIN_SHORT_CODE_LENGTH}, got {length!r}")
    return generate(ALPHABET, length)
