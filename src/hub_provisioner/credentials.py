"""
hub_provisioner.credentials

Service principal credential generation.

Responsibilities:
- Generate a random password drawn from four disjoint character classes.
- Produce the validity window (now -> fixed far-future end).
"""

from __future__ import annotations

import secrets
import string
from datetime import UTC, datetime

from hub_provisioner.models import Credential

MIN_LENGTH = 28
MAX_LENGTH = 36
MIN_PER_CLASS = 4

LOWERCASE = string.ascii_lowercase
UPPERCASE = string.ascii_uppercase
DIGITS = string.digits
SPECIAL_CHARACTERS = "!@#$%^&*()-_=+"

CREDENTIAL_END = datetime(2099, 12, 31, 23, 59, 59, tzinfo=UTC)

_rng = secrets.SystemRandom()


def class_counts(length: int) -> dict[str, int]:
    """
    Split `length` across character classes.

    The special count is allocated twice (digits and symbols); lowercase takes the rest,
    so the four counts always sum to `length`.
    """

    if not MIN_LENGTH <= length <= MAX_LENGTH:
        raise ValueError(f"length must be within [{MIN_LENGTH}, {MAX_LENGTH}], got {length}")
    upper = length // 4
    special = length // 6
    lower = length - upper - 2 * special
    counts = {"lower": lower, "upper": upper, "digits": special, "special": special}
    if min(counts.values()) < MIN_PER_CLASS:
        raise ValueError(f"length {length} leaves a class below {MIN_PER_CLASS} characters")
    return counts


def generate_password(length: int | None = None) -> str:
    if length is None:
        length = _rng.randint(MIN_LENGTH, MAX_LENGTH)
    counts = class_counts(length)

    chars: list[str] = []
    chars.extend(_rng.choice(LOWERCASE) for _ in range(counts["lower"]))
    chars.extend(_rng.choice(UPPERCASE) for _ in range(counts["upper"]))
    chars.extend(_rng.choice(DIGITS) for _ in range(counts["digits"]))
    chars.extend(_rng.choice(SPECIAL_CHARACTERS) for _ in range(counts["special"]))
    _rng.shuffle(chars)
    return "".join(chars)


def generate_credential(*, length: int | None = None) -> Credential:
    return Credential(
        secret=generate_password(length),
        start=datetime.now(tz=UTC),
        end=CREDENTIAL_END,
    )


# --- Module Notes -----------------------------------------------------------
# Every call draws from the OS CSPRNG; there is no seed.
