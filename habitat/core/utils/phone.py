"""Mauritanian (+222) phone number helpers.

``validate`` checks the local form (8 digits, first digit 2, 3 or 4) while
``format`` produces the international storage form (``222`` + local digits).
Running ``validate`` on a formatted number therefore fails; use
``validate_international`` for stored values.
"""

from __future__ import annotations

import re

COUNTRY_CODE = "222"
LOCAL_LENGTH = 8
INTERNATIONAL_LENGTH = len(COUNTRY_CODE) + LOCAL_LENGTH
VALID_LOCAL_PREFIXES = frozenset("234")

_NON_DIGIT = re.compile(r"\D")


def digits_only(phone_number: str) -> str:
    return _NON_DIGIT.sub("", phone_number or "")


def format(phone_number: str) -> str:  # noqa: A001 - public name of the operation
    """Strip non-digits and make sure the number carries the country code."""
    digits = digits_only(phone_number)
    if digits and not digits.startswith(COUNTRY_CODE):
        digits = COUNTRY_CODE + digits.lstrip("0")
    return digits


def normalize(phone_number: str) -> str:
    """Storage form of a phone number."""
    return format(phone_number)


def validate(phone_number: str) -> bool:
    """True iff the input is a local number: 8 digits starting with 2, 3 or 4."""
    cleaned = digits_only(phone_number)
    return len(cleaned) == LOCAL_LENGTH and cleaned[0] in VALID_LOCAL_PREFIXES


def validate_international(phone_number: str) -> bool:
    cleaned = digits_only(phone_number)
    return (
        len(cleaned) == INTERNATIONAL_LENGTH
        and cleaned.startswith(COUNTRY_CODE)
        and validate(cleaned[len(COUNTRY_CODE):])
    )


def display(phone_number: str) -> str:
    """Render as ``+222 XX XX XX XX``; anything else is returned unchanged."""
    formatted = format(phone_number)
    if len(formatted) != INTERNATIONAL_LENGTH or not formatted.startswith(COUNTRY_CODE):
        return phone_number
    local = formatted[len(COUNTRY_CODE):]
    pairs = [local[i:i + 2] for i in range(0, LOCAL_LENGTH, 2)]
    return "+" + COUNTRY_CODE + " " + " ".join(pairs)
