"""
Phone canonicalization.

The normalized form is the exclusivity key: two leads whose normalized phones
match are the same contact for the purpose of the restriction window.

Rules (applied in order):
1. Strip every non-digit character.
2. If the result starts with the country code (55) and has more than 11 digits,
   drop the country code.
3. If the remainder has more than 9 digits and starts with the mobile
   prefix digit (9), drop that digit.

    "(11) 98765-4321"        -> "11987654321"
    "+55 11 98765-4321"      -> "11987654321"
    "+55 (98) 98765-4321"    -> "8987654321"
    "98765-4321"             -> "987654321"
"""
import re

from allocation.exceptions import ValidationError

COUNTRY_CODE = "55"
MOBILE_PREFIX = "9"

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(raw: str | None) -> str:
    """Canonicalize a raw phone string."""
    digits = _NON_DIGITS.sub("", raw or "")

    if digits.startswith(COUNTRY_CODE) and len(digits) > 11:
        digits = digits[len(COUNTRY_CODE):]

    if len(digits) > 9 and digits.startswith(MOBILE_PREFIX):
        digits = digits[len(MOBILE_PREFIX):]

    return digits


def phones_equivalent(a: str | None, b: str | None) -> bool:
    return normalize_phone(a) == normalize_phone(b)


def clean_phone(raw: str | None) -> str:
    """Normalize, rejecting input that carries no digits at all."""
    normalized = normalize_phone(raw)
    if not normalized:
        raise ValidationError(f"Malformed phone number: {raw!r}", phone=raw)
    return normalized
