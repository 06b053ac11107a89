"""
Contact and identity normalization shared by import, matching and hashing.
"""

import re

_NON_DIGITS = re.compile(r"\D")


def digits_only(value) -> str:
    """Strip everything but digits; None becomes an empty string."""
    if value is None:
        return ""
    return _NON_DIGITS.sub("", str(value))


def normalize_email(value: str | None) -> str:
    if not value:
        return ""
    return value.strip().lower()


def normalize_text(value) -> str:
    """Case-fold a free-text identity field (names, city, region)."""
    if value is None:
        return ""
    return str(value).strip().lower()
