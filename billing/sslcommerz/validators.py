"""Shared input sanitizers for gateway models."""

from __future__ import annotations

import re

CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")
NON_DIGITS = re.compile(r"[^0-9]")
# Reserved by the invoice pass-through encoding
INVOICE_ID_DELIMITERS = ("=", "|")
INVOICE_AMOUNT_DELIMITERS = ("|",)


def normalize_currency(value: str) -> str:
    cleaned = (value or "").strip().upper()
    if not CURRENCY_PATTERN.fullmatch(cleaned):
        raise ValueError("currency must be a 3-letter ISO 4217 code")
    return cleaned


def reject_delimiters(value: str, field: str, delimiters: tuple[str, ...]) -> str:
    """Return ``value`` untouched unless it holds one of ``delimiters``."""
    for delimiter in delimiters:
        if delimiter in value:
            raise ValueError(f"{field} cannot contain '{delimiter}'")
    return value


def digits_only(value: str | None) -> str:
    if not value:
        return ""
    return NON_DIGITS.sub("", value)


__all__ = [
    "digits_only",
    "normalize_currency",
    "reject_delimiters",
]
