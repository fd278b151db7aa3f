"""Builds the SSLCommerz payment-initiation form from a charge request."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from urllib.parse import urlencode

from .contracts import ChargeRequest, ContactNumber
from .invoices import encode_invoices
from .validators import digits_only

TWO_PLACES = Decimal("0.01")
# Earlier entries win
PHONE_LOCATION_PRIORITY = ("home", "work", "mobile")


def format_amount(value: Decimal | int | float | str) -> str:
    """Two decimals, ``.`` separator, half-up rounding: ``10.456`` -> ``"10.46"``."""
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        quantized = amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc
    if not quantized.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return f"{quantized:.2f}"


def select_phone(contact_numbers: Iterable[ContactNumber]) -> str:
    """First phone by location priority: home, then work, then mobile."""
    by_location: dict[str, str] = {}
    for contact in contact_numbers:
        if contact.type != "phone" or not contact.number:
            continue
        by_location.setdefault(contact.location, contact.number)
    for location in PHONE_LOCATION_PRIORITY:
        if location in by_location:
            return by_location[location]
    return ""


def customer_name(first_name: str | None, last_name: str | None) -> str:
    return " ".join(part.strip() for part in (first_name, last_name) if part and part.strip())


def callback_urls(return_url: str, client_id: str) -> dict[str, str]:
    """
    Success/fail/cancel URLs for one initiation.

    SSLCommerz does not post transaction data back on the browser redirect, so
    the ``fail``/``cancel`` markers are the only way to tell the outcomes apart.
    """
    joiner = "&" if "?" in return_url else "?"
    success = f"{return_url}{joiner}{urlencode({'client_id': client_id})}"
    return {
        "success_url": success,
        "fail_url": f"{success}&fail=true",
        "cancel_url": f"{success}&cancel=true",
    }


def build_initiation_params(
    charge: ChargeRequest,
    currency: str,
    *,
    ipn_url: str | None = None,
) -> dict[str, str | int]:
    phone = charge.customer_phone or select_phone(charge.contact_numbers)

    params: dict[str, str | int] = {
        "total_amount": format_amount(charge.amount),
        "currency": charge.currency or currency,
        "tran_id": charge.transaction_ref,
        **callback_urls(charge.return_url, charge.client_id),
        "emi_option": 0,
        "cus_name": customer_name(charge.first_name, charge.last_name),
        "cus_email": charge.customer_email or "",
        "cus_phone": digits_only(phone),
        "value_a": encode_invoices(charge.invoices),
        "value_b": charge.client_id,
    }
    if ipn_url:
        params["ipn_url"] = ipn_url
    return params


__all__ = [
    "build_initiation_params",
    "callback_urls",
    "customer_name",
    "format_amount",
    "select_phone",
]
