"""Invoice list encoding for the ``value_a`` pass-through field.

Format: ``id=amount`` pairs joined by ``|``, e.g. ``1=500.00|2=500.00``.
"""

from __future__ import annotations

from collections.abc import Iterable

from .contracts import InvoiceLine

PAIR_SEPARATOR = "|"
KEY_SEPARATOR = "="


def encode_invoices(invoices: Iterable[InvoiceLine]) -> str:
    return PAIR_SEPARATOR.join(
        f"{invoice.id}{KEY_SEPARATOR}{invoice.amount}" for invoice in invoices
    )


def decode_invoices(encoded: str | None) -> list[InvoiceLine]:
    invoices: list[InvoiceLine] = []
    if not encoded:
        return invoices
    for segment in encoded.split(PAIR_SEPARATOR):
        invoice_id, sep, amount = segment.partition(KEY_SEPARATOR)
        if not sep:
            # tolerate partial/legacy data
            continue
        invoices.append(InvoiceLine(id=invoice_id, amount=amount))
    return invoices


__all__ = ["decode_invoices", "encode_invoices"]
