from __future__ import annotations

from .contracts import TransactionStatus

PAYMENT_STATUSES: dict[str, TransactionStatus] = {
    "VALID": TransactionStatus.APPROVED,
    "VALIDATED": TransactionStatus.APPROVED,
    "FAILED": TransactionStatus.DECLINED,
}

REFUND_STATUSES: dict[str, TransactionStatus] = {
    "success": TransactionStatus.REFUNDED,
    "refunded": TransactionStatus.REFUNDED,
    "processing": TransactionStatus.PENDING,
    "cancelled": TransactionStatus.RETURNED,
}


def map_payment_status(status: str | None, *, verified: bool = True) -> TransactionStatus:
    """Canonical status for a payment lookup; unverified callbacks are always ``error``."""
    if not verified or status is None:
        return TransactionStatus.ERROR
    return PAYMENT_STATUSES.get(status, TransactionStatus.ERROR)


def map_refund_status(status: str | None) -> TransactionStatus:
    if status is None:
        return TransactionStatus.ERROR
    return REFUND_STATUSES.get(status, TransactionStatus.ERROR)


def is_acceptable(status: TransactionStatus) -> bool:
    return status is not TransactionStatus.ERROR


__all__ = [
    "PAYMENT_STATUSES",
    "REFUND_STATUSES",
    "is_acceptable",
    "map_payment_status",
    "map_refund_status",
]
