from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ConfigurationError
from .validators import (
    INVOICE_AMOUNT_DELIMITERS,
    INVOICE_ID_DELIMITERS,
    normalize_currency,
    reject_delimiters,
)

# {"group": {"code": "message"}}, the shape the billing host renders
ErrorMap = dict[str, dict[str, str]]


def new_transaction_ref() -> str:
    return uuid4().hex


def _truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


class TransactionStatus(str, Enum):
    APPROVED = "approved"
    DECLINED = "declined"
    VOID = "void"
    PENDING = "pending"
    RECONCILED = "reconciled"
    REFUNDED = "refunded"
    RETURNED = "returned"
    ERROR = "error"


# --- Configuration ---
class Credentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    store_id: str
    store_password: str
    sandbox_mode: bool = False

    @classmethod
    def from_meta(cls, meta: dict[str, Any]) -> Credentials:
        """Build credentials from the host's stored gateway settings."""
        store_id = str(meta.get("store_id") or "").strip()
        store_password = str(meta.get("store_password") or "")
        if not store_id:
            raise ConfigurationError("Store ID is required")
        if not store_password.strip():
            raise ConfigurationError("Store password is required")
        return cls(
            store_id=store_id,
            store_password=store_password,
            sandbox_mode=_truthy(meta.get("dev_mode")),
        )

    def __repr__(self) -> str:
        return f"Credentials(store_id={self.store_id!r}, sandbox_mode={self.sandbox_mode})"


# --- Charges ---
class ContactNumber(BaseModel):
    number: str
    type: str = "phone"
    location: str = "home"


class InvoiceLine(BaseModel):
    id: str
    amount: str

    @field_validator("id", "amount", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return str(value)


class ChargeRequest(BaseModel):
    amount: Decimal
    currency: str | None = None
    transaction_ref: str = Field(default_factory=new_transaction_ref)
    client_id: str
    first_name: str | None = None
    last_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    contact_numbers: list[ContactNumber] = Field(default_factory=list)
    return_url: str
    invoices: list[InvoiceLine] = Field(default_factory=list)

    @field_validator("currency")
    @classmethod
    def _validate_currency(cls, value: str | None) -> str | None:
        return normalize_currency(value) if value is not None else None

    @field_validator("client_id", mode="before")
    @classmethod
    def _stringify_client(cls, value: Any) -> str:
        return str(value)

    @field_validator("invoices")
    @classmethod
    def _validate_invoices(cls, invoices: list[InvoiceLine]) -> list[InvoiceLine]:
        # lines travel in the value_a pass-through and must survive decoding
        for invoice in invoices:
            reject_delimiters(invoice.id, "invoice id", INVOICE_ID_DELIMITERS)
            reject_delimiters(invoice.amount, "invoice amount", INVOICE_AMOUNT_DELIMITERS)
        return invoices


# --- Results ---
class InitiationResult(BaseModel):
    transaction_ref: str
    redirect_url: str | None = None
    session_key: str | None = None
    errors: ErrorMap = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.redirect_url is not None and not self.errors


class NormalizedResult(BaseModel):
    client_id: str | None = None
    amount: str | None = None
    currency: str | None = None
    status: TransactionStatus = TransactionStatus.ERROR
    reference_id: str | None = None
    transaction_id: str | None = None
    invoices: list[InvoiceLine] | None = None
    errors: ErrorMap = Field(default_factory=dict)


class RefundRequest(BaseModel):
    transaction_id: str = Field(min_length=1, max_length=80)
    amount: Decimal = Field(gt=0)
    reference_id: str | None = None
    notes: str | None = None


class RefundResult(BaseModel):
    status: TransactionStatus
    reference_id: str | None = None
    transaction_id: str | None = None
    message: str | None = None


class SettingsResult(BaseModel):
    meta: dict[str, Any]
    errors: ErrorMap = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


__all__ = [
    "ChargeRequest",
    "ContactNumber",
    "Credentials",
    "ErrorMap",
    "InitiationResult",
    "InvoiceLine",
    "NormalizedResult",
    "RefundRequest",
    "RefundResult",
    "SettingsResult",
    "TransactionStatus",
    "new_transaction_ref",
]
