from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import uuid4

from ..contracts import Credentials
from ..signing import sign_payload
from .base import GatewayApi, InitiationResponse, RefundResponse, TransactionDetails

# Fields SSLCommerz lists in verify_key on a typical IPN post
IPN_SIGNED_FIELDS = (
    "amount",
    "bank_tran_id",
    "currency",
    "status",
    "tran_id",
    "val_id",
    "value_a",
    "value_b",
)


# Oldest calls and transactions are dropped past this point
MAX_RECORDED = 500


class MockSslcommerzApi(GatewayApi):
    """In-memory stand-in for SSLCommerz; nothing leaves the process."""

    def __init__(self, credentials: Credentials | None = None) -> None:
        self.credentials = credentials or Credentials(
            store_id="testbox", store_password="qwerty", sandbox_mode=True
        )
        self.should_succeed: bool = True
        self.failure_reason: str = "Store Credential Error Or Store is De-active"
        self.payment_status: str = "VALID"
        self.refund_status: str = "success"
        self.refund_error: str | None = None
        self.transactions: dict[str, dict[str, Any]] = {}
        self.calls: list[dict[str, Any]] = []

    def configure(
        self,
        *,
        should_succeed: bool | None = None,
        failure_reason: str | None = None,
        payment_status: str | None = None,
        refund_status: str | None = None,
        refund_error: str | None = None,
    ) -> None:
        if should_succeed is not None:
            self.should_succeed = should_succeed
        if failure_reason is not None:
            self.failure_reason = failure_reason
        if payment_status is not None:
            self.payment_status = payment_status
        if refund_status is not None:
            self.refund_status = refund_status
        if refund_error is not None:
            self.refund_error = refund_error

    def _record(self, entry: dict[str, Any]) -> None:
        self.calls.append(entry)
        del self.calls[:-MAX_RECORDED]

    def initiate_payment(self, params: Mapping[str, Any]) -> InitiationResponse:
        self._record({"method": "initiate_payment", "params": dict(params)})
        if not self.should_succeed:
            return InitiationResponse(status="FAILED", failed_reason=self.failure_reason)

        tran_id = str(params.get("tran_id") or uuid4().hex)
        session_key = uuid4().hex.upper()
        self.transactions[tran_id] = {
            "tran_id": tran_id,
            "val_id": f"val_{uuid4().hex[:12]}",
            "bank_tran_id": f"bank_{uuid4().hex[:12]}",
            "amount": str(params.get("total_amount", "")),
            "currency": str(params.get("currency", "")),
            "value_a": str(params.get("value_a", "")),
            "value_b": str(params.get("value_b", "")),
        }
        while len(self.transactions) > MAX_RECORDED:
            self.transactions.pop(next(iter(self.transactions)))
        return InitiationResponse(
            status="SUCCESS",
            session_key=session_key,
            gateway_page_url=f"https://sandbox.sslcommerz.com/EasyCheckOut/{session_key}",
        )

    def get_payment(self, tran_id: str) -> TransactionDetails:
        self._record({"method": "get_payment", "tran_id": tran_id})
        record = self.transactions.get(tran_id)
        if record is None:
            return TransactionDetails(tran_id=tran_id)
        return TransactionDetails(
            status=self.payment_status,
            tran_id=tran_id,
            val_id=record["val_id"],
            bank_tran_id=record["bank_tran_id"],
            currency_amount=record["amount"],
            currency_type=record["currency"],
        )

    def refund_payment(self, params: Mapping[str, Any]) -> RefundResponse:
        self._record({"method": "refund_payment", "params": dict(params)})
        return RefundResponse(
            api_connect="DONE",
            status=self.refund_status,
            bank_tran_id=str(params.get("bank_tran_id", "")),
            refund_ref_id=f"ref_{uuid4().hex[:12]}",
            error_reason=self.refund_error,
        )

    def ipn_payload(self, tran_id: str) -> dict[str, str]:
        """Signed notification SSLCommerz would post for a known transaction."""
        record = self.transactions[tran_id]
        fields = {
            "amount": record["amount"],
            "bank_tran_id": record["bank_tran_id"],
            "currency": record["currency"],
            "status": self.payment_status,
            "tran_id": tran_id,
            "val_id": record["val_id"],
            "value_a": record["value_a"],
            "value_b": record["value_b"],
        }
        return sign_payload(fields, self.credentials.store_password, IPN_SIGNED_FIELDS)
