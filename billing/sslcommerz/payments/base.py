from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from ..errors import GatewayRejection


class GatewayResponse(BaseModel):
    # SSLCommerz adds fields freely; keep them around for logging
    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)


class InitiationResponse(GatewayResponse):
    status: str | None = None
    session_key: str | None = Field(default=None, alias="sessionkey")
    gateway_page_url: str | None = Field(default=None, alias="GatewayPageURL")
    failed_reason: str | None = Field(default=None, alias="failedreason")

    def ensure_success(self) -> None:
        """Raise :class:`GatewayRejection` unless a checkout page was handed out."""
        if self.status != "SUCCESS" or not self.gateway_page_url:
            raise GatewayRejection(
                self.failed_reason or "SSLCommerz did not accept the payment request."
            )


class TransactionDetails(GatewayResponse):
    status: str | None = None
    tran_id: str | None = None
    val_id: str | None = None
    bank_tran_id: str | None = None
    currency_amount: str | None = None
    currency_type: str | None = None


class RefundResponse(GatewayResponse):
    api_connect: str | None = Field(default=None, alias="APIConnect")
    status: str | None = None
    bank_tran_id: str | None = None
    refund_ref_id: str | None = None
    error_reason: str | None = Field(default=None, alias="errorReason")


class GatewayApi(Protocol):
    """The three remote SSLCommerz operations the adapter relies on."""

    def initiate_payment(self, params: Mapping[str, Any]) -> InitiationResponse: ...

    def get_payment(self, tran_id: str) -> TransactionDetails: ...

    def refund_payment(self, params: Mapping[str, Any]) -> RefundResponse: ...
