"""HTTP client for the SSLCommerz merchant APIs."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from ..contracts import Credentials
from ..errors import GatewayUnavailableError
from ..logging_config import get_logger, redact_secrets
from ..settings import settings
from .base import GatewayApi, InitiationResponse, RefundResponse, TransactionDetails

logger = get_logger(__name__)

INITIATE_PATH = "/gwprocess/v4/api.php"
TRANSACTION_QUERY_PATH = "/validator/api/merchantTransIDvalidationAPI.php"


class SslcommerzApi(GatewayApi):
    """Blocking client; every call opens and closes its own connection."""

    def __init__(
        self,
        credentials: Credentials,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.credentials = credentials
        self.base_url = (base_url or settings.gateway_base_url(credentials.sandbox_mode)).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.SSLCOMMERZ_TIMEOUT_SECONDS
        self._transport = transport

    def _auth(self) -> dict[str, str]:
        return {
            "store_id": self.credentials.store_id,
            "store_passwd": self.credentials.store_password,
        }

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.request(method, url, params=params, data=data)
        except httpx.HTTPError as exc:
            logger.warning("sslcommerz_unreachable", url=url, error=str(exc))
            raise GatewayUnavailableError(f"Request to SSLCommerz failed: {exc}") from exc

        if response.status_code >= 400:
            raise GatewayUnavailableError(
                f"SSLCommerz error {response.status_code}: {response.text[:200]}"
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise GatewayUnavailableError("Invalid JSON from SSLCommerz") from exc
        if not isinstance(body, dict):
            raise GatewayUnavailableError("Unexpected response shape from SSLCommerz")
        return body

    def initiate_payment(self, params: Mapping[str, Any]) -> InitiationResponse:
        data = {**params, **self._auth()}
        body = self._request("POST", INITIATE_PATH, data=data)
        return InitiationResponse.model_validate(body)

    def get_payment(self, tran_id: str) -> TransactionDetails:
        query = {"tran_id": tran_id, "format": "json", **self._auth()}
        body = self._request("GET", TRANSACTION_QUERY_PATH, params=query)

        elements = body.get("element") or []
        if body.get("APIConnect") != "DONE" or not elements:
            logger.info(
                "sslcommerz_transaction_not_found",
                tran_id=tran_id,
                api_connect=body.get("APIConnect"),
                found=body.get("no_of_trans_found"),
            )
            return TransactionDetails(tran_id=tran_id)
        return TransactionDetails.model_validate(elements[0])

    def refund_payment(self, params: Mapping[str, Any]) -> RefundResponse:
        query = {**params, "format": "json", **self._auth()}
        logger.debug("sslcommerz_refund_query", params=redact_secrets(query))
        body = self._request("GET", TRANSACTION_QUERY_PATH, params=query)
        return RefundResponse.model_validate(body)


__all__ = ["INITIATE_PATH", "TRANSACTION_QUERY_PATH", "SslcommerzApi"]
