"""SSLCommerz gateway adapter for the billing host.

One adapter instance serves one request: credentials and currency travel in a
:class:`GatewayContext` instead of process-wide state.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .contracts import (
    ChargeRequest,
    Credentials,
    ErrorMap,
    InitiationResult,
    NormalizedResult,
    RefundResult,
    SettingsResult,
    TransactionStatus,
    new_transaction_ref,
)
from .errors import ConfigurationError, GatewayError, GatewayRejection
from .invoices import decode_invoices
from .logging_config import get_logger, redact_secrets
from .payments import GatewayApi, get_gateway_api
from .request_builder import build_initiation_params, format_amount
from .signing import CallbackVerifier
from .status import is_acceptable, map_payment_status, map_refund_status

logger = get_logger(__name__)

MESSAGES = {
    "payment.canceled": "The payment was canceled.",
    "payment.failed": "The payment failed.",
    "callback.tran_id": "The notification did not include a transaction ID.",
    "callback.signature": "The notification signature could not be verified.",
    "settings.store_id": "Please enter a Store ID.",
    "settings.store_password": "The Store ID or Store Password is invalid.",
}

# Fixed parameters for the trial initiation used to check credentials
CREDENTIAL_CHECK_PARAMS: dict[str, str | int] = {
    "total_amount": "1000.00",
    "currency": "BDT",
    "emi_option": 0,
    "cus_name": "Billing",
    "cus_email": "noreply@example.com",
    "success_url": "https://example.com",
    "fail_url": "https://example.com",
    "cancel_url": "https://example.com",
}

ApiFactory = Callable[[Credentials], GatewayApi]


@dataclass(slots=True)
class GatewayContext:
    credentials: Credentials
    currency: str = "BDT"
    request_uri: str | None = None
    ipn_url: str | None = None


def _add_error(errors: ErrorMap, group: str, code: str, message: str) -> None:
    errors.setdefault(group, {})[code] = message


def _marker_set(query: Mapping[str, Any], name: str) -> bool:
    return str(query.get(name, "")).lower() == "true"


class GatewayAdapter:
    def __init__(self, context: GatewayContext, api: GatewayApi | None = None) -> None:
        self.context = context
        self.api = api if api is not None else get_gateway_api(context.credentials)
        self.verifier = CallbackVerifier(context.credentials.store_password)

    def _log(self, event: str, payload: Mapping[str, Any], direction: str, success: bool) -> None:
        log = logger.info if success else logger.warning
        log(
            event,
            url=self.context.request_uri,
            direction=direction,
            success=success,
            payload=redact_secrets(payload),
        )

    def build_process(self, charge: ChargeRequest) -> InitiationResult:
        """Start a hosted-checkout session; failures come back in ``errors``."""
        params = build_initiation_params(
            charge, self.context.currency, ipn_url=self.context.ipn_url
        )
        self._log("sslcommerz_request", params, "input", True)

        result = InitiationResult(transaction_ref=charge.transaction_ref)
        try:
            response = self.api.initiate_payment(params)
            self._log(
                "sslcommerz_response",
                response.model_dump(by_alias=True),
                "output",
                response.status == "SUCCESS",
            )
            response.ensure_success()
        except GatewayRejection as exc:
            logger.warning("sslcommerz_initiation_rejected", reason=exc.reason)
            _add_error(result.errors, "api", "response", exc.reason)
            return result
        except GatewayError as exc:
            _add_error(result.errors, "internal", "response", str(exc))
            return result

        result.redirect_url = response.gateway_page_url
        result.session_key = response.session_key
        return result

    def validate(self, get: Mapping[str, Any], post: Mapping[str, Any]) -> NormalizedResult:
        """
        Handle the server-to-server notification from SSLCommerz.

        The transaction is looked up by ``tran_id`` and its status only counts when
        the posted fields carry a valid signature.

        Raises:
            GatewayUnavailableError: the lookup failed; the notification should be
                redelivered rather than recorded.
        """
        client_id = get.get("client_id") or post.get("value_b")
        tran_id = post.get("tran_id")
        if not tran_id:
            logger.warning("sslcommerz_callback_without_tran_id", url=self.context.request_uri)
            result = NormalizedResult(client_id=client_id)
            _add_error(result.errors, "callback", "tran_id", MESSAGES["callback.tran_id"])
            return result

        details = self.api.get_payment(tran_id)
        verified = self.verifier.verify(post)
        status = map_payment_status(details.status, verified=verified)
        self._log(
            "sslcommerz_response",
            details.model_dump(by_alias=True),
            "output",
            is_acceptable(status),
        )

        amount = None
        if details.currency_amount not in (None, ""):
            try:
                amount = format_amount(details.currency_amount)
            except ValueError:
                logger.warning(
                    "sslcommerz_amount_unparseable",
                    tran_id=tran_id,
                    currency_amount=details.currency_amount,
                )

        result = NormalizedResult(
            client_id=client_id,
            amount=amount,
            currency=details.currency_type,
            status=status,
            reference_id=None,
            transaction_id=details.bank_tran_id or tran_id,
            invoices=decode_invoices(post.get("value_a")),
        )
        if not verified:
            _add_error(result.errors, "callback", "signature", MESSAGES["callback.signature"])
        return result

    def success(self, get: Mapping[str, Any], post: Mapping[str, Any] | None = None) -> NormalizedResult:
        """
        Handle the customer's browser returning from SSLCommerz.

        No transaction data comes back on this redirect, so the result is
        provisional; the notification path settles the payment.
        """
        result = NormalizedResult(
            client_id=get.get("client_id"),
            status=TransactionStatus.APPROVED,
        )
        if _marker_set(get, "cancel"):
            _add_error(result.errors, "payment", "canceled", MESSAGES["payment.canceled"])
        if _marker_set(get, "fail"):
            _add_error(result.errors, "payment", "failed", MESSAGES["payment.failed"])
        return result

    def refund(
        self,
        reference_id: str | None,
        transaction_id: str | None,
        amount: Decimal | float | str,
        notes: str | None = None,
    ) -> RefundResult:
        try:
            refund_amount = format_amount(amount)
        except ValueError as exc:
            logger.warning(
                "sslcommerz_refund_rejected", transaction_id=transaction_id, error=str(exc)
            )
            return RefundResult(
                status=TransactionStatus.ERROR,
                transaction_id=transaction_id,
                message=str(exc),
            )

        params = {
            "bank_tran_id": transaction_id,
            "refund_amount": refund_amount,
            "refund_remarks": notes,
        }
        self._log("sslcommerz_request", params, "input", True)

        try:
            response = self.api.refund_payment(params)
        except GatewayError as exc:
            logger.warning("sslcommerz_refund_failed", transaction_id=transaction_id, error=str(exc))
            return RefundResult(
                status=TransactionStatus.ERROR,
                transaction_id=transaction_id,
                message=str(exc),
            )

        status = map_refund_status(response.status)
        self._log("sslcommerz_response", response.model_dump(by_alias=True), "output", is_acceptable(status))
        return RefundResult(
            status=status,
            reference_id=None,
            transaction_id=transaction_id,
            message=response.error_reason,
        )


def validate_credentials(credentials: Credentials, api: GatewayApi | None = None) -> bool:
    """Trial initiation with fixed parameters; True iff SSLCommerz hands out a session key."""
    api = api if api is not None else get_gateway_api(credentials)
    params = {**CREDENTIAL_CHECK_PARAMS, "tran_id": new_transaction_ref()}
    try:
        response = api.initiate_payment(params)
    except GatewayError as exc:
        logger.warning("sslcommerz_credentials_unverified", store_id=credentials.store_id, error=str(exc))
        return False
    if not response.session_key:
        logger.warning(
            "sslcommerz_credentials_rejected",
            store_id=credentials.store_id,
            reason=response.failed_reason,
        )
        return False
    return True


def edit_settings(
    meta: Mapping[str, Any], api_factory: ApiFactory = get_gateway_api
) -> SettingsResult:
    """Validate gateway settings before the host stores them."""
    updated = dict(meta)
    updated.setdefault("dev_mode", "false")
    result = SettingsResult(meta=updated)

    if not str(updated.get("store_id") or "").strip():
        _add_error(result.errors, "store_id", "valid", MESSAGES["settings.store_id"])
        # the password check cannot pass without a store id
        _add_error(result.errors, "store_password", "valid", MESSAGES["settings.store_password"])
        return result

    try:
        credentials = Credentials.from_meta(updated)
    except ConfigurationError:
        _add_error(result.errors, "store_password", "valid", MESSAGES["settings.store_password"])
        return result

    if not validate_credentials(credentials, api_factory(credentials)):
        _add_error(result.errors, "store_password", "valid", MESSAGES["settings.store_password"])
    return result


__all__ = [
    "GatewayAdapter",
    "GatewayContext",
    "edit_settings",
    "validate_credentials",
]
