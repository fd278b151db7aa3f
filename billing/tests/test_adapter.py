"""End-to-end adapter flows against the in-memory gateway."""

from __future__ import annotations

import pytest
from billing.sslcommerz.adapter import GatewayAdapter, edit_settings, validate_credentials
from billing.sslcommerz.contracts import TransactionStatus
from billing.sslcommerz.errors import GatewayUnavailableError
from billing.sslcommerz.payments import MockSslcommerzApi


class FlakyApi(MockSslcommerzApi):
    """Mock whose transport is down."""

    def initiate_payment(self, params):
        raise GatewayUnavailableError("Request to SSLCommerz failed: connection refused")

    def get_payment(self, tran_id):
        raise GatewayUnavailableError("Request to SSLCommerz failed: timed out")

    def refund_payment(self, params):
        raise GatewayUnavailableError("Request to SSLCommerz failed: timed out")


def _pairs(invoices):
    return [(invoice.id, invoice.amount) for invoice in invoices]


class TestBuildProcess:
    def test_success_returns_redirect(self, adapter, mock_api, charge):
        result = adapter.build_process(charge)

        assert result.ok
        assert result.redirect_url.startswith("https://sandbox.sslcommerz.com/")
        assert result.session_key
        assert result.transaction_ref == charge.transaction_ref
        sent = mock_api.calls[0]["params"]
        assert sent["total_amount"] == "1000.00"
        assert sent["value_a"] == "1=500.00|2=500.00"

    def test_gateway_rejection_is_reported_not_raised(self, adapter, mock_api, charge):
        mock_api.configure(should_succeed=False, failure_reason="Invalid Information")

        result = adapter.build_process(charge)

        assert not result.ok
        assert result.redirect_url is None
        assert result.errors == {"api": {"response": "Invalid Information"}}

    def test_transport_failure_is_reported(self, context, charge):
        adapter = GatewayAdapter(context, api=FlakyApi(context.credentials))

        result = adapter.build_process(charge)

        assert result.errors["internal"]["response"].startswith("Request to SSLCommerz failed")


class TestValidate:
    def test_valid_notification_is_approved(self, adapter, mock_api, charge):
        adapter.build_process(charge)
        post = mock_api.ipn_payload(charge.transaction_ref)

        result = adapter.validate({}, post)

        assert result.status is TransactionStatus.APPROVED
        assert result.client_id == "42"
        assert result.amount == "1000.00"
        assert result.currency == "BDT"
        assert result.transaction_id == mock_api.transactions[charge.transaction_ref]["bank_tran_id"]
        assert result.reference_id is None
        assert _pairs(result.invoices) == [("1", "500.00"), ("2", "500.00")]
        assert result.errors == {}

    def test_validated_status_is_approved(self, adapter, mock_api, charge):
        mock_api.configure(payment_status="VALIDATED")
        adapter.build_process(charge)

        result = adapter.validate({}, mock_api.ipn_payload(charge.transaction_ref))

        assert result.status is TransactionStatus.APPROVED

    def test_signed_failed_payment_is_declined(self, adapter, mock_api, charge):
        mock_api.configure(payment_status="FAILED")
        adapter.build_process(charge)

        result = adapter.validate({}, mock_api.ipn_payload(charge.transaction_ref))

        assert result.status is TransactionStatus.DECLINED

    def test_forged_notification_is_error(self, adapter, mock_api, charge):
        adapter.build_process(charge)
        post = mock_api.ipn_payload(charge.transaction_ref)
        post["value_a"] = "1=1000.00"

        result = adapter.validate({}, post)

        assert result.status is TransactionStatus.ERROR
        assert "signature" in result.errors["callback"]

    def test_unsigned_notification_is_error(self, adapter, mock_api, charge):
        adapter.build_process(charge)
        post = mock_api.ipn_payload(charge.transaction_ref)
        post.pop("verify_sign")

        assert adapter.validate({}, post).status is TransactionStatus.ERROR

    def test_unknown_transaction_is_error(self, adapter, mock_api, credentials):
        post = {"tran_id": "nope", "value_b": "7"}

        result = adapter.validate({}, post)

        assert result.status is TransactionStatus.ERROR
        assert result.transaction_id == "nope"
        assert result.amount is None
        assert result.client_id == "7"

    def test_query_client_id_wins(self, adapter, mock_api, charge):
        adapter.build_process(charge)
        post = mock_api.ipn_payload(charge.transaction_ref)

        assert adapter.validate({"client_id": "99"}, post).client_id == "99"

    def test_missing_tran_id_skips_lookup(self, adapter, mock_api):
        result = adapter.validate({}, {"value_b": "42"})

        assert result.status is TransactionStatus.ERROR
        assert "tran_id" in result.errors["callback"]
        assert mock_api.calls == []

    def test_lookup_failure_propagates(self, context):
        adapter = GatewayAdapter(context, api=FlakyApi(context.credentials))

        with pytest.raises(GatewayUnavailableError):
            adapter.validate({}, {"tran_id": "T1"})

    def test_revalidation_is_idempotent(self, adapter, mock_api, charge):
        adapter.build_process(charge)
        post = mock_api.ipn_payload(charge.transaction_ref)

        assert adapter.validate({}, post) == adapter.validate({}, post)


class TestSuccess:
    def test_provisional_approval(self, adapter):
        result = adapter.success({"client_id": "42"}, {})

        assert result.client_id == "42"
        assert result.status is TransactionStatus.APPROVED
        assert result.amount is None
        assert result.invoices is None
        assert result.errors == {}

    def test_cancel_marker(self, adapter):
        result = adapter.success({"client_id": "42", "cancel": "true"}, {})
        assert set(result.errors["payment"]) == {"canceled"}

    def test_fail_marker(self, adapter):
        result = adapter.success({"client_id": "42", "fail": "true"}, {})
        assert set(result.errors["payment"]) == {"failed"}

    def test_markers_must_be_true(self, adapter):
        assert adapter.success({"client_id": "42", "fail": "false"}, {}).errors == {}


class TestRefund:
    @pytest.mark.parametrize(
        ("gateway_status", "expected"),
        [
            ("success", TransactionStatus.REFUNDED),
            ("refunded", TransactionStatus.REFUNDED),
            ("processing", TransactionStatus.PENDING),
            ("cancelled", TransactionStatus.RETURNED),
            ("failed", TransactionStatus.ERROR),
        ],
    )
    def test_refund_status(self, adapter, mock_api, gateway_status, expected):
        mock_api.configure(refund_status=gateway_status)

        result = adapter.refund(None, "BANK123", 250, "duplicate charge")

        assert result.status is expected
        assert result.transaction_id == "BANK123"
        assert result.reference_id is None

    def test_refund_params(self, adapter, mock_api):
        adapter.refund(None, "BANK123", "99.5", "partial")

        assert mock_api.calls[-1]["params"] == {
            "bank_tran_id": "BANK123",
            "refund_amount": "99.50",
            "refund_remarks": "partial",
        }

    def test_refund_error_reason_is_message(self, adapter, mock_api):
        mock_api.configure(refund_status="failed", refund_error="Refund amount exceeds")

        result = adapter.refund(None, "BANK123", 10)

        assert result.status is TransactionStatus.ERROR
        assert result.message == "Refund amount exceeds"

    def test_unparseable_amount_is_reported(self, adapter, mock_api):
        result = adapter.refund(None, "BANK1", "12,50")

        assert result.status is TransactionStatus.ERROR
        assert result.transaction_id == "BANK1"
        assert "12,50" in result.message
        assert mock_api.calls == []

    def test_refund_error_survives_later_configure(self, adapter, mock_api):
        mock_api.configure(refund_status="failed", refund_error="Refund amount exceeds")
        mock_api.configure(payment_status="FAILED")

        result = adapter.refund(None, "BANK123", 10)

        assert result.message == "Refund amount exceeds"

    def test_refund_transport_failure(self, context):
        adapter = GatewayAdapter(context, api=FlakyApi(context.credentials))

        result = adapter.refund(None, "BANK123", 10)

        assert result.status is TransactionStatus.ERROR
        assert "timed out" in result.message


class TestCredentials:
    def test_session_key_means_valid(self, credentials, mock_api):
        assert validate_credentials(credentials, mock_api) is True
        sent = mock_api.calls[0]["params"]
        assert sent["total_amount"] == "1000.00"
        assert sent["currency"] == "BDT"
        assert sent["tran_id"]

    def test_rejection_means_invalid(self, credentials, mock_api):
        mock_api.configure(should_succeed=False)
        assert validate_credentials(credentials, mock_api) is False

    def test_transport_failure_means_invalid(self, credentials):
        assert validate_credentials(credentials, FlakyApi(credentials)) is False

    def test_each_check_uses_fresh_tran_id(self, credentials, mock_api):
        validate_credentials(credentials, mock_api)
        validate_credentials(credentials, mock_api)
        first, second = (call["params"]["tran_id"] for call in mock_api.calls)
        assert first != second


class TestEditSettings:
    def test_valid_settings(self, mock_api):
        result = edit_settings(
            {"store_id": "teststore", "store_password": "p@ss"}, lambda _creds: mock_api
        )
        assert result.ok
        assert result.meta["dev_mode"] == "false"

    def test_blank_store_id(self, mock_api):
        result = edit_settings({"store_id": " ", "store_password": "p@ss"}, lambda _creds: mock_api)
        assert set(result.errors) == {"store_id", "store_password"}
        assert mock_api.calls == []

    def test_rejected_password(self, mock_api):
        mock_api.configure(should_succeed=False)
        result = edit_settings(
            {"store_id": "teststore", "store_password": "wrong", "dev_mode": "true"},
            lambda _creds: mock_api,
        )
        assert "store_password" in result.errors
        assert result.meta["dev_mode"] == "true"

    def test_sandbox_flag_reaches_credentials(self, mock_api):
        seen = []

        def factory(creds):
            seen.append(creds)
            return mock_api

        edit_settings({"store_id": "s", "store_password": "p", "dev_mode": "true"}, factory)
        assert seen[0].sandbox_mode is True
