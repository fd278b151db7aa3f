import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Never talk to SSLCommerz during tests
os.environ["PAYMENTS_MODE"] = "mock"
os.environ["SSLCOMMERZ_STORE_ID"] = "teststore"
os.environ["SSLCOMMERZ_STORE_PASSWORD"] = "p@ss"
os.environ["SSLCOMMERZ_SANDBOX"] = "true"
os.environ["SENTRY_DSN"] = ""

from fastapi.testclient import TestClient  # noqa: E402

from billing.sslcommerz.adapter import GatewayAdapter, GatewayContext  # noqa: E402
from billing.sslcommerz.api.dependencies import get_adapter  # noqa: E402
from billing.sslcommerz.contracts import ChargeRequest, Credentials, InvoiceLine  # noqa: E402
from billing.sslcommerz.main import app  # noqa: E402
from billing.sslcommerz.payments import MockSslcommerzApi  # noqa: E402


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(store_id="teststore", store_password="p@ss", sandbox_mode=True)


@pytest.fixture
def mock_api(credentials) -> MockSslcommerzApi:
    return MockSslcommerzApi(credentials)


@pytest.fixture
def context(credentials) -> GatewayContext:
    return GatewayContext(credentials=credentials, currency="BDT", request_uri="/tests")


@pytest.fixture
def adapter(context, mock_api) -> GatewayAdapter:
    return GatewayAdapter(context, api=mock_api)


@pytest.fixture
def charge() -> ChargeRequest:
    return ChargeRequest(
        amount="1000",
        currency="BDT",
        client_id="42",
        first_name="Rahim",
        last_name="Uddin",
        customer_email="rahim@example.com",
        contact_numbers=[{"number": "+880 1711-000000", "type": "phone", "location": "mobile"}],
        return_url="https://billing.example.com/pay/return",
        invoices=[
            InvoiceLine(id="1", amount="500.00"),
            InvoiceLine(id="2", amount="500.00"),
        ],
    )


@pytest.fixture
def client(adapter):
    app.dependency_overrides[get_adapter] = lambda: adapter
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_adapter, None)
