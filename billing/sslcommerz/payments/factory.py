from __future__ import annotations

from functools import lru_cache

from ..contracts import Credentials
from ..settings import settings
from .base import GatewayApi
from .mock import MockSslcommerzApi
from .sslcommerz import SslcommerzApi


@lru_cache(maxsize=16)
def get_mock_api(credentials: Credentials) -> MockSslcommerzApi:
    # one in-memory gateway per store, shared across requests for that store only
    return MockSslcommerzApi(credentials)


def get_gateway_api(credentials: Credentials) -> GatewayApi:
    mode = (settings.PAYMENTS_MODE or "mock").lower()

    if mode == "mock":
        return get_mock_api(credentials)

    if mode == "live":
        return SslcommerzApi(credentials)

    raise RuntimeError(
        f"Unsupported PAYMENTS_MODE '{settings.PAYMENTS_MODE}'. Use 'mock' or 'live'."
    )
