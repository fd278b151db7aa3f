"""Remote SSLCommerz API clients."""

from .base import GatewayApi, InitiationResponse, RefundResponse, TransactionDetails
from .factory import get_gateway_api, get_mock_api
from .mock import MockSslcommerzApi
from .sslcommerz import SslcommerzApi

__all__ = [
    "GatewayApi",
    "InitiationResponse",
    "MockSslcommerzApi",
    "RefundResponse",
    "SslcommerzApi",
    "TransactionDetails",
    "get_gateway_api",
    "get_mock_api",
]
