"""Error types raised and reported by the SSLCommerz adapter."""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for every adapter error."""


class ConfigurationError(GatewayError):
    """Store credentials are missing or rejected by the gateway."""


class GatewayRejection(GatewayError):
    """The gateway answered with a structured failure reason."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class VerificationFailure(GatewayError):
    """A callback signature did not match or could not be computed."""


class MalformedCallbackError(VerificationFailure):
    """A field named in ``verify_key`` is missing from the callback payload."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Callback payload is missing signed field '{field}'")
        self.field = field


class GatewayUnavailableError(GatewayError):
    """The gateway could not be reached or answered with garbage."""


__all__ = [
    "ConfigurationError",
    "GatewayError",
    "GatewayRejection",
    "GatewayUnavailableError",
    "MalformedCallbackError",
    "VerificationFailure",
]
