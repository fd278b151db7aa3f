from __future__ import annotations

from fastapi import HTTPException, Request

from ..adapter import GatewayAdapter, GatewayContext
from ..errors import ConfigurationError
from ..settings import settings


def get_adapter(request: Request) -> GatewayAdapter:
    """One adapter per request, bound to the configured store."""
    try:
        credentials = settings.credentials
    except ConfigurationError as exc:
        raise HTTPException(503, str(exc)) from exc
    context = GatewayContext(
        credentials=credentials,
        currency=settings.DEFAULT_CURRENCY,
        request_uri=request.url.path,
        ipn_url=settings.SSLCOMMERZ_IPN_URL,
    )
    return GatewayAdapter(context)
