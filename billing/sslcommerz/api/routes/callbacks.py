from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from ...adapter import GatewayAdapter
from ...contracts import NormalizedResult, RefundRequest, RefundResult
from ...errors import GatewayUnavailableError
from ..dependencies import get_adapter

router = APIRouter(prefix="/sslcommerz", tags=["sslcommerz"])


async def _form_fields(request: Request) -> dict[str, str]:
    if request.method != "POST":
        return {}
    form = await request.form()
    return {key: str(value) for key, value in form.items()}


@router.post("/ipn", response_model=NormalizedResult)
async def instant_payment_notification(
    request: Request, adapter: GatewayAdapter = Depends(get_adapter)
):
    post = await _form_fields(request)
    get = dict(request.query_params)
    try:
        return await run_in_threadpool(adapter.validate, get, post)
    except GatewayUnavailableError as exc:
        # a 5xx makes SSLCommerz redeliver the notification
        raise HTTPException(502, str(exc)) from exc


@router.api_route("/return", methods=["GET", "POST"], response_model=NormalizedResult)
async def customer_return(request: Request, adapter: GatewayAdapter = Depends(get_adapter)):
    post = await _form_fields(request)
    return adapter.success(dict(request.query_params), post)


@router.post("/refunds", response_model=RefundResult)
def request_refund(payload: RefundRequest, adapter: GatewayAdapter = Depends(get_adapter)):
    return adapter.refund(
        payload.reference_id,
        payload.transaction_id,
        payload.amount,
        payload.notes,
    )
