import sentry_sdk
from fastapi import FastAPI, HTTPException
from sentry_sdk.integrations.fastapi import FastApiIntegration

from .api.routes import callbacks as callbacks_routes
from .logging_config import configure_structlog, get_logger
from .payments import get_mock_api
from .settings import APP_VERSION, settings
from .utils import add_request_id_tracing

# Configure structured logging (must be done before any logging calls)
configure_structlog(json_logs=not settings.DEBUG)

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        release=f"{settings.SERVICE_NAME}@{APP_VERSION}",
        integrations=[FastApiIntegration()],
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
    )

app = FastAPI(
    title="SSLCommerz Gateway",
    version=APP_VERSION,
    description="SSLCommerz payment notifications, returns and refunds for the billing platform",
)
add_request_id_tracing(app)

API_PREFIX = "/v1"

app.include_router(callbacks_routes.router, prefix=API_PREFIX)

logger = get_logger(__name__)


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "version": APP_VERSION,
        "mode": settings.PAYMENTS_MODE,
    }


if settings.DEBUG and settings.PAYMENTS_MODE == "mock":

    @app.get("/dev/sslcommerz/ipn/{tran_id}")
    def dev_mock_ipn(tran_id: str):
        """Signed notification the mock gateway would post for ``tran_id``."""
        api = get_mock_api(settings.credentials)
        if tran_id not in api.transactions:
            raise HTTPException(404, "Unknown transaction")
        return api.ipn_payload(tran_id)
