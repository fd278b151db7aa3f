from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from .contracts import Credentials
from .errors import ConfigurationError

REPO_ROOT = Path(__file__).resolve().parents[2]
ENV_FILE = REPO_ROOT / ".env"

APP_VERSION = "0.3.0"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE), env_file_encoding="utf-8", extra="ignore"
    )

    # human-readable console logs instead of JSON
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    SERVICE_NAME: str = "sslcommerz-gateway"
    ENVIRONMENT: str = "development"

    # "mock" never leaves the process; "live" talks to SSLCommerz
    PAYMENTS_MODE: Literal["mock", "live"] = "mock"
    DEFAULT_CURRENCY: str = "BDT"

    # Store credentials issued by SSLCommerz
    SSLCOMMERZ_STORE_ID: str | None = None
    SSLCOMMERZ_STORE_PASSWORD: str | None = None
    SSLCOMMERZ_SANDBOX: bool = True

    SSLCOMMERZ_SANDBOX_URL: str = "https://sandbox.sslcommerz.com"
    SSLCOMMERZ_LIVE_URL: str = "https://securepay.sslcommerz.com"
    # Optional IPN listener; SSLCommerz falls back to the merchant panel value
    SSLCOMMERZ_IPN_URL: str | None = None
    SSLCOMMERZ_TIMEOUT_SECONDS: float = 30.0

    # Observability
    SENTRY_DSN: str | None = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2

    @property
    def credentials(self) -> Credentials:
        if not (self.SSLCOMMERZ_STORE_ID or "").strip():
            raise ConfigurationError("SSLCOMMERZ_STORE_ID is not configured")
        if not (self.SSLCOMMERZ_STORE_PASSWORD or "").strip():
            raise ConfigurationError("SSLCOMMERZ_STORE_PASSWORD is not configured")
        return Credentials(
            store_id=self.SSLCOMMERZ_STORE_ID.strip(),
            store_password=self.SSLCOMMERZ_STORE_PASSWORD,
            sandbox_mode=self.SSLCOMMERZ_SANDBOX,
        )

    def gateway_base_url(self, sandbox: bool) -> str:
        base = self.SSLCOMMERZ_SANDBOX_URL if sandbox else self.SSLCOMMERZ_LIVE_URL
        return base.rstrip("/")


settings = Settings()
