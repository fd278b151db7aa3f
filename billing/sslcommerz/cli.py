#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from billing.sslcommerz.adapter import validate_credentials  # noqa: E402
from billing.sslcommerz.errors import ConfigurationError, GatewayError  # noqa: E402
from billing.sslcommerz.logging_config import configure_structlog  # noqa: E402
from billing.sslcommerz.payments import get_gateway_api  # noqa: E402
from billing.sslcommerz.settings import settings  # noqa: E402
from billing.sslcommerz.status import map_payment_status  # noqa: E402


def _emit(payload: dict, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        for key, value in payload.items():
            print(f"{key}: {value}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="SSLCommerz store maintenance commands.")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("check", help="Verify the configured store credentials with a trial session")
    lookup = sub.add_parser("lookup", help="Fetch a transaction and show its mapped status")
    lookup.add_argument("tran_id", help="Merchant transaction ID sent at initiation")
    args = parser.parse_args(argv)

    configure_structlog(json_logs=args.json)

    try:
        credentials = settings.credentials
    except ConfigurationError as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return 2

    if args.command == "check":
        ok = validate_credentials(credentials)
        _emit({"store_id": credentials.store_id, "sandbox": credentials.sandbox_mode, "valid": ok}, args.json)
        return 0 if ok else 1

    try:
        details = get_gateway_api(credentials).get_payment(args.tran_id)
    except GatewayError as exc:
        print(f"lookup failed: {exc}", file=sys.stderr)
        return 1
    _emit(
        {
            "tran_id": args.tran_id,
            "gateway_status": details.status,
            "status": map_payment_status(details.status).value,
            "bank_tran_id": details.bank_tran_id,
            "amount": details.currency_amount,
            "currency": details.currency_type,
        },
        args.json,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
