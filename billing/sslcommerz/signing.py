"""Callback signature verification for SSLCommerz notifications.

SSLCommerz signs a notification by listing the signed field names in
``verify_key`` and sending ``verify_sign``, the MD5 of the canonical string::

    name1=value1&name2=value2&...&store_passwd=<md5(store password)>

with the names (``store_passwd`` included) sorted in ascending byte order.
This is not an HMAC; the canonical form has to match the gateway bit for bit.
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Iterable, Mapping

from .errors import MalformedCallbackError
from .logging_config import get_logger

logger = get_logger(__name__)

VERIFY_KEY_FIELD = "verify_key"
VERIFY_SIGN_FIELD = "verify_sign"
PASSWORD_FIELD = "store_passwd"


def md5_hex(value: str) -> str:
    return hashlib.md5(value.encode("utf-8"), usedforsecurity=False).hexdigest()


def signed_fields(verify_key: str) -> list[str]:
    """Field names covered by the signature, ``store_passwd`` included, sorted."""
    fields = verify_key.split(",")
    fields.append(PASSWORD_FIELD)
    # str ordering is code point ordering, which is byte order for ASCII names
    return sorted(fields)


def canonical_string(payload: Mapping[str, str], store_password: str) -> str:
    """
    Build the string SSLCommerz hashed to produce ``verify_sign``.

    Raises:
        MalformedCallbackError: a field named in ``verify_key`` is absent. Absent
            fields are never skipped; a shorter string must not validate.
    """
    values = dict(payload)
    values[PASSWORD_FIELD] = md5_hex(store_password)

    parts: list[str] = []
    for field in signed_fields(payload[VERIFY_KEY_FIELD]):
        if field not in values:
            raise MalformedCallbackError(field)
        parts.append(f"{field}={values[field]}")
    return "&".join(parts)


class CallbackVerifier:
    """Checks inbound notifications against the store password."""

    def __init__(self, store_password: str) -> None:
        self._store_password = store_password

    def verify(self, payload: Mapping[str, str]) -> bool:
        verify_sign = payload.get(VERIFY_SIGN_FIELD)
        if payload.get(VERIFY_KEY_FIELD) is None or verify_sign is None:
            logger.warning(
                "sslcommerz_signature_missing",
                tran_id=payload.get("tran_id"),
                has_verify_key=VERIFY_KEY_FIELD in payload,
                has_verify_sign=VERIFY_SIGN_FIELD in payload,
            )
            return False

        try:
            expected = md5_hex(canonical_string(payload, self._store_password))
        except MalformedCallbackError as exc:
            logger.warning(
                "sslcommerz_callback_malformed",
                tran_id=payload.get("tran_id"),
                missing_field=exc.field,
            )
            return False

        matched = hmac.compare_digest(expected.encode("utf-8"), str(verify_sign).encode("utf-8"))
        if not matched:
            logger.warning("sslcommerz_signature_mismatch", tran_id=payload.get("tran_id"))
        return matched


def sign_payload(
    fields: Mapping[str, str], store_password: str, keys: Iterable[str] | None = None
) -> dict[str, str]:
    """
    Return ``fields`` plus the ``verify_key``/``verify_sign`` pair SSLCommerz would add.

    ``keys`` restricts which fields are signed (all of them by default).
    """
    signed = dict(fields)
    signed[VERIFY_KEY_FIELD] = ",".join(keys if keys is not None else fields.keys())
    signed[VERIFY_SIGN_FIELD] = md5_hex(canonical_string(signed, store_password))
    return signed


__all__ = [
    "CallbackVerifier",
    "canonical_string",
    "md5_hex",
    "sign_payload",
    "signed_fields",
]
