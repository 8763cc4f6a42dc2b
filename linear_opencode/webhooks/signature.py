"""Linear webhook signature validation."""

from __future__ import annotations

import hashlib
import hmac
from typing import Mapping

from linear_opencode.utils.logging import get_logger

log = get_logger(__name__)

SIGNATURE_HEADER = "Linear-Signature"
DELIVERY_HEADER = "Linear-Delivery"


def sign(body: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 digest of ``body`` under ``secret``."""
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: str | None, secret: str | None) -> bool:
    """Validate a Linear webhook HMAC-SHA256 signature.

    Returns False if no secret is configured (rejects unauthenticated requests)
    and on any error while computing the digest.
    """
    if not secret:
        return False
    if not signature:
        return False
    try:
        expected = sign(body, secret)
        return hmac.compare_digest(expected, signature.strip())
    except Exception:
        log.warning("signature_check_error", exc_info=True)
        return False


def _find_header(headers: Mapping[str, str], name: str) -> str | None:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value or None
    return None


def extract_signature(headers: Mapping[str, str]) -> str | None:
    return _find_header(headers, SIGNATURE_HEADER)


def extract_delivery_id(headers: Mapping[str, str]) -> str | None:
    return _find_header(headers, DELIVERY_HEADER)
