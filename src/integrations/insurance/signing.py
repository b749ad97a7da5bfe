"""
Request signing for the partner insurance API.

The partner authenticates every call with an HMAC-SHA256 over
``METHOD + path + timestamp + body``. The body string that is signed must be
byte-for-byte the body that is sent, so callers serialize once with
``serialize_body`` and pass the same string to both.
"""

import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional

PARTNER_ID_HEADER = "X-Partner-Id"
TIMESTAMP_HEADER = "X-Timestamp"
SIGNATURE_HEADER = "X-Request-Signature"


def current_timestamp_ms() -> str:
    return str(int(time.time() * 1000))


def serialize_body(body: Optional[Dict[str, Any]]) -> Optional[str]:
    if body is None:
        return None
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


def build_sign_string(method: str, path: str, timestamp: str, body: Optional[str]) -> str:
    sign_data = f"{method.upper()}{path}{timestamp}"
    if body is not None:
        sign_data += body
    return sign_data


def generate_request_signature(
    secret: str,
    path: str,
    method: str,
    timestamp: str,
    body: Optional[str],
) -> str:
    """
    Generate the hex HMAC-SHA256 signature for a partner API request.

    Args:
        secret: Shared API secret
        path: Request path, e.g. "/partner/{partner_id}/policy/create"
        method: HTTP method, any case
        timestamp: Milliseconds since epoch, as sent in X-Timestamp
        body: Already-serialized JSON body, or None for body-less requests
    """
    return hmac.new(
        secret.encode("utf-8"),
        build_sign_string(method, path, timestamp, body).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def signed_headers(partner_id: str, timestamp: str, signature: str) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        PARTNER_ID_HEADER: partner_id,
        TIMESTAMP_HEADER: timestamp,
        SIGNATURE_HEADER: signature,
    }
