from __future__ import annotations

import base64
import hashlib
import hmac

SIGNATURE_SCHEME = "sha1="


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def compute_signature(url: str, body: str | bytes, auth_token: str) -> str:
    """
    Signature the inbound webhook is expected to carry:

      "sha1=" + base64(HMAC-SHA1(auth_token, url + body))
    """
    digest = hmac.new(
        _as_bytes(auth_token),
        _as_bytes(url) + _as_bytes(body),
        hashlib.sha1,
    ).digest()
    return SIGNATURE_SCHEME + base64.b64encode(digest).decode("ascii")


def verify_signature(
    body: str | bytes,
    signature: str | None,
    url: str,
    auth_token: str | None,
) -> bool:
    if not signature or not auth_token:
        return False
    expected = compute_signature(url, body, auth_token)
    return hmac.compare_digest(expected.encode("ascii"), _as_bytes(signature))
