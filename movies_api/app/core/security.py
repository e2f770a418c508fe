"""
Bearer token helpers for the movies routes.

Tokens are compact, JWT‑like strings (``header.payload.signature``)
signed with HMAC‑SHA256 and base64url encoded.  The payload carries an
``iat`` claim, the UNIX time at which the token was issued.  The
``require_fresh_token`` dependency accepts a token only while it is
younger than ``settings.token_freshness_seconds``; there are no users
or roles behind it.  ``/auth/fake-token`` hands such tokens out to
anybody, so this is a convenience for test clients, not an
authentication scheme.
"""

import base64
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status

from .config import Settings

MISSING_HEADER_MESSAGE = "Unauthorized; no Authorization header."
INVALID_TIMESTAMP_MESSAGE = "Unauthorized; not valid timestamp."


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = '=' * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    """Compute HMAC‑SHA256 signature of a message using the given secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(
    data: Dict[str, Any], secret_key: str, issued_at: Optional[float] = None
) -> str:
    """Create a signed token with the given claims.

    The claims are extended with ``iat``, the issue time as a UNIX
    timestamp (``time.time()`` unless ``issued_at`` is given).

    Parameters
    ----------
    data : dict
        Claims to embed in the token (e.g. {"sub": "movies-client"}).
    secret_key : str
        HMAC key used to sign the token.
    issued_at : Optional[float]
        Issue time override, mostly useful in tests.

    Returns
    -------
    str
        A signed token, without the ``Bearer`` prefix.
    """
    to_encode = dict(data)
    to_encode["iat"] = time.time() if issued_at is None else issued_at
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(',', ':')).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(',', ':')).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_access_token(token: str, secret_key: str) -> Optional[Dict[str, Any]]:
    """Verify the signature of a token and return its claims.

    Returns ``None`` for malformed tokens and signature mismatches.
    Freshness is checked separately by ``is_fresh``.
    """
    parts = token.split('.')
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    try:
        actual_sig = _b64_url_decode(signature_b64)
        payload = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None
    # Constant‑time comparison to prevent timing attacks
    if not hmac.compare_digest(_sign(signing_input, secret_key), actual_sig):
        return None
    if not isinstance(payload, dict):
        return None
    return payload


def is_fresh(
    issued_at: Any, freshness_seconds: int, clock_skew_seconds: int = 0, now: Optional[float] = None
) -> bool:
    """Return True if ``issued_at`` lies within the freshness window."""
    if isinstance(issued_at, bool) or not isinstance(issued_at, (int, float)):
        return False
    current = time.time() if now is None else now
    age = current - issued_at
    return -clock_skew_seconds <= age <= freshness_seconds


def issue_token(settings: Settings, subject: str = "movies-client") -> str:
    """Return a ``Bearer`` authorization value for a fresh token."""
    return f"Bearer {create_access_token({'sub': subject}, settings.secret_key)}"


def require_fresh_token(request: Request) -> Dict[str, Any]:
    """Dependency guarding the movies routes.

    Raises 401 when the ``Authorization`` header is missing, and a
    distinct 401 when the token is unreadable, wrongly signed, expired
    or issued in the future.  Returns the token claims on success.
    """
    settings: Settings = request.app.state.settings
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=MISSING_HEADER_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )
    token = auth_header.replace("Bearer ", "", 1).strip()
    claims = decode_access_token(token, settings.secret_key)
    if claims is None or not is_fresh(
        claims.get("iat"), settings.token_freshness_seconds, settings.token_clock_skew_seconds
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_TIMESTAMP_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims
