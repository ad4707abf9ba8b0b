"""
Local token inspection helpers.

Nothing here is a security decision: signatures are only checked by the
verification authority. These helpers read the unverified payload so callers
can make cheap pre-checks (expiry, age) and reject malformed input early.
"""

import base64
import binascii
import hashlib
import json
import re
import time
from typing import Any, Dict, Optional

_SEGMENT_RE = re.compile(r"[A-Za-z0-9_-]+")


def hash_output(response_text: str) -> str:
    """SHA-256 hex digest of a model response, as bound by the authority."""
    return hashlib.sha256(response_text.encode("utf-8")).hexdigest()


def encode_segment(claims: Dict[str, Any]) -> str:
    """Encode claims as an unpadded base64url token segment."""
    raw = json.dumps(claims, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_claims(token: Any) -> Optional[Dict[str, Any]]:
    """Decode the payload segment of ``token`` without verifying it.

    Returns None when the token cannot be split into three parts or the
    payload is not base64url-encoded UTF-8 JSON object.
    """
    if not isinstance(token, str):
        return None

    parts = token.split(".")
    if len(parts) != 3:
        return None

    payload = parts[1]
    padded = payload + "=" * (-len(payload) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        claims = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        return None

    if not isinstance(claims, dict):
        return None
    return claims


def is_expired(token: Any, now: Optional[int] = None) -> Optional[bool]:
    """True if ``exp`` is in the past, None if it cannot be determined."""
    claims = decode_claims(token)
    if not claims or not _is_number(claims.get("exp")):
        return None

    now = int(time.time()) if now is None else now
    return claims["exp"] < now


def token_age(token: Any, now: Optional[int] = None) -> Optional[int]:
    """Seconds since ``iat``, None if it cannot be determined."""
    claims = decode_claims(token)
    if not claims or not _is_number(claims.get("iat")):
        return None

    now = int(time.time()) if now is None else now
    return now - claims["iat"]


def is_valid_format(token: Any) -> bool:
    """Structural check: three non-empty base64url segments."""
    if not token or not isinstance(token, str):
        return False

    parts = token.split(".")
    if len(parts) != 3:
        return False

    return all(_SEGMENT_RE.fullmatch(part) for part in parts)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
