# -*- coding: utf-8 -*-
"""Auth — PBKDF2 password hashes, HS256 bearer tokens and the request helpers built on them."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request

from ..config import settings
from .storage import get_user_by_id

HASH_SCHEME = "pbkdf2_sha256"
HASH_ITERATIONS = 200_000
_TOKEN_HEADER = {"alg": "HS256", "typ": "JWT"}


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _unb64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _compact_json(value: Dict[str, Any]) -> bytes:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


# ---- passwords ----


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str) -> str:
    """Return ``pbkdf2_sha256$<iterations>$<salt>$<digest>``."""
    salt = secrets.token_bytes(16)
    digest = _derive(password, salt, HASH_ITERATIONS)
    return "$".join((HASH_SCHEME, str(HASH_ITERATIONS), _b64(salt), _b64(digest)))


def verify_password(password: str, password_hash: str) -> bool:
    parts = (password_hash or "").split("$")
    if len(parts) != 4 or parts[0] != HASH_SCHEME:
        return False
    try:
        iterations = int(parts[1])
        salt, expected = _unb64(parts[2]), _unb64(parts[3])
    except ValueError:
        return False
    return hmac.compare_digest(_derive(password, salt, iterations), expected)


# ---- tokens ----


def _signature(signing_input: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()


def sign_token(claims: Dict[str, Any], secret: str) -> str:
    signing_input = f"{_b64(_compact_json(_TOKEN_HEADER))}.{_b64(_compact_json(claims))}".encode("ascii")
    return f"{signing_input.decode('ascii')}.{_b64(_signature(signing_input, secret))}"


def read_token(token: str, secret: str) -> Dict[str, Any]:
    """Check the signature and return the claims; raises ``ValueError`` on any defect."""
    try:
        header_part, claims_part, signature_part = token.split(".")
        signing_input = f"{header_part}.{claims_part}".encode("ascii")
        signature = _unb64(signature_part)
    except (ValueError, UnicodeEncodeError) as exc:
        raise ValueError("malformed token") from exc
    if not hmac.compare_digest(_signature(signing_input, secret), signature):
        raise ValueError("bad signature")
    claims = json.loads(_unb64(claims_part))
    if not isinstance(claims, dict):
        raise ValueError("claims are not an object")
    return claims


def create_access_token(*, user_id: str, email: str, ttl: timedelta | None = None) -> str:
    issued = datetime.now(timezone.utc)
    lifetime = ttl if ttl is not None else timedelta(days=settings.token_ttl_days)
    claims = {
        "sub": user_id,
        "email": email,
        "iat": int(issued.timestamp()),
        "exp": int((issued + lifetime).timestamp()),
    }
    return sign_token(claims, settings.jwt_secret)


def decode_token(token: str) -> Dict[str, Any]:
    try:
        claims = read_token(token, settings.jwt_secret)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc
    expires = claims.get("exp")
    if isinstance(expires, (int, float)) and expires < datetime.now(timezone.utc).timestamp():
        raise HTTPException(status_code=401, detail="Token expired")
    return claims


# ---- request helpers ----


def get_token_from_request(request: Request) -> Optional[str]:
    scheme, _, token = (request.headers.get("authorization") or "").partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def get_current_user_from_request(request: Request) -> Dict[str, Any]:
    # The middleware may already have resolved the user for this request.
    cached = getattr(request.state, "user", None)
    if cached:
        return cached

    token = get_token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Access denied. No token provided.")

    user_id = str(decode_token(token).get("sub") or "")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token format")

    user = get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    request.state.user = user
    return user


def get_current_user(user: Dict[str, Any] = Depends(get_current_user_from_request)) -> Dict[str, Any]:
    return user
