"""Access-token verification.

Tokens are minted by the external auth service with the user id in ``sub``.
This module only decodes and checks them.
"""

from __future__ import annotations

from typing import Any

import jwt

from backend.app.core.settings import settings


class AuthSecurityError(RuntimeError):
    pass


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(raw, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    return payload


def subject_from_token(token: str) -> str:
    """Return the user id carried in the token's ``sub`` claim."""
    payload = decode_access_token(token)
    subject = str(payload.get("sub") or "").strip()
    if not subject:
        raise AuthSecurityError("Access token has no subject.")
    return subject
