"""
Session token helpers.

The planner frontend does not sign anyone in; the external auth service
does that and leaves an RS256 JWT in the session under ``auth_token``.
This module only reads that token: to greet the user on the dashboard
and to forward it to the task API as a bearer credential.
"""

from __future__ import annotations

from typing import Any

import jwt
from flask import current_app, session

DEFAULT_ALLOWED_ALGORITHMS = ["RS256"]
REQUIRED_TOKEN_CLAIMS = ["username", "iat", "exp"]
SESSION_TOKEN_KEY = "auth_token"


def verify_token(
    token: str,
    public_key: str,
    algorithms: list[str] | None = None,
) -> dict[str, Any] | None:
    """
    Decode and validate a JWT, returning the payload on success.

    Args:
        token: The raw compact-JWS token string to verify.
        public_key: The RSA public key in PEM format.
        algorithms: Allowed signing algorithms.  Defaults to
            ``["RS256"]`` when *None*.

    Returns:
        The decoded payload, or ``None`` if the token is expired,
        malformed, badly signed, or has a blank ``username``.
    """
    try:
        decoded = jwt.decode(
            token,
            public_key,
            algorithms=algorithms or DEFAULT_ALLOWED_ALGORITHMS,
            options={"require": REQUIRED_TOKEN_CLAIMS},
            leeway=int(current_app.config.get("JWT_CLOCK_SKEW_SECONDS", 30)),
        )
    except jwt.InvalidTokenError:
        return None

    username = decoded.get("username")
    if not isinstance(username, str) or not username.strip():
        return None
    return decoded


def session_token() -> str | None:
    """Return the raw auth token stored in the session, if any."""
    token = session.get(SESSION_TOKEN_KEY)
    return token if isinstance(token, str) and token else None


def session_username() -> str | None:
    """
    Return the signed-in username, or ``None``.

    Without a configured public key no token is trusted.
    """
    token = session_token()
    public_key = current_app.config.get("JWT_PUBLIC_KEY")
    if not token or not public_key:
        return None
    payload = verify_token(token, public_key)
    if payload is None:
        return None
    return payload["username"].strip()
