"""Identity token handling.

Admin users sign in through the hosted identity provider, which issues
HS256 JWTs signed with the project's JWT secret. The API only verifies
those tokens; it never issues sessions of its own.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from portfolio_api.config import settings


class IdentityToken:
    """Validated claims of an identity token.

    Raises:
        KeyError: If the token has no subject.
        ValueError: If the subject is not a UUID.
    """

    def __init__(self, payload: dict[str, Any]):
        self.user_id = uuid.UUID(payload["sub"])
        self.email: str | None = payload.get("email")
        app_metadata = payload.get("app_metadata") or {}
        self.role: str | None = app_metadata.get("role")
        self.payload = payload

    def __repr__(self) -> str:
        return f"<IdentityToken(user_id={self.user_id}, role={self.role})>"


def decode_identity_token(token: str) -> dict[str, Any] | None:
    """Decode and validate an identity token.

    Returns:
        Token payload dict if valid, None if invalid, expired or issued
        for another audience
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
        )
    except JWTError:
        return None


def create_identity_token(
    user_id: uuid.UUID,
    email: str | None = None,
    role: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Mint a token shaped like the identity provider's.

    Used for local tooling and tests; production tokens come from the
    provider.
    """
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "aud": settings.jwt_audience,
        "role": "authenticated",
        "iat": now,
        "exp": now + (expires_delta or timedelta(hours=1)),
        "app_metadata": {"role": role} if role else {},
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
