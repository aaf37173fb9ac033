"""Authentication and admin authorization dependencies.

Every admin route requires ``Authorization: Bearer <identity token>``.
A token is privileged when its ``app_metadata.role`` matches the
configured admin role or its email is on the admin allowlist.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from portfolio_api.config import settings
from portfolio_api.core.security import IdentityToken, decode_identity_token
from portfolio_api.logging_config import get_logger

logger = get_logger(__name__)


async def get_current_identity(request: Request) -> IdentityToken:
    """Resolve the bearer token into the caller's identity.

    Raises:
        HTTPException 401: If the header is missing or the token is invalid
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    invalid_token = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid token or user not found.",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_identity_token(auth_header[7:])
    if payload is None:
        raise invalid_token

    try:
        return IdentityToken(payload)
    except (KeyError, ValueError, TypeError):
        raise invalid_token


def is_admin(identity: IdentityToken) -> bool:
    if identity.role and identity.role == settings.admin_role:
        return True
    allowlist = {email.lower() for email in settings.admin_emails}
    return bool(identity.email) and identity.email.lower() in allowlist


async def get_admin_identity(
    request: Request,
    identity: Annotated[IdentityToken, Depends(get_current_identity)],
) -> IdentityToken:
    """Get the caller and verify they hold a privileged account.

    Raises:
        HTTPException 403: If the caller is not an admin
    """
    if not is_admin(identity):
        client_ip = request.client.host if request.client else "unknown"
        logger.warning(
            "Unauthorized access attempt",
            user_id=str(identity.user_id),
            email=identity.email,
            user_role=identity.role,
            path=request.url.path,
            method=request.method,
            client_ip=client_ip,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to access this resource",
        )
    return identity


AdminIdentity = Annotated[IdentityToken, Depends(get_admin_identity)]
