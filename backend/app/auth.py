"""
Customer Details Backend — Bearer Token Dependencies
======================================================

What:  FastAPI dependencies that authenticate the caller and gate routes by role.
How:   HTTPBearer extracts the token, LoginService verifies it, and
       require_roles() compares the token's `role` claim to the allowed set.

Usage:
    @router.get("/GetAllCustomerList")
    async def get_all(current_user: CurrentUser = Depends(require_roles("Admin"))):
        ...

Status codes:
    401  no Authorization header, not a Bearer token, or token invalid/expired
    403  valid token whose role is not allowed on the route
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.exceptions import AuthenticationError, AuthorizationError
from app.services.login_service import login_service

logger = logging.getLogger(__name__)

# auto_error=False: a missing header is reported through AuthenticationError,
# so it gets the same 401 body and WWW-Authenticate header as a bad token
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Caller identity taken from a verified access token."""

    username: str
    role: Optional[str] = None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Authentication required")

    claims = login_service.decode_jwt_token(credentials.credentials)
    return CurrentUser(
        username=str(claims["sub"]),
        role=claims.get("role"),
    )


def require_roles(*roles: str) -> Callable[..., Awaitable[CurrentUser]]:
    """
    Dependency factory: the caller must hold one of `roles`.

    Role names compare exactly, as they are issued from the roles table.
    """
    allowed = frozenset(roles)

    async def role_checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            logger.info(
                "Denied %s (role=%s); requires one of %s",
                current_user.username,
                current_user.role,
                sorted(allowed),
            )
            raise AuthorizationError(required_roles=roles, role=current_user.role)
        return current_user

    return role_checker
