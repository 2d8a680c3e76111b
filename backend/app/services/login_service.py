"""
Customer Details Backend — Login Service
==========================================

What:  Verifies account credentials and issues signed JWT access tokens.
Why:   Every customer endpoint is role-gated; the token carries the role.
How:   Account lookup by normalized username → bcrypt check → first role
       → HS256 token with issuer, audience, expiry and a unique jti.
Who:   Login route (issue) and app.auth dependencies (decode).

Token claims:
    sub / name : username
    role       : the account's first role by name (omitted when it has none)
    jti        : unique token id, logged for correlation
    iat / exp  : issued-at and expiry (JWT_EXPIRATION_MINUTES)
    iss / aud  : JWT_ISSUER / JWT_AUDIENCE, both verified on decode

There is no refresh token, revocation list or key rotation: a token is
valid until it expires.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import AuthenticationError, DatabaseError
from app.models.identity import IdentityUser, normalize_name
from app.schemas.auth import TokenResponse
from app.services.password_service import PasswordService, password_service

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
INVALID_CREDENTIALS = "Invalid username or password"


class LoginService:

    def __init__(
        self,
        secret_key: str,
        issuer: str,
        audience: str,
        expiration_minutes: int,
        passwords: PasswordService,
    ):
        if len(secret_key) < 32:
            raise ValueError("JWT secret key must be at least 32 characters (256 bits)")
        self._secret_key = secret_key
        self.issuer = issuer
        self.audience = audience
        self.expiration_minutes = expiration_minutes
        self.passwords = passwords

    @property
    def expires_in_seconds(self) -> int:
        return self.expiration_minutes * 60

    def generate_jwt_token(self, username: str, role: Optional[str]) -> str:
        """
        Issue a signed access token for an authenticated account.

        Args:
            username: Account name; becomes the `sub` and `name` claims.
            role: Role name for the `role` claim, or None for no role.
                  A token without a role authenticates but passes no
                  role-gated route.

        Returns:
            Compact JWT string (header.payload.signature).
        """
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": username,
            "name": username,
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + timedelta(minutes=self.expiration_minutes),
            "iss": self.issuer,
            "aud": self.audience,
        }
        if role:
            payload["role"] = role
        return jwt.encode(payload, self._secret_key, algorithm=JWT_ALGORITHM)

    def decode_jwt_token(self, token: str) -> Dict[str, Any]:
        """
        Verify a token and return its claims.

        PyJWT checks the signature, `exp`, `iss` and `aud`; `sub` must be
        present as well.

        Raises:
            AuthenticationError: expired, tampered, wrong issuer/audience,
                                 or otherwise malformed token
        """
        try:
            return jwt.decode(
                token,
                self._secret_key,
                algorithms=[JWT_ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except ExpiredSignatureError:
            raise AuthenticationError(message="Access token has expired")
        except InvalidTokenError as e:
            logger.info("Rejected access token: %s", type(e).__name__)
            raise AuthenticationError(
                message="Invalid access token",
                context={"reason": type(e).__name__},
            )

    async def find_account(self, db: AsyncSession, username: str) -> Optional[IdentityUser]:
        result = await db.execute(
            select(IdentityUser).where(
                IdentityUser.normalized_username == normalize_name(username)
            )
        )
        return result.scalar_one_or_none()

    async def login(self, db: AsyncSession, username: str, password: str) -> TokenResponse:
        """
        Check credentials and issue a token.

        Workflow:
            1. Find the account by case-insensitive username
            2. Verify the password against the bcrypt hash
            3. Take the account's first role (roles are ordered by name)
            4. Sign a token for username + role

        Unknown username and wrong password raise the same error, so the
        response never confirms that an account exists.

        Raises:
            AuthenticationError: unknown username or wrong password (→ 401)
            DatabaseError: account lookup failed (→ 400)
        """
        try:
            account = await self.find_account(db, username)
        except SQLAlchemyError as e:
            logger.error("Database error during login lookup: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "login"})

        if account is None or not self.passwords.verify_password(password, account.password_hash):
            logger.info("Failed login attempt for username=%r", username)
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        role = account.primary_role
        token = self.generate_jwt_token(account.username, role)
        logger.info("Issued access token for %s (role=%s)", account.username, role)

        return TokenResponse(
            access_token=token,
            token_type="bearer",
            expires_in=self.expires_in_seconds,
        )


login_service = LoginService(
    secret_key=settings.jwt_secret_key,
    issuer=settings.jwt_issuer,
    audience=settings.jwt_audience,
    expiration_minutes=settings.jwt_expiration_minutes,
    passwords=password_service,
)
