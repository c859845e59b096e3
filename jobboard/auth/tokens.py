"""Bearer token codec shared by HTTP and WebSocket authentication.

One TokenService is built from configuration at startup and handed to both
entry points, so there is exactly one signing secret in the process.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import jwt

from jobboard.domain.models import UserRole
from jobboard.utils.timestamps import utc_now


class AuthenticationError(Exception):
    """Raised when a bearer token is missing, malformed, expired or wrongly signed."""

    def __init__(self, message: str = "Invalid or missing credentials"):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class Actor:
    """An authenticated identity."""

    user_id: int
    role: UserRole


class TokenService:
    """Issues and verifies signed bearer tokens.

    Tokens carry ``sub`` (the user id, as a string), ``role``, ``iat`` and ``exp``.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 7 * 24 * 3600):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl_seconds = ttl_seconds

    def issue(self, user_id: int, role: UserRole, ttl_seconds: Optional[int] = None) -> str:
        """Mint a token for a user."""
        now = utc_now()
        claims = {
            "sub": str(user_id),
            "role": UserRole(role).value,
            "iat": now,
            "exp": now + timedelta(seconds=ttl_seconds if ttl_seconds is not None else self.ttl_seconds),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def decode(self, token: Optional[str]) -> Actor:
        """Verify a token and return its identity.

        Raises:
            AuthenticationError: If the token is missing or invalid, or lacks sub/role
        """
        if not token:
            raise AuthenticationError("No token provided")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {e}") from e

        try:
            return Actor(user_id=int(claims["sub"]), role=UserRole(claims.get("role")))
        except (TypeError, ValueError) as e:
            raise AuthenticationError("Token does not carry a valid subject and role") from e
