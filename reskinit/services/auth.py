"""
Authentication boundary.

Tokens are issued by the external auth service (registration and login
live there). This module only verifies a bearer token and extracts the
principal id; the rest of the application trusts that id.

Accepted claims: "userId" (issued by the existing auth service) or the
standard "sub".
"""

import logging
from dataclasses import dataclass

import jwt

from reskinit.models.failure import UnauthenticatedError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class TokenVerifier:
    """Verifies HS256 (or configured) JWTs against a shared secret."""

    secret: str
    algorithm: str = "HS256"

    def principal_id(self, token: str) -> int:
        """
        Verify a token and return the user id it was issued for.

        Raises:
            UnauthenticatedError: If the token is expired, invalid or has
                no usable user id claim
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as e:
            raise UnauthenticatedError("Token expired") from e
        except jwt.InvalidTokenError as e:
            logger.info("Rejected token: %s", type(e).__name__)
            raise UnauthenticatedError("Invalid token") from e

        raw = payload.get("userId", payload.get("sub"))
        try:
            user_id = int(raw)
        except (TypeError, ValueError):
            raise UnauthenticatedError("Invalid token payload") from None
        if user_id <= 0:
            raise UnauthenticatedError("Invalid token payload")
        return user_id

    def principal_from_header(self, authorization: str | None) -> int:
        """
        Extract and verify the bearer token from an Authorization header.

        Raises:
            UnauthenticatedError: If the header is missing or malformed, or
                the token does not verify
        """
        if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
            raise UnauthenticatedError("Access token required")
        token = authorization[len(BEARER_PREFIX) :].strip()
        if not token:
            raise UnauthenticatedError("Access token required")
        return self.principal_id(token)
