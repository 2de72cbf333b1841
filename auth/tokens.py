"""
auth/tokens.py -- Access token minting and validation.

Security design decisions:
  JWT: python-jose with HS256. Claims are {"user": <profile snapshot>,
       "iat": <issued>, "exp": <issued + 30 min>}. The snapshot is a copy
       taken at mint time; later profile edits do not reach tokens already
       issued.

  No revocation: a token stays valid until "exp" even if the password is
       changed. Sessions are stateless, so there is no server-side list to
       revoke against.

  Secret key: passed into TokenSigner at construction. api/main.py builds
       exactly one signer from Settings during lifespan startup and stores
       it on app.state; nothing in this module reads configuration itself.

  Failures: validate() raises InvalidTokenError (ExpiredTokenError for the
       expiry case). A missing Authorization header is the caller's concern
       -- extract_bearer_token() returns None and the dependency layer maps
       that to 401 before validate() is ever reached.

Layer rule: no imports from api/, applications/, or uploads/.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from auth.models import User

logger = logging.getLogger("jobtrack.auth")

_BEARER_PREFIX = "Bearer "


class InvalidTokenError(Exception):
    """Raised when a presented token is tampered, malformed, or signed with another key."""


class ExpiredTokenError(InvalidTokenError):
    """Raised when a token's signature is valid but its "exp" claim has passed."""


@dataclass(frozen=True)
class TokenSigner:
    """Mints and validates signed, time-limited access tokens.

    Immutable and stateless apart from the key, so one instance is shared by
    every request without locking.

    Usage:
        signer = TokenSigner(secret_key=settings.secret_key)
        token = signer.mint(user_claims(user))
        claims = signer.validate(token)   # claims["user"]["id"] == user.id
    """

    secret_key: str
    expire_minutes: int = 30
    algorithm: str = "HS256"

    def __post_init__(self) -> None:
        if not self.secret_key:
            raise ValueError("TokenSigner requires a non-empty secret key.")
        if self.expire_minutes <= 0:
            raise ValueError("expire_minutes must be positive.")

    def mint(self, user: dict[str, Any], issued_at: datetime | None = None) -> str:
        """Encode a signed JWT carrying the user snapshot.

        Args:
            user:      JSON-serializable identity payload, stored under "user".
            issued_at: Override for the issue time. Defaults to now (UTC).
        """
        now = issued_at or datetime.now(timezone.utc)
        claims = {
            "user": user,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def validate(self, token: str) -> dict[str, Any]:
        """Verify signature and expiry; return the decoded claims.

        Raises ExpiredTokenError for an expired token and InvalidTokenError
        for anything else that is not a well-formed token from this signer.
        """
        if not token or not isinstance(token, str):
            raise InvalidTokenError("Token is empty.")
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            logger.info("Rejected expired token")
            raise ExpiredTokenError("Token has expired.") from exc
        except JWTError as exc:
            logger.info("Rejected invalid token: %s", exc)
            raise InvalidTokenError("Token is invalid.") from exc
        if not isinstance(claims.get("user"), dict):
            raise InvalidTokenError("Token has no user claim.")
        return claims


def extract_bearer_token(header: str | None) -> str | None:
    """Return the raw token from an "Authorization: Bearer <token>" value.

    Returns None when the header is absent, uses another scheme, or has
    nothing after the scheme.
    """
    if not header or not header.startswith(_BEARER_PREFIX):
        return None
    token = header[len(_BEARER_PREFIX) :].strip()
    return token or None


def user_claims(user: User) -> dict[str, Any]:
    """Build the profile snapshot embedded in a token for this user."""
    return {
        "id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "bio": user.bio or "",
        "accessLevel": user.access_level,
        "newUser": user.new_user,
        "avatar": user.avatar,
    }
