"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Tokens arrive as "Authorization: Bearer <token>". The three outcomes are
kept apart on purpose:
  - no header / no token       -> 401 unauthorized
  - token present but rejected -> 403 invalid_token / token_expired
  - token fine, user deleted   -> 401 unauthorized

get_token_claims() stops at the decoded claims (used by /auth/validate).
get_current_user() goes on to load the User the token names.
require_admin() and ensure_owner_or_admin() add access-level checks.

Layer rule: no imports from applications/ or uploads/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request

from auth.models import User
from auth.store import UserStore, normalize_email
from auth.tokens import ExpiredTokenError, InvalidTokenError, TokenSigner, extract_bearer_token


def get_token_claims(request: Request) -> dict[str, Any]:
    """Validate the bearer token on the request and return its claims.

    Use as a FastAPI dependency:
        @router.get("/auth/validate")
        async def route(claims: dict = Depends(get_token_claims)): ...
    """
    header = request.headers.get("Authorization")
    if not header:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authorization header missing."},
        )
    token = extract_bearer_token(header)
    if token is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Token missing."},
        )

    signer: TokenSigner = request.app.state.token_signer
    try:
        return signer.validate(token)
    except ExpiredTokenError as exc:
        raise HTTPException(
            status_code=403,
            detail={"code": "token_expired", "message": "Invalid or expired token."},
        ) from exc
    except InvalidTokenError as exc:
        raise HTTPException(
            status_code=403,
            detail={"code": "invalid_token", "message": "Invalid or expired token."},
        ) from exc


def get_current_user(request: Request) -> User:
    """Require a valid token for an existing user. Returns that User.

    Loads the user fresh from the store: the token only names the account,
    access decisions use the current record.
    """
    claims = get_token_claims(request)
    user_id = claims["user"].get("id")
    if not isinstance(user_id, int):
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Invalid token payload."},
        )
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Account no longer exists."},
        )
    # The id alone is not enough: the token must name the same account it was
    # minted for. After an email change the holder has to sign in again.
    token_email = claims["user"].get("email")
    if not isinstance(token_email, str) or normalize_email(token_email) != user.email:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Token does not match the account."},
        )
    return user


def require_admin(request: Request) -> User:
    """Require an admin access level. Raises HTTP 401 if unauthenticated, HTTP 403 if not admin."""
    user = get_current_user(request)
    if not user.is_admin:
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "Admin access required."},
        )
    return user


def ensure_owner_or_admin(current_user: User, owner_id: int) -> None:
    """Raise HTTP 403 unless current_user owns the resource or is an admin."""
    if current_user.id != owner_id and not current_user.is_admin:
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "You can only access your own records."},
        )
