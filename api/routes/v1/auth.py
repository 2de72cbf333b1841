"""
api/routes/v1/auth.py -- Sign-in and token endpoints.

Routes:
  POST /api/v1/auth/signin               -- email + password login; returns a token
  GET  /api/v1/auth/check-email/{email}  -- 409 if the address is taken (signup form helper)
  POST /api/v1/auth/change-password      -- re-hash the password (requires token)
  GET  /api/v1/auth/validate             -- decode the presented token

Security:
  POST /signin and /change-password are rate-limited per IP (SIGNIN_RATE_LIMIT).
  authenticate_user() provides timing equalization -- use it, never inline.
  Cache-Control: no-store on responses that carry a token.
  A password change does not revoke tokens already issued; they run to expiry.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, signin_rate_limit
from api.models import (
    AuthResponse,
    ChangePasswordRequest,
    MessageResponse,
    ProfileResponse,
    SigninRequest,
    TokenClaimsResponse,
)
from auth.dependencies import get_token_claims
from auth.passwords import authenticate_user, hash_password, verify_password
from auth.store import UserStore, normalize_email
from auth.tokens import TokenSigner, user_claims

logger = logging.getLogger("jobtrack.api.auth")

# Auth policy:
# - POST /api/v1/auth/signin:               public -- login endpoint must be unauthenticated
# - GET  /api/v1/auth/check-email/{email}:  public -- called by the signup form
# - POST /api/v1/auth/change-password:      requires bearer token (get_token_claims)
# - GET  /api/v1/auth/validate:             requires bearer token (get_token_claims)
router = APIRouter()


@router.post("/auth/signin", response_model=AuthResponse)
@limiter.limit(signin_rate_limit)  # router must register the limited wrapper, so this sits below it
def signin(request: Request, body: SigninRequest) -> JSONResponse:
    """Authenticate with email and password; return a token and profile.

    Returns the same generic error for unknown email and wrong password
    ("bad_credentials") to avoid leaking which addresses have accounts.
    """
    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, body.email, body.password)
    if user is None:
        logger.info("Sign-in failed")
        resp = JSONResponse(
            status_code=401,
            content={"error": {"code": "bad_credentials", "message": "Email or password is incorrect."}},
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    signer: TokenSigner = request.app.state.token_signer
    token = signer.mint(user_claims(user))
    logger.info("User %d signed in", user.id)
    resp = JSONResponse(
        status_code=200,
        content=AuthResponse(
            message="Successfully logged in.",
            token=token,
            user=ProfileResponse.from_user(user),
        ).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/auth/check-email/{email}", response_model=MessageResponse)
async def check_email(request: Request, email: str) -> MessageResponse:
    """Return 200 if no account uses this email, 409 if one does."""
    user_store: UserStore = request.app.state.user_store
    if user_store.email_exists(email):
        raise HTTPException(
            status_code=409,
            detail={"code": "conflict", "message": "Email is already in use."},
        )
    return MessageResponse(message="Email is available.")


@router.post("/auth/change-password", response_model=MessageResponse)
@limiter.limit(signin_rate_limit)
def change_password(
    request: Request,
    body: ChangePasswordRequest,
    claims: dict[str, Any] = Depends(get_token_claims),
) -> MessageResponse:
    """Replace the caller's password after re-checking the old one.

    The new password gets a fresh salt. Tokens issued before the change stay
    valid until they expire.
    """
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
            status_code=404,
            detail={"code": "not_found", "message": "User not found."},
        )
    if normalize_email(str(claims["user"].get("email", ""))) != user.email:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Token does not match the account."},
        )

    if not verify_password(body.old_password, user.hashed_password):
        raise HTTPException(
            status_code=400,
            detail={"code": "bad_credentials", "message": "Old password is incorrect."},
        )

    user_store.update_user(user_id, hashed_password=hash_password(body.new_password))
    logger.info("User %d changed password", user_id)
    return MessageResponse(message="Password changed successfully.")


@router.get("/auth/validate", response_model=TokenClaimsResponse)
async def validate(claims: dict[str, Any] = Depends(get_token_claims)) -> TokenClaimsResponse:
    """Return the decoded claims of a valid, unexpired token.

    The user claim is the snapshot taken at sign-in; it is not refreshed
    from the database.
    """
    return TokenClaimsResponse(user=claims["user"], iat=claims.get("iat"), exp=claims["exp"])
