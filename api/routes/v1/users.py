"""
api/routes/v1/users.py -- User account and avatar routes.

Routes (in registration order to avoid FastAPI path capture conflicts):
  POST   /user                -- signup; returns a token (public)
  GET    /user                -- list accounts (admin)
  GET    /user/email/{email}  -- look up by email (admin)
  GET    /user/{user_id}      -- profile (owner or admin)
  PUT    /user/{user_id}      -- partial update (owner or admin)
  DELETE /user/{user_id}      -- delete account, applications, avatar (owner or admin)
  POST   /user/{user_id}/avatar   -- upload avatar (owner or admin)
  DELETE /user/{user_id}/avatar   -- remove avatar (owner or admin)
  GET    /user/{user_id}/avatar   -- fetch avatar image (public, used in <img> tags)

Access levels:
  Only an admin may change accessLevel. Everyone else gets 403 for trying,
  even on their own account.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.exc import IntegrityError

from api.models import (
    AuthResponse,
    AvatarResponse,
    MessageResponse,
    ProfileResponse,
    ProfileUpdatedResponse,
    UserCreate,
    UserUpdate,
)
from applications.store import ApplicationStore
from auth.dependencies import ensure_owner_or_admin, get_current_user, require_admin
from auth.models import DEFAULT_ACCESS_LEVEL, User
from auth.passwords import hash_password
from auth.store import UserStore
from auth.tokens import TokenSigner, user_claims
from core.config import get_settings
from uploads.store import UnsupportedImageError, UploadStore

logger = logging.getLogger("jobtrack.api.users")

router = APIRouter()


def _get_user_or_404(user_store: UserStore, user_id: int) -> User:
    user = user_store.get_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "User not found."},
        )
    return user


# ---------------------------------------------------------------------------
# POST /user -- signup
# ---------------------------------------------------------------------------


@router.post("/user", response_model=AuthResponse, status_code=201)
def create_user(request: Request, body: UserCreate) -> AuthResponse:
    """Create an account and sign it in.

    The uniqueness check runs in the database (UNIQUE email) rather than as
    a read-then-write, so two concurrent signups for one address cannot both
    succeed.
    """
    user_store: UserStore = request.app.state.user_store
    new_user = User(
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        hashed_password=hash_password(body.password),
        bio=body.bio,
        access_level=DEFAULT_ACCESS_LEVEL,
        new_user=True,
    )
    try:
        user_id = user_store.create_user(new_user)
    except IntegrityError as exc:
        raise HTTPException(
            status_code=409,
            detail={"code": "conflict", "message": "Email is already in use."},
        ) from exc

    created = _get_user_or_404(user_store, user_id)
    signer: TokenSigner = request.app.state.token_signer
    logger.info("User %d created", user_id)
    return AuthResponse(
        message="User created successfully.",
        token=signer.mint(user_claims(created)),
        user=ProfileResponse.from_user(created),
    )


# ---------------------------------------------------------------------------
# Admin lookups
# ---------------------------------------------------------------------------


@router.get("/user", response_model=list[ProfileResponse])
def list_users(request: Request, current_user: User = Depends(require_admin)) -> list[ProfileResponse]:
    user_store: UserStore = request.app.state.user_store
    return [ProfileResponse.from_user(u) for u in user_store.list_users()]


@router.get("/user/email/{email}", response_model=ProfileResponse)
def get_user_by_email(
    request: Request,
    email: str,
    current_user: User = Depends(require_admin),
) -> ProfileResponse:
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_email(email)
    if user is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "User not found for that email address."},
        )
    return ProfileResponse.from_user(user)


# ---------------------------------------------------------------------------
# Single account
# ---------------------------------------------------------------------------


@router.get("/user/{user_id}", response_model=ProfileResponse)
def get_user(request: Request, user_id: int, current_user: User = Depends(get_current_user)) -> ProfileResponse:
    ensure_owner_or_admin(current_user, user_id)
    user_store: UserStore = request.app.state.user_store
    return ProfileResponse.from_user(_get_user_or_404(user_store, user_id))


@router.put("/user/{user_id}", response_model=ProfileUpdatedResponse)
def update_user(
    request: Request,
    user_id: int,
    body: UserUpdate,
    current_user: User = Depends(get_current_user),
) -> ProfileUpdatedResponse:
    """Apply the fields present in the body; omitted fields are left alone.

    A non-blank password is re-hashed with a fresh salt. The caller's token
    is reissued only when they change their own email, since tokens are bound
    to the account email; otherwise the old snapshot stays until it expires.
    """
    ensure_owner_or_admin(current_user, user_id)
    user_store: UserStore = request.app.state.user_store
    _get_user_or_404(user_store, user_id)

    updates: dict = {}
    if body.first_name is not None:
        updates["first_name"] = body.first_name
    if body.last_name is not None:
        updates["last_name"] = body.last_name
    if body.email is not None:
        updates["email"] = body.email
    if body.bio is not None:
        updates["bio"] = body.bio
    if body.new_user is not None:
        updates["new_user"] = body.new_user
    if body.access_level is not None:
        if not current_user.is_admin:
            raise HTTPException(
                status_code=403,
                detail={"code": "forbidden", "message": "Only an admin can change access levels."},
            )
        updates["access_level"] = body.access_level
    if body.password and body.password.strip():
        updates["hashed_password"] = hash_password(body.password)

    if updates:
        try:
            user_store.update_user(user_id, **updates)
        except IntegrityError as exc:
            raise HTTPException(
                status_code=409,
                detail={"code": "conflict", "message": "Email is already in use."},
            ) from exc

    updated = _get_user_or_404(user_store, user_id)
    token = None
    if "email" in updates and current_user.id == user_id and updated.email != current_user.email:
        signer: TokenSigner = request.app.state.token_signer
        token = signer.mint(user_claims(updated))
    return ProfileUpdatedResponse(
        message="User updated successfully.",
        user=ProfileResponse.from_user(updated),
        token=token,
    )


@router.delete("/user/{user_id}", response_model=MessageResponse)
def delete_user(request: Request, user_id: int, current_user: User = Depends(get_current_user)) -> MessageResponse:
    """Delete the account together with its job applications, documents and avatar file."""
    ensure_owner_or_admin(current_user, user_id)
    user_store: UserStore = request.app.state.user_store
    applications: ApplicationStore = request.app.state.applications
    uploads: UploadStore = request.app.state.uploads

    user = _get_user_or_404(user_store, user_id)
    applications.delete_for_user(user_id)
    uploads.delete_documents(user_id)
    if user.avatar:
        uploads.delete_avatar(user.avatar)
    user_store.delete_user(user_id)
    logger.info("User %d deleted by user %d", user_id, current_user.id)
    return MessageResponse(message="User deleted successfully.")


# ---------------------------------------------------------------------------
# Avatar
# ---------------------------------------------------------------------------


@router.post("/user/{user_id}/avatar", response_model=AvatarResponse)
async def upload_avatar(
    request: Request,
    user_id: int,
    avatar: UploadFile,
    current_user: User = Depends(get_current_user),
) -> AvatarResponse:
    """Store an avatar image as user_<id>.<ext>, replacing any previous one."""
    ensure_owner_or_admin(current_user, user_id)
    user_store: UserStore = request.app.state.user_store
    uploads: UploadStore = request.app.state.uploads
    _get_user_or_404(user_store, user_id)

    max_bytes = get_settings().max_avatar_bytes
    raw = await avatar.read(max_bytes + 1)
    if len(raw) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail={"code": "file_too_large", "message": f"Avatar must be {max_bytes} bytes or smaller."},
        )
    try:
        filename = uploads.save_avatar(user_id, raw)
    except UnsupportedImageError as exc:
        raise HTTPException(
            status_code=415,
            detail={"code": "unsupported_media_type", "message": str(exc)},
        ) from exc

    user_store.update_user(user_id, avatar=filename)
    return AvatarResponse(message="Avatar uploaded successfully.", filename=filename)


@router.delete("/user/{user_id}/avatar", response_model=MessageResponse)
def remove_avatar(request: Request, user_id: int, current_user: User = Depends(get_current_user)) -> MessageResponse:
    ensure_owner_or_admin(current_user, user_id)
    user_store: UserStore = request.app.state.user_store
    uploads: UploadStore = request.app.state.uploads

    user = _get_user_or_404(user_store, user_id)
    if user.avatar:
        uploads.delete_avatar(user.avatar)
    user_store.update_user(user_id, avatar="")
    return MessageResponse(message="Avatar removed.")


@router.get("/user/{user_id}/avatar", response_class=FileResponse)
def get_avatar(request: Request, user_id: int) -> FileResponse:
    user_store: UserStore = request.app.state.user_store
    uploads: UploadStore = request.app.state.uploads

    user = _get_user_or_404(user_store, user_id)
    path = uploads.avatar_path(user.avatar) if user.avatar else None
    if path is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "User has no avatar."},
        )
    return FileResponse(path)
