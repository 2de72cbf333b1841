"""
api/routes/v1/job_applications.py -- Job application tracking routes.

Routes (in registration order to avoid FastAPI path capture conflicts):
  POST   /job-application/documents/upload                -- upload 1..10 documents
  GET    /job-application/documents/{user_id}/{file_name} -- download a document
  POST   /job-application                                 -- create a record
  GET    /job-application/{user_id}                       -- list a user's records, newest first
  PUT    /job-application/{application_id}                -- replace a record's fields
  DELETE /job-application/{application_id}                -- delete a record

Ownership:
  Records belong to the user named in their "user" field. Non-admins can
  only create, list, edit, or delete their own. PUT may not move a record to
  another user unless the caller is an admin.

File uploads:
  /documents/upload accepts multipart/form-data with up to 10 "documents"
  parts, each capped at MAX_DOCUMENT_BYTES. Files land in the owner's own
  folder (the caller, or the "user" form field for admins). File names are
  reduced to their base name; re-uploading a name the owner already has
  overwrites it. Downloads are owner-or-admin like every other record.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse

from api.models import (
    DocumentUploadResponse,
    JobApplicationEnvelope,
    JobApplicationInput,
    JobApplicationListResponse,
    JobApplicationResponse,
    MessageResponse,
)
from applications.models import JobApplication
from applications.store import ApplicationStore
from auth.dependencies import ensure_owner_or_admin, get_current_user
from auth.models import User
from core.config import get_settings
from uploads.store import UnsafeFileNameError, UploadStore

logger = logging.getLogger("jobtrack.api.applications")

# Every route here requires authentication; handlers that need the user
# itself declare Depends(get_current_user) again (FastAPI caches it per request).
router = APIRouter(dependencies=[Depends(get_current_user)])

_MAX_DOCUMENTS_PER_UPLOAD = 10


def _get_application_or_404(store: ApplicationStore, application_id: int) -> JobApplication:
    application = store.get(application_id)
    if application is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Job application not found."},
        )
    return application


# ---------------------------------------------------------------------------
# Documents (must be registered before /job-application/{user_id})
# ---------------------------------------------------------------------------


@router.post("/job-application/documents/upload", response_model=DocumentUploadResponse)
async def upload_documents(
    request: Request,
    documents: list[UploadFile] = File(...),
    user: Optional[int] = Form(None),
    current_user: User = Depends(get_current_user),
) -> DocumentUploadResponse:
    """Store uploaded documents in the owner's folder and return the names to reference them by.

    The owner is the caller unless an admin names another user in the "user"
    form field.
    """
    owner_id = current_user.id if user is None else user
    ensure_owner_or_admin(current_user, owner_id)
    if len(documents) > _MAX_DOCUMENTS_PER_UPLOAD:
        raise HTTPException(
            status_code=400,
            detail={
                "code": "too_many_files",
                "message": f"At most {_MAX_DOCUMENTS_PER_UPLOAD} documents per upload.",
            },
        )

    max_bytes = get_settings().max_document_bytes
    batch: list[tuple[Optional[str], bytes]] = []
    for document in documents:
        raw = await document.read(max_bytes + 1)
        if len(raw) > max_bytes:
            raise HTTPException(
                status_code=413,
                detail={
                    "code": "file_too_large",
                    "message": f"{document.filename} exceeds {max_bytes} bytes.",
                },
            )
        batch.append((document.filename, raw))

    uploads: UploadStore = request.app.state.uploads
    try:
        file_names = uploads.save_documents(owner_id, batch)
    except UnsafeFileNameError as exc:
        raise HTTPException(
            status_code=400,
            detail={"code": "invalid_file_name", "message": str(exc)},
        ) from exc
    return DocumentUploadResponse(message="Documents uploaded successfully.", user=owner_id, file_names=file_names)


@router.get("/job-application/documents/{user_id}/{file_name}", response_class=FileResponse)
def download_document(
    request: Request,
    user_id: int,
    file_name: str,
    current_user: User = Depends(get_current_user),
) -> FileResponse:
    ensure_owner_or_admin(current_user, user_id)
    uploads: UploadStore = request.app.state.uploads
    try:
        path = uploads.document_path(user_id, file_name)
    except UnsafeFileNameError as exc:
        raise HTTPException(
            status_code=400,
            detail={"code": "invalid_file_name", "message": str(exc)},
        ) from exc
    if path is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Document not found."},
        )
    return FileResponse(path, filename=file_name)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@router.post("/job-application", response_model=JobApplicationEnvelope, status_code=201)
def create_application(
    request: Request,
    body: JobApplicationInput,
    current_user: User = Depends(get_current_user),
) -> JobApplicationEnvelope:
    ensure_owner_or_admin(current_user, body.user)
    store: ApplicationStore = request.app.state.applications
    application_id = store.create(body.to_domain())
    created = _get_application_or_404(store, application_id)
    logger.info("Application %d created for user %d", application_id, body.user)
    return JobApplicationEnvelope(
        message="Job application created successfully.",
        job_application=JobApplicationResponse.from_application(created),
    )


@router.get("/job-application/{user_id}", response_model=JobApplicationListResponse)
def list_applications(
    request: Request,
    user_id: int,
    current_user: User = Depends(get_current_user),
) -> JobApplicationListResponse:
    ensure_owner_or_admin(current_user, user_id)
    store: ApplicationStore = request.app.state.applications
    return JobApplicationListResponse(
        message="Job applications retrieved successfully.",
        applications=[JobApplicationResponse.from_application(a) for a in store.list_for_user(user_id)],
    )


@router.put("/job-application/{application_id}", response_model=JobApplicationEnvelope)
def update_application(
    request: Request,
    application_id: int,
    body: JobApplicationInput,
    current_user: User = Depends(get_current_user),
) -> JobApplicationEnvelope:
    """Replace every editable field. Omitted optional fields reset to their defaults."""
    store: ApplicationStore = request.app.state.applications
    existing = _get_application_or_404(store, application_id)
    ensure_owner_or_admin(current_user, existing.user_id)
    ensure_owner_or_admin(current_user, body.user)

    store.replace(application_id, body.to_domain())
    updated = _get_application_or_404(store, application_id)
    return JobApplicationEnvelope(
        message="Job application updated successfully.",
        job_application=JobApplicationResponse.from_application(updated),
    )


@router.delete("/job-application/{application_id}", response_model=MessageResponse)
def delete_application(
    request: Request,
    application_id: int,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    store: ApplicationStore = request.app.state.applications
    existing = _get_application_or_404(store, application_id)
    ensure_owner_or_admin(current_user, existing.user_id)
    store.delete(application_id)
    return MessageResponse(message="Job application deleted successfully.")
