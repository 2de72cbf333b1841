"""
applications/store.py -- SQLAlchemy-backed persistence for job applications.

Uses SQLAlchemy Core (not ORM) so the dataclass in applications/models.py
remains the authoritative domain representation. Swapping SQLite for
PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. ApplicationStore is the repository;
_row_to_application is the mapper. Route handlers never touch SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = ApplicationStore("sqlite:///jobtrack.db")
    app_id = store.create(JobApplication(user_id=1, company="Acme", ...))
    apps = store.list_for_user(1)
    store.close()
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Float, Integer, MetaData, String, Table, Text
from sqlalchemy.engine import Engine

from applications.models import APPLICATION_STATUSES, JobApplication
from core.db import make_engine

logger = logging.getLogger("jobtrack.applications")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_applications = Table(
    "job_applications",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("company", String(255), nullable=False),
    Column("position", String(255), nullable=False),
    Column("location", String(255), nullable=False),
    Column("status", String(20), nullable=False, server_default="applied"),
    Column("min_salary", Float),
    Column("max_salary", Float),
    Column("date_applied", String(10), nullable=False),  # YYYY-MM-DD
    Column("interview_date", String(10)),  # YYYY-MM-DD
    Column("interview_time", String(20), nullable=False, server_default=""),
    Column("job_url", Text, nullable=False, server_default=""),
    Column("notes", Text, nullable=False, server_default=""),
    Column("documents", Text, nullable=False, server_default="[]"),  # JSON array of file names
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    # AUTOINCREMENT: ids of deleted rows are never handed out again.
    sqlite_autoincrement=True,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _editable_values(application: JobApplication) -> dict:
    """Column values a client controls, trimmed and checked.

    Shared by create() and replace() so both paths store identical shapes.
    """
    if application.status not in APPLICATION_STATUSES:
        raise ValueError(f"Unknown application status: {application.status!r}")
    return {
        "user_id": application.user_id,
        "company": application.company.strip(),
        "position": application.position.strip(),
        "location": application.location.strip(),
        "status": application.status,
        "min_salary": application.min_salary or None,
        "max_salary": application.max_salary or None,
        "date_applied": application.date_applied,
        "interview_date": application.interview_date,
        "interview_time": application.interview_time or "",
        "job_url": (application.job_url or "").strip(),
        "notes": application.notes or "",
        "documents": json.dumps(list(application.documents)),
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ApplicationStore:
    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        metadata.create_all(self.engine)

    def create(self, application: JobApplication) -> int:
        """Insert a new job application and return its assigned database ID.

        Raises ValueError for a status outside APPLICATION_STATUSES.
        """
        now = _now_iso()
        values = _editable_values(application)
        with self.engine.connect() as conn:
            result = conn.execute(_applications.insert().values(created_at=now, updated_at=now, **values))
            conn.commit()
            return result.inserted_primary_key[0]

    def get(self, application_id: int) -> Optional[JobApplication]:
        """Return one application by ID, or None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_applications.select().where(_applications.c.id == application_id)).fetchone()
        return _row_to_application(row) if row is not None else None

    def list_for_user(self, user_id: int) -> list[JobApplication]:
        """Return every application owned by user_id, newest first.

        id breaks ties so records created within the same timestamp tick keep
        insertion order reversed.
        """
        with self.engine.connect() as conn:
            rows = conn.execute(
                _applications.select()
                .where(_applications.c.user_id == user_id)
                .order_by(_applications.c.created_at.desc(), _applications.c.id.desc())
            ).fetchall()
        return [_row_to_application(r) for r in rows]

    def replace(self, application_id: int, application: JobApplication) -> bool:
        """Overwrite every editable field of an existing application.

        Returns True if a row was updated, False if application_id was not found.
        """
        values = _editable_values(application)
        with self.engine.connect() as conn:
            result = conn.execute(
                _applications.update()
                .where(_applications.c.id == application_id)
                .values(updated_at=_now_iso(), **values)
            )
            conn.commit()
        return result.rowcount > 0

    def delete(self, application_id: int) -> bool:
        """Delete one application. Returns True if deleted, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_applications.delete().where(_applications.c.id == application_id))
            conn.commit()
        return result.rowcount > 0

    def delete_for_user(self, user_id: int) -> int:
        """Delete every application owned by user_id. Returns the number removed."""
        with self.engine.connect() as conn:
            result = conn.execute(_applications.delete().where(_applications.c.user_id == user_id))
            conn.commit()
        if result.rowcount:
            logger.info("Deleted %d application(s) for user %d", result.rowcount, user_id)
        return result.rowcount

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_application(row) -> JobApplication:
    try:
        documents = json.loads(row.documents or "[]")
    except json.JSONDecodeError:
        logger.warning("Application %s has unreadable documents column; treating as empty", row.id)
        documents = []
    return JobApplication(
        id=row.id,
        user_id=row.user_id,
        company=row.company,
        position=row.position,
        location=row.location,
        status=row.status,
        min_salary=row.min_salary,
        max_salary=row.max_salary,
        date_applied=row.date_applied,
        interview_date=row.interview_date,
        interview_time=row.interview_time or "",
        job_url=row.job_url or "",
        notes=row.notes or "",
        documents=documents,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
