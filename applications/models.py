"""
applications/models.py -- Domain dataclass for job application records.

These are pure data containers with zero logic. Persistence lives in
applications/store.py; validation of client input lives in api/models.py.
"""

from dataclasses import dataclass, field
from typing import Optional

# Pipeline stages a job application moves through. "applied" is the default
# for new records.
APPLICATION_STATUSES: tuple[str, ...] = ("applied", "interviewing", "offer", "rejected")


@dataclass
class JobApplication:
    """One job the user applied for.

    date_applied / interview_date are ISO dates (YYYY-MM-DD).
    documents holds file names previously uploaded through
    POST /job-application/documents/upload.

    id is None before the record is written to the database.
    """

    user_id: int
    company: str
    position: str
    location: str
    date_applied: str
    status: str = "applied"
    min_salary: Optional[float] = None
    max_salary: Optional[float] = None
    interview_date: Optional[str] = None
    interview_time: str = ""
    job_url: str = ""
    notes: str = ""
    documents: list[str] = field(default_factory=list)
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, set by store on every write
