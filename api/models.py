"""
API request and response models for JobTrack REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
applications/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire format: camelCase field names (firstName, accessLevel, dateApplied, ...),
generated from the snake_case attribute names by to_camel. Handlers may build
models with either spelling (populate_by_name=True); responses are always
serialized by alias.
"""

from datetime import date
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, model_validator
from pydantic.alias_generators import to_camel

from applications.models import JobApplication
from auth.models import User

# ---------------------------------------------------------------------------
# Constrained types
# ---------------------------------------------------------------------------

_Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]

# Passwords are never stripped: surrounding whitespace is part of the secret.
_Password = Annotated[str, Field(min_length=1, max_length=1024)]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ApplicationStatusEnum(str, Enum):
    applied = "applied"
    interviewing = "interviewing"
    offer = "offer"
    rejected = "rejected"


# ---------------------------------------------------------------------------
# Shared envelopes
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Auth / users -- request models
# ---------------------------------------------------------------------------


class SigninRequest(_CamelModel):
    email: EmailStr
    password: _Password


class ChangePasswordRequest(_CamelModel):
    old_password: _Password
    new_password: _Password


class UserCreate(_CamelModel):
    """Request body for POST /api/v1/user (signup).

    There is no accessLevel field: every self-service signup starts at the
    default level. Admins raise levels later through PUT /user/{id}.
    """

    first_name: _Name
    last_name: _Name
    email: EmailStr
    password: _Password
    bio: str = Field(default="", max_length=2000)


class UserUpdate(_CamelModel):
    """Request body for PUT /api/v1/user/{id}. Every field is optional.

    A password that is empty or only whitespace is ignored rather than
    rejected, so a profile form can always send the field.
    """

    first_name: Optional[_Name] = None
    last_name: Optional[_Name] = None
    email: Optional[EmailStr] = None
    bio: Optional[str] = Field(default=None, max_length=2000)
    access_level: Optional[int] = Field(default=None, ge=1)
    new_user: Optional[bool] = None
    password: Optional[str] = Field(default=None, max_length=1024)


# ---------------------------------------------------------------------------
# Auth / users -- response models
# ---------------------------------------------------------------------------


class ProfileResponse(_CamelModel):
    """Public view of a user account. The stored hash never leaves the server."""

    id: int
    first_name: str
    last_name: str
    email: str
    bio: str
    access_level: int
    new_user: bool
    avatar: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "ProfileResponse":
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            bio=user.bio or "",
            access_level=user.access_level,
            new_user=user.new_user,
            avatar=user.avatar,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class AuthResponse(_CamelModel):
    """Returned by signin and signup: a fresh token plus the profile it snapshots."""

    message: str
    token: str
    user: ProfileResponse


class ProfileUpdatedResponse(_CamelModel):
    """token is set when callers change their own email; the token they held
    no longer matches the account."""

    message: str
    user: ProfileResponse
    token: Optional[str] = None


class TokenClaimsResponse(_CamelModel):
    """Decoded token as returned by GET /api/v1/auth/validate."""

    user: dict[str, Any]
    iat: Optional[int] = None
    exp: int


class AvatarResponse(_CamelModel):
    message: str
    filename: str


# ---------------------------------------------------------------------------
# Job applications
# ---------------------------------------------------------------------------


class JobApplicationInput(_CamelModel):
    """Request body for POST /api/v1/job-application and PUT /api/v1/job-application/{id}."""

    user: int
    company: _Name
    position: _Name
    location: _Name
    status: ApplicationStatusEnum = ApplicationStatusEnum.applied
    min_salary: Optional[float] = Field(default=None, ge=0)
    max_salary: Optional[float] = Field(default=None, ge=0)
    date_applied: date
    interview_date: Optional[date] = None
    interview_time: str = Field(default="", max_length=20)
    job_url: str = Field(default="", max_length=2048)
    notes: str = Field(default="", max_length=10000)
    documents: list[str] = Field(default_factory=list, max_length=50)

    @model_validator(mode="after")
    def check_salary_range(self) -> "JobApplicationInput":
        if self.min_salary and self.max_salary and self.min_salary > self.max_salary:
            raise ValueError("minSalary must not exceed maxSalary.")
        return self

    def to_domain(self) -> JobApplication:
        return JobApplication(
            user_id=self.user,
            company=self.company,
            position=self.position,
            location=self.location,
            status=self.status.value,
            min_salary=self.min_salary,
            max_salary=self.max_salary,
            date_applied=self.date_applied.isoformat(),
            interview_date=self.interview_date.isoformat() if self.interview_date else None,
            interview_time=self.interview_time,
            job_url=self.job_url,
            notes=self.notes,
            documents=self.documents,
        )


class JobApplicationResponse(_CamelModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user: int
    company: str
    position: str
    location: str
    status: str
    min_salary: Optional[float]
    max_salary: Optional[float]
    date_applied: date
    interview_date: Optional[date]
    interview_time: str
    job_url: str
    notes: str
    documents: list[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_application(cls, application: JobApplication) -> "JobApplicationResponse":
        """Factory Method -- the domain-to-wire mapping lives next to the wire model."""
        return cls(
            id=application.id,
            user=application.user_id,
            company=application.company,
            position=application.position,
            location=application.location,
            status=application.status,
            min_salary=application.min_salary,
            max_salary=application.max_salary,
            date_applied=application.date_applied,
            interview_date=application.interview_date,
            interview_time=application.interview_time,
            job_url=application.job_url,
            notes=application.notes,
            documents=application.documents,
            created_at=application.created_at,
            updated_at=application.updated_at,
        )


class JobApplicationEnvelope(_CamelModel):
    message: str
    job_application: JobApplicationResponse


class JobApplicationListResponse(_CamelModel):
    message: str
    applications: list[JobApplicationResponse]


class DocumentUploadResponse(_CamelModel):
    message: str
    user: int
    file_names: list[str]
