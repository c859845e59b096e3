"""Core domain models for the job board.

This module defines the data structures passed between the persistence,
matching, notification and API layers:
- User, Profile: accounts and the job seeker's skills / résumé reference
- Job: a posting owned by a recruiter (or by nobody, when imported from a feed)
- Application, SavedJob: a job seeker's relationship to a job
- Notification: a ledger entry telling one user about one event

All models serialize to camelCase JSON (``createdAt``, ``postedBy``), which is
what the browser client consumes; Python code uses snake_case.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from jobboard.utils.timestamps import ensure_utc


class UserRole(str, Enum):
    """Account roles."""

    JOBSEEKER = "jobseeker"
    RECRUITER = "recruiter"
    ADMIN = "admin"


class UserStatus(str, Enum):
    """Account moderation state."""

    ACTIVE = "active"
    SUSPENDED = "suspended"


class JobStatus(str, Enum):
    """Job posting lifecycle. Jobs are created open."""

    OPEN = "open"
    PAUSED = "paused"
    CLOSED = "closed"


class JobType(str, Enum):
    """Employment type of a posting."""

    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    REMOTE = "remote"
    HYBRID = "hybrid"


class ApplicationStatus(str, Enum):
    """Application lifecycle. Applications are created pending."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: str) -> "ApplicationStatus":
        """
        Parse a status string, accepting "accepted" as a synonym of approved.

        Raises:
            ValueError: If the value is not a known status
        """
        normalized = (value or "").strip().lower()
        if normalized == "accepted":
            return cls.APPROVED
        return cls(normalized)


class NotificationType(str, Enum):
    """Kinds of ledger entries produced by the orchestration services."""

    NEW_APPLICATION = "newApplication"
    APPLICATION_UPDATE = "applicationUpdate"
    JOB_REOPENED = "jobReopened"
    RECOMMENDED_JOB = "recommendedJob"
    JOB_STATUS_UPDATE = "jobStatusUpdate"
    JOB_DELETED = "jobDeleted"
    ACCOUNT_BANNED = "accountBanned"
    ACCOUNT_UNBANNED = "accountUnbanned"


class DomainModel(BaseModel):
    """Base for domain models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys, as pushed over the live channel."""
        return self.model_dump(mode="json", by_alias=True)


class User(DomainModel):
    """A registered account."""

    id: int
    name: str
    email: str
    role: UserRole = UserRole.JOBSEEKER
    status: UserStatus = UserStatus.ACTIVE
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @property
    def is_suspended(self) -> bool:
        return self.status == UserStatus.SUSPENDED


class Profile(DomainModel):
    """A job seeker's profile. ``skills`` is the raw comma-separated text."""

    id: int
    user_id: int
    headline: Optional[str] = None
    experience: Optional[int] = None
    skills: Optional[str] = None
    resume_url: Optional[str] = None

    @property
    def has_resume(self) -> bool:
        return bool(self.resume_url and self.resume_url.strip())


class Job(DomainModel):
    """A job posting.

    ``posted_by`` is the owning recruiter's user id; feed-imported jobs have no
    owner. ``skills`` is stored as raw comma-separated text and only turned into
    a skill set by the matching engine.
    """

    id: int
    title: str
    company: str
    description: str
    skills: Optional[str] = None
    location: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    experience_required: Optional[int] = None
    job_type: JobType = JobType.FULL_TIME
    posted_by: Optional[int] = None
    status: JobStatus = JobStatus.OPEN
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @property
    def is_open(self) -> bool:
        return self.status == JobStatus.OPEN


class Application(DomainModel):
    """A job seeker's application to a job."""

    id: int
    applicant_id: int
    job_id: int
    status: ApplicationStatus = ApplicationStatus.PENDING
    applied_at: datetime

    @field_validator("applied_at")
    @classmethod
    def applied_at_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class SavedJob(DomainModel):
    """A bookmark of a job by a user."""

    id: int
    user_id: int
    job_id: int
    saved_at: datetime

    @field_validator("saved_at")
    @classmethod
    def saved_at_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class Notification(DomainModel):
    """A ledger entry: one message for one recipient."""

    id: int
    user_id: int
    type: NotificationType
    message: str
    data: Optional[Dict[str, Any]] = Field(None, description="Type-specific payload")
    is_read: bool = False
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)
