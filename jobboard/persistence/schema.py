"""Database schema definition and ORM models.

ORM rows never leave the persistence layer: each model converts to and from
its pydantic domain counterpart with ``to_domain()`` / ``from_domain()``.
Timestamps are stored as fixed-width ISO 8601 UTC strings so they sort
lexicographically in chronological order.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    inspect,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from jobboard.domain.models import (
    Application,
    ApplicationStatus,
    Job,
    JobStatus,
    JobType,
    Notification,
    NotificationType,
    Profile,
    SavedJob,
    User,
    UserRole,
    UserStatus,
)

logger = logging.getLogger(__name__)

Base = declarative_base()


class UserModel(Base):
    """ORM model for users table."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(String(20), nullable=False, default=UserRole.JOBSEEKER.value)
    status = Column(String(20), nullable=False, default=UserStatus.ACTIVE.value)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_users_role", "role"),)

    def to_domain(self) -> User:
        return User(
            id=self.id,
            name=self.name,
            email=self.email,
            role=UserRole(self.role),
            status=UserStatus(self.status),
            created_at=_parse_datetime(self.created_at),
        )


class ProfileModel(Base):
    """ORM model for profiles table. One profile per user."""

    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    headline = Column(String(255), nullable=True)
    experience = Column(Integer, nullable=True)
    skills = Column(Text, nullable=True)
    resume_url = Column(Text, nullable=True)

    def to_domain(self) -> Profile:
        return Profile(
            id=self.id,
            user_id=self.user_id,
            headline=self.headline,
            experience=self.experience,
            skills=self.skills,
            resume_url=self.resume_url,
        )


class JobModel(Base):
    """ORM model for jobs table.

    ``posted_by`` is deliberately not a foreign key: a job outlives the
    recruiter account that posted it, and imported jobs have no owner.
    """

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    company = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    skills = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)
    experience_required = Column(Integer, nullable=True)
    job_type = Column(String(20), nullable=False, default=JobType.FULL_TIME.value)
    posted_by = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default=JobStatus.OPEN.value)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_jobs_status", "status"),
        Index("idx_jobs_posted_by_status", "posted_by", "status"),
        Index("idx_jobs_title_company", "title", "company"),
    )

    def to_domain(self) -> Job:
        return Job(
            id=self.id,
            title=self.title,
            company=self.company,
            description=self.description,
            skills=self.skills,
            location=self.location,
            salary_min=self.salary_min,
            salary_max=self.salary_max,
            experience_required=self.experience_required,
            job_type=JobType(self.job_type),
            posted_by=self.posted_by,
            status=JobStatus(self.status),
            created_at=_parse_datetime(self.created_at),
        )


class ApplicationModel(Base):
    """ORM model for applications table. One application per (applicant, job)."""

    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    applicant_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False, default=ApplicationStatus.PENDING.value)
    applied_at = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("applicant_id", "job_id", name="uq_applications_applicant_job"),
        Index("idx_applications_job", "job_id"),
    )

    def to_domain(self) -> Application:
        return Application(
            id=self.id,
            applicant_id=self.applicant_id,
            job_id=self.job_id,
            status=ApplicationStatus(self.status),
            applied_at=_parse_datetime(self.applied_at),
        )


class SavedJobModel(Base):
    """ORM model for saved_jobs table."""

    __tablename__ = "saved_jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    saved_at = Column(String(50), nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "job_id", name="uq_saved_jobs_user_job"),)

    def to_domain(self) -> SavedJob:
        return SavedJob(
            id=self.id,
            user_id=self.user_id,
            job_id=self.job_id,
            saved_at=_parse_datetime(self.saved_at),
        )


class NotificationModel(Base):
    """ORM model for notifications table (the ledger)."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(50), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_notifications_user_read", "user_id", "is_read"),
        Index("idx_notifications_user_created", "user_id", "created_at"),
    )

    def to_domain(self) -> Notification:
        return Notification(
            id=self.id,
            user_id=self.user_id,
            type=NotificationType(self.type),
            message=self.message,
            data=self.data,
            is_read=bool(self.is_read),
            created_at=_parse_datetime(self.created_at),
        )


def _format_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime as ISO 8601 UTC for storage (naive values are UTC)."""
    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    return dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _parse_datetime(dt_str: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO 8601 string back to an aware UTC datetime."""
    if dt_str is None or dt_str == "":
        return None

    dt_str = dt_str.rstrip("Z")
    try:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S.%f")
    except ValueError:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S")

    return dt.replace(tzinfo=timezone.utc)


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent)."""
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(
            f"Database schema ready. Tables: {', '.join(tables)}",
            extra={"event": "database.schema.ready"},
        )
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
