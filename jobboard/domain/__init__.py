"""Domain models for users, jobs, applications and notifications."""

from .models import (
    Application,
    ApplicationStatus,
    DomainModel,
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

__all__ = [
    "Application",
    "ApplicationStatus",
    "DomainModel",
    "Job",
    "JobStatus",
    "JobType",
    "Notification",
    "NotificationType",
    "Profile",
    "SavedJob",
    "User",
    "UserRole",
    "UserStatus",
]
