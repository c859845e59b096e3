"""Orchestration services: jobs, applications, admin moderation, profiles and saved jobs.

Service classes live in their own modules (``jobboard.services.jobs`` etc.);
this package only re-exports the business-rule errors.
"""

from .errors import AuthorizationError, ConflictError, DomainError, NotFoundError, ValidationError

__all__ = [
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "AuthorizationError",
    "ConflictError",
]
