"""Persistence layer for the job board (SQLAlchemy).

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repository classes
    - UserRepository, ProfileRepository, JobRepository,
      ApplicationRepository, SavedJobRepository, NotificationRepository

    # Exceptions
    - PersistenceError, DatabaseConnectionError, RecordNotFoundError,
      DataIntegrityError

Example usage:
    >>> from jobboard.persistence import init_database, get_session, JobRepository
    >>> init_database("sqlite:///./data/job_board.db")
    >>> with get_session() as session:
    ...     open_jobs = JobRepository(session).list_open()
"""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import (
    ApplicationRepository,
    JobRepository,
    NotificationRepository,
    ProfileRepository,
    SavedJobRepository,
    UserRepository,
)

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    # Repositories
    "UserRepository",
    "ProfileRepository",
    "JobRepository",
    "ApplicationRepository",
    "SavedJobRepository",
    "NotificationRepository",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
