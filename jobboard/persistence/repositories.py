"""Data access layer (repositories) for persistence operations.

Repositories take an open Session, encapsulate the SQL for one aggregate and
return pydantic domain models rather than ORM rows. They flush but never
commit; the surrounding ``get_session()`` block owns the transaction.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

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
from jobboard.utils.timestamps import utc_now

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import (
    ApplicationModel,
    JobModel,
    NotificationModel,
    ProfileModel,
    SavedJobModel,
    UserModel,
    _format_datetime,
)

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user accounts."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: int) -> Optional[User]:
        """Retrieve a user by id, or None."""
        try:
            user_model = self.session.get(UserModel, user_id)
            return user_model.to_domain() if user_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve user: {e}") from e

    def get_by_email(self, email: str) -> Optional[User]:
        try:
            stmt = select(UserModel).where(func.lower(UserModel.email) == email.strip().lower())
            user_model = self.session.execute(stmt).scalar_one_or_none()
            return user_model.to_domain() if user_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving user by email: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve user: {e}") from e

    def get_many(self, user_ids: Iterable[int]) -> Dict[int, User]:
        """Retrieve several users at once, keyed by id. Unknown ids are absent."""
        ids = {user_id for user_id in user_ids if user_id is not None}
        if not ids:
            return {}
        try:
            stmt = select(UserModel).where(UserModel.id.in_(ids))
            return {model.id: model.to_domain() for model in self.session.execute(stmt).scalars()}
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving users {sorted(ids)}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve users: {e}") from e

    def list_all(self) -> List[User]:
        """All users ordered by id."""
        try:
            stmt = select(UserModel).order_by(UserModel.id.asc())
            return [model.to_domain() for model in self.session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing users: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list users: {e}") from e

    def create(
        self,
        name: str,
        email: str,
        role: UserRole = UserRole.JOBSEEKER,
        status: UserStatus = UserStatus.ACTIVE,
        created_at: Optional[datetime] = None,
    ) -> User:
        """Insert a user.

        Raises:
            DataIntegrityError: If the email is already registered
            PersistenceError: If database error occurs
        """
        try:
            user_model = UserModel(
                name=name,
                email=email,
                role=UserRole(role).value,
                status=UserStatus(status).value,
                created_at=_format_datetime(created_at or utc_now()),
            )
            self.session.add(user_model)
            self.session.flush()
            return user_model.to_domain()
        except IntegrityError as e:
            raise DataIntegrityError(f"User with email {email} already exists") from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating user {email}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create user: {e}") from e

    def set_status(self, user_id: int, status: UserStatus) -> User:
        """Update a user's moderation status.

        Raises:
            RecordNotFoundError: If the user doesn't exist
        """
        try:
            user_model = self.session.get(UserModel, user_id)
            if user_model is None:
                raise RecordNotFoundError(f"User {user_id} not found")
            user_model.status = UserStatus(status).value
            self.session.flush()
            return user_model.to_domain()
        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating status for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update user status: {e}") from e

    def delete(self, user_id: int) -> bool:
        """Remove a user account. Jobs they posted are kept."""
        try:
            result = self.session.execute(delete(UserModel).where(UserModel.id == user_id))
            self.session.flush()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(f"Error deleting user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to delete user: {e}") from e


class ProfileRepository:
    """Repository for job seeker profiles."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_user(self, user_id: int) -> Optional[Profile]:
        try:
            stmt = select(ProfileModel).where(ProfileModel.user_id == user_id)
            profile_model = self.session.execute(stmt).scalar_one_or_none()
            return profile_model.to_domain() if profile_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving profile for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve profile: {e}") from e

    def save(self, user_id: int, **fields) -> Profile:
        """Create the user's profile or update the given fields of the existing one.

        Args:
            user_id: Owner of the profile
            **fields: Any of headline, experience, skills, resume_url

        Raises:
            DataIntegrityError: If user_id does not reference a user
        """
        allowed = {"headline", "experience", "skills", "resume_url"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"Unknown profile fields: {sorted(unknown)}")

        try:
            stmt = select(ProfileModel).where(ProfileModel.user_id == user_id)
            profile_model = self.session.execute(stmt).scalar_one_or_none()

            if profile_model is None:
                profile_model = ProfileModel(user_id=user_id, **fields)
                self.session.add(profile_model)
            else:
                for key, value in fields.items():
                    setattr(profile_model, key, value)

            self.session.flush()
            return profile_model.to_domain()
        except IntegrityError as e:
            raise DataIntegrityError(f"Failed to save profile for user {user_id}: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error saving profile for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to save profile: {e}") from e

    def list_for_role(self, role: UserRole = UserRole.JOBSEEKER) -> List[Tuple[Profile, User]]:
        """Profiles whose owner has the given role, paired with the owner."""
        try:
            stmt = (
                select(ProfileModel, UserModel)
                .join(UserModel, UserModel.id == ProfileModel.user_id)
                .where(UserModel.role == UserRole(role).value)
                .order_by(ProfileModel.id.asc())
            )
            rows = self.session.execute(stmt).all()
            return [(profile.to_domain(), user.to_domain()) for profile, user in rows]
        except SQLAlchemyError as e:
            logger.error(f"Error listing profiles for role {role}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list profiles: {e}") from e

    def get_many_by_user(self, user_ids: Iterable[int]) -> Dict[int, Profile]:
        ids = set(user_ids)
        if not ids:
            return {}
        try:
            stmt = select(ProfileModel).where(ProfileModel.user_id.in_(ids))
            return {model.user_id: model.to_domain() for model in self.session.execute(stmt).scalars()}
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving profiles: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve profiles: {e}") from e


class JobRepository:
    """Repository for job postings."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, job_id: int) -> Optional[Job]:
        """Retrieve a job by id, or None."""
        try:
            job_model = self.session.get(JobModel, job_id)
            return job_model.to_domain() if job_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving job {job_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve job: {e}") from e

    def create(
        self,
        title: str,
        company: str,
        description: str,
        skills: Optional[str] = None,
        location: Optional[str] = None,
        salary_min: Optional[int] = None,
        salary_max: Optional[int] = None,
        experience_required: Optional[int] = None,
        job_type: JobType = JobType.FULL_TIME,
        posted_by: Optional[int] = None,
        status: JobStatus = JobStatus.OPEN,
        created_at: Optional[datetime] = None,
    ) -> Job:
        """Insert a job posting.

        Returns:
            Persisted Job with its generated id

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            job_model = JobModel(
                title=title,
                company=company,
                description=description,
                skills=skills,
                location=location,
                salary_min=salary_min,
                salary_max=salary_max,
                experience_required=experience_required,
                job_type=JobType(job_type).value,
                posted_by=posted_by,
                status=JobStatus(status).value,
                created_at=_format_datetime(created_at or utc_now()),
            )
            self.session.add(job_model)
            self.session.flush()
            return job_model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error creating job {title!r}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create job: {e}") from e

    def list_all(self) -> List[Job]:
        """All jobs, newest first."""
        return self._list(select(JobModel))

    def list_open(self) -> List[Job]:
        """Open jobs, newest first."""
        return self._list(select(JobModel).where(JobModel.status == JobStatus.OPEN.value))

    def list_by_owner(self, posted_by: int, status: Optional[JobStatus] = None) -> List[Job]:
        """Jobs posted by one recruiter, optionally filtered by status, newest first."""
        stmt = select(JobModel).where(JobModel.posted_by == posted_by)
        if status is not None:
            stmt = stmt.where(JobModel.status == JobStatus(status).value)
        return self._list(stmt)

    def _list(self, stmt) -> List[Job]:
        try:
            stmt = stmt.order_by(JobModel.created_at.desc(), JobModel.id.desc())
            return [model.to_domain() for model in self.session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing jobs: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list jobs: {e}") from e

    def set_status(self, job_id: int, status: JobStatus) -> Job:
        """Update a job's status.

        Raises:
            RecordNotFoundError: If the job doesn't exist
        """
        try:
            job_model = self.session.get(JobModel, job_id)
            if job_model is None:
                raise RecordNotFoundError(f"Job {job_id} not found")
            job_model.status = JobStatus(status).value
            self.session.flush()
            return job_model.to_domain()
        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating status for job {job_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update job status: {e}") from e

    def transition_owner_jobs(
        self, posted_by: int, from_status: JobStatus, to_status: JobStatus
    ) -> List[Job]:
        """Move every job of one owner in ``from_status`` to ``to_status``.

        Returns:
            The jobs that changed, in their new state

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(JobModel.id).where(
                JobModel.posted_by == posted_by,
                JobModel.status == JobStatus(from_status).value,
            )
            job_ids = list(self.session.execute(stmt).scalars())
            if not job_ids:
                return []

            self.session.execute(
                update(JobModel)
                .where(JobModel.id.in_(job_ids))
                .values(status=JobStatus(to_status).value)
                .execution_options(synchronize_session="fetch")
            )
            self.session.flush()
            return self._list(select(JobModel).where(JobModel.id.in_(job_ids)))
        except SQLAlchemyError as e:
            logger.error(
                f"Error moving jobs of owner {posted_by} from {from_status} to {to_status}: {e}",
                exc_info=True,
            )
            raise PersistenceError(f"Failed to transition jobs: {e}") from e

    def exists_with_title_and_company(self, title: str, company: str) -> bool:
        """Case-insensitive check used to de-duplicate imported jobs."""
        try:
            stmt = (
                select(JobModel.id)
                .where(
                    func.lower(JobModel.title) == title.strip().lower(),
                    func.lower(JobModel.company) == company.strip().lower(),
                )
                .limit(1)
            )
            return self.session.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            logger.error(f"Error checking for job {title!r} at {company!r}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to look up job: {e}") from e

    def delete(self, job_id: int) -> bool:
        """Delete a job together with its applications and saved-job rows.

        Returns:
            True if the job existed
        """
        try:
            self.session.execute(delete(ApplicationModel).where(ApplicationModel.job_id == job_id))
            self.session.execute(delete(SavedJobModel).where(SavedJobModel.job_id == job_id))
            result = self.session.execute(delete(JobModel).where(JobModel.id == job_id))
            self.session.flush()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(f"Error deleting job {job_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to delete job: {e}") from e


class ApplicationRepository:
    """Repository for job applications."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, application_id: int) -> Optional[Application]:
        try:
            app_model = self.session.get(ApplicationModel, application_id)
            return app_model.to_domain() if app_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving application {application_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve application: {e}") from e

    def find(self, applicant_id: int, job_id: int) -> Optional[Application]:
        """The applicant's application for a job, or None."""
        try:
            stmt = select(ApplicationModel).where(
                ApplicationModel.applicant_id == applicant_id,
                ApplicationModel.job_id == job_id,
            )
            app_model = self.session.execute(stmt).scalar_one_or_none()
            return app_model.to_domain() if app_model else None
        except SQLAlchemyError as e:
            logger.error(
                f"Error retrieving application of {applicant_id} for job {job_id}: {e}",
                exc_info=True,
            )
            raise PersistenceError(f"Failed to retrieve application: {e}") from e

    def create(self, applicant_id: int, job_id: int, applied_at: Optional[datetime] = None) -> Application:
        """Insert a pending application.

        Raises:
            DataIntegrityError: If the applicant already applied to the job
            PersistenceError: If database error occurs
        """
        try:
            app_model = ApplicationModel(
                applicant_id=applicant_id,
                job_id=job_id,
                status=ApplicationStatus.PENDING.value,
                applied_at=_format_datetime(applied_at or utc_now()),
            )
            self.session.add(app_model)
            self.session.flush()
            return app_model.to_domain()
        except IntegrityError as e:
            raise DataIntegrityError(
                f"Application of user {applicant_id} for job {job_id} violates a constraint: {e}"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating application for job {job_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create application: {e}") from e

    def list_for_applicant(self, applicant_id: int) -> List[Application]:
        """The applicant's applications, newest first."""
        return self._list(select(ApplicationModel).where(ApplicationModel.applicant_id == applicant_id))

    def list_for_job(self, job_id: int) -> List[Application]:
        """Applications to one job, newest first."""
        return self._list(select(ApplicationModel).where(ApplicationModel.job_id == job_id))

    def _list(self, stmt) -> List[Application]:
        try:
            stmt = stmt.order_by(ApplicationModel.applied_at.desc(), ApplicationModel.id.desc())
            return [model.to_domain() for model in self.session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing applications: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list applications: {e}") from e

    def set_status(self, application_id: int, status: ApplicationStatus) -> Application:
        """Update an application's status.

        Raises:
            RecordNotFoundError: If the application doesn't exist
        """
        try:
            app_model = self.session.get(ApplicationModel, application_id)
            if app_model is None:
                raise RecordNotFoundError(f"Application {application_id} not found")
            app_model.status = ApplicationStatus(status).value
            self.session.flush()
            return app_model.to_domain()
        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating application {application_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update application status: {e}") from e


class SavedJobRepository:
    """Repository for saved (bookmarked) jobs."""

    def __init__(self, session: Session):
        self.session = session

    def find(self, user_id: int, job_id: int) -> Optional[SavedJob]:
        try:
            stmt = select(SavedJobModel).where(
                SavedJobModel.user_id == user_id,
                SavedJobModel.job_id == job_id,
            )
            saved_model = self.session.execute(stmt).scalar_one_or_none()
            return saved_model.to_domain() if saved_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving saved job {job_id} for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve saved job: {e}") from e

    def create(self, user_id: int, job_id: int) -> SavedJob:
        """Insert a bookmark.

        Raises:
            DataIntegrityError: If the job is already saved by this user
        """
        try:
            saved_model = SavedJobModel(
                user_id=user_id,
                job_id=job_id,
                saved_at=_format_datetime(utc_now()),
            )
            self.session.add(saved_model)
            self.session.flush()
            return saved_model.to_domain()
        except IntegrityError as e:
            raise DataIntegrityError(f"Job {job_id} already saved by user {user_id}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error saving job {job_id} for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to save job: {e}") from e

    def delete(self, user_id: int, job_id: int) -> bool:
        """Remove a bookmark. Returns False if it did not exist."""
        try:
            result = self.session.execute(
                delete(SavedJobModel).where(
                    SavedJobModel.user_id == user_id,
                    SavedJobModel.job_id == job_id,
                )
            )
            self.session.flush()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(f"Error removing saved job {job_id} for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to remove saved job: {e}") from e

    def list_for_user(self, user_id: int) -> List[Tuple[SavedJob, Job]]:
        """The user's bookmarks paired with their jobs, newest first."""
        try:
            stmt = (
                select(SavedJobModel, JobModel)
                .join(JobModel, JobModel.id == SavedJobModel.job_id)
                .where(SavedJobModel.user_id == user_id)
                .order_by(SavedJobModel.saved_at.desc(), SavedJobModel.id.desc())
            )
            rows = self.session.execute(stmt).all()
            return [(saved.to_domain(), job.to_domain()) for saved, job in rows]
        except SQLAlchemyError as e:
            logger.error(f"Error listing saved jobs for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list saved jobs: {e}") from e


class NotificationRepository:
    """Repository for notification ledger rows.

    Every query is scoped by recipient id.
    """

    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        user_id: int,
        notification_type: NotificationType,
        message: str,
        data: Optional[dict] = None,
        created_at: Optional[datetime] = None,
    ) -> Notification:
        """Append a notification for one recipient.

        Raises:
            DataIntegrityError: If user_id does not reference a user
            PersistenceError: If database error occurs
        """
        try:
            notification_model = NotificationModel(
                user_id=user_id,
                type=NotificationType(notification_type).value,
                message=message,
                data=data,
                is_read=False,
                created_at=_format_datetime(created_at or utc_now()),
            )
            self.session.add(notification_model)
            self.session.flush()
            return notification_model.to_domain()
        except IntegrityError as e:
            raise DataIntegrityError(f"Cannot notify unknown user {user_id}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating notification for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create notification: {e}") from e

    def list_for_user(self, user_id: int) -> List[Notification]:
        """The recipient's notifications, newest first."""
        try:
            stmt = (
                select(NotificationModel)
                .where(NotificationModel.user_id == user_id)
                .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing notifications for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list notifications: {e}") from e

    def count_unread(self, user_id: int) -> int:
        try:
            stmt = select(func.count(NotificationModel.id)).where(
                NotificationModel.user_id == user_id,
                NotificationModel.is_read.is_(False),
            )
            return int(self.session.execute(stmt).scalar_one())
        except SQLAlchemyError as e:
            logger.error(f"Error counting unread notifications for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count notifications: {e}") from e

    def mark_read(self, user_id: int, notification_id: int) -> Optional[Notification]:
        """Mark one of the recipient's notifications read.

        Returns:
            The updated notification, or None if no notification with that id
            belongs to the recipient
        """
        try:
            stmt = select(NotificationModel).where(
                NotificationModel.id == notification_id,
                NotificationModel.user_id == user_id,
            )
            notification_model = self.session.execute(stmt).scalar_one_or_none()
            if notification_model is None:
                return None
            notification_model.is_read = True
            self.session.flush()
            return notification_model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error marking notification {notification_id} read: {e}", exc_info=True)
            raise PersistenceError(f"Failed to mark notification read: {e}") from e

    def mark_all_read(self, user_id: int) -> int:
        """Mark every unread notification of the recipient read. Returns the count."""
        try:
            result = self.session.execute(
                update(NotificationModel)
                .where(
                    NotificationModel.user_id == user_id,
                    NotificationModel.is_read.is_(False),
                )
                .values(is_read=True)
                .execution_options(synchronize_session=False)
            )
            self.session.flush()
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Error marking notifications read for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to mark notifications read: {e}") from e
