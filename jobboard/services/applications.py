"""Applications: the apply gate and recruiter decisions."""

from typing import Any, List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool

from jobboard.auth import Actor
from jobboard.domain.models import (
    Application,
    ApplicationStatus,
    Job,
    JobStatus,
    NotificationType,
    Profile,
    User,
    UserRole,
)
from jobboard.logging import get_logger
from jobboard.persistence import (
    ApplicationRepository,
    DataIntegrityError,
    JobRepository,
    ProfileRepository,
    UserRepository,
    get_session,
)
from jobboard.realtime import events

from .errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from .notifier import Notifier

logger = get_logger(__name__, component="applications")


def parse_application_status(value: Any) -> ApplicationStatus:
    """
    Parse an application status, accepting "accepted" for approved.

    Raises:
        ValidationError: If the value is unknown
    """
    try:
        return ApplicationStatus.parse(str(value) if value is not None else "")
    except ValueError:
        raise ValidationError(
            f"Invalid status '{value}'. Must be one of: pending, approved, rejected"
        ) from None


class ApplicationService:
    """Orchestrates applications and the notifications they trigger."""

    def __init__(self, notifier: Notifier):
        self.notifier = notifier

    async def apply(self, actor: Actor, job_id: int) -> Application:
        """Apply the actor to a job.

        Checks run in order and the first failure aborts the call:
        account not suspended, résumé on file, not already applied, job
        exists and is open. On success the job's recruiter is notified.

        Raises:
            NotFoundError: If the applicant or the job doesn't exist
            AuthorizationError: If the applicant's account is suspended
            ValidationError: If there is no résumé, or the job isn't open
            ConflictError: If the applicant already applied to the job
        """
        application, job, applicant, recruiter = await run_in_threadpool(
            _apply, actor.user_id, job_id
        )

        logger.info(
            "Application submitted",
            extra={
                "event": "application.created",
                "application_id": application.id,
                "job_id": job.id,
                "applicant_id": applicant.id,
            },
        )

        if recruiter is None:
            logger.info(
                "Job has no recruiter to notify",
                extra={"event": "application.notify_skipped", "job_id": job.id},
            )
            return application

        event_data = {
            **application.to_wire(),
            "job": job.to_wire(),
            "applicant": {"id": applicant.id, "name": applicant.name, "email": applicant.email},
        }
        await self.notifier.notify(
            recruiter.id,
            recruiter.role,
            NotificationType.NEW_APPLICATION,
            {"application_id": application.id, "job_id": job.id},
            events.APP_NEW,
            event_data,
            job_title=job.title,
            applicant_name=applicant.name,
        )
        return application

    async def update_status(self, actor: Actor, application_id: int, status: Any) -> Application:
        """Recruiter decision on an application; the applicant is notified.

        Raises:
            ValidationError: If the status is unknown
            NotFoundError: If the application doesn't exist
            AuthorizationError: If the actor doesn't own the job applied to
        """
        new_status = parse_application_status(status)
        application, job, applicant = await run_in_threadpool(
            _set_application_status, actor.user_id, application_id, new_status
        )

        logger.info(
            "Application status changed",
            extra={
                "event": "application.status.changed",
                "application_id": application.id,
                "status": new_status.value,
            },
        )

        if applicant is None:
            return application

        await self.notifier.notify(
            applicant.id,
            applicant.role,
            NotificationType.APPLICATION_UPDATE,
            {
                "application_id": application.id,
                "job_id": job.id,
                "job_title": job.title,
                "company": job.company,
                "status": application.status,
            },
            events.APP_STATUS,
            {
                "appId": application.id,
                "status": application.status.value,
                "jobId": job.id,
                "jobTitle": job.title,
                "company": job.company,
            },
        )
        return application

    async def list_mine(self, actor: Actor) -> List[Tuple[Application, Optional[Job]]]:
        """The actor's applications with their jobs, newest first."""
        return await run_in_threadpool(_list_for_applicant, actor.user_id)

    async def list_for_job(
        self, actor: Actor, job_id: int
    ) -> List[Tuple[Application, Optional[User], Optional[Profile]]]:
        """Applicants to one of the actor's jobs, each with their profile.

        Raises:
            NotFoundError: If the job doesn't exist
            AuthorizationError: If the actor doesn't own the job
        """
        return await run_in_threadpool(_list_for_job, actor.user_id, job_id)


# ----------------------------------------------------------------------
# Units of work (run in a worker thread)
# ----------------------------------------------------------------------


def _apply(user_id: int, job_id: int):
    with get_session() as session:
        users = UserRepository(session)
        applications = ApplicationRepository(session)

        applicant = users.get(user_id)
        if applicant is None:
            raise NotFoundError("User not found")
        if applicant.is_suspended:
            raise AuthorizationError("Your account has been suspended. You cannot apply for jobs.")

        profile = ProfileRepository(session).get_by_user(user_id)
        if profile is None or not profile.has_resume:
            raise ValidationError("Please upload your resume before applying")

        if applications.find(user_id, job_id) is not None:
            raise ConflictError("You have already applied")

        job = JobRepository(session).get(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        if job.status != JobStatus.OPEN:
            raise ValidationError("This job is not accepting applications")

        try:
            application = applications.create(user_id, job_id)
        except DataIntegrityError as e:
            # Lost a race with a concurrent apply for the same job
            raise ConflictError("You have already applied") from e

        recruiter = users.get(job.posted_by) if job.posted_by is not None else None
        return application, job, applicant, recruiter


def _set_application_status(user_id: int, application_id: int, status: ApplicationStatus):
    with get_session() as session:
        applications = ApplicationRepository(session)
        application = applications.get(application_id)
        if application is None:
            raise NotFoundError("Application not found")

        job = JobRepository(session).get(application.job_id)
        if job is None:
            raise NotFoundError("Job not found")
        if job.posted_by != user_id:
            raise AuthorizationError("Not your job")

        updated = applications.set_status(application_id, status)
        applicant = UserRepository(session).get(application.applicant_id)
        return updated, job, applicant


def _list_for_applicant(user_id: int):
    with get_session() as session:
        jobs = JobRepository(session)
        return [(app, jobs.get(app.job_id)) for app in ApplicationRepository(session).list_for_applicant(user_id)]


def _list_for_job(user_id: int, job_id: int):
    with get_session() as session:
        job = JobRepository(session).get(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        if job.posted_by != user_id:
            raise AuthorizationError("Not your job")

        applications = ApplicationRepository(session).list_for_job(job_id)
        applicant_ids = [app.applicant_id for app in applications]
        users = UserRepository(session).get_many(applicant_ids)
        profiles = ProfileRepository(session).get_many_by_user(applicant_ids)
        return [
            (app, users.get(app.applicant_id), profiles.get(app.applicant_id))
            for app in applications
        ]
