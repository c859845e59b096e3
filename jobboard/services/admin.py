"""Admin moderation: account suspension and direct control of job postings.

Suspending a recruiter pauses all of their open jobs; reactivating them
reopens those paused jobs. Only the account holder is told in either case;
reactivation does not re-run the candidate fan-out.
"""

from typing import Any, Dict, List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool

from jobboard.auth import Actor
from jobboard.domain.models import Job, JobStatus, NotificationType, User, UserRole, UserStatus
from jobboard.logging import get_logger, log_context
from jobboard.persistence import JobRepository, UserRepository, get_session
from jobboard.realtime import events

from .errors import NotFoundError, ValidationError
from .jobs import parse_job_status
from .notifier import Notifier

logger = get_logger(__name__, component="admin")


def parse_user_status(value: Any) -> UserStatus:
    """
    Parse an account status.

    Raises:
        ValidationError: If the value is not active or suspended
    """
    try:
        return UserStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError("Invalid status. Must be one of: active, suspended") from None


class AdminService:
    """Admin-only operations and their notifications."""

    def __init__(self, notifier: Notifier):
        self.notifier = notifier

    async def list_users(self) -> List[User]:
        return await run_in_threadpool(_list_users)

    async def list_jobs(self) -> List[Tuple[Job, Optional[User]]]:
        """Every job with its recruiter (None for imported or orphaned jobs)."""
        return await run_in_threadpool(_list_jobs_with_recruiters)

    async def update_user_status(self, actor: Actor, user_id: int, status: Any) -> User:
        """Suspend or reactivate an account.

        Job side effects and notifications happen only on an actual change of
        status; setting the current status again is a no-op.

        Raises:
            ValidationError: If the status is unknown
            NotFoundError: If the user doesn't exist
        """
        new_status = parse_user_status(status)
        old_status, user, changed_jobs = await run_in_threadpool(_set_user_status, user_id, new_status)

        with log_context(target_user_id=user.id, admin_id=actor.user_id):
            if old_status == new_status:
                logger.info(
                    "User status unchanged",
                    extra={"event": "admin.user.status_unchanged", "status": new_status.value},
                )
                return user

            owns_jobs = user.role == UserRole.RECRUITER
            count = len(changed_jobs) if owns_jobs else None

            if new_status == UserStatus.SUSPENDED:
                logger.info(
                    "User suspended",
                    extra={"event": "admin.user.suspended", "role": user.role.value, "jobs_paused": count},
                )
                message = self.notifier.render(NotificationType.ACCOUNT_BANNED, jobs_closed=count)
                await self.notifier.notify(
                    user.id,
                    user.role,
                    NotificationType.ACCOUNT_BANNED,
                    {"jobs_closed": count},
                    events.ACCOUNT_BANNED,
                    {"message": message, "jobsClosed": count},
                    message=message,
                )
            else:
                logger.info(
                    "User reactivated",
                    extra={"event": "admin.user.reactivated", "role": user.role.value, "jobs_reopened": count},
                )
                message = self.notifier.render(NotificationType.ACCOUNT_UNBANNED, jobs_reopened=count)
                await self.notifier.notify(
                    user.id,
                    user.role,
                    NotificationType.ACCOUNT_UNBANNED,
                    {"jobs_reopened": count},
                    events.ACCOUNT_UNBANNED,
                    {"message": message, "jobsReopened": count},
                    message=message,
                )
        return user

    async def update_job_status(self, actor: Actor, job_id: int, status: Any) -> Job:
        """Set any job's status and tell its recruiter.

        Only the recruiter is told; candidates are not notified, even when
        the job is reopened.

        Raises:
            ValidationError: If the status is unknown
            NotFoundError: If the job doesn't exist
        """
        new_status = parse_job_status(status)
        old_status, job, recruiter = await run_in_threadpool(_set_job_status, job_id, new_status)

        logger.info(
            "Admin changed job status",
            extra={
                "event": "admin.job.status_changed",
                "job_id": job.id,
                "admin_id": actor.user_id,
                "old_status": old_status.value,
                "new_status": new_status.value,
            },
        )

        if recruiter is not None:
            payload = {
                "job_id": job.id,
                "job_title": job.title,
                "old_status": old_status,
                "new_status": new_status,
            }
            await self.notifier.notify(
                recruiter.id,
                recruiter.role,
                NotificationType.JOB_STATUS_UPDATE,
                payload,
                events.JOB_STATUS,
                {
                    "jobId": job.id,
                    "jobTitle": job.title,
                    "oldStatus": old_status.value,
                    "newStatus": new_status.value,
                },
            )
        return job

    async def delete_job(self, actor: Actor, job_id: int) -> Dict[str, Any]:
        """Delete a job and tell its recruiter, if that account still exists.

        Raises:
            NotFoundError: If the job doesn't exist
        """
        job, recruiter = await run_in_threadpool(_delete_job, job_id)

        logger.info(
            "Admin deleted job",
            extra={"event": "admin.job.deleted", "job_id": job.id, "admin_id": actor.user_id},
        )

        if recruiter is None:
            logger.info(
                "Skipped notification for deleted job, recruiter not found",
                extra={"event": "admin.job.notify_skipped", "job_id": job.id, "posted_by": job.posted_by},
            )
        else:
            message = self.notifier.render(NotificationType.JOB_DELETED, job_title=job.title)
            await self.notifier.notify(
                recruiter.id,
                recruiter.role,
                NotificationType.JOB_DELETED,
                {"job_id": job.id, "job_title": job.title},
                events.JOB_DELETED,
                {"jobId": job.id, "jobTitle": job.title, "message": message},
                message=message,
            )

        return {"message": "Job deleted successfully", "jobId": job.id, "jobTitle": job.title}


# ----------------------------------------------------------------------
# Units of work (run in a worker thread)
# ----------------------------------------------------------------------


def _list_users() -> List[User]:
    with get_session() as session:
        return UserRepository(session).list_all()


def _list_jobs_with_recruiters():
    with get_session() as session:
        jobs = JobRepository(session).list_all()
        recruiters = UserRepository(session).get_many(job.posted_by for job in jobs)
        return [(job, recruiters.get(job.posted_by)) for job in jobs]


def _set_user_status(user_id: int, status: UserStatus):
    with get_session() as session:
        users = UserRepository(session)
        user = users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")

        old_status = user.status
        if old_status == status:
            return old_status, user, []

        updated = users.set_status(user_id, status)
        changed_jobs: List[Job] = []
        if user.role == UserRole.RECRUITER:
            jobs = JobRepository(session)
            if status == UserStatus.SUSPENDED:
                changed_jobs = jobs.transition_owner_jobs(user_id, JobStatus.OPEN, JobStatus.PAUSED)
            else:
                changed_jobs = jobs.transition_owner_jobs(user_id, JobStatus.PAUSED, JobStatus.OPEN)
        return old_status, updated, changed_jobs


def _set_job_status(job_id: int, status: JobStatus):
    with get_session() as session:
        repo = JobRepository(session)
        job = repo.get(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        updated = repo.set_status(job_id, status)
        recruiter = UserRepository(session).get(job.posted_by) if job.posted_by is not None else None
        return job.status, updated, recruiter


def _delete_job(job_id: int):
    with get_session() as session:
        repo = JobRepository(session)
        job = repo.get(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        recruiter = UserRepository(session).get(job.posted_by) if job.posted_by is not None else None
        repo.delete(job_id)
        return job, recruiter
