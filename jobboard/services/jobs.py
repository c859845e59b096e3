"""Job postings: creation, status changes, recommendations, search and fan-out.

Creating a job, or reopening one, notifies every job seeker whose skills
match it. The fan-out runs as a background task so the request returns as
soon as the job is saved; each recipient's notification is attempted on its
own, so one failure doesn't stop the rest.
"""

from typing import Any, Dict, List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool

from jobboard.auth import Actor
from jobboard.domain.models import Job, JobStatus, JobType, NotificationType, UserRole
from jobboard.logging import get_logger, log_context
from jobboard.matching import (
    LIVE_MATCH_LIMIT,
    ScoredCandidate,
    ScoredJob,
    SearchFilters,
    SearchHit,
    matched_candidates,
    rank_search_results,
    recommend_for_candidate,
)
from jobboard.persistence import JobRepository, ProfileRepository, get_session
from jobboard.realtime import events

from .background import TaskTracker
from .errors import AuthorizationError, NotFoundError, ValidationError
from .notifier import Notifier

logger = get_logger(__name__, component="jobs")


def parse_job_status(value: Any) -> JobStatus:
    """
    Parse a job status value.

    Raises:
        ValidationError: If the value is not open, paused or closed
    """
    try:
        return JobStatus(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(status.value for status in JobStatus)
        raise ValidationError(f"Invalid status '{value}'. Must be one of: {allowed}") from None


def job_with_score(job: Job, score: int) -> Dict[str, Any]:
    """Live-event body for a job annotated with a candidate's match score."""
    return {**job.to_wire(), "matchScore": score}


class JobService:
    """Orchestrates job lifecycle events and their notifications."""

    def __init__(self, notifier: Notifier, tasks: TaskTracker):
        self.notifier = notifier
        self.tasks = tasks

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_jobs(self) -> List[Job]:
        return await run_in_threadpool(_list_jobs)

    async def get_job(self, job_id: int) -> Job:
        job = await run_in_threadpool(_get_job, job_id)
        if job is None:
            raise NotFoundError("Job not found")
        return job

    async def list_own_jobs(self, actor: Actor) -> List[Job]:
        return await run_in_threadpool(_list_owner_jobs, actor.user_id)

    async def search(self, filters: SearchFilters) -> List[SearchHit]:
        """Rank every open job against the filters."""
        jobs = await run_in_threadpool(_list_open_jobs)
        hits = rank_search_results(jobs, filters)
        logger.debug(
            "Search executed",
            extra={"event": "job.search.executed", "jobs_considered": len(jobs)},
        )
        return hits

    async def recommend(self, actor: Actor) -> List[ScoredJob]:
        """Open jobs matching the actor's profile skills, best first.

        The three best matches are also pushed live as ``job:match``.
        """
        profile, jobs = await run_in_threadpool(_load_recommendation_inputs, actor.user_id)
        if profile is None or not profile.skills:
            return []

        scored = recommend_for_candidate(jobs, profile.skills)
        for entry in scored[:LIVE_MATCH_LIMIT]:
            await self.notifier.push(
                actor.user_id, actor.role, events.JOB_MATCH, {**entry.job.to_wire(), "score": entry.score}
            )

        logger.info(
            "Recommendations computed",
            extra={
                "event": "job.recommendations.computed",
                "user_id": actor.user_id,
                "matches": len(scored),
            },
        )
        return scored

    async def matched_candidates(self, actor: Actor, job_id: int) -> Tuple[Job, List[ScoredCandidate]]:
        """Job seekers matching one of the actor's jobs, best first.

        Raises:
            NotFoundError: If the job doesn't exist
            AuthorizationError: If the actor doesn't own the job
        """
        job, candidates = await run_in_threadpool(_load_candidates, job_id)
        if job is None:
            raise NotFoundError("Job not found")
        if job.posted_by != actor.user_id:
            raise AuthorizationError("Not your job")
        if not job.skills:
            return job, []
        return job, matched_candidates(job, candidates)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def create_job(self, actor: Actor, **fields: Any) -> Job:
        """Save a new open job owned by the actor and start the match fan-out."""
        job = await run_in_threadpool(_create_job, actor.user_id, fields)

        logger.info(
            "Job created",
            extra={"event": "job.created", "job_id": job.id, "posted_by": actor.user_id},
        )

        await self.notifier.announce(events.JOB_NEW, job.to_wire())
        self.schedule_fan_out(job, NotificationType.RECOMMENDED_JOB, events.JOB_RECOMMENDED)
        return job

    async def update_status(self, actor: Actor, job_id: int, status: Any) -> Job:
        """Owner-only status change. Reopening a job re-runs the fan-out.

        Raises:
            ValidationError: If the status is unknown
            NotFoundError: If the job doesn't exist
            AuthorizationError: If the actor doesn't own the job
        """
        new_status = parse_job_status(status)
        old_status, job = await run_in_threadpool(_set_owned_job_status, actor.user_id, job_id, new_status)

        logger.info(
            "Job status changed",
            extra={
                "event": "job.status.changed",
                "job_id": job.id,
                "old_status": old_status.value,
                "new_status": new_status.value,
            },
        )

        if old_status != JobStatus.OPEN and new_status == JobStatus.OPEN:
            self.schedule_fan_out(job, NotificationType.JOB_REOPENED, events.JOB_REOPENED)
        return job

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    def schedule_fan_out(self, job: Job, notification_type: NotificationType, event: str) -> None:
        """Run ``fan_out`` in the background."""
        self.tasks.spawn(
            self.fan_out(job, notification_type, event),
            name=f"fanout-{notification_type.value}-job-{job.id}",
        )

    async def fan_out(self, job: Job, notification_type: NotificationType, event: str) -> int:
        """Notify every job seeker whose skills match the job.

        Returns:
            Number of recipients notified
        """
        with log_context(job_id=job.id, notification_type=notification_type.value):
            if not job.skills:
                logger.debug("Job has no skills, fan-out skipped", extra={"event": "fanout.skipped"})
                return 0

            candidates = await run_in_threadpool(_list_jobseeker_profiles)
            matches = matched_candidates(job, candidates)

            notified = 0
            for match in matches:
                notification = await self.notifier.notify(
                    match.user.id,
                    UserRole.JOBSEEKER,
                    notification_type,
                    {"job_id": job.id, "match_score": match.score},
                    event,
                    job_with_score(job, match.score),
                    job_title=job.title,
                    company=job.company,
                )
                if notification is not None:
                    notified += 1

            logger.info(
                f"Sent {notified} job match notification(s)",
                extra={
                    "event": "fanout.completed",
                    "candidates": len(candidates),
                    "matches": len(matches),
                    "notified": notified,
                },
            )
            return notified


# ----------------------------------------------------------------------
# Units of work (run in a worker thread)
# ----------------------------------------------------------------------


def _list_jobs() -> List[Job]:
    with get_session() as session:
        return JobRepository(session).list_all()


def _list_open_jobs() -> List[Job]:
    with get_session() as session:
        return JobRepository(session).list_open()


def _list_owner_jobs(user_id: int) -> List[Job]:
    with get_session() as session:
        return JobRepository(session).list_by_owner(user_id)


def _get_job(job_id: int) -> Optional[Job]:
    with get_session() as session:
        return JobRepository(session).get(job_id)


def _list_jobseeker_profiles():
    with get_session() as session:
        return ProfileRepository(session).list_for_role(UserRole.JOBSEEKER)


def _load_recommendation_inputs(user_id: int):
    with get_session() as session:
        profile = ProfileRepository(session).get_by_user(user_id)
        jobs = JobRepository(session).list_open() if profile and profile.skills else []
        return profile, jobs


def _load_candidates(job_id: int):
    with get_session() as session:
        job = JobRepository(session).get(job_id)
        if job is None or not job.skills:
            return job, []
        return job, ProfileRepository(session).list_for_role(UserRole.JOBSEEKER)


def _create_job(user_id: int, fields: Dict[str, Any]) -> Job:
    job_type = fields.pop("job_type", None) or JobType.FULL_TIME
    with get_session() as session:
        return JobRepository(session).create(
            posted_by=user_id,
            status=JobStatus.OPEN,
            job_type=JobType(job_type),
            **fields,
        )


def _set_owned_job_status(user_id: int, job_id: int, status: JobStatus) -> Tuple[JobStatus, Job]:
    with get_session() as session:
        repo = JobRepository(session)
        job = repo.get(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        if job.posted_by != user_id:
            raise AuthorizationError("Not your job")
        return job.status, repo.set_status(job_id, status)
