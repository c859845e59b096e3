"""Saved jobs (bookmarks).

Saving is idempotent: saving an already-saved job returns the existing
record. Applying twice, by contrast, is a conflict.
"""

from typing import List, Tuple

from fastapi.concurrency import run_in_threadpool

from jobboard.auth import Actor
from jobboard.domain.models import Job, SavedJob
from jobboard.logging import get_logger
from jobboard.persistence import DataIntegrityError, JobRepository, SavedJobRepository, get_session

from .errors import NotFoundError

logger = get_logger(__name__, component="saved_jobs")


class SavedJobService:
    async def save(self, actor: Actor, job_id: int) -> SavedJob:
        """Bookmark a job.

        Raises:
            NotFoundError: If the job doesn't exist
        """
        saved, created = await run_in_threadpool(_save, actor.user_id, job_id)
        if created:
            logger.info(
                "Job saved",
                extra={"event": "saved_job.created", "user_id": actor.user_id, "job_id": job_id},
            )
        return saved

    async def unsave(self, actor: Actor, job_id: int) -> None:
        """Remove a bookmark.

        Raises:
            NotFoundError: If the job isn't saved
        """
        removed = await run_in_threadpool(_unsave, actor.user_id, job_id)
        if not removed:
            raise NotFoundError("Saved job not found")
        logger.info(
            "Job unsaved",
            extra={"event": "saved_job.removed", "user_id": actor.user_id, "job_id": job_id},
        )

    async def list_saved(self, actor: Actor) -> List[Tuple[SavedJob, Job]]:
        """The actor's bookmarks with their jobs, newest first."""
        return await run_in_threadpool(_list, actor.user_id)


def _save(user_id: int, job_id: int):
    try:
        with get_session() as session:
            if JobRepository(session).get(job_id) is None:
                raise NotFoundError("Job not found")
            repo = SavedJobRepository(session)
            existing = repo.find(user_id, job_id)
            if existing is not None:
                return existing, False
            return repo.create(user_id, job_id), True
    except DataIntegrityError:
        # A concurrent save of the same job won the insert
        with get_session() as session:
            return SavedJobRepository(session).find(user_id, job_id), False


def _unsave(user_id: int, job_id: int) -> bool:
    with get_session() as session:
        return SavedJobRepository(session).delete(user_id, job_id)


def _list(user_id: int):
    with get_session() as session:
        return SavedJobRepository(session).list_for_user(user_id)

