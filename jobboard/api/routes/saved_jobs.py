"""Bookmark routes. Registered before the job routes so /jobs/saved wins."""

from typing import List

from fastapi import APIRouter, Depends, Response

from jobboard.auth import Actor
from jobboard.domain.models import SavedJob
from jobboard.services.container import ServiceContainer

from ..dependencies import current_actor, get_services
from ..schemas import SavedJobEntry

router = APIRouter(prefix="/jobs", tags=["saved-jobs"])


@router.get("/saved", response_model=List[SavedJobEntry])
async def list_saved_jobs(
    actor: Actor = Depends(current_actor),
    services: ServiceContainer = Depends(get_services),
):
    entries = await services.saved_jobs.list_saved(actor)
    return [SavedJobEntry(**saved.model_dump(), job=job) for saved, job in entries]


@router.post("/{job_id}/save", response_model=SavedJob, status_code=201)
async def save_job(
    job_id: int,
    actor: Actor = Depends(current_actor),
    services: ServiceContainer = Depends(get_services),
):
    return await services.saved_jobs.save(actor, job_id)


@router.delete("/{job_id}/save", status_code=204)
async def unsave_job(
    job_id: int,
    actor: Actor = Depends(current_actor),
    services: ServiceContainer = Depends(get_services),
):
    await services.saved_jobs.unsave(actor, job_id)
    return Response(status_code=204)
