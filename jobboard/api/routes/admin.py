"""Administrator routes: account moderation and job oversight."""

from typing import List

from fastapi import APIRouter, Depends

from jobboard.auth import Actor
from jobboard.domain.models import Job, User
from jobboard.services.container import ServiceContainer

from ..dependencies import get_services, require_admin
from ..schemas import AdminJob, DeleteJobResponse, StatusUpdateRequest

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/users", response_model=List[User])
async def list_users(services: ServiceContainer = Depends(get_services)):
    return await services.admin.list_users()


@router.patch("/users/{user_id}/status", response_model=User)
async def update_user_status(
    user_id: int,
    body: StatusUpdateRequest,
    actor: Actor = Depends(require_admin),
    services: ServiceContainer = Depends(get_services),
):
    return await services.admin.update_user_status(actor, user_id, body.status)


@router.get("/jobs", response_model=List[AdminJob])
async def list_jobs(services: ServiceContainer = Depends(get_services)):
    entries = await services.admin.list_jobs()
    return [
        AdminJob(
            **job.model_dump(),
            recruiter_name=recruiter.name if recruiter else None,
            recruiter_email=recruiter.email if recruiter else None,
            recruiter_status=recruiter.status if recruiter else None,
        )
        for job, recruiter in entries
    ]


@router.patch("/jobs/{job_id}/status", response_model=Job)
async def update_job_status(
    job_id: int,
    body: StatusUpdateRequest,
    actor: Actor = Depends(require_admin),
    services: ServiceContainer = Depends(get_services),
):
    return await services.admin.update_job_status(actor, job_id, body.status)


@router.delete("/jobs/{job_id}", response_model=DeleteJobResponse)
async def delete_job(
    job_id: int,
    actor: Actor = Depends(require_admin),
    services: ServiceContainer = Depends(get_services),
):
    return await services.admin.delete_job(actor, job_id)
