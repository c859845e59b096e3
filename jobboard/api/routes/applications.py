"""Application routes."""

from typing import List

from fastapi import APIRouter, Depends

from jobboard.auth import Actor
from jobboard.domain.models import Application
from jobboard.services.container import ServiceContainer

from ..dependencies import current_actor, get_services, require_jobseeker, require_recruiter
from ..schemas import Applicant, ApplicationWithJob, StatusUpdateRequest, UserSummary

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post("/{job_id}", response_model=Application, status_code=201)
async def apply_to_job(
    job_id: int,
    actor: Actor = Depends(require_jobseeker),
    services: ServiceContainer = Depends(get_services),
):
    return await services.applications.apply(actor, job_id)


@router.get("/me", response_model=List[ApplicationWithJob])
async def my_applications(
    actor: Actor = Depends(current_actor),
    services: ServiceContainer = Depends(get_services),
):
    entries = await services.applications.list_mine(actor)
    return [ApplicationWithJob(**application.model_dump(), job=job) for application, job in entries]


@router.get("/job/{job_id}", response_model=List[Applicant])
async def job_applicants(
    job_id: int,
    actor: Actor = Depends(require_recruiter),
    services: ServiceContainer = Depends(get_services),
):
    entries = await services.applications.list_for_job(actor, job_id)
    return [
        Applicant(
            **application.model_dump(),
            applicant=UserSummary(**user.model_dump()) if user else None,
            profile=profile,
        )
        for application, user, profile in entries
    ]


@router.patch("/{application_id}/status", response_model=Application)
async def update_application_status(
    application_id: int,
    body: StatusUpdateRequest,
    actor: Actor = Depends(require_recruiter),
    services: ServiceContainer = Depends(get_services),
):
    return await services.applications.update_status(actor, application_id, body.status)
