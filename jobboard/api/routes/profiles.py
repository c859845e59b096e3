"""The caller's own profile."""

from typing import Optional

from fastapi import APIRouter, Depends

from jobboard.auth import Actor
from jobboard.domain.models import Profile
from jobboard.services.container import ServiceContainer

from ..dependencies import current_actor, get_services
from ..schemas import ProfileUpdateRequest

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=Optional[Profile])
async def get_profile(
    actor: Actor = Depends(current_actor),
    services: ServiceContainer = Depends(get_services),
):
    return await services.profiles.get(actor)


@router.post("", response_model=Profile)
async def save_profile(
    body: ProfileUpdateRequest,
    actor: Actor = Depends(current_actor),
    services: ServiceContainer = Depends(get_services),
):
    # Only fields present in the request are written
    return await services.profiles.save(actor, **body.model_dump(exclude_unset=True))
