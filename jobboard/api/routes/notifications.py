"""Notification inbox routes. Every route is scoped to the caller's own rows."""

from typing import List

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from jobboard.auth import Actor
from jobboard.domain.models import Notification
from jobboard.services.container import ServiceContainer

from ..dependencies import current_actor, get_services
from ..schemas import ReadAllResult, UnreadCount

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[Notification])
async def list_notifications(
    actor: Actor = Depends(current_actor),
    services: ServiceContainer = Depends(get_services),
):
    return await run_in_threadpool(services.ledger.list_for_user, actor.user_id)


@router.get("/unread-count", response_model=UnreadCount)
async def unread_count(
    actor: Actor = Depends(current_actor),
    services: ServiceContainer = Depends(get_services),
):
    count = await run_in_threadpool(services.ledger.unread_count, actor.user_id)
    return UnreadCount(count=count)


@router.patch("/read-all", response_model=ReadAllResult)
async def mark_all_read(
    actor: Actor = Depends(current_actor),
    services: ServiceContainer = Depends(get_services),
):
    updated = await run_in_threadpool(services.ledger.mark_all_read, actor.user_id)
    return ReadAllResult(updated=updated)


@router.patch("/{notification_id}/read", response_model=Notification)
async def mark_read(
    notification_id: int,
    actor: Actor = Depends(current_actor),
    services: ServiceContainer = Depends(get_services),
):
    return await run_in_threadpool(services.ledger.mark_read, actor.user_id, notification_id)
