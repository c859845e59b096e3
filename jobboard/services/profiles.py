"""Job seeker profiles: skills, headline, experience and résumé reference."""

from typing import Any, Optional

from fastapi.concurrency import run_in_threadpool

from jobboard.auth import Actor
from jobboard.domain.models import Profile
from jobboard.logging import get_logger
from jobboard.persistence import ProfileRepository, UserRepository, get_session

from .errors import NotFoundError

logger = get_logger(__name__, component="profiles")


class ProfileService:
    async def get(self, actor: Actor) -> Optional[Profile]:
        return await run_in_threadpool(_get_profile, actor.user_id)

    async def save(self, actor: Actor, **fields: Any) -> Profile:
        """Create or update the actor's profile with the given fields.

        Raises:
            NotFoundError: If the actor's account no longer exists
        """
        profile = await run_in_threadpool(_save_profile, actor.user_id, fields)
        logger.info(
            "Profile saved",
            extra={"event": "profile.saved", "user_id": actor.user_id, "fields": ",".join(sorted(fields))},
        )
        return profile


def _get_profile(user_id: int) -> Optional[Profile]:
    with get_session() as session:
        return ProfileRepository(session).get_by_user(user_id)


def _save_profile(user_id: int, fields) -> Profile:
    with get_session() as session:
        if UserRepository(session).get(user_id) is None:
            raise NotFoundError("User not found")
        return ProfileRepository(session).save(user_id, **fields)
