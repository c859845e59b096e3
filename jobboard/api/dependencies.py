"""FastAPI dependencies: services, authentication and role guards."""

from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from jobboard.auth import Actor, AuthenticationError, TokenService
from jobboard.domain.models import UserRole
from jobboard.logging import push_log_context
from jobboard.services.container import ServiceContainer
from jobboard.services.errors import AuthorizationError

bearer_scheme = HTTPBearer(auto_error=False)


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> Actor:
    """Authenticated identity from the ``Authorization: Bearer`` header.

    Raises:
        AuthenticationError: If the header is missing or the token is invalid
    """
    if credentials is None:
        raise AuthenticationError("Missing bearer token")
    actor = tokens.decode(credentials.credentials)
    push_log_context(actor_id=actor.user_id, actor_role=actor.role.value)
    return actor


def require_roles(*roles: UserRole) -> Callable[..., Actor]:
    """Dependency factory admitting only actors with one of the given roles."""
    allowed = frozenset(roles)

    async def guard(actor: Actor = Depends(current_actor)) -> Actor:
        if actor.role not in allowed:
            raise AuthorizationError("You do not have permission to perform this action")
        return actor

    return guard


require_recruiter = require_roles(UserRole.RECRUITER)
require_admin = require_roles(UserRole.ADMIN)
require_jobseeker = require_roles(UserRole.JOBSEEKER)
