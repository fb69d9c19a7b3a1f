"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator, Callable, Coroutine
from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hr_admin.config import get_settings
from hr_admin.database import init_db
from hr_admin.exceptions import ForbiddenError, NotAuthenticatedError
from hr_admin.models import Base, User, UserRole
from hr_admin.services.entity_store import EntityStore
from hr_admin.services.guards import Actor
from hr_admin.services.querying import ListQuery, parse_list_query
from hr_admin.services.visibility import DEFAULT_READ, UNSCOPED_READ, ReadOptions


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_actor(
    db: DbSession,
    x_actor_id: Annotated[str | None, Header()] = None,
) -> Actor:
    """Resolve the acting user from the X-Actor-ID header.

    Session issuance happens upstream; this only maps an id to an active user.
    """
    if not x_actor_id:
        raise NotAuthenticatedError("You are not logged in! Please log in to get access")
    try:
        actor_id = UUID(x_actor_id)
    except ValueError:
        raise NotAuthenticatedError("Invalid X-Actor-ID format") from None

    user = await EntityStore(db, User, "user").find_by_id(actor_id)
    if user is None:
        raise NotAuthenticatedError("The user belonging to this token no longer exists")
    return Actor(id=user.id, role=user.role)


CurrentActor = Annotated[Actor, Depends(get_actor)]


def require_roles(*roles: UserRole) -> Callable[..., Coroutine[Any, Any, Actor]]:
    """Build a dependency that admits only the given roles."""
    allowed = {role.value for role in roles}

    async def dependency(actor: CurrentActor) -> Actor:
        if actor.role not in allowed:
            raise ForbiddenError("You do not have permission to perform this action")
        return actor

    return dependency


AdminActor = Annotated[Actor, Depends(require_roles(UserRole.ADMIN))]
StaffActor = Annotated[Actor, Depends(require_roles(UserRole.ADMIN, UserRole.HR))]


def list_query_for(model: type[Base]) -> Callable[[Request], ListQuery]:
    """Build a dependency parsing filter/sort/page query parameters for a model."""

    def dependency(
        request: Request,
        page: Annotated[int, Query(ge=1)] = 1,
        limit: Annotated[int | None, Query(ge=1)] = None,
        sort: str | None = None,
    ) -> ListQuery:
        settings = get_settings()
        return parse_list_query(
            model,
            request.query_params,
            default_page_size=settings.default_page_size,
            max_page_size=settings.max_page_size,
        )

    return dependency


def read_options(
    include_inactive: Annotated[bool, Query()] = False,
) -> ReadOptions:
    """Visibility scope requested for this call."""
    return UNSCOPED_READ if include_inactive else DEFAULT_READ


ReadScope = Annotated[ReadOptions, Depends(read_options)]
