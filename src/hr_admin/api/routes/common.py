"""Response helpers shared by the resource routers."""

from collections.abc import Callable
from typing import Any, TypeVar
from uuid import UUID

from fastapi import Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from hr_admin.api.schemas import ActorSummary, ListEnvelope
from hr_admin.models import User
from hr_admin.services.entity_store import EntityStore
from hr_admin.services.querying import Page
from hr_admin.services.visibility import UNSCOPED_READ

SchemaT = TypeVar("SchemaT", bound=BaseModel)

WARNINGS_HEADER = "X-Operation-Warnings"


def list_envelope(
    page: Page,
    schema: type[SchemaT],
    enrich: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
) -> ListEnvelope[SchemaT]:
    """Wrap a page of snapshots in the list envelope."""
    items = [schema.model_validate(enrich(item) if enrich else item) for item in page.items]
    return ListEnvelope[schema](
        results=len(items),
        total=page.total,
        page=page.page,
        page_size=page.page_size,
        items=items,
    )


def apply_warnings_header(response: Response, warnings: list[str]) -> None:
    """Surface secondary warnings on bodiless (204) responses."""
    if warnings:
        response.headers[WARNINGS_HEADER] = "; ".join(warnings)


async def actor_summaries(db: AsyncSession, *user_ids: UUID | None) -> dict[UUID, ActorSummary]:
    """Resolve user ids to summaries in one query; deactivated users included."""
    wanted = {user_id for user_id in user_ids if user_id is not None}
    if not wanted:
        return {}
    users = await EntityStore(db, User, "user").find_all(
        User.id.in_(wanted), options=UNSCOPED_READ
    )
    return {user.id: ActorSummary.model_validate(user) for user in users}


async def with_stamps(db: AsyncSession, document: dict[str, Any]) -> dict[str, Any]:
    """Add ``created_by_user`` and ``updated_by_user`` to a snapshot."""
    users = await actor_summaries(db, document.get("created_by"), document.get("updated_by"))
    return {
        **document,
        "created_by_user": users.get(document.get("created_by")),
        "updated_by_user": users.get(document.get("updated_by")),
    }
