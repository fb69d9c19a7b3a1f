"""User account endpoints (admin only, except the unassigned listing)."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy import exists, select

from hr_admin.api.dependencies import AdminActor, DbSession, ReadScope, StaffActor, list_query_for
from hr_admin.api.routes.common import apply_warnings_header, list_envelope
from hr_admin.api.schemas import (
    Envelope,
    ErrorResponse,
    ListEnvelope,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from hr_admin.models import EmployeeProfile, User, UserRole
from hr_admin.services.querying import ListQuery
from hr_admin.services.registry import EntityKind
from hr_admin.services.resource_handler import ResourceHandler

router = APIRouter(prefix="/users", tags=["users"])

UserListQuery = Annotated[ListQuery, Depends(list_query_for(User))]


@router.get("", response_model=ListEnvelope[UserResponse])
async def list_users(
    db: DbSession, actor: AdminActor, query: UserListQuery, scope: ReadScope
) -> ListEnvelope[UserResponse]:
    """List users; inactive accounts only with include_inactive=true."""
    page = await ResourceHandler(db, EntityKind.USER).list(query, options=scope)
    return list_envelope(page, UserResponse)


@router.get("/unassigned", response_model=ListEnvelope[UserResponse])
async def list_unassigned_users(db: DbSession, actor: StaffActor) -> ListEnvelope[UserResponse]:
    """Active employee/HR users that have no employee profile yet."""
    has_profile = exists().where(EmployeeProfile.user_id == User.id)
    result = await db.execute(
        select(User)
        .where(
            User.role.in_([UserRole.EMPLOYEE.value, UserRole.HR.value]),
            User.active.is_not(False),
            ~has_profile,
        )
        .order_by(User.name)
    )
    users = [UserResponse.model_validate(u) for u in result.scalars().all()]
    return ListEnvelope[UserResponse](
        results=len(users), total=len(users), page=1, page_size=len(users), items=users
    )


@router.get(
    "/{user_id}",
    response_model=Envelope[UserResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_user(
    db: DbSession, actor: AdminActor, user_id: Annotated[UUID, Path()], scope: ReadScope
) -> Envelope[UserResponse]:
    document = await ResourceHandler(db, EntityKind.USER).get(user_id, scope)
    return Envelope[UserResponse](data=UserResponse.model_validate(document))


@router.post(
    "",
    response_model=Envelope[UserResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_user(
    db: DbSession, actor: AdminActor, payload: UserCreate
) -> Envelope[UserResponse]:
    """Create a user account (credentials are issued elsewhere)."""
    result = await ResourceHandler(db, EntityKind.USER).create(
        payload.model_dump(exclude_none=True), actor.id
    )
    return Envelope[UserResponse](
        data=UserResponse.model_validate(result.document), warnings=result.warnings
    )


@router.patch(
    "/{user_id}",
    response_model=Envelope[UserResponse],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_user(
    db: DbSession, actor: AdminActor, user_id: Annotated[UUID, Path()], payload: UserUpdate
) -> Envelope[UserResponse]:
    """Update a user; setting active=true reactivates a deactivated account."""
    result = await ResourceHandler(db, EntityKind.USER).update(
        user_id, payload.model_dump(exclude_unset=True, exclude_none=True), actor.id
    )
    return Envelope[UserResponse](
        data=UserResponse.model_validate(result.document), warnings=result.warnings
    )


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_user(
    db: DbSession, actor: AdminActor, user_id: Annotated[UUID, Path()], response: Response
) -> None:
    """Deactivate a user account."""
    result = await ResourceHandler(db, EntityKind.USER).delete(user_id, actor.id)
    apply_warnings_header(response, result.warnings)
