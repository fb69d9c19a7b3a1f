"""Employee profile endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Response, status

from hr_admin.api.dependencies import (
    CurrentActor,
    DbSession,
    ReadScope,
    StaffActor,
    list_query_for,
)
from hr_admin.api.routes.common import apply_warnings_header, list_envelope, with_stamps
from hr_admin.api.schemas import (
    EmployeeProfileCreate,
    EmployeeProfileDetailResponse,
    EmployeeProfileResponse,
    EmployeeProfileUpdate,
    Envelope,
    ErrorResponse,
    ListEnvelope,
)
from hr_admin.exceptions import ForbiddenError, NotFoundError
from hr_admin.models import EmployeeProfile
from hr_admin.services.entity_store import EntityStore
from hr_admin.services.guards import GuardRules
from hr_admin.services.querying import ListQuery
from hr_admin.services.registry import EntityKind
from hr_admin.services.resource_handler import ResourceHandler

router = APIRouter(prefix="/employees", tags=["employees"])

ProfileListQuery = Annotated[ListQuery, Depends(list_query_for(EmployeeProfile))]


@router.get("", response_model=ListEnvelope[EmployeeProfileResponse])
async def list_employees(
    db: DbSession, actor: StaffActor, query: ProfileListQuery, scope: ReadScope
) -> ListEnvelope[EmployeeProfileResponse]:
    """List employee profiles; deactivated ones only with include_inactive=true."""
    page = await ResourceHandler(db, EntityKind.EMPLOYEE_PROFILE).list(query, options=scope)
    return list_envelope(page, EmployeeProfileResponse)


@router.get(
    "/me",
    response_model=Envelope[EmployeeProfileResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_my_profile(
    db: DbSession, actor: CurrentActor
) -> Envelope[EmployeeProfileResponse]:
    profile = await EntityStore(db, EmployeeProfile, "employee profile").find_one(
        EmployeeProfile.user_id == actor.id
    )
    if profile is None:
        raise NotFoundError(
            "employee profile",
            message=(
                "This user has an account but does not have an employee profile yet. "
                "Please contact HR to complete the registration."
            ),
        )
    return Envelope[EmployeeProfileResponse](data=EmployeeProfileResponse.model_validate(profile))


@router.get(
    "/{profile_id}",
    response_model=Envelope[EmployeeProfileDetailResponse],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_employee(
    db: DbSession, actor: CurrentActor, profile_id: Annotated[UUID, Path()]
) -> Envelope[EmployeeProfileDetailResponse]:
    """Staff may read any profile; employees only their own."""
    document = await ResourceHandler(db, EntityKind.EMPLOYEE_PROFILE).get(profile_id)
    if not (actor.is_admin or actor.is_hr) and document["user_id"] != actor.id:
        raise ForbiddenError("You do not have permission to perform this action")
    return Envelope[EmployeeProfileDetailResponse](
        data=EmployeeProfileDetailResponse.model_validate(await with_stamps(db, document))
    )


@router.post(
    "",
    response_model=Envelope[EmployeeProfileResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_employee(
    db: DbSession, actor: StaffActor, payload: EmployeeProfileCreate
) -> Envelope[EmployeeProfileResponse]:
    await GuardRules(db).check_profile_create(actor, payload.user_id)
    result = await ResourceHandler(db, EntityKind.EMPLOYEE_PROFILE).create(
        payload.model_dump(exclude_none=True), actor.id
    )
    return Envelope[EmployeeProfileResponse](
        data=EmployeeProfileResponse.model_validate(result.document), warnings=result.warnings
    )


@router.patch(
    "/{profile_id}",
    response_model=Envelope[EmployeeProfileResponse],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_employee(
    db: DbSession,
    actor: StaffActor,
    profile_id: Annotated[UUID, Path()],
    payload: EmployeeProfileUpdate,
) -> Envelope[EmployeeProfileResponse]:
    """Update a profile; a department change recounts both departments."""
    await GuardRules(db).check_profile_write(actor, profile_id)
    result = await ResourceHandler(db, EntityKind.EMPLOYEE_PROFILE).update(
        profile_id, payload.model_dump(exclude_unset=True, exclude_none=True), actor.id
    )
    return Envelope[EmployeeProfileResponse](
        data=EmployeeProfileResponse.model_validate(result.document), warnings=result.warnings
    )


@router.delete(
    "/{profile_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_employee(
    db: DbSession,
    actor: StaffActor,
    profile_id: Annotated[UUID, Path()],
    response: Response,
) -> None:
    """Deactivate a profile and the user account behind it."""
    await GuardRules(db).check_profile_write(actor, profile_id)
    profiles = ResourceHandler(db, EntityKind.EMPLOYEE_PROFILE)
    profile = await profiles.get(profile_id)
    result = await profiles.delete(profile_id, actor.id)

    user_result = await ResourceHandler(db, EntityKind.USER).update(
        profile["user_id"], {"active": False}, actor.id
    )
    apply_warnings_header(response, result.warnings + user_result.warnings)
