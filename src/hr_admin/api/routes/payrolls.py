"""Payroll endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Response, status

from hr_admin.api.dependencies import CurrentActor, DbSession, StaffActor, list_query_for
from hr_admin.api.routes.common import apply_warnings_header, list_envelope, with_stamps
from hr_admin.api.schemas import (
    EmployeeProfileResponse,
    Envelope,
    ErrorResponse,
    ListEnvelope,
    PayrollCreate,
    PayrollDetailResponse,
    PayrollResponse,
    PayrollUpdate,
)
from hr_admin.exceptions import ForbiddenError, NotFoundError
from hr_admin.models import EmployeeProfile, Payroll
from hr_admin.services.entity_store import EntityStore
from hr_admin.services.guards import GuardRules
from hr_admin.services.querying import ListQuery
from hr_admin.services.registry import EntityKind
from hr_admin.services.resource_handler import ResourceHandler
from hr_admin.services.visibility import UNSCOPED_READ

router = APIRouter(prefix="/payrolls", tags=["payrolls"])

PayrollListQuery = Annotated[ListQuery, Depends(list_query_for(Payroll))]


@router.get("", response_model=ListEnvelope[PayrollResponse])
async def list_payrolls(
    db: DbSession, actor: StaffActor, query: PayrollListQuery
) -> ListEnvelope[PayrollResponse]:
    """List payrolls; filter with e.g. ?employee_profile_id=...&year=2026."""
    page = await ResourceHandler(db, EntityKind.PAYROLL).list(query)
    return list_envelope(page, PayrollResponse)


@router.get(
    "/me",
    response_model=ListEnvelope[PayrollResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_my_payrolls(
    db: DbSession, actor: CurrentActor, query: PayrollListQuery
) -> ListEnvelope[PayrollResponse]:
    """The caller's own payroll history."""
    profile = await EntityStore(db, EmployeeProfile, "employee profile").find_one(
        EmployeeProfile.user_id == actor.id
    )
    if profile is None:
        raise NotFoundError("employee profile", message="No Employee Profile found for this user")
    page = await ResourceHandler(db, EntityKind.PAYROLL).list(
        query, Payroll.employee_profile_id == profile.id
    )
    return list_envelope(page, PayrollResponse)


@router.get(
    "/{payroll_id}",
    response_model=Envelope[PayrollDetailResponse],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_payroll(
    db: DbSession, actor: CurrentActor, payroll_id: Annotated[UUID, Path()]
) -> Envelope[PayrollDetailResponse]:
    """Staff may read any payroll; employees only their own."""
    document = await ResourceHandler(db, EntityKind.PAYROLL).get(payroll_id)
    profile = await EntityStore(db, EmployeeProfile, "employee profile").find_by_id(
        document["employee_profile_id"], UNSCOPED_READ
    )
    if not (actor.is_admin or actor.is_hr) and (profile is None or profile.user_id != actor.id):
        raise ForbiddenError("You do not have permission to perform this action")
    detail = await with_stamps(db, document)
    detail["employee_profile"] = (
        EmployeeProfileResponse.model_validate(profile) if profile is not None else None
    )
    return Envelope[PayrollDetailResponse](data=PayrollDetailResponse.model_validate(detail))


@router.post(
    "",
    response_model=Envelope[PayrollResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_payroll(
    db: DbSession, actor: StaffActor, payload: PayrollCreate
) -> Envelope[PayrollResponse]:
    """Create a payroll entry; net pay is derived from the current salary."""
    await GuardRules(db).check_payroll_write(actor, employee_profile_id=payload.employee_profile_id)
    result = await ResourceHandler(db, EntityKind.PAYROLL).create(
        payload.model_dump(exclude_none=True), actor.id
    )
    return Envelope[PayrollResponse](
        data=PayrollResponse.model_validate(result.document), warnings=result.warnings
    )


@router.patch(
    "/{payroll_id}",
    response_model=Envelope[PayrollResponse],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_payroll(
    db: DbSession,
    actor: StaffActor,
    payroll_id: Annotated[UUID, Path()],
    payload: PayrollUpdate,
) -> Envelope[PayrollResponse]:
    await GuardRules(db).check_payroll_write(actor, payroll_id=payroll_id)
    result = await ResourceHandler(db, EntityKind.PAYROLL).update(
        payroll_id, payload.model_dump(exclude_unset=True, exclude_none=True), actor.id
    )
    return Envelope[PayrollResponse](
        data=PayrollResponse.model_validate(result.document), warnings=result.warnings
    )


@router.delete(
    "/{payroll_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_payroll(
    db: DbSession,
    actor: StaffActor,
    payroll_id: Annotated[UUID, Path()],
    response: Response,
) -> None:
    result = await ResourceHandler(db, EntityKind.PAYROLL).delete(payroll_id, actor.id)
    apply_warnings_header(response, result.warnings)
