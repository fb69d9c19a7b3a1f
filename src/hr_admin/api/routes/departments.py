"""Department endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Response, status

from hr_admin.api.dependencies import (
    AdminActor,
    CurrentActor,
    DbSession,
    StaffActor,
    list_query_for,
)
from hr_admin.api.routes.common import apply_warnings_header, list_envelope
from hr_admin.api.schemas import (
    DepartmentCreate,
    DepartmentDetailResponse,
    DepartmentResponse,
    DepartmentUpdate,
    EmployeeProfileResponse,
    Envelope,
    ErrorResponse,
    ListEnvelope,
    ReconcileResponse,
)
from hr_admin.exceptions import NotFoundError
from hr_admin.models import Department, EmployeeProfile
from hr_admin.services.cascade import DepartmentCountCascade
from hr_admin.services.entity_store import EntityStore
from hr_admin.services.querying import ListQuery
from hr_admin.services.registry import EntityKind
from hr_admin.services.resource_handler import ResourceHandler

router = APIRouter(prefix="/departments", tags=["departments"])

DepartmentListQuery = Annotated[ListQuery, Depends(list_query_for(Department))]


@router.get("", response_model=ListEnvelope[DepartmentResponse])
async def list_departments(
    db: DbSession, actor: StaffActor, query: DepartmentListQuery
) -> ListEnvelope[DepartmentResponse]:
    page = await ResourceHandler(db, EntityKind.DEPARTMENT).list(query)
    return list_envelope(page, DepartmentResponse)


@router.get(
    "/my-team",
    response_model=ListEnvelope[EmployeeProfileResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_my_team(db: DbSession, actor: CurrentActor) -> ListEnvelope[EmployeeProfileResponse]:
    """Active colleagues in the caller's department."""
    profiles = EntityStore(db, EmployeeProfile, "employee profile")
    own = await profiles.find_one(EmployeeProfile.user_id == actor.id)
    if own is None:
        raise NotFoundError(
            "employee profile",
            message="This user does not have an employee profile yet. Please contact HR.",
        )
    team = await profiles.find_all(
        EmployeeProfile.department_id == own.department_id,
        EmployeeProfile.user_id != actor.id,
    )
    items = [EmployeeProfileResponse.model_validate(p) for p in team]
    return ListEnvelope[EmployeeProfileResponse](
        results=len(items), total=len(items), page=1, page_size=len(items), items=items
    )


@router.post(
    "/reconcile",
    response_model=ReconcileResponse,
)
async def reconcile_department_counts(db: DbSession, actor: AdminActor) -> ReconcileResponse:
    """Recompute every department's employee count (repair job)."""
    outcome = await DepartmentCountCascade(db).reconcile_all()
    return ReconcileResponse(counts=outcome.counts, warnings=outcome.warnings)


@router.get(
    "/{department_id}",
    response_model=Envelope[DepartmentDetailResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_department(
    db: DbSession, actor: StaffActor, department_id: Annotated[UUID, Path()]
) -> Envelope[DepartmentDetailResponse]:
    """Get a department with its active employee profiles."""
    document = await ResourceHandler(db, EntityKind.DEPARTMENT).get(department_id)
    employees = await EntityStore(db, EmployeeProfile, "employee profile").find_all(
        EmployeeProfile.department_id == department_id
    )
    detail = DepartmentDetailResponse(
        **DepartmentResponse.model_validate(document).model_dump(),
        employees=[EmployeeProfileResponse.model_validate(e) for e in employees],
    )
    return Envelope[DepartmentDetailResponse](data=detail)


@router.post(
    "",
    response_model=Envelope[DepartmentResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_department(
    db: DbSession, actor: StaffActor, payload: DepartmentCreate
) -> Envelope[DepartmentResponse]:
    result = await ResourceHandler(db, EntityKind.DEPARTMENT).create(
        payload.model_dump(), actor.id
    )
    return Envelope[DepartmentResponse](
        data=DepartmentResponse.model_validate(result.document), warnings=result.warnings
    )


@router.patch(
    "/{department_id}",
    response_model=Envelope[DepartmentResponse],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_department(
    db: DbSession,
    actor: StaffActor,
    department_id: Annotated[UUID, Path()],
    payload: DepartmentUpdate,
) -> Envelope[DepartmentResponse]:
    result = await ResourceHandler(db, EntityKind.DEPARTMENT).update(
        department_id, payload.model_dump(exclude_unset=True, exclude_none=True), actor.id
    )
    return Envelope[DepartmentResponse](
        data=DepartmentResponse.model_validate(result.document), warnings=result.warnings
    )


@router.delete(
    "/{department_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_department(
    db: DbSession,
    actor: StaffActor,
    department_id: Annotated[UUID, Path()],
    response: Response,
) -> None:
    """Delete a department. Departments still referenced by profiles are rejected."""
    result = await ResourceHandler(db, EntityKind.DEPARTMENT).delete(department_id, actor.id)
    apply_warnings_header(response, result.warnings)
