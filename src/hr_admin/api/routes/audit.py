"""Audit trail endpoints (read-only)."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from hr_admin.api.dependencies import CurrentActor, DbSession, StaffActor, list_query_for
from hr_admin.api.routes.common import actor_summaries, list_envelope
from hr_admin.api.schemas import (
    AuditRecordDetailResponse,
    AuditRecordResponse,
    Envelope,
    ErrorResponse,
    ListEnvelope,
)
from hr_admin.exceptions import ForbiddenError
from hr_admin.models import AuditRecord
from hr_admin.services.audit_writer import AuditReader
from hr_admin.services.entity_store import snapshot
from hr_admin.services.querying import ListQuery

router = APIRouter(prefix="/audit-logs", tags=["audit"])

AuditListQuery = Annotated[ListQuery, Depends(list_query_for(AuditRecord))]


@router.get("", response_model=ListEnvelope[AuditRecordResponse])
async def list_audit_records(
    db: DbSession, actor: StaffActor, query: AuditListQuery
) -> ListEnvelope[AuditRecordResponse]:
    """List audit records, newest first; filter by entity_kind, action, actor_id..."""
    page = await AuditReader(db).list(query)
    actors = await actor_summaries(db, *(item["actor_id"] for item in page.items))
    return list_envelope(
        page, AuditRecordResponse, lambda item: {**item, "actor": actors.get(item["actor_id"])}
    )


@router.get(
    "/{record_id}",
    response_model=Envelope[AuditRecordDetailResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_audit_record(
    db: DbSession, actor: StaffActor, record_id: Annotated[UUID, Path()]
) -> Envelope[AuditRecordDetailResponse]:
    """Get one record with the entity it references."""
    record, entity = await AuditReader(db).get_with_entity(record_id)
    actors = await actor_summaries(db, record.actor_id)
    detail = AuditRecordDetailResponse.model_validate(
        {**snapshot(record), "actor": actors.get(record.actor_id), "entity": entity}
    )
    return Envelope[AuditRecordDetailResponse](data=detail)


@router.api_route(
    "",
    methods=["POST"],
    status_code=403,
    responses={403: {"model": ErrorResponse}},
)
@router.api_route(
    "/{record_id}",
    methods=["PUT", "PATCH", "DELETE"],
    status_code=403,
    responses={403: {"model": ErrorResponse}},
)
async def audit_trail_is_read_only(actor: CurrentActor) -> None:
    """The audit trail cannot be created, modified or deleted through the API."""
    raise ForbiddenError("The audit trail is read-only")
