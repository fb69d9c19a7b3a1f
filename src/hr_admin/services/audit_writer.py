"""Audit trail writer and reader.

Usage:
    writer = AuditWriter(session)
    writer.record(AuditAction.UPDATE, EntityKind.DEPARTMENT, dept_id, actor_id,
                  changes={"name": {"from": "Sales", "to": "Revenue"}})
    await session.commit()

Records are append-only; the writer exposes no way to change or remove one.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

from hr_admin.exceptions import NotFoundError
from hr_admin.models import AuditAction, AuditRecord, Base
from hr_admin.services.diff import ChangeSet
from hr_admin.services.entity_store import EntityStore, snapshot
from hr_admin.services.querying import ListQuery, Page
from hr_admin.services.registry import EntityKind, EntityRef
from hr_admin.services.visibility import UNSCOPED_READ


def _encode(value: Any) -> Any:
    if value is None:
        return None
    return jsonable_encoder(value)


class AuditWriter:
    """Appends audit records to the session (the caller commits)."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(
        self,
        action: AuditAction | str,
        entity_kind: EntityKind | str,
        entity_id: UUID,
        actor_id: UUID | None,
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
        changes: ChangeSet | None = None,
    ) -> AuditRecord:
        """Append exactly one audit record and flush it."""
        action = AuditAction(action)
        kind = EntityKind(entity_kind)
        if action is AuditAction.UPDATE and not changes:
            raise ValueError("An update audit record requires a non-empty change set")
        if action is AuditAction.DELETE and after is not None:
            raise ValueError("A delete audit record cannot carry an after snapshot")

        record = AuditRecord(
            action=action.value,
            entity_kind=kind.value,
            entity_id=entity_id,
            actor_id=actor_id,
            before=_encode(before),
            after=_encode(after),
            changes=_encode(changes) if changes else None,
        )
        self.session.add(record)
        await self.session.flush()
        return record


class AuditReader:
    """Read access to the audit trail, with polymorphic reference resolution."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.store = EntityStore(session, AuditRecord, "audit record")

    async def list(self, query: ListQuery) -> Page:
        return await self.store.find_many(query)

    async def get(self, record_id: UUID) -> AuditRecord:
        record = await self.store.find_by_id(record_id)
        if record is None:
            raise NotFoundError("audit record", record_id)
        return record

    async def for_entity(self, ref: EntityRef) -> list[AuditRecord]:
        """All records about one entity, oldest first."""
        records = await self.store.find_all(
            AuditRecord.entity_kind == ref.kind.value,
            AuditRecord.entity_id == ref.id,
        )
        return sorted(records, key=lambda r: r.timestamp)

    async def resolve(self, ref: EntityRef) -> Base | None:
        """Load the referenced entity, inactive records included."""
        return await EntityStore(self.session, ref.model).find_by_id(ref.id, UNSCOPED_READ)

    async def get_with_entity(self, record_id: UUID) -> tuple[AuditRecord, dict[str, Any] | None]:
        """Fetch a record and a snapshot of the entity it references (None if gone)."""
        record = await self.get(record_id)
        entity = await self.resolve(EntityRef(EntityKind(record.entity_kind), record.entity_id))
        return record, snapshot(entity) if entity is not None else None
