"""Generic resource handler - the audited write engine.

One handler instance serves one entity kind for one request. Every kind goes
through the same four passes:

- list:   visibility scope -> caller filter/sort/page -> page
- create: stamp created_by -> insert -> commit -> audit(create)
- update: pre-image (scope bypassed) -> stamp updated_by -> update ->
          commit -> diff -> audit(update) if anything changed
- delete: pre-image -> hard or soft delete -> commit -> audit(delete)

EmployeeProfile writes additionally run the department count cascade.

The mutation is committed before its audit record is written. Audit and
cascade failures are logged and returned as warnings on the result; they
never undo the committed mutation. Store errors propagate unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hr_admin.exceptions import NotFoundError
from hr_admin.models import AuditAction
from hr_admin.services.audit_writer import AuditWriter
from hr_admin.services.cascade import DepartmentCountCascade
from hr_admin.services.diff import ChangeSet, compute_diff
from hr_admin.services.entity_store import snapshot, store_for
from hr_admin.services.querying import ListQuery, Page
from hr_admin.services.registry import EntityKind, descriptor_for
from hr_admin.services.visibility import DEFAULT_READ, UNSCOPED_READ, ReadOptions

logger = logging.getLogger(__name__)

# Keys clients may never set; the engine owns them
PROTECTED_FIELDS = frozenset({"id", "created_at", "created_by", "updated_by"})


@dataclass
class WriteResult:
    """Outcome of a create/update/delete."""

    document: dict[str, Any] | None
    changes: ChangeSet = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


class ResourceHandler:
    """Audited list/get/create/update/delete for one entity kind."""

    def __init__(self, session: AsyncSession, kind: EntityKind | str):
        self.session = session
        self.descriptor = descriptor_for(kind)
        self.kind = self.descriptor.kind
        self.store = store_for(session, self.kind)
        self.audit = AuditWriter(session)
        self.cascade = DepartmentCountCascade(session)

    async def list(
        self,
        query: ListQuery,
        *criteria: Any,
        options: ReadOptions = DEFAULT_READ,
    ) -> Page:
        """List entities under the visibility scope."""
        return await self.store.find_many(query, *criteria, options=options)

    async def get(self, entity_id: UUID, options: ReadOptions = DEFAULT_READ) -> dict[str, Any]:
        """Fetch one entity snapshot, NotFound if absent under the scope."""
        entity = await self.store.find_by_id(entity_id, options)
        if entity is None:
            raise NotFoundError(self.descriptor.label, entity_id)
        return snapshot(entity)

    async def create(self, payload: dict[str, Any], actor_id: UUID | None) -> WriteResult:
        values = _clean(payload)
        values["created_by"] = actor_id

        entity = await self.store.create(values)
        await self.session.commit()
        document = snapshot(entity)

        warnings = await self._audit(
            AuditAction.CREATE, document["id"], actor_id, after=document
        )
        if self.kind is EntityKind.EMPLOYEE_PROFILE:
            warnings += await self._cascade(None, document["department_id"])
        return WriteResult(document=document, warnings=warnings)

    async def update(
        self, entity_id: UUID, payload: dict[str, Any], actor_id: UUID | None
    ) -> WriteResult:
        previous = await self.store.find_by_id(entity_id, UNSCOPED_READ)
        if previous is None:
            raise NotFoundError(self.descriptor.label, entity_id)
        before = snapshot(previous)

        values = _clean(payload)
        values["updated_by"] = actor_id

        updated = await self.store.update(entity_id, values)
        if updated is None:
            # Removed between the pre-image read and the update
            await self.session.rollback()
            raise NotFoundError(self.descriptor.label, entity_id)
        await self.session.commit()
        after = snapshot(updated)

        changes = compute_diff(before, after)
        warnings: list[str] = []
        if changes:
            warnings += await self._audit(
                AuditAction.UPDATE, entity_id, actor_id, changes=changes
            )
        if self.kind is EntityKind.EMPLOYEE_PROFILE:
            warnings += await self._cascade(before["department_id"], after["department_id"])
        return WriteResult(document=after, changes=changes, warnings=warnings)

    async def delete(self, entity_id: UUID, actor_id: UUID | None) -> WriteResult:
        existing = await self.store.find_by_id(entity_id)
        if existing is None:
            raise NotFoundError(self.descriptor.label, entity_id)
        before = snapshot(existing)

        if self.descriptor.soft_delete:
            removed = await self.store.soft_delete(entity_id)
        else:
            removed = await self.store.hard_delete(entity_id)
        if not removed:
            await self.session.rollback()
            raise NotFoundError(self.descriptor.label, entity_id)
        await self.session.commit()

        warnings = await self._audit(AuditAction.DELETE, entity_id, actor_id, before=before)
        if self.kind is EntityKind.EMPLOYEE_PROFILE:
            warnings += await self._cascade(before["department_id"], None)
        return WriteResult(document=None, warnings=warnings)

    async def _audit(
        self,
        action: AuditAction,
        entity_id: UUID,
        actor_id: UUID | None,
        **snapshots: Any,
    ) -> list[str]:
        try:
            await self.audit.record(action, self.kind, entity_id, actor_id, **snapshots)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            logger.exception(
                "Audit record for %s %s:%s could not be written",
                action.value,
                self.kind.value,
                entity_id,
            )
            return [f"The {action.value} was applied but its audit record could not be written"]
        return []

    async def _cascade(self, previous_department_id: Any, current_department_id: Any) -> list[str]:
        outcome = await self.cascade.on_employee_profile_write(
            previous_department_id, current_department_id
        )
        return outcome.warnings


def _clean(payload: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in payload.items() if k not in PROTECTED_FIELDS}
