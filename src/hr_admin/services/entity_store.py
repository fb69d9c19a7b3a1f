"""Entity store: typed persistence access for one entity kind.

The store flushes but never commits; the caller owns the commit boundary so
that each step of a write (mutation, audit, cascade) can be committed on its
own.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hr_admin.exceptions import ConflictError, ValidationFailedError
from hr_admin.models import Base, EmployeeProfile, Payroll
from hr_admin.services.querying import ListQuery, Page, apply_filters, apply_sort_and_page
from hr_admin.services.registry import EntityKind, descriptor_for
from hr_admin.services.visibility import DEFAULT_READ, ReadOptions, apply_visibility

ModelT = TypeVar("ModelT", bound=Base)


def snapshot(entity: Base) -> dict[str, Any]:
    """Capture the column values of an entity at this moment."""
    return dict(entity.to_dict())


def _is_unique_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate" in message


class EntityStore(Generic[ModelT]):
    """Persistence operations for one model."""

    def __init__(self, session: AsyncSession, model: type[ModelT], label: str | None = None):
        self.session = session
        self.model = model
        self.label = label or model.__tablename__.replace("_", " ")

    def _select(self, options: ReadOptions):
        return apply_visibility(select(self.model), self.model, options)

    async def find_by_id(
        self, entity_id: UUID, options: ReadOptions = DEFAULT_READ
    ) -> ModelT | None:
        """Fetch one entity by id under the given read scope."""
        result = await self.session.execute(
            self._select(options)
            .where(self.model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_one(
        self, *criteria: ColumnElement[bool], options: ReadOptions = DEFAULT_READ
    ) -> ModelT | None:
        """Fetch the first entity matching the criteria."""
        result = await self.session.execute(self._select(options).where(*criteria).limit(1))
        return result.scalars().first()

    async def find_all(
        self, *criteria: ColumnElement[bool], options: ReadOptions = DEFAULT_READ
    ) -> list[ModelT]:
        """Fetch every entity matching the criteria (unpaginated)."""
        result = await self.session.execute(self._select(options).where(*criteria))
        return list(result.scalars().all())

    async def find_many(
        self,
        query: ListQuery,
        *criteria: ColumnElement[bool],
        options: ReadOptions = DEFAULT_READ,
    ) -> Page:
        """Visibility, then caller filters, then sort and pagination."""
        stmt = apply_filters(self._select(options).where(*criteria), self.model, query)

        count_query = select(func.count()).select_from(stmt.subquery())
        total = await self.session.scalar(count_query) or 0

        result = await self.session.execute(apply_sort_and_page(stmt, self.model, query))
        items = [snapshot(entity) for entity in result.scalars().all()]
        return Page(items=items, total=total, page=query.page, page_size=query.page_size)

    async def count(
        self, *criteria: ColumnElement[bool], options: ReadOptions = DEFAULT_READ
    ) -> int:
        """Count entities matching the criteria under the read scope."""
        stmt = apply_visibility(
            select(func.count()).select_from(self.model), self.model, options
        ).where(*criteria)
        return await self.session.scalar(stmt) or 0

    async def prepare_create(self, values: dict[str, Any]) -> dict[str, Any]:
        """Hook for kind-specific derived fields before insertion."""
        return values

    async def create(self, values: dict[str, Any]) -> ModelT:
        """Insert a new entity and return it with server defaults loaded."""
        values = await self.prepare_create(dict(values))
        entity = self.model(**values)
        self.session.add(entity)
        await self._flush()
        await self.session.refresh(entity)
        return entity

    async def overwrite(self, entity_id: UUID, values: dict[str, Any]) -> bool:
        """Apply field values to one row. Returns False if no row matched."""
        result = await self._execute(
            update(self.model)
            .where(self.model.id == entity_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) > 0

    async def update(self, entity_id: UUID, values: dict[str, Any]) -> ModelT | None:
        """Apply field values and return the post-image, or None if no row matched.

        The post-image is read regardless of the visibility scope.
        """
        if not await self.overwrite(entity_id, values):
            return None
        return await self.find_by_id(entity_id, ReadOptions(include_inactive=True))

    async def soft_delete(self, entity_id: UUID) -> bool:
        """Mark an entity inactive."""
        return await self.overwrite(entity_id, {"active": False})

    async def hard_delete(self, entity_id: UUID) -> bool:
        """Remove an entity row."""
        result = await self._execute(
            delete(self.model)
            .where(self.model.id == entity_id)
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) > 0

    async def _execute(self, stmt: Any) -> Any:
        try:
            return await self.session.execute(stmt)
        except IntegrityError as exc:
            await self._raise_translated(exc)

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self._raise_translated(exc)

    async def _raise_translated(self, exc: IntegrityError) -> None:
        await self.session.rollback()
        if _is_unique_violation(exc):
            raise ConflictError(
                f"Duplicate {self.label}: a record with these values already exists"
            ) from exc
        raise ValidationFailedError(f"Invalid {self.label}: {exc.orig}") from exc


class PayrollStore(EntityStore[Payroll]):
    """Payroll store; derives ``net_pay`` from the profile's current salary."""

    async def prepare_create(self, values: dict[str, Any]) -> dict[str, Any]:
        profile_store = EntityStore(self.session, EmployeeProfile, "employee profile")
        profile = await profile_store.find_by_id(values.get("employee_profile_id"))
        if profile is None:
            raise ValidationFailedError(
                "No employee profile found with that ID",
                employee_profile_id=values.get("employee_profile_id"),
            )
        bonus = values.get("bonus") or 0
        deductions = values.get("deductions") or 0
        values["net_pay"] = profile.salary + bonus - deductions
        return values


_STORE_CLASSES: dict[EntityKind, type[EntityStore[Any]]] = {
    EntityKind.PAYROLL: PayrollStore,
}


def store_for(session: AsyncSession, kind: EntityKind | str) -> EntityStore[Any]:
    """Build the store for an entity kind."""
    descriptor = descriptor_for(kind)
    store_class = _STORE_CLASSES.get(descriptor.kind, EntityStore)
    return store_class(session, descriptor.model, descriptor.label)
