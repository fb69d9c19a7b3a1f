"""Tests for the audited write engine."""

from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_admin.exceptions import ConflictError, NotFoundError, ValidationFailedError
from hr_admin.models import AuditRecord, Department, User
from hr_admin.services.audit_writer import AuditWriter
from hr_admin.services.entity_store import EntityStore
from hr_admin.services.registry import EntityKind
from hr_admin.services.resource_handler import ResourceHandler
from hr_admin.services.visibility import UNSCOPED_READ


async def audit_records(session: AsyncSession, entity_id) -> list[AuditRecord]:
    result = await session.execute(
        select(AuditRecord).where(AuditRecord.entity_id == entity_id).order_by(AuditRecord.timestamp)
    )
    return list(result.scalars().all())


class TestCreate:
    """create: stamp, insert, commit, audit."""

    async def test_create_writes_one_audit_record(self, session, admin_actor):
        result = await ResourceHandler(session, EntityKind.DEPARTMENT).create(
            {"name": "Finance", "description": "Books and budgets"}, admin_actor.id
        )

        document = result.document
        assert document["name"] == "Finance"
        assert document["employee_count"] == 0
        assert document["created_by"] == admin_actor.id
        assert result.warnings == []

        [record] = await audit_records(session, document["id"])
        assert record.action == "create"
        assert record.entity_kind == "Department"
        assert record.actor_id == admin_actor.id
        assert record.before is None
        assert record.changes is None
        assert record.after["name"] == "Finance"
        assert record.after["id"] == str(document["id"])

    async def test_protected_fields_are_ignored(self, session, admin_actor):
        forged_id = uuid4()
        result = await ResourceHandler(session, EntityKind.DEPARTMENT).create(
            {
                "id": forged_id,
                "name": "Legal",
                "description": "Contracts",
                "created_by": uuid4(),
            },
            admin_actor.id,
        )

        assert result.document["id"] != forged_id
        assert result.document["created_by"] == admin_actor.id

    async def test_duplicate_is_conflict(self, session, admin_actor, sales):
        with pytest.raises(ConflictError):
            await ResourceHandler(session, EntityKind.DEPARTMENT).create(
                {"name": "Sales", "description": "Again"}, admin_actor.id
            )

        # the session is usable after the failed insert
        assert await EntityStore(session, Department, "department").count() == 1

    async def test_payroll_net_pay_is_derived(
        self, session, make_profile, admin_actor, employee_user, sales
    ):
        profile = await make_profile(employee_user.id, sales.id, salary=Decimal("4000.00"))

        result = await ResourceHandler(session, EntityKind.PAYROLL).create(
            {
                "employee_profile_id": profile["id"],
                "bonus": Decimal("250.00"),
                "deductions": Decimal("100.00"),
                "month": 3,
                "year": 2026,
                "net_pay": Decimal("1.00"),
            },
            admin_actor.id,
        )

        assert result.document["net_pay"] == Decimal("4150.00")
        assert result.document["month"] == 3

    async def test_payroll_needs_an_existing_profile(self, session, admin_actor):
        with pytest.raises(ValidationFailedError):
            await ResourceHandler(session, EntityKind.PAYROLL).create(
                {"employee_profile_id": uuid4()}, admin_actor.id
            )

    async def test_one_payroll_per_profile_and_period(
        self, session, make_profile, admin_actor, employee_user, sales
    ):
        profile = await make_profile(employee_user.id, sales.id)
        handler = ResourceHandler(session, EntityKind.PAYROLL)
        values = {"employee_profile_id": profile["id"], "month": 1, "year": 2026}

        await handler.create(values, admin_actor.id)
        with pytest.raises(ConflictError):
            await handler.create(values, admin_actor.id)


class TestUpdate:
    """update: pre-image, update, commit, diff, audit if changed."""

    async def test_update_records_changes(self, session, admin_actor, sales):
        result = await ResourceHandler(session, EntityKind.DEPARTMENT).update(
            sales.id, {"name": "Revenue"}, admin_actor.id
        )

        assert result.document["name"] == "Revenue"
        assert result.document["updated_by"] == admin_actor.id
        assert result.changes == {"name": {"from": "Sales", "to": "Revenue"}}

        [record] = await audit_records(session, sales.id)
        assert record.action == "update"
        assert record.changes == {"name": {"from": "Sales", "to": "Revenue"}}
        assert record.before is None
        assert record.after is None

    async def test_noop_update_writes_no_audit(self, session, admin_actor, sales):
        result = await ResourceHandler(session, EntityKind.DEPARTMENT).update(
            sales.id, {"name": "Sales"}, admin_actor.id
        )

        assert result.changes == {}
        assert await audit_records(session, sales.id) == []

    async def test_missing_entity_is_not_found(self, session, admin_actor):
        with pytest.raises(NotFoundError) as exc_info:
            await ResourceHandler(session, EntityKind.DEPARTMENT).update(
                uuid4(), {"name": "Ghost"}, admin_actor.id
            )

        assert exc_info.value.message == "No department found with that ID"

    async def test_row_removed_after_pre_image_is_not_found(
        self, session, admin_actor, sales, monkeypatch
    ):
        handler = ResourceHandler(session, EntityKind.DEPARTMENT)
        read_pre_image = handler.store.find_by_id

        async def read_then_remove(entity_id, options):
            entity = await read_pre_image(entity_id, options)
            await EntityStore(session, Department, "department").hard_delete(entity_id)
            await session.commit()
            return entity

        monkeypatch.setattr(handler.store, "find_by_id", read_then_remove)

        with pytest.raises(NotFoundError):
            await handler.update(sales.id, {"name": "Revenue"}, admin_actor.id)

        assert await audit_records(session, sales.id) == []

    async def test_inactive_entity_can_be_reactivated(self, session, admin_actor, employee_user):
        handler = ResourceHandler(session, EntityKind.USER)
        await handler.delete(employee_user.id, admin_actor.id)

        result = await handler.update(employee_user.id, {"active": True}, admin_actor.id)

        assert result.document["active"] is True
        assert result.changes == {"active": {"from": False, "to": True}}

    async def test_audit_failure_keeps_the_mutation(
        self, session, admin_actor, sales, monkeypatch
    ):
        async def broken_record(self, *args, **kwargs):
            raise RuntimeError("audit store unavailable")

        monkeypatch.setattr(AuditWriter, "record", broken_record)

        result = await ResourceHandler(session, EntityKind.DEPARTMENT).update(
            sales.id, {"description": "Closes deals"}, admin_actor.id
        )

        assert result.warnings
        assert "audit" in result.warnings[0]
        stored = await EntityStore(session, Department, "department").find_by_id(sales.id)
        assert stored.description == "Closes deals"
        assert await audit_records(session, sales.id) == []


class TestDelete:
    """delete: pre-image, hard or soft delete, commit, audit."""

    async def test_soft_delete_keeps_the_row(self, session, admin_actor, employee_user):
        result = await ResourceHandler(session, EntityKind.USER).delete(
            employee_user.id, admin_actor.id
        )

        assert result.document is None
        stored = await EntityStore(session, User, "user").find_by_id(
            employee_user.id, UNSCOPED_READ
        )
        assert stored.active is False

        [record] = await audit_records(session, employee_user.id)
        assert record.action == "delete"
        assert record.before["email"] == "eve@acme.io"
        assert record.before["active"] is True
        assert record.after is None

    async def test_hard_delete_removes_the_row(self, session, admin_actor, sales):
        await ResourceHandler(session, EntityKind.DEPARTMENT).delete(sales.id, admin_actor.id)

        departments = EntityStore(session, Department, "department")
        assert await departments.find_by_id(sales.id, UNSCOPED_READ) is None

        [record] = await audit_records(session, sales.id)
        assert record.before["name"] == "Sales"

    async def test_deleting_twice_is_not_found(self, session, admin_actor, employee_user):
        handler = ResourceHandler(session, EntityKind.USER)
        await handler.delete(employee_user.id, admin_actor.id)

        with pytest.raises(NotFoundError):
            await handler.delete(employee_user.id, admin_actor.id)

        assert len(await audit_records(session, employee_user.id)) == 1


class TestAuditCompleteness:
    """Every effective write leaves exactly one record."""

    async def test_lifecycle_of_a_profile(
        self, session, make_profile, admin_actor, employee_user, sales, engineering
    ):
        profile = await make_profile(employee_user.id, sales.id)
        handler = ResourceHandler(session, EntityKind.EMPLOYEE_PROFILE)

        await handler.update(profile["id"], {"department_id": engineering.id}, admin_actor.id)
        await handler.update(profile["id"], {"department_id": engineering.id}, admin_actor.id)
        await handler.delete(profile["id"], admin_actor.id)

        records = await audit_records(session, profile["id"])
        assert [r.action for r in records] == ["create", "update", "delete"]
        assert records[1].changes["department_id"] == {
            "from": str(sales.id),
            "to": str(engineering.id),
        }
