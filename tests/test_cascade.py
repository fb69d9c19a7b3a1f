"""Tests for the department employee-count cascade."""

import logging
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from hr_admin.models import Department
from hr_admin.services.cascade import DepartmentCountCascade
from hr_admin.services.entity_store import EntityStore
from hr_admin.services.registry import EntityKind
from hr_admin.services.resource_handler import ResourceHandler


async def employee_count(session: AsyncSession, department_id) -> int:
    department = await EntityStore(session, Department, "department").find_by_id(department_id)
    return department.employee_count


class TestProfileWrites:
    """Counts follow every employee profile write."""

    async def test_create_increments(
        self, session, make_profile, employee_user, hr_user, sales
    ):
        await make_profile(employee_user.id, sales.id)
        assert await employee_count(session, sales.id) == 1

        await make_profile(hr_user.id, sales.id)
        assert await employee_count(session, sales.id) == 2

    async def test_reassignment_recounts_both_departments(
        self, session, make_profile, admin_actor, employee_user, sales, engineering
    ):
        profile = await make_profile(employee_user.id, sales.id)

        result = await ResourceHandler(session, EntityKind.EMPLOYEE_PROFILE).update(
            profile["id"], {"department_id": engineering.id}, admin_actor.id
        )

        assert result.warnings == []
        assert await employee_count(session, sales.id) == 0
        assert await employee_count(session, engineering.id) == 1

    async def test_deactivation_and_delete_decrement(
        self, session, make_profile, admin_actor, employee_user, hr_user, sales
    ):
        first = await make_profile(employee_user.id, sales.id)
        second = await make_profile(hr_user.id, sales.id)
        handler = ResourceHandler(session, EntityKind.EMPLOYEE_PROFILE)

        await handler.update(first["id"], {"active": False}, admin_actor.id)
        assert await employee_count(session, sales.id) == 1

        await handler.delete(second["id"], admin_actor.id)
        assert await employee_count(session, sales.id) == 0

    async def test_reactivation_increments(
        self, session, make_profile, admin_actor, employee_user, sales
    ):
        profile = await make_profile(employee_user.id, sales.id)
        handler = ResourceHandler(session, EntityKind.EMPLOYEE_PROFILE)
        await handler.delete(profile["id"], admin_actor.id)
        assert await employee_count(session, sales.id) == 0

        await handler.update(profile["id"], {"active": True}, admin_actor.id)
        assert await employee_count(session, sales.id) == 1


class TestRecompute:
    """Recompute-and-overwrite converges on the true count."""

    async def test_reconcile_repairs_drift(
        self, session, make_profile, employee_user, sales, engineering
    ):
        await make_profile(employee_user.id, sales.id)
        departments = EntityStore(session, Department, "department")
        await departments.overwrite(sales.id, {"employee_count": 42})
        await departments.overwrite(engineering.id, {"employee_count": 7})
        await session.commit()

        outcome = await DepartmentCountCascade(session).reconcile_all()

        assert outcome.ok
        assert outcome.counts == {sales.id: 1, engineering.id: 0}
        assert await employee_count(session, sales.id) == 1
        assert await employee_count(session, engineering.id) == 0

    async def test_recompute_is_idempotent(self, session, make_profile, employee_user, sales):
        await make_profile(employee_user.id, sales.id)
        cascade = DepartmentCountCascade(session)

        assert await cascade.recompute(sales.id) == 1
        assert await cascade.recompute(sales.id) == 1
        assert await employee_count(session, sales.id) == 1

    async def test_vanished_department_is_logged(self, session, caplog):
        missing = uuid4()
        with caplog.at_level(logging.WARNING, logger="hr_admin.services.cascade"):
            assert await DepartmentCountCascade(session).recompute(missing) == 0

        assert str(missing) in caplog.text

    async def test_failure_becomes_warning(self, session, sales, engineering, monkeypatch):
        cascade = DepartmentCountCascade(session)
        original = cascade.recompute

        async def flaky(department_id):
            if department_id == sales.id:
                raise RuntimeError("connection reset")
            return await original(department_id)

        monkeypatch.setattr(cascade, "recompute", flaky)

        outcome = await cascade.on_employee_profile_write(sales.id, engineering.id)

        assert not outcome.ok
        assert outcome.counts == {engineering.id: 0}
        assert str(sales.id) in outcome.warnings[0]
