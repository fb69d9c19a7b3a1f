"""Tests for the soft-delete visibility scope."""

from sqlalchemy.ext.asyncio import AsyncSession

from hr_admin.models import Department, User
from hr_admin.services.entity_store import EntityStore
from hr_admin.services.querying import ListQuery
from hr_admin.services.visibility import DEFAULT_READ, UNSCOPED_READ, ReadOptions, active_only


class TestReadOptions:
    def test_default_hides_inactive(self):
        assert DEFAULT_READ == ReadOptions(include_inactive=False)
        assert UNSCOPED_READ.include_inactive is True


class TestScopedReads:
    """Inactive records are hidden unless the caller opts out per call."""

    async def test_inactive_user_hidden_by_default(
        self, session: AsyncSession, employee_user: User
    ):
        users = EntityStore(session, User, "user")
        assert await users.soft_delete(employee_user.id)
        await session.commit()

        assert await users.find_by_id(employee_user.id) is None
        found = await users.find_by_id(employee_user.id, UNSCOPED_READ)
        assert found is not None
        assert found.active is False

    async def test_list_and_count_respect_scope(
        self, session: AsyncSession, admin: User, hr_user: User, employee_user: User
    ):
        users = EntityStore(session, User, "user")
        await users.soft_delete(hr_user.id)
        await session.commit()

        page = await users.find_many(ListQuery())
        assert {item["id"] for item in page.items} == {admin.id, employee_user.id}
        assert page.total == 2

        everything = await users.find_many(ListQuery(), options=UNSCOPED_READ)
        assert everything.total == 3

        assert await users.count() == 2
        assert await users.count(active_only(User), options=UNSCOPED_READ) == 2

    async def test_scope_opt_out_does_not_leak(self, session: AsyncSession, employee_user: User):
        """Opting out on one call leaves the next call scoped."""
        users = EntityStore(session, User, "user")
        await users.soft_delete(employee_user.id)
        await session.commit()

        assert await users.find_by_id(employee_user.id, UNSCOPED_READ) is not None
        assert await users.find_by_id(employee_user.id) is None

    async def test_hard_deleted_kinds_are_unscoped(self, session: AsyncSession, sales: Department):
        departments = EntityStore(session, Department, "department")
        assert await departments.find_by_id(sales.id) is not None
        assert await departments.count() == 1
