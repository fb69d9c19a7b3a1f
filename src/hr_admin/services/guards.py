"""Guard rules run before the resource handler for sensitive kinds.

- HR may not create or modify a payroll belonging to an HR user.
- HR may not create or modify the employee profile of an HR user.
- No employee profile may be created for an admin user.

Every check fails closed: if the referenced payroll, profile or user cannot
be resolved the request is rejected. Checks only read; they never write.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hr_admin.exceptions import ForbiddenError, NotFoundError, ValidationFailedError
from hr_admin.models import EmployeeProfile, Payroll, User, UserRole
from hr_admin.services.entity_store import EntityStore
from hr_admin.services.visibility import DEFAULT_READ, UNSCOPED_READ


@dataclass(frozen=True)
class Actor:
    """The principal performing a request."""

    id: UUID
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_hr(self) -> bool:
        return self.role == UserRole.HR.value


class GuardRules:
    """Role-scoped write predicates for payrolls and employee profiles."""

    def __init__(self, session: AsyncSession):
        self.users = EntityStore(session, User, "user")
        self.profiles = EntityStore(session, EmployeeProfile, "employee profile")
        self.payrolls = EntityStore(session, Payroll, "payroll")

    async def check_profile_create(self, actor: Actor, user_id: UUID) -> None:
        """Reject profiles for admins, and HR creating profiles for HR."""
        user = await self.users.find_by_id(user_id, DEFAULT_READ)
        if user is None:
            raise ValidationFailedError("There is no user with that ID", user_id=user_id)
        if user.role == UserRole.ADMIN.value:
            raise ForbiddenError("Cannot create profile for admin")
        await self.check_profile_write(actor, user_id=user.id)

    async def check_profile_write(
        self,
        actor: Actor,
        profile_id: UUID | None = None,
        user_id: UUID | None = None,
    ) -> None:
        """Reject HR creating or modifying an HR user's profile.

        Pass ``profile_id`` for an existing profile or ``user_id`` for the
        owner of a profile about to be created.
        """
        if profile_id is not None:
            profile = await self.profiles.find_by_id(profile_id, UNSCOPED_READ)
            if profile is None:
                raise NotFoundError("employee profile", profile_id)
            role = await self._role_of_profile_owner(profile)
        elif user_id is not None:
            user = await self.users.find_by_id(user_id, UNSCOPED_READ)
            if user is None:
                raise ValidationFailedError("There is no user with that ID", user_id=user_id)
            role = user.role
        else:
            raise ValidationFailedError("No employee profile or user ID provided")
        if actor.is_hr and role == UserRole.HR.value:
            raise ForbiddenError("HR cannot create or update profile for another HR")

    async def check_payroll_write(
        self,
        actor: Actor,
        employee_profile_id: UUID | None = None,
        payroll_id: UUID | None = None,
    ) -> None:
        """Reject HR creating or modifying payroll for an HR user.

        Pass ``employee_profile_id`` for creation and ``payroll_id`` for
        modification of an existing entry.
        """
        if payroll_id is not None:
            payroll = await self.payrolls.find_by_id(payroll_id)
            if payroll is None:
                raise NotFoundError("payroll", payroll_id)
            employee_profile_id = payroll.employee_profile_id
        if employee_profile_id is None:
            raise ValidationFailedError("No employee ID provided")

        profile = await self.profiles.find_by_id(employee_profile_id, UNSCOPED_READ)
        if profile is None:
            raise ValidationFailedError(
                "No employee found with that ID", employee_profile_id=employee_profile_id
            )
        role = await self._role_of_profile_owner(profile)
        if actor.is_hr and role == UserRole.HR.value:
            raise ForbiddenError("HR cannot assign bonus or payroll to themselves")

    async def _role_of_profile_owner(self, profile: EmployeeProfile) -> str:
        user = await self.users.find_by_id(profile.user_id, UNSCOPED_READ)
        if user is None:
            raise ValidationFailedError(
                "The user linked to this employee profile no longer exists",
                user_id=profile.user_id,
            )
        return user.role
