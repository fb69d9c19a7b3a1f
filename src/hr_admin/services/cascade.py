"""Department employee-count cascade.

After any EmployeeProfile write, the affected departments' denormalized
``employee_count`` is recomputed from scratch:

    count(EmployeeProfile where department_id = D and active = true)

and written over the stored value. Recompute-and-overwrite is idempotent, so
a missed or failed cascade is repaired by running it again; ``reconcile_all``
is that repair job.

Each department is recomputed and committed on its own. A failure is logged
and reported as a warning; it never reverses the profile write that
triggered it. Concurrent writers to the same department may interleave
(last overwrite wins).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_admin.models import Department, EmployeeProfile
from hr_admin.services.entity_store import EntityStore
from hr_admin.services.visibility import UNSCOPED_READ, active_only

logger = logging.getLogger(__name__)


@dataclass
class CascadeOutcome:
    """Result of one cascade run."""

    counts: dict[UUID, int] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings


class DepartmentCountCascade:
    """Keeps Department.employee_count in line with active profiles."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.profiles = EntityStore(session, EmployeeProfile, "employee profile")
        self.departments = EntityStore(session, Department, "department")

    async def count_active(self, department_id: UUID) -> int:
        """Count active profiles assigned to a department."""
        return await self.profiles.count(
            EmployeeProfile.department_id == department_id,
            active_only(EmployeeProfile),
            options=UNSCOPED_READ,
        )

    async def recompute(self, department_id: UUID) -> int:
        """Recompute and overwrite one department's count, then commit."""
        employee_count = await self.count_active(department_id)
        matched = await self.departments.overwrite(
            department_id, {"employee_count": employee_count}
        )
        await self.session.commit()
        if not matched:
            logger.warning(
                "Department %s no longer exists; count %d not stored",
                department_id,
                employee_count,
            )
        else:
            logger.debug("Department %s employee_count=%d", department_id, employee_count)
        return employee_count

    async def on_employee_profile_write(
        self,
        previous_department_id: UUID | None,
        current_department_id: UUID | None,
    ) -> CascadeOutcome:
        """Recompute the current department, and the previous one if it differs.

        ``current_department_id`` is None for deletions: only the department
        the profile left is recomputed.
        """
        targets: list[UUID] = []
        if current_department_id is not None:
            targets.append(current_department_id)
        if previous_department_id is not None and previous_department_id != current_department_id:
            targets.append(previous_department_id)
        return await self._run(targets)

    async def reconcile_all(self) -> CascadeOutcome:
        """Recompute every department's count."""
        result = await self.session.execute(select(Department.id))
        return await self._run(list(result.scalars().all()))

    async def _run(self, department_ids: list[UUID]) -> CascadeOutcome:
        outcome = CascadeOutcome()
        for department_id in department_ids:
            try:
                outcome.counts[department_id] = await self.recompute(department_id)
            except Exception:
                await self.session.rollback()
                logger.exception("Employee count recompute failed for department %s", department_id)
                outcome.warnings.append(
                    f"Employee count for department {department_id} could not be "
                    "recomputed; run the reconcile job to repair it"
                )
        return outcome
