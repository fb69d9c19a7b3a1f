"""Dashboard statistics endpoint."""

from datetime import datetime, timezone
from decimal import Decimal

from fastapi import APIRouter
from sqlalchemy import func, select

from hr_admin.api.dependencies import DbSession, StaffActor
from hr_admin.api.schemas import DepartmentStat, StatsResponse
from hr_admin.models import Department, EmployeeProfile, Payroll, User, UserRole
from hr_admin.services.entity_store import EntityStore
from hr_admin.services.visibility import UNSCOPED_READ, active_only

router = APIRouter(tags=["stats"])


def _month_bounds(now: datetime) -> tuple[datetime, datetime]:
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


@router.get("/stats", response_model=StatsResponse)
async def get_stats(db: DbSession, actor: StaffActor) -> StatsResponse:
    """Company-wide counters for the dashboard."""
    now = datetime.now(timezone.utc)
    month_start, next_month = _month_bounds(now)

    profiles = EntityStore(db, EmployeeProfile, "employee profile")
    users = EntityStore(db, User, "user")

    employees_count = await profiles.count(active_only(EmployeeProfile), options=UNSCOPED_READ)
    non_active = await profiles.count(EmployeeProfile.active.is_(False), options=UNSCOPED_READ)
    hr_count = await users.count(User.role == UserRole.HR.value)
    admin_count = await users.count(User.role == UserRole.ADMIN.value)
    new_users = await users.count(
        User.created_at >= month_start, User.created_at < next_month, options=UNSCOPED_READ
    )

    totals = (
        await db.execute(
            select(
                func.coalesce(func.sum(Payroll.net_pay), 0),
                func.coalesce(func.sum(Payroll.bonus), 0),
                func.coalesce(func.sum(Payroll.deductions), 0),
            ).where(Payroll.month == now.month, Payroll.year == now.year)
        )
    ).one()

    departments = await db.execute(
        select(Department).order_by(Department.employee_count.desc(), Department.name)
    )

    return StatsResponse(
        employees_count=employees_count,
        hr_count=hr_count,
        admin_count=admin_count,
        non_active_employees_count=non_active,
        new_users_this_month=new_users,
        total_payroll_this_month=Decimal(str(totals[0])),
        total_bonus_this_month=Decimal(str(totals[1])),
        total_deductions_this_month=Decimal(str(totals[2])),
        departments=[DepartmentStat.model_validate(d) for d in departments.scalars().all()],
    )
