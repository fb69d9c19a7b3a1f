"""Employee profile model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Numeric,
    String,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from hr_admin.models.base import ActorStampMixin, Base, IdentifierMixin, TimestampMixin


class EmployeeProfile(Base, IdentifierMixin, TimestampMixin, ActorStampMixin):
    """Employment profile linking a user to a department.

    A user has at most one profile. Soft-deleted by clearing ``active``.
    """

    __tablename__ = "employee_profile"

    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("app_user.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )
    department_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("department.id", ondelete="RESTRICT"),
        nullable=False,
    )
    salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    phone: Mapped[str] = mapped_column(String, nullable=False)
    address: Mapped[str] = mapped_column(String, nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    joining_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("salary >= 0", name="employee_profile_salary_check"),
        Index("ix_employee_profile_department_active", "department_id", "active"),
    )
