"""Payroll model."""

from __future__ import annotations

import calendar
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from hr_admin.models.base import ActorStampMixin, Base, IdentifierMixin, TimestampMixin


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _current_month() -> int:
    return _utcnow().month


def _current_year() -> int:
    return _utcnow().year


class Payroll(Base, IdentifierMixin, TimestampMixin, ActorStampMixin):
    """Monthly payroll entry for one employee profile. Hard-deleted.

    ``net_pay`` is derived when the entry is created, from the profile's
    salary at that moment.
    """

    __tablename__ = "payroll"

    employee_profile_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("employee_profile.id", ondelete="RESTRICT"),
        nullable=False,
    )
    bonus: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    deductions: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    net_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    month: Mapped[int] = mapped_column(Integer, nullable=False, default=_current_month)
    year: Mapped[int] = mapped_column(Integer, nullable=False, default=_current_year)

    __table_args__ = (
        UniqueConstraint(
            "employee_profile_id", "month", "year", name="payroll_profile_period_unique"
        ),
        CheckConstraint("month BETWEEN 1 AND 12", name="payroll_month_check"),
        CheckConstraint("bonus >= 0", name="payroll_bonus_check"),
        CheckConstraint("deductions >= 0", name="payroll_deductions_check"),
        Index("ix_payroll_month", "month"),
        Index("ix_payroll_year", "year"),
    )

    @property
    def month_name(self) -> str:
        """Get the English month name."""
        return calendar.month_name[self.month]
