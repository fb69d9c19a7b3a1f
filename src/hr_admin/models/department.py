"""Department model."""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from hr_admin.models.base import ActorStampMixin, Base, IdentifierMixin, TimestampMixin


class Department(Base, IdentifierMixin, TimestampMixin, ActorStampMixin):
    """Department (organizational unit). Hard-deleted.

    ``employee_count`` is denormalized and owned by the department count
    cascade; clients never write it directly.
    """

    __tablename__ = "department"

    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    description: Mapped[str] = mapped_column(String, nullable=False)
    employee_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
