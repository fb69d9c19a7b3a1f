"""User account model."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from hr_admin.models.base import ActorStampMixin, Base, IdentifierMixin, TimestampMixin


class UserRole(str, Enum):
    """Roles a user account can hold."""

    ADMIN = "admin"
    HR = "hr"
    EMPLOYEE = "employee"


class User(Base, IdentifierMixin, TimestampMixin, ActorStampMixin):
    """User account. Soft-deleted by clearing ``active``."""

    __tablename__ = "app_user"

    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String, nullable=False, default=UserRole.EMPLOYEE.value)
    photo: Mapped[str] = mapped_column(String, nullable=False, default="default.jpg")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'hr', 'employee')", name="app_user_role_check"),
        Index("ix_app_user_role", "role"),
    )
