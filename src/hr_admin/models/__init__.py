"""ORM models for every entity collection."""

from hr_admin.models.audit import AuditAction, AuditImmutabilityError, AuditRecord
from hr_admin.models.base import Base
from hr_admin.models.department import Department
from hr_admin.models.employee import EmployeeProfile
from hr_admin.models.payroll import Payroll
from hr_admin.models.user import User, UserRole

__all__ = [
    "AuditAction",
    "AuditImmutabilityError",
    "AuditRecord",
    "Base",
    "Department",
    "EmployeeProfile",
    "Payroll",
    "User",
    "UserRole",
]
