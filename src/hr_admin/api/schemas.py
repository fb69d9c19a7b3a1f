"""Pydantic schemas for API request/response models."""

import calendar
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field, field_validator

from hr_admin.models import UserRole

T = TypeVar("T")

PHONE_PATTERN = r"^\+?[0-9][0-9\s\-()]{6,19}$"


# ============================================================================
# Envelopes
# ============================================================================


class ErrorResponse(BaseModel):
    """Error response body."""

    detail: str
    code: str


class Envelope(BaseModel, Generic[T]):
    """Single-document response."""

    status: str = "success"
    data: T
    warnings: list[str] = Field(default_factory=list)


class ListEnvelope(BaseModel, Generic[T]):
    """Paginated list response."""

    status: str = "success"
    results: int
    total: int
    page: int
    page_size: int
    items: list[T]


# ============================================================================
# Referenced documents
# ============================================================================


class ActorSummary(BaseModel):
    """The user behind an audit record or an actor stamp."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    role: str


class StampedDetail(BaseModel):
    """Actor stamps resolved to user summaries (None if the user is gone)."""

    created_by_user: ActorSummary | None = None
    updated_by_user: ActorSummary | None = None


# ============================================================================
# User schemas
# ============================================================================


class UserCreate(BaseModel):
    """Schema for creating a user account."""

    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(min_length=1)
    email: EmailStr
    role: UserRole = UserRole.EMPLOYEE
    photo: str | None = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class UserUpdate(BaseModel):
    """Schema for updating a user account."""

    model_config = ConfigDict(use_enum_values=True)

    name: str | None = Field(default=None, min_length=1)
    email: EmailStr | None = None
    role: UserRole | None = None
    photo: str | None = None
    active: bool | None = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str | None) -> str | None:
        return value.lower() if value is not None else None


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    role: str
    photo: str
    active: bool
    created_at: datetime
    created_by: UUID | None = None
    updated_by: UUID | None = None


# ============================================================================
# Department schemas
# ============================================================================


class DepartmentCreate(BaseModel):
    """Schema for creating a department."""

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)


class DepartmentUpdate(BaseModel):
    """Schema for updating a department. ``employee_count`` is derived."""

    name: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)


class DepartmentResponse(BaseModel):
    """Schema for department response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str
    employee_count: int
    created_at: datetime
    created_by: UUID | None = None
    updated_by: UUID | None = None


# ============================================================================
# Employee profile schemas
# ============================================================================


class EmployeeProfileCreate(BaseModel):
    """Schema for creating an employee profile."""

    user_id: UUID
    department_id: UUID
    salary: Decimal = Field(ge=0, decimal_places=2)
    phone: str = Field(pattern=PHONE_PATTERN)
    address: str = Field(min_length=1)
    date_of_birth: date
    joining_date: date | None = None


class EmployeeProfileUpdate(BaseModel):
    """Schema for updating an employee profile. The linked user is fixed."""

    department_id: UUID | None = None
    salary: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    address: str | None = Field(default=None, min_length=1)
    date_of_birth: date | None = None
    joining_date: date | None = None
    active: bool | None = None


class EmployeeProfileResponse(BaseModel):
    """Schema for employee profile response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    department_id: UUID
    salary: Decimal
    phone: str
    address: str
    date_of_birth: date
    joining_date: date
    active: bool
    created_at: datetime
    created_by: UUID | None = None
    updated_by: UUID | None = None


class EmployeeProfileDetailResponse(EmployeeProfileResponse, StampedDetail):
    """Employee profile with its actor stamps resolved."""


class DepartmentDetailResponse(DepartmentResponse):
    """Department with its active employee profiles."""

    employees: list[EmployeeProfileResponse] = Field(default_factory=list)


# ============================================================================
# Payroll schemas
# ============================================================================


class PayrollCreate(BaseModel):
    """Schema for creating a payroll entry. ``net_pay`` is derived."""

    employee_profile_id: UUID
    bonus: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    deductions: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    payment_date: datetime | None = None
    month: int | None = Field(default=None, ge=1, le=12)
    year: int | None = Field(default=None, ge=1900, le=9999)


class PayrollUpdate(BaseModel):
    """Schema for updating a payroll entry. The profile is fixed."""

    bonus: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    deductions: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    payment_date: datetime | None = None
    month: int | None = Field(default=None, ge=1, le=12)
    year: int | None = Field(default=None, ge=1900, le=9999)


class PayrollResponse(BaseModel):
    """Schema for payroll response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    employee_profile_id: UUID
    bonus: Decimal
    deductions: Decimal
    net_pay: Decimal
    payment_date: datetime
    month: int
    year: int
    created_at: datetime
    created_by: UUID | None = None
    updated_by: UUID | None = None

    @computed_field
    @property
    def month_name(self) -> str:
        return calendar.month_name[self.month]


class PayrollDetailResponse(PayrollResponse, StampedDetail):
    """Payroll entry with its employee profile and actor stamps resolved."""

    employee_profile: EmployeeProfileResponse | None = None


# ============================================================================
# Audit schemas
# ============================================================================


class AuditRecordResponse(BaseModel):
    """Schema for audit record response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    action: str
    entity_kind: str
    entity_id: UUID
    actor_id: UUID | None = None
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
    changes: dict[str, Any] | None = None
    timestamp: datetime
    actor: ActorSummary | None = None


class AuditRecordDetailResponse(AuditRecordResponse):
    """Audit record with the referenced entity resolved (None if it is gone)."""

    entity: dict[str, Any] | None = None


# ============================================================================
# Operations and dashboard schemas
# ============================================================================


class ReconcileResponse(BaseModel):
    """Result of the department count repair job."""

    counts: dict[UUID, int]
    warnings: list[str]


class DepartmentStat(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    employee_count: int


class StatsResponse(BaseModel):
    """Dashboard counters."""

    employees_count: int
    hr_count: int
    admin_count: int
    non_active_employees_count: int
    new_users_this_month: int
    total_payroll_this_month: Decimal
    total_bonus_this_month: Decimal
    total_deductions_this_month: Decimal
    departments: list[DepartmentStat]
