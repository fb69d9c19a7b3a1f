"""Entity kind registry.

Maps each entity kind to its ORM model and deletion policy. Audit records
reference entities through ``EntityRef`` (kind tag + raw id) and are resolved
through this table rather than through database-level polymorphism.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from hr_admin.models import Base, Department, EmployeeProfile, Payroll, User


class EntityKind(str, Enum):
    """Entity kinds handled by the generic write engine."""

    USER = "User"
    EMPLOYEE_PROFILE = "EmployeeProfile"
    DEPARTMENT = "Department"
    PAYROLL = "Payroll"


@dataclass(frozen=True)
class EntityDescriptor:
    """How one entity kind is stored and deleted."""

    kind: EntityKind
    model: type[Base]
    soft_delete: bool
    label: str


REGISTRY: dict[EntityKind, EntityDescriptor] = {
    EntityKind.USER: EntityDescriptor(EntityKind.USER, User, soft_delete=True, label="user"),
    EntityKind.EMPLOYEE_PROFILE: EntityDescriptor(
        EntityKind.EMPLOYEE_PROFILE, EmployeeProfile, soft_delete=True, label="employee profile"
    ),
    EntityKind.DEPARTMENT: EntityDescriptor(
        EntityKind.DEPARTMENT, Department, soft_delete=False, label="department"
    ),
    EntityKind.PAYROLL: EntityDescriptor(
        EntityKind.PAYROLL, Payroll, soft_delete=False, label="payroll"
    ),
}

_BY_MODEL: dict[type[Base], EntityDescriptor] = {d.model: d for d in REGISTRY.values()}


def descriptor_for(kind: EntityKind | str) -> EntityDescriptor:
    """Look up the descriptor for a kind (enum member or its value)."""
    try:
        return REGISTRY[EntityKind(kind)]
    except ValueError:
        raise KeyError(f"Unknown entity kind: {kind!r}") from None


def is_soft_deletable(model: type[Base]) -> bool:
    """Whether reads of this model are subject to the visibility scope."""
    descriptor = _BY_MODEL.get(model)
    return descriptor is not None and descriptor.soft_delete


@dataclass(frozen=True)
class EntityRef:
    """Discriminated reference to an entity of any registered kind."""

    kind: EntityKind
    id: UUID

    @property
    def model(self) -> type[Base]:
        return descriptor_for(self.kind).model

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"
