"""Audit trail model.

Audit records are append-only. The ORM listeners below reject any flush
that would UPDATE or DELETE an existing record.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Uuid, event
from sqlalchemy.orm import Mapped, mapped_column

from hr_admin.models.base import Base, IdentifierMixin


class AuditAction(str, Enum):
    """Mutation kinds recorded in the audit trail."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class AuditImmutabilityError(RuntimeError):
    """Raised when code attempts to modify or remove an audit record."""

    def __init__(self, record_id: UUID | None, operation: str):
        self.record_id = record_id
        self.operation = operation
        super().__init__(f"Audit record {record_id} is immutable; {operation} rejected")


class AuditRecord(Base, IdentifierMixin):
    """Immutable audit trail entry.

    ``entity_kind`` + ``entity_id`` form a polymorphic reference resolved
    through the entity registry, not a database foreign key.
    """

    __tablename__ = "audit_record"

    action: Mapped[str] = mapped_column(String, nullable=False)
    entity_kind: Mapped[str] = mapped_column(String, nullable=False)
    entity_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    actor_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("app_user.id", ondelete="SET NULL"),
        nullable=True,
    )
    before: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    after: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    changes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("ix_audit_record_entity", "entity_kind", "entity_id"),
        Index("ix_audit_record_actor_timestamp", "actor_id", "timestamp"),
    )


@event.listens_for(AuditRecord, "before_update")
def _reject_audit_update(mapper, connection, target: AuditRecord) -> None:
    raise AuditImmutabilityError(target.id, "update")


@event.listens_for(AuditRecord, "before_delete")
def _reject_audit_delete(mapper, connection, target: AuditRecord) -> None:
    raise AuditImmutabilityError(target.id, "delete")
