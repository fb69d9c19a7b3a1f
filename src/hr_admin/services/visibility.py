"""Visibility scope for soft-deletable entity kinds.

Every read of a soft-deletable kind hides records whose ``active`` flag is
false. Callers that need the full record (update pre-images, audit
resolution, administrative listings) pass ``ReadOptions(include_inactive=True)``
on that call only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from hr_admin.services.registry import is_soft_deletable

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Select

    from hr_admin.models import Base

SelectT = TypeVar("SelectT", bound="Select")


@dataclass(frozen=True)
class ReadOptions:
    """Per-call read options."""

    include_inactive: bool = False


DEFAULT_READ = ReadOptions()
UNSCOPED_READ = ReadOptions(include_inactive=True)


def apply_visibility(stmt: SelectT, model: type[Base], options: ReadOptions) -> SelectT:
    """Add the active-only predicate to a select unless the caller opted out."""
    if options.include_inactive or not is_soft_deletable(model):
        return stmt
    return stmt.where(model.active.is_not(False))


def active_only(model: type[Base]) -> ColumnElement[bool]:
    """Predicate used by aggregations: records explicitly marked active."""
    return model.active.is_(True)
