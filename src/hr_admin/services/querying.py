"""List query parsing: filter, sort and pagination options for list reads."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import Select

from hr_admin.exceptions import ValidationFailedError

if TYPE_CHECKING:
    from sqlalchemy import Column

    from hr_admin.models import Base

# Query parameters that are never treated as field filters
RESERVED_PARAMS = frozenset({"page", "limit", "sort", "include_inactive"})

OPERATORS = {
    "eq": lambda col, v: col == v,
    "ne": lambda col, v: col != v,
    "gt": lambda col, v: col > v,
    "gte": lambda col, v: col >= v,
    "lt": lambda col, v: col < v,
    "lte": lambda col, v: col <= v,
}


@dataclass(frozen=True)
class FieldFilter:
    """One ``field <op> value`` predicate."""

    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class ListQuery:
    """Caller-supplied filter/sort/pagination for a list read."""

    filters: tuple[FieldFilter, ...] = ()
    sort: tuple[SortKey, ...] = ()
    page: int = 1
    page_size: int = 100

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class Page:
    """One page of list results."""

    items: list[dict[str, Any]]
    total: int
    page: int
    page_size: int


def _column(model: type[Base], name: str) -> Column[Any]:
    column = model.__table__.columns.get(name)
    if column is None:
        raise ValidationFailedError(f"Unknown field: {name}", field=name)
    return column


def coerce_value(column: Column[Any], raw: str) -> Any:
    """Convert a raw query-string value to the column's Python type."""
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw

    try:
        if python_type is bool:
            lowered = raw.strip().lower()
            if lowered in ("true", "1"):
                return True
            if lowered in ("false", "0"):
                return False
            raise ValueError(raw)
        if python_type is UUID:
            return UUID(raw)
        if python_type is Decimal:
            return Decimal(raw)
        if python_type is int:
            return int(raw)
        if python_type is datetime:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        if python_type is date:
            return date.fromisoformat(raw)
    except (ValueError, ArithmeticError):
        raise ValidationFailedError(
            f"Invalid {column.name} : {raw}", field=column.name, value=raw
        ) from None
    return raw


def _positive_int(name: str, raw: str | None, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationFailedError(f"{name} must be an integer", field=name) from None
    if value < 1:
        raise ValidationFailedError(f"{name} must be at least 1", field=name)
    return value


def parse_list_query(
    model: type[Base],
    params: Mapping[str, str],
    default_page_size: int = 100,
    max_page_size: int = 500,
) -> ListQuery:
    """Build a ListQuery from query-string parameters.

    Filters are ``field=value`` or ``field__<op>=value`` with op one of
    eq, ne, gt, gte, lt, lte. ``sort`` is a comma-separated list of fields,
    a leading ``-`` meaning descending.
    """
    filters: list[FieldFilter] = []
    for key, raw in params.items():
        if key in RESERVED_PARAMS:
            continue
        name, _, op = key.partition("__")
        op = op or "eq"
        if op not in OPERATORS:
            raise ValidationFailedError(f"Unknown filter operator: {op}", field=name)
        column = _column(model, name)
        filters.append(FieldFilter(name, op, coerce_value(column, raw)))

    sort: list[SortKey] = []
    for token in (params.get("sort") or "").split(","):
        token = token.strip()
        if not token:
            continue
        descending = token.startswith("-")
        name = token.lstrip("-")
        _column(model, name)
        sort.append(SortKey(name, descending))

    page = _positive_int("page", params.get("page"), 1)
    page_size = min(_positive_int("limit", params.get("limit"), default_page_size), max_page_size)

    return ListQuery(filters=tuple(filters), sort=tuple(sort), page=page, page_size=page_size)


def apply_filters(stmt: Select, model: type[Base], query: ListQuery) -> Select:
    """Apply the filter predicates of a ListQuery."""
    for flt in query.filters:
        stmt = stmt.where(OPERATORS[flt.op](_column(model, flt.field), flt.value))
    return stmt


def apply_sort_and_page(stmt: Select, model: type[Base], query: ListQuery) -> Select:
    """Apply ordering (newest first by default) and pagination."""
    columns = model.__table__.columns
    if query.sort:
        order_by = [
            _column(model, key.field).desc() if key.descending else _column(model, key.field)
            for key in query.sort
        ]
    elif "created_at" in columns:
        order_by = [columns["created_at"].desc()]
    elif "timestamp" in columns:
        order_by = [columns["timestamp"].desc()]
    else:
        order_by = []
    # Tiebreaker keeps pages stable
    order_by.append(columns["id"])
    return stmt.order_by(*order_by).offset(query.offset).limit(query.page_size)
