"""HR admin engine services."""

from hr_admin.services.audit_writer import AuditReader, AuditWriter
from hr_admin.services.cascade import CascadeOutcome, DepartmentCountCascade
from hr_admin.services.diff import compute_diff
from hr_admin.services.entity_store import EntityStore, PayrollStore, snapshot, store_for
from hr_admin.services.guards import Actor, GuardRules
from hr_admin.services.querying import ListQuery, Page, parse_list_query
from hr_admin.services.registry import EntityKind, EntityRef, descriptor_for
from hr_admin.services.resource_handler import ResourceHandler, WriteResult
from hr_admin.services.visibility import DEFAULT_READ, UNSCOPED_READ, ReadOptions

__all__ = [
    "Actor",
    "AuditReader",
    "AuditWriter",
    "CascadeOutcome",
    "DEFAULT_READ",
    "DepartmentCountCascade",
    "EntityKind",
    "EntityRef",
    "EntityStore",
    "GuardRules",
    "ListQuery",
    "Page",
    "PayrollStore",
    "ReadOptions",
    "ResourceHandler",
    "UNSCOPED_READ",
    "WriteResult",
    "compute_diff",
    "descriptor_for",
    "parse_list_query",
    "snapshot",
    "store_for",
]
