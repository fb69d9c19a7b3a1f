"""Field-level diff between two snapshots of the same entity."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypedDict


# "from" is a keyword, so the functional syntax is required
FieldChange = TypedDict("FieldChange", {"from": Any, "to": Any})

ChangeSet = dict[str, FieldChange]

# Bookkeeping fields that never count as a change
IGNORED_FIELDS = frozenset({"created_by", "updated_by"})


def compute_diff(old: Mapping[str, Any], new: Mapping[str, Any]) -> ChangeSet:
    """Compare two snapshots field by field.

    Only fields present in both snapshots are compared, by their string
    form. Equivalent values with a different representation (e.g. mappings
    with another key order) are reported as changed.
    """
    changes: ChangeSet = {}
    for name, new_value in new.items():
        if name in IGNORED_FIELDS or name not in old:
            continue
        old_value = old[name]
        if str(old_value) != str(new_value):
            changes[name] = {"from": old_value, "to": new_value}
    return changes
