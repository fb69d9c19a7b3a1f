"""Tests for snapshot diffing."""

from decimal import Decimal
from uuid import uuid4

from hr_admin.services.diff import compute_diff


class TestComputeDiff:
    """Field-level change detection."""

    def test_reports_changed_fields_only(self):
        old = {"name": "Sales", "description": "Sells things", "employee_count": 3}
        new = {"name": "Revenue", "description": "Sells things", "employee_count": 3}

        assert compute_diff(old, new) == {"name": {"from": "Sales", "to": "Revenue"}}

    def test_identical_snapshots_have_no_changes(self):
        snapshot = {"salary": Decimal("100.00"), "active": True}
        assert compute_diff(snapshot, dict(snapshot)) == {}

    def test_compares_by_string_form(self):
        """Values with the same textual form are not a change."""
        department_id = uuid4()
        old = {"department_id": department_id}
        new = {"department_id": str(department_id)}

        assert compute_diff(old, new) == {}

    def test_fields_missing_on_either_side_are_skipped(self):
        old = {"name": "Eve", "photo": "a.jpg"}
        new = {"name": "Eve", "role": "hr"}

        assert compute_diff(old, new) == {}

    def test_actor_stamps_are_ignored(self):
        old = {"updated_by": uuid4(), "phone": "+1 555 000 0000"}
        new = {"updated_by": uuid4(), "phone": "+1 555 000 0000"}

        assert compute_diff(old, new) == {}

    def test_mapping_key_order_counts_as_change(self):
        old = {"meta": {"a": 1, "b": 2}}
        new = {"meta": {"b": 2, "a": 1}}

        assert "meta" in compute_diff(old, new)
