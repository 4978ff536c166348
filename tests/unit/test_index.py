"""
Unit tests for the resource index and plan ordering.
"""

import pytest

from duckkit.errors import ResolutionError
from duckkit.index import ResourceIndex
from duckkit.models import Operation, ResourceKind
from duckkit.plan import Action, Plan, PlanError
from tests.fixtures import make_group, make_principal


class TestResourceIndex:
    """Tests for ResourceIndex."""

    def test_register_and_resolve(self) -> None:
        """Test forward and reverse lookups."""
        index = ResourceIndex()
        index.register(ResourceKind.SCHEMA, "lake.sales", "s1")

        assert index.resolve(ResourceKind.SCHEMA, "lake.sales") == "s1"
        assert index.name_for(ResourceKind.SCHEMA, "s1") == "lake.sales"
        assert len(index) == 1

    def test_identifiers_are_strings(self) -> None:
        """Test that numeric identifiers are stored as strings."""
        index = ResourceIndex()
        index.register(ResourceKind.TABLE, "lake.sales.orders", 42)

        assert index.lookup(ResourceKind.TABLE, "lake.sales.orders") == "42"
        assert index.name_for(ResourceKind.TABLE, 42) == "lake.sales.orders"

    def test_empty_identifier_ignored(self) -> None:
        """Test that a response without an identifier registers nothing."""
        index = ResourceIndex()
        index.register(ResourceKind.GROUP, "analysts", "")
        index.register(ResourceKind.GROUP, "analysts", None)

        assert index.lookup(ResourceKind.GROUP, "analysts") is None
        assert len(index) == 0

    def test_resolve_missing(self) -> None:
        """Test the error for an unindexed path."""
        with pytest.raises(ResolutionError, match="schema 'lake.sales' not found in resource index") as exc_info:
            ResourceIndex().resolve(ResourceKind.SCHEMA, "lake.sales")

        assert exc_info.value.kind == "schema"
        assert exc_info.value.path == "lake.sales"

    def test_forget(self) -> None:
        """Test that forgetting removes both directions."""
        index = ResourceIndex()
        index.register(ResourceKind.PRINCIPAL, "alice", "p1")

        index.forget(ResourceKind.PRINCIPAL, "alice")
        index.forget(ResourceKind.PRINCIPAL, "never-registered")

        assert index.lookup(ResourceKind.PRINCIPAL, "alice") is None
        assert index.name_for(ResourceKind.PRINCIPAL, "p1") is None

    def test_principals_and_groups_by_type(self) -> None:
        """Test that the principal type selects the namespace."""
        index = ResourceIndex()
        index.register(ResourceKind.PRINCIPAL, "ops", "p1")
        index.register(ResourceKind.GROUP, "ops", "g1")

        assert index.resolve_principal("ops", "user") == "p1"
        assert index.resolve_principal("ops", "service_principal") == "p1"
        assert index.resolve_principal("ops", "group") == "g1"
        assert index.principal_name_for("g1", "group") == "ops"
        assert index.principal_name_for("g1", "user") is None


class TestPlan:
    """Tests for Plan bookkeeping and ordering."""

    def test_sort_forward_then_reverse_deletes(self) -> None:
        """Test that creates climb the layers and deletes descend them."""
        plan = Plan()
        plan.add_delete(ResourceKind.PRINCIPAL, "old-user", make_principal("old-user"))
        plan.add_create(ResourceKind.GROUP_MEMBERSHIP, "analysts/alice(user)", None)
        plan.add_delete(ResourceKind.GROUP_MEMBERSHIP, "legacy/bob(user)", None)
        plan.add_create(ResourceKind.GROUP, "analysts", make_group())
        plan.add_create(ResourceKind.PRINCIPAL, "alice", make_principal())

        plan.sort_actions()

        assert [(a.operation, a.resource_kind) for a in plan.actions] == [
            (Operation.CREATE, ResourceKind.PRINCIPAL),
            (Operation.CREATE, ResourceKind.GROUP),
            (Operation.CREATE, ResourceKind.GROUP_MEMBERSHIP),
            (Operation.DELETE, ResourceKind.GROUP_MEMBERSHIP),
            (Operation.DELETE, ResourceKind.PRINCIPAL),
        ]

    def test_sort_is_stable_within_a_kind(self) -> None:
        """Test that actions of one kind keep their diff order."""
        plan = Plan()
        for name in ("carol", "alice", "bob"):
            plan.add_create(ResourceKind.PRINCIPAL, name, make_principal(name))

        plan.sort_actions()

        assert [a.resource_name for a in plan.actions] == ["carol", "alice", "bob"]

    def test_summary(self) -> None:
        """Test counts per operation."""
        plan = Plan()
        plan.add_create(ResourceKind.PRINCIPAL, "alice", make_principal())
        plan.add_delete(ResourceKind.GROUP, "legacy", make_group("legacy"))
        plan.add_error(ResourceKind.TABLE, "lake.sales.orders", "nope")

        assert plan.summary() == {"create": 1, "update": 0, "delete": 1, "errors": 1}
        assert plan.has_changes()
        assert [a.resource_name for a in plan.actions_of(ResourceKind.GROUP)] == ["legacy"]

    def test_empty_plan(self) -> None:
        """Test an empty plan."""
        assert not Plan().has_changes()

    def test_string_forms(self) -> None:
        """Test how actions and plan errors print."""
        action = Action(Operation.CREATE, ResourceKind.GROUP, "analysts")
        error = PlanError(ResourceKind.TABLE, "lake.sales.orders", "cannot delete")

        assert str(action) == "create group 'analysts'"
        assert str(error) == 'table "lake.sales.orders": cannot delete'
