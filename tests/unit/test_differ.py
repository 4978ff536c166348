"""
Unit tests for the differ.

Tests plan ordering, idempotence, field-level updates and plan errors.
"""

from duckkit.differ import diff
from duckkit.models import (
    CellSpec,
    DesiredState,
    MacroResource,
    MacroSpec,
    MaskBindingRef,
    Operation,
    PipelineJobSpec,
    ResourceKind,
    S3CredentialSpec,
    StorageCredentialSpec,
    TableResource,
    TableSpec,
)
from duckkit.reader import model_from_row, table_from_row
from tests.fixtures import (
    make_catalog,
    make_column,
    make_column_masks,
    make_grant,
    make_group,
    make_member,
    make_model,
    make_model_test,
    make_notebook,
    make_pipeline,
    make_principal,
    make_schema,
    make_table,
)


def _full_state() -> DesiredState:
    table = make_table()
    return DesiredState(
        principals=[make_principal("alice")],
        groups=[make_group("analysts", members=[make_member("alice")])],
        grants=[make_grant()],
        catalogs=[make_catalog()],
        schemas=[make_schema()],
        tables=[table],
        column_masks=[make_column_masks(table, bindings=[MaskBindingRef(principal="analysts", principal_type="group")])],
        notebooks=[make_notebook()],
        pipelines=[make_pipeline()],
        models=[make_model(tests=[make_model_test()])],
    )


class TestPlanOrdering:
    """Tests for the order of actions in a plan."""

    def test_creates_run_lowest_layer_first(self) -> None:
        """Test that creates are ordered catalog, schema, table, grant."""
        desired = DesiredState(
            catalogs=[make_catalog()],
            schemas=[make_schema()],
            tables=[make_table()],
            grants=[make_grant()],
        )

        plan = diff(desired, DesiredState())

        kinds = [a.resource_kind for a in plan.actions]
        assert kinds == [
            ResourceKind.CATALOG_REGISTRATION,
            ResourceKind.SCHEMA,
            ResourceKind.TABLE,
            ResourceKind.PRIVILEGE_GRANT,
        ]
        assert all(a.operation == Operation.CREATE for a in plan.actions)

    def test_deletes_follow_creates_in_reverse_layer_order(self) -> None:
        """Test that a membership is removed before its group, after all creates."""
        desired = DesiredState(principals=[make_principal("alice")], catalogs=[make_catalog()])
        actual = DesiredState(
            principals=[make_principal("alice")],
            groups=[make_group("old", members=[make_member("alice")])],
        )

        plan = diff(desired, actual)

        assert [(a.operation, a.resource_kind, a.resource_name) for a in plan.actions] == [
            (Operation.CREATE, ResourceKind.CATALOG_REGISTRATION, "lake"),
            (Operation.DELETE, ResourceKind.GROUP_MEMBERSHIP, "old/alice(user)"),
            (Operation.DELETE, ResourceKind.GROUP, "old"),
        ]

    def test_children_of_new_parents_are_created(self) -> None:
        """Test that a new group's members and a new pipeline's jobs get their own actions."""
        desired = DesiredState(
            principals=[make_principal("alice")],
            groups=[make_group("analysts", members=[make_member("alice")])],
            notebooks=[make_notebook("etl")],
            pipelines=[make_pipeline("nightly")],
        )

        plan = diff(desired, DesiredState())

        names = {(a.resource_kind, a.resource_name) for a in plan.actions}
        assert (ResourceKind.GROUP_MEMBERSHIP, "analysts/alice(user)") in names
        assert (ResourceKind.PIPELINE_JOB, "nightly/load") in names


class TestIdempotence:
    """Tests that identical states produce empty plans."""

    def test_same_state_has_no_changes(self) -> None:
        """Test that diffing a state against itself plans nothing."""
        plan = diff(_full_state(), _full_state())

        assert plan.actions == []
        assert plan.errors == []
        assert not plan.has_changes()

    def test_diff_is_deterministic(self) -> None:
        """Test that equal inputs give equal plans."""
        desired = _full_state()

        first = diff(desired, DesiredState())
        second = diff(desired, DesiredState())

        assert first.actions == second.actions


def _stored_model(materialization: str) -> dict:
    return {
        "id": "m1",
        "project_name": "analytics",
        "name": "daily_orders",
        "materialization": materialization,
        "sql": "SELECT * FROM orders",
    }


class TestServerDefaults:
    """Tests that values the server stores for unset fields are not drift."""

    def test_unset_materialization_matches_stored_view(self) -> None:
        """Test that a model without a materialization matches the server's VIEW."""
        desired = DesiredState(models=[make_model(materialization="")])
        actual = DesiredState(models=[model_from_row(_stored_model("VIEW"))])

        plan = diff(desired, actual)

        assert desired.models[0].spec.materialization == "VIEW"
        assert plan.actions == []

    def test_explicit_materialization_is_compared(self) -> None:
        """Test that a materialization set in configuration is still diffed."""
        desired = DesiredState(models=[make_model(materialization="TABLE")])
        actual = DesiredState(models=[model_from_row(_stored_model("VIEW"))])

        plan = diff(desired, actual)

        assert len(plan.actions) == 1
        assert [(c.field, c.old_value, c.new_value) for c in plan.actions[0].changes] == [
            ("materialization", "VIEW", "TABLE")
        ]

    def test_unset_table_type_matches_managed(self) -> None:
        """Test that a table without a type matches a stored MANAGED table."""
        desired = DesiredState(tables=[TableResource(
            catalog_name="lake",
            schema_name="sales",
            table_name="orders",
            spec=TableSpec(table_type="", columns=[make_column("id", "BIGINT")]),
        )])
        actual = DesiredState(tables=[table_from_row("lake", "sales", {
            "table_id": "t1",
            "name": "orders",
            "table_type": "MANAGED",
            "columns": [{"name": "id", "type": "BIGINT"}],
        })])

        plan = diff(desired, actual)

        assert plan.actions == []
        assert plan.errors == []

    def test_unset_macro_fields_match_stored_defaults(self) -> None:
        """Test that macro type, visibility and status left empty match what the server stores."""
        desired = DesiredState(macros=[MacroResource(
            name="cents_to_dollars",
            spec=MacroSpec(macro_type="", visibility="", status="", parameters=["cents"], body="cents / 100.0"),
        )])
        actual = DesiredState(macros=[MacroResource(
            name="cents_to_dollars",
            spec=MacroSpec(
                macro_type="SCALAR",
                visibility="project",
                status="ACTIVE",
                parameters=["cents"],
                body="cents / 100.0",
            ),
        )])

        plan = diff(desired, actual)

        assert plan.actions == []


class TestFieldUpdates:
    """Tests for update actions and their field diffs."""

    def test_schema_comment_change(self) -> None:
        """Test that a changed comment is reported with old and new values."""
        desired = DesiredState(schemas=[make_schema(comment="Sales data")])
        actual = DesiredState(schemas=[make_schema(comment="")])

        plan = diff(desired, actual)

        assert len(plan.actions) == 1
        action = plan.actions[0]
        assert action.operation == Operation.UPDATE
        assert action.resource_name == "lake.sales"
        assert [(c.field, c.old_value, c.new_value) for c in action.changes] == [
            ("comment", "", "Sales data")
        ]

    def test_properties_rendered_sorted(self) -> None:
        """Test that map fields are compared in their sorted rendering."""
        desired = DesiredState(schemas=[make_schema(properties={"b": "2", "a": "1"})])
        actual = DesiredState(schemas=[make_schema(properties={"a": "1"})])

        change = diff(desired, actual).actions[0].changes[0]

        assert change.field == "properties"
        assert change.old_value == "a=1"
        assert change.new_value == "a=1, b=2"

    def test_added_column_is_an_update(self) -> None:
        """Test that a new column shows up as a column field change."""
        desired = DesiredState(tables=[make_table(columns=[make_column("id"), make_column("ts", "TIMESTAMP")])])
        actual = DesiredState(tables=[make_table(columns=[make_column("id")])])

        plan = diff(desired, actual)

        assert plan.errors == []
        assert [(c.field, c.new_value) for c in plan.actions[0].changes] == [("columns.ts", "ts TIMESTAMP")]

    def test_mask_binding_see_original_change(self) -> None:
        """Test that flipping see_original updates the binding, not the mask."""
        table = make_table()
        desired = DesiredState(column_masks=[make_column_masks(
            table, bindings=[MaskBindingRef(principal="analysts", principal_type="group", see_original=True)],
        )])
        actual = DesiredState(column_masks=[make_column_masks(
            table, bindings=[MaskBindingRef(principal="analysts", principal_type="group")],
        )])

        plan = diff(desired, actual)

        assert len(plan.actions) == 1
        action = plan.actions[0]
        assert action.resource_kind == ResourceKind.COLUMN_MASK_BINDING
        assert action.resource_name == "lake.sales.orders/hide_email->group:analysts"
        assert action.changes[0].field == "see_original"

    def test_notebook_cells_change(self) -> None:
        """Test that different cells are summarised as one change."""
        desired = DesiredState(notebooks=[make_notebook(cells=[CellSpec(type="sql", content="SELECT 2")])])
        actual = DesiredState(notebooks=[make_notebook()])

        change = diff(desired, actual).actions[0].changes[0]

        assert (change.field, change.old_value, change.new_value) == ("cells", "1 cells", "1 cells")

    def test_pipeline_job_change(self) -> None:
        """Test that a changed job is an update of the job, not the pipeline."""
        desired = DesiredState(pipelines=[make_pipeline(jobs=[PipelineJobSpec(name="load", notebook="etl", retry_count=3)])])
        actual = DesiredState(pipelines=[make_pipeline()])

        plan = diff(desired, actual)

        assert [(a.resource_kind, a.resource_name) for a in plan.actions] == [
            (ResourceKind.PIPELINE_JOB, "nightly/load")
        ]
        assert plan.actions[0].changes[0].new_value == "3"

    def test_model_tests_change(self) -> None:
        """Test that a changed test list is an update of the model."""
        desired = DesiredState(models=[make_model(tests=[make_model_test(), make_model_test("id_unique", "unique")])])
        actual = DesiredState(models=[make_model(tests=[make_model_test()])])

        action = diff(desired, actual).actions[0]

        assert action.resource_kind == ResourceKind.MODEL
        assert action.changes[0].field == "tests"
        assert action.changes[0].new_value == "2 tests"

    def test_credential_secrets_are_not_compared(self) -> None:
        """Test that secret references never produce a change."""
        desired = DesiredState(storage_credentials=[StorageCredentialSpec(
            name="s3", credential_type="S3",
            s3=S3CredentialSpec(key_id_from_env="KEY", secret_from_env="SECRET", region="eu-west-1"),
        )])
        actual = DesiredState(storage_credentials=[StorageCredentialSpec(
            name="s3", credential_type="S3", s3=S3CredentialSpec(region="eu-west-1"),
        )])

        assert diff(desired, actual).actions == []

    def test_grants_are_never_updated(self) -> None:
        """Test that a different privilege is a create plus a delete."""
        desired = DesiredState(grants=[make_grant(privilege="SELECT")])
        actual = DesiredState(grants=[make_grant(privilege="USAGE")])

        plan = diff(desired, actual)

        assert [a.operation for a in plan.actions] == [Operation.CREATE, Operation.DELETE]


class TestPlanErrors:
    """Tests for changes the differ refuses to plan."""

    def test_protected_catalog_delete(self) -> None:
        """Test that deleting a protected catalog is a plan error, not an action."""
        actual = DesiredState(catalogs=[make_catalog(deletion_protection=True)])

        plan = diff(DesiredState(), actual)

        assert plan.actions == []
        assert len(plan.errors) == 1
        assert plan.errors[0].resource_kind == ResourceKind.CATALOG_REGISTRATION
        assert plan.errors[0].message == "cannot delete catalog: deletion_protection is enabled"

    def test_unprotected_table_delete(self) -> None:
        """Test that an unprotected table is deleted normally."""
        plan = diff(DesiredState(), DesiredState(tables=[make_table()]))

        assert plan.errors == []
        assert plan.actions[0].operation == Operation.DELETE

    def test_column_type_change(self) -> None:
        """Test that a column type change blocks the table update."""
        desired = DesiredState(tables=[make_table(columns=[make_column("id", "VARCHAR")], comment="new")])
        actual = DesiredState(tables=[make_table(columns=[make_column("id", "BIGINT")])])

        plan = diff(desired, actual)

        assert plan.actions == []
        assert len(plan.errors) == 1
        assert plan.errors[0].resource_name == "lake.sales.orders"
        assert plan.errors[0].message == 'column "id": cannot change type from "BIGINT" to "VARCHAR"'
