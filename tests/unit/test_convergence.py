"""
Unit tests for apply-then-plan convergence.

Each test applies a desired state to an in-memory platform that stores
exactly what the create requests carried, reads the state back and checks
that a second plan is empty.
"""

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from duckkit.client import APIClient
from duckkit.differ import diff
from duckkit.engine import Reconciler
from duckkit.executors.transformation import model_payload
from duckkit.models import (
    CatalogResource,
    CatalogSpec,
    CellSpec,
    DesiredState,
    ExternalLocationSpec,
    FreshnessSpec,
    MacroResource,
    MacroSpec,
    ModelConfigSpec,
    ModelResource,
    ModelSpec,
    S3CredentialSpec,
    StorageCredentialSpec,
    TableResource,
    TableSpec,
    ViewResource,
    ViewSpec,
    VolumeResource,
    VolumeSpec,
)
from tests.fixtures import (
    make_column,
    make_column_masks,
    make_compute_assignment,
    make_compute_endpoint,
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
    make_tag,
    make_tag_assignment,
)

Row = Dict[str, Any]

STORE_URL = "http://store.test/v1"

# Values the server stores when a create leaves them empty, by collection name
SERVER_DEFAULTS = {
    "tables": {"table_type": "MANAGED"},
    "volumes": {"volume_type": "MANAGED"},
    "macros": {"macro_type": "SCALAR", "visibility": "project", "status": "ACTIVE"},
    "models": {"materialization": "VIEW"},
}


class PlatformStore:
    """
    Stateful stand-in for the platform API.

    Created rows are kept per collection path and listed back on GET, with
    the server's defaults filled in. Items are fetched by ID or name below
    their collection. Notebook cells are kept on the notebook and tag
    assignments are listed from ``/tag-assignments``.
    """

    def __init__(self) -> None:
        self.collections: Dict[str, List[Row]] = {}
        self._next_id = 0

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path[len("/v1"):]
        request.read()
        if request.method == "POST":
            return httpx.Response(201, json=self._insert(path, json.loads(request.content)))
        if request.method == "GET":
            return httpx.Response(200, json=self._fetch(path))
        return httpx.Response(200, json={})

    def _insert(self, path: str, body: Row) -> Row:
        self._next_id += 1
        row = dict(body, id=f"id-{self._next_id}")
        parent, _, collection = path.rpartition("/")
        for name, value in SERVER_DEFAULTS.get(collection, {}).items():
            if not row.get(name):
                row[name] = value

        if collection == "cells":
            self._item(parent).setdefault("cells", []).append(row)
            return row
        if collection == "assignments" and parent.startswith("/tags/"):
            row["tag_id"] = parent.rsplit("/", 1)[1]
            path = "/tag-assignments"
        self.collections.setdefault(path, []).append(row)
        return row

    def _fetch(self, path: str) -> Row:
        if path in self.collections:
            return {"data": self.collections[path]}
        item = self._item(path)
        return item if item is not None else {"data": []}

    def _item(self, path: str) -> Optional[Row]:
        collection, _, key = path.rpartition("/")
        for row in self.collections.get(collection, []):
            if key in (row.get("id"), row.get("name")):
                return row
        return None


@pytest.fixture
def store() -> PlatformStore:
    return PlatformStore()


@pytest.fixture
def store_client(store):
    """Client wired to the stateful store."""
    api = APIClient(STORE_URL, token="test-token", transport=httpx.MockTransport(store.handle))
    yield api
    api.close()


def _apply_and_replan(client: APIClient, settings, desired: DesiredState):
    """Apply ``desired`` to an empty store, then plan again from a fresh read."""
    engine = Reconciler(client, settings)
    first = diff(desired, engine.read_actual())
    assert first.errors == []
    assert first.actions

    result = engine.apply(first)
    assert result.failed == 0, result.get_summary()

    actual = Reconciler(client, settings).read_actual()
    return diff(desired, actual), actual


def _catalog_tree() -> DesiredState:
    orders = make_table()
    return DesiredState(
        principals=[make_principal("alice")],
        groups=[make_group("analysts", members=[make_member("alice")])],
        catalogs=[CatalogResource(
            catalog_name="lake",
            spec=CatalogSpec(
                metastore_type="sqlite",
                dsn="/data/lake.sqlite",
                data_path="/data/lake",
                is_default=True,
            ),
        )],
        schemas=[make_schema(comment="Sales data", properties={"team": "sales"})],
        tables=[
            orders,
            TableResource(
                catalog_name="lake",
                schema_name="sales",
                table_name="events",
                spec=TableSpec(table_type="", columns=[make_column("ts", "TIMESTAMP")]),
            ),
        ],
        views=[ViewResource(
            catalog_name="lake",
            schema_name="sales",
            view_name="recent_orders",
            spec=ViewSpec(view_definition="SELECT * FROM orders WHERE ts > now() - INTERVAL 1 DAY"),
        )],
        volumes=[VolumeResource(
            catalog_name="lake",
            schema_name="sales",
            volume_name="landing",
            spec=VolumeSpec(volume_type=""),
        )],
        grants=[make_grant(securable_type="table", securable="lake.sales.orders", privilege="SELECT")],
        column_masks=[make_column_masks(orders)],
        tags=[make_tag("pii")],
        tag_assignments=[make_tag_assignment()],
    )


class TestConvergence:
    """Tests that applying a plan and planning again changes nothing."""

    def test_catalog_tree(self, store_client, settings) -> None:
        """Test catalogs, schemas, tables, views, volumes, grants, masks and tags."""
        replan, actual = _apply_and_replan(store_client, settings, _catalog_tree())

        assert replan.actions == []
        assert replan.errors == []
        assert actual.catalogs[0].spec.is_default
        assert {t.table_name: t.spec.table_type for t in actual.tables} == {
            "orders": "MANAGED",
            "events": "MANAGED",
        }
        assert actual.volumes[0].spec.volume_type == "MANAGED"
        assert [m.name for m in actual.column_masks[0].masks] == ["hide_email"]
        assert actual.tag_assignments[0].column_name == "email"

    def test_storage_and_compute(self, store_client, settings) -> None:
        """Test credentials, external locations, endpoints and compute assignments."""
        desired = DesiredState(
            principals=[make_principal("alice")],
            groups=[make_group("analysts")],
            storage_credentials=[StorageCredentialSpec(
                name="warehouse",
                credential_type="S3",
                s3=S3CredentialSpec(endpoint="minio:9000", region="us-east-1", url_style="path"),
            )],
            external_locations=[ExternalLocationSpec(
                name="raw",
                url="s3://lake/raw",
                credential_name="warehouse",
                storage_type="S3",
                read_only=True,
            )],
            compute_endpoints=[make_compute_endpoint()],
            compute_assignments=[
                make_compute_assignment(is_default=True),
                make_compute_assignment(principal="alice", principal_type="user", is_default=False),
            ],
        )

        replan, actual = _apply_and_replan(store_client, settings, desired)

        assert replan.actions == []
        assert {a.principal: a.is_default for a in actual.compute_assignments} == {
            "analysts": True,
            "alice": False,
        }
        assert actual.storage_credentials[0].s3.region == "us-east-1"

    def test_notebooks_and_pipelines(self, store_client, settings) -> None:
        """Test notebooks with ordered cells and pipelines with jobs."""
        desired = DesiredState(
            notebooks=[make_notebook(cells=[
                CellSpec(type="markdown", content="# Load"),
                CellSpec(type="sql", content="SELECT 1"),
            ])],
            pipelines=[make_pipeline()],
        )

        replan, actual = _apply_and_replan(store_client, settings, desired)

        assert replan.actions == []
        assert [c.type for c in actual.notebooks[0].spec.cells] == ["markdown", "sql"]
        assert actual.pipelines[0].spec.jobs[0].notebook == "etl"

    def test_macros_and_models(self, store_client, settings) -> None:
        """Test macros and models that leave server-defaulted fields empty."""
        desired = DesiredState(
            macros=[MacroResource(
                name="cents_to_dollars",
                spec=MacroSpec(macro_type="", visibility="", status="", parameters=["cents"], body="cents / 100.0"),
            )],
            models=[
                make_model(materialization="", tests=[make_model_test()]),
                ModelResource(
                    project_name="analytics",
                    model_name="orders_incremental",
                    spec=ModelSpec(
                        materialization="INCREMENTAL",
                        sql="SELECT * FROM orders",
                        config=ModelConfigSpec(unique_key=["id"], incremental_strategy="delete+insert"),
                        freshness=FreshnessSpec(max_lag_seconds=3600, cron_schedule="0 * * * *"),
                    ),
                ),
            ],
        )

        replan, actual = _apply_and_replan(store_client, settings, desired)

        assert replan.actions == []
        macro = actual.macros[0].spec
        assert (macro.macro_type, macro.visibility, macro.status) == ("SCALAR", "project", "ACTIVE")
        materializations = {m.model_name: m.spec.materialization for m in actual.models}
        assert materializations == {"daily_orders": "VIEW", "orders_incremental": "INCREMENTAL"}

    def test_unset_materialization_sent_as_view(self) -> None:
        """Test that a model without a materialization is created as the server would store it."""
        assert model_payload(make_model(materialization=""))["materialization"] == "VIEW"
