"""
Unit tests for reading actual state from the platform API.
"""

import httpx
import pytest

from duckkit.capabilities import CompatibilityMode
from duckkit.errors import ReadStateError
from duckkit.models import ResourceKind
from duckkit.reader import (
    StateReader,
    cells_from_rows,
    model_from_row,
    row_id,
    storage_credential_from_row,
)


@pytest.fixture
def populated_server(fake_server):
    """Server holding one of most things, with identifiers the reader must translate."""
    fake_server.list("/principals", [{"id": "p1", "name": "alice", "type": "user", "is_admin": True}])
    fake_server.list("/groups", [{"id": "g1", "name": "analysts", "description": "BI"}])
    fake_server.list("/groups/g1/members", [
        {"member_id": "p1", "member_type": "user"},
        {"member_id": "p404", "member_type": "user"},
    ])
    fake_server.list("/catalogs", [{
        "id": "c1", "name": "lake", "metastore_type": "sqlite",
        "dsn": "/data/lake.sqlite", "data_path": "/data/lake",
    }])
    fake_server.list("/catalogs/lake/schemas", [{"schema_id": "s1", "name": "sales", "comment": "Sales"}])
    fake_server.list("/catalogs/lake/schemas/sales/tables", [{
        "table_id": "t1", "name": "orders",
        "columns": [{"name": "id", "type": "BIGINT"}, {"name": "email", "type": "VARCHAR"}],
    }])
    fake_server.list("/tables/t1/column-masks", [{
        "id": "m1", "name": "hide_email", "column_name": "email", "mask_expression": "'***'",
    }])
    fake_server.list("/column-masks/m1/bindings", [
        {"principal_id": "g1", "principal_type": "group", "see_original": True},
    ])
    fake_server.list("/grants", [
        {"principal_id": "g1", "principal_type": "group", "securable_type": "schema",
         "securable_id": "s1", "privilege": "USAGE"},
        {"principal_id": "unknown", "principal_type": "user", "securable_type": "schema",
         "securable_id": "s1", "privilege": "SELECT"},
        {"principal_id": "g1", "principal_type": "group", "securable_type": "table",
         "securable_id": "t-gone", "privilege": "SELECT"},
    ])
    fake_server.list("/tags", [{"id": "tag1", "key": "pii"}])
    fake_server.list("/tag-assignments", [
        {"tag_id": "tag1", "securable_type": "column", "securable_id": "t1", "column_name": "email"},
    ])
    fake_server.list("/notebooks", [{"id": "n1", "name": "etl"}])
    fake_server.on("GET", "/notebooks/n1", body={"id": "n1", "cells": [
        {"id": "x2", "cell_type": "sql", "content": "SELECT 2", "position": 1},
        {"id": "x1", "cell_type": "markdown", "content": "# Load", "position": 0},
    ]})
    fake_server.list("/pipelines", [{"id": "pl1", "name": "nightly", "schedule_cron": "0 2 * * *"}])
    fake_server.list("/pipelines/nightly/jobs", [
        {"id": "j1", "name": "load", "notebook_id": "n1", "depends_on": [], "retry_count": 2},
        {"id": "j2", "name": "orphan", "notebook_id": "n-gone"},
    ])
    fake_server.error("GET", "/models", 404)
    return fake_server


class TestReadState:
    """Tests for a full state read."""

    def test_reads_and_indexes(self, client, populated_server) -> None:
        """Test that resources are read and their identifiers indexed."""
        reader = StateReader(client)

        state = reader.read_state()

        assert [p.name for p in state.principals] == ["alice"]
        assert state.principals[0].is_admin is True
        assert [s.path for s in state.schemas] == ["lake.sales"]
        assert reader.index.lookup(ResourceKind.SCHEMA, "lake.sales") == "s1"
        assert reader.index.lookup(ResourceKind.TABLE, "lake.sales.orders") == "t1"
        assert reader.index.lookup(ResourceKind.GROUP, "analysts") == "g1"

    def test_relationships_translated_to_names(self, client, populated_server) -> None:
        """Test that identifier-keyed rows come back named."""
        state = StateReader(client).read_state()

        assert [(g.principal, g.securable, g.privilege) for g in state.grants] == [
            ("analysts", "lake.sales", "USAGE")
        ]
        mask = state.column_masks[0].masks[0]
        assert mask.bindings[0].principal == "analysts"
        assert mask.bindings[0].see_original is True
        assignment = state.tag_assignments[0]
        assert (assignment.tag, assignment.securable, assignment.column_name) == ("pii", "lake.sales.orders", "email")

    def test_unresolvable_rows_dropped(self, client, populated_server) -> None:
        """Test that rows pointing at unknown identifiers are silently dropped."""
        state = StateReader(client).read_state()

        assert len(state.grants) == 1
        assert [m.name for m in state.groups[0].members] == ["alice"]
        assert state.groups[0].members[0].member_id == "p1"
        assert [j.name for j in state.pipelines[0].spec.jobs] == ["load"]

    def test_notebook_cells_in_position_order(self, client, populated_server) -> None:
        """Test that cells are ordered by position, not response order."""
        state = StateReader(client).read_state()

        assert [c.content for c in state.notebooks[0].spec.cells] == ["# Load", "SELECT 2"]

    def test_pipeline_jobs_name_their_notebook(self, client, populated_server) -> None:
        """Test that job rows resolve notebook identifiers."""
        state = StateReader(client).read_state()

        job = state.pipelines[0].spec.jobs[0]
        assert job.notebook == "etl"
        assert job.retry_count == 2

    def test_optional_endpoint_warns(self, client, populated_server) -> None:
        """Test that a missing models endpoint is a warning, not an error."""
        reader = StateReader(client)

        state = reader.read_state()

        assert state.models == []
        assert reader.warnings == [
            "models endpoint unavailable (HTTP 404); continuing without models state"
        ]


class TestReadFailures:
    """Tests for read failures."""

    def test_mandatory_endpoint_failure(self, client, fake_server) -> None:
        """Test that a failing mandatory endpoint aborts the read."""
        fake_server.error("GET", "/principals", 500, "boom")

        with pytest.raises(ReadStateError) as exc_info:
            StateReader(client).read_state()

        assert exc_info.value.resource == "principals"

    def test_optional_endpoint_server_error_in_strict_mode(self, client, fake_server) -> None:
        """Test that a 500 from an optional endpoint is still an error."""
        fake_server.error("GET", "/macros", 500)

        with pytest.raises(ReadStateError, match="macros"):
            StateReader(client).read_state()

    def test_legacy_mode_tolerates_transport_failure(self, client, fake_server) -> None:
        """Test that legacy mode treats a dropped connection as an absent endpoint."""
        def reset(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadError("connection reset by peer", request=request)

        fake_server.on("GET", "/api-keys", handler=reset)
        reader = StateReader(client, compatibility_mode=CompatibilityMode.LEGACY)

        reader.read_state()

        assert len(reader.warnings) == 1
        assert reader.warnings[0].startswith("api-keys endpoint read failed in compatibility mode")

    def test_strict_mode_rejects_transport_failure(self, client, fake_server) -> None:
        """Test that strict mode does not excuse transport failures."""
        def reset(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadError("connection reset by peer", request=request)

        fake_server.on("GET", "/api-keys", handler=reset)

        with pytest.raises(ReadStateError):
            StateReader(client).read_state()


class TestPagination:
    """Tests for paged list endpoints."""

    def test_follows_page_tokens(self, client, fake_server) -> None:
        """Test that every page is collected."""
        def pages(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("page_token") == "page-2":
                return httpx.Response(200, json={"data": [{"id": "p2", "name": "bob", "type": "user"}]})
            return httpx.Response(200, json={
                "data": [{"id": "p1", "name": "alice", "type": "user"}],
                "next_page_token": "page-2",
            })

        fake_server.on("GET", "/principals", handler=pages)

        state = StateReader(client, page_size=1).read_state()

        assert [p.name for p in state.principals] == ["alice", "bob"]
        calls = fake_server.calls("GET", "/principals")
        assert [c.params.get("page_token") for c in calls] == [None, "page-2"]
        assert calls[0].params["max_results"] == "1"

    def test_repeated_token_aborts(self, client, fake_server) -> None:
        """Test that a server repeating a token cannot loop the reader."""
        fake_server.on("GET", "/principals", body={"data": [], "next_page_token": "again"})

        with pytest.raises(ReadStateError, match="repeated"):
            StateReader(client).read_state()


class TestRowConversion:
    """Tests for the row conversion helpers."""

    def test_row_id_prefers_named_fields(self) -> None:
        """Test identifier field precedence."""
        assert row_id({"schema_id": "s1", "id": "x"}, "schema_id") == "s1"
        assert row_id({"schema_id": "", "id": "x"}, "schema_id") == "x"
        assert row_id({}) == ""

    def test_storage_credential_provider_from_type(self) -> None:
        """Test that the provider block is rebuilt from the flat wire form."""
        credential = storage_credential_from_row({
            "name": "s3", "credential_type": "S3", "s3_region": "eu-west-1", "s3_url_style": "path",
        })

        assert credential.s3 is not None
        assert credential.s3.region == "eu-west-1"
        assert credential.s3.key_id_from_env == ""
        assert credential.azure is None

    def test_model_strategy_and_empty_sections(self) -> None:
        """Test strategy name mapping and that empty sections stay unset."""
        model = model_from_row({
            "project_name": "analytics", "name": "daily", "materialization": "INCREMENTAL",
            "config": {"unique_key": ["id"], "incremental_strategy": "delete_insert"},
            "contract": {},
            "freshness_policy": {"max_lag_seconds": 3600},
        })

        assert model.path == "analytics.daily"
        assert model.spec.config.incremental_strategy == "delete+insert"
        assert model.spec.contract is None
        assert model.spec.freshness.max_lag_seconds == 3600

    def test_cells_without_position(self) -> None:
        """Test that cells lacking a position keep response order."""
        cells = cells_from_rows([
            {"cell_type": "sql", "content": "a"},
            {"cell_type": "sql", "content": "b"},
        ])

        assert [c.content for c in cells] == ["a", "b"]
