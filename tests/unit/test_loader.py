"""
Unit tests for the desired-state directory loader.
"""

import pytest

from duckkit.errors import ConfigError
from duckkit.loader import API_VERSION, LoadOptions, load_directory


def _named(kind: str, name: str, spec: dict, **metadata) -> dict:
    return {
        "apiVersion": API_VERSION,
        "kind": kind,
        "metadata": {"name": name, **metadata},
        "spec": spec,
    }


@pytest.fixture
def config_tree(tmp_path, write_yaml):
    """A small but complete configuration tree."""
    write_yaml("security/principals.yaml", {
        "apiVersion": API_VERSION,
        "kind": "PrincipalList",
        "principals": [{"name": "alice", "type": "user", "is_admin": True}],
    })
    write_yaml("security/groups.yaml", {
        "apiVersion": API_VERSION,
        "kind": "GroupList",
        "groups": [{"name": "analysts", "members": [{"name": "alice", "type": "user"}]}],
    })
    write_yaml("catalogs/lake/catalog.yaml", _named(
        "Catalog", "lake",
        {"metastore_type": "sqlite", "dsn": "/data/lake.sqlite", "data_path": "/data/lake"},
        deletion_protection=True,
    ))
    write_yaml("catalogs/lake/schemas/sales/schema.yaml", _named("Schema", "sales", {"comment": "Sales"}))
    write_yaml("catalogs/lake/schemas/sales/tables/orders/table.yaml", _named(
        "Table", "orders",
        {"columns": [{"name": "id", "type": "BIGINT"}, {"name": "email", "type": "VARCHAR"}]},
    ))
    write_yaml("catalogs/lake/schemas/sales/tables/orders/column-masks.yaml", {
        "apiVersion": API_VERSION,
        "kind": "ColumnMaskList",
        "masks": [{
            "name": "hide_email",
            "column_name": "email",
            "mask_expression": "'***'",
            "bindings": [{"principal": "analysts", "principal_type": "group"}],
        }],
    })
    write_yaml("catalogs/lake/schemas/sales/views/recent.yaml", _named(
        "View", "recent", {"view_definition": "SELECT * FROM orders"},
    ))
    write_yaml("models/analytics/marts/daily_orders.yaml", _named(
        "Model", "daily_orders",
        {"materialization": "TABLE", "sql": "SELECT 1", "tests": [{"name": "t", "type": "not_null", "column": "id"}]},
    ))
    return tmp_path


class TestLoadDirectory:
    """Tests for loading a full tree."""

    def test_loads_every_section(self, config_tree) -> None:
        """Test that each document lands in its collection."""
        state = load_directory(config_tree)

        assert [p.name for p in state.principals] == ["alice"]
        assert state.principals[0].is_admin is True
        assert state.groups[0].members[0].key == "alice(user)"
        assert [c.path for c in state.catalogs] == ["lake"]
        assert [s.path for s in state.schemas] == ["lake.sales"]
        assert [t.path for t in state.tables] == ["lake.sales.orders"]
        assert [v.path for v in state.views] == ["lake.sales.recent"]
        assert state.column_masks[0].table_path == "lake.sales.orders"
        assert state.column_masks[0].masks[0].bindings[0].principal == "analysts"

    def test_identity_comes_from_layout(self, config_tree) -> None:
        """Test that catalog protection comes from metadata and names from directories."""
        state = load_directory(config_tree)

        assert state.catalogs[0].deletion_protection is True
        assert state.tables[0].catalog_name == "lake"
        assert state.tables[0].schema_name == "sales"

    def test_model_subdirectories_do_not_change_identity(self, config_tree) -> None:
        """Test that a model nested in a sub-folder keeps its project identity."""
        state = load_directory(config_tree)

        assert [m.path for m in state.models] == ["analytics.daily_orders"]
        assert state.models[0].spec.tests[0].type == "not_null"

    def test_empty_directory(self, tmp_path) -> None:
        """Test that an empty tree gives an empty state."""
        assert load_directory(tmp_path).is_empty()


class TestLoadErrors:
    """Tests for documents the loader rejects."""

    def test_missing_root(self, tmp_path) -> None:
        """Test that a missing directory is a ConfigError."""
        with pytest.raises(ConfigError, match="does not exist"):
            load_directory(tmp_path / "nope")

    def test_wrong_api_version(self, tmp_path, write_yaml) -> None:
        """Test that an unknown apiVersion is rejected."""
        write_yaml("security/principals.yaml", {"apiVersion": "duck/v2", "kind": "PrincipalList"})

        with pytest.raises(ConfigError, match="unsupported apiVersion"):
            load_directory(tmp_path)

    def test_wrong_kind(self, tmp_path, write_yaml) -> None:
        """Test that a document of the wrong kind is rejected."""
        write_yaml("security/groups.yaml", {"apiVersion": API_VERSION, "kind": "PrincipalList"})

        with pytest.raises(ConfigError, match="unexpected kind"):
            load_directory(tmp_path)

    def test_name_mismatch(self, tmp_path, write_yaml) -> None:
        """Test that metadata.name must match the directory name."""
        write_yaml("catalogs/lake/catalog.yaml", _named("Catalog", "other", {}))

        with pytest.raises(ConfigError, match="does not match directory name"):
            load_directory(tmp_path)

    def test_invalid_yaml(self, tmp_path) -> None:
        """Test that unparseable YAML names the file."""
        path = tmp_path / "security" / "principals.yaml"
        path.parent.mkdir(parents=True)
        path.write_text("principals: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            load_directory(tmp_path)

        assert exc_info.value.path == str(path)
        assert "invalid YAML" in str(exc_info.value)


class TestUnknownFields:
    """Tests for the allow-unknown-fields option."""

    def _write(self, write_yaml) -> None:
        write_yaml("security/principals.yaml", {
            "apiVersion": API_VERSION,
            "kind": "PrincipalList",
            "principals": [{"name": "alice", "type": "user", "email": "alice@example.com"}],
        })

    def test_rejected_by_default(self, tmp_path, write_yaml) -> None:
        """Test that unknown keys are an error by default."""
        self._write(write_yaml)

        with pytest.raises(ConfigError, match="email"):
            load_directory(tmp_path)

    def test_dropped_when_allowed(self, tmp_path, write_yaml) -> None:
        """Test that unknown keys are ignored when allowed."""
        self._write(write_yaml)

        state = load_directory(tmp_path, LoadOptions(allow_unknown_fields=True))

        assert state.principals[0].name == "alice"
