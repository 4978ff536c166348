"""
Differ: compares desired state with actual state and produces a Plan.

Each kind is matched by its identity path. Matched resources are compared
field by field, with every value rendered to a string so that a change can be
shown to the user exactly as it was detected. Children (group memberships,
policy bindings, pipeline jobs) are diffed together with their parent.

The differ is pure: no I/O, and equal inputs always give equal plans.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, TypeVar

from duckkit.models.base import render_list, render_map
from duckkit.models.catalogs import ColumnDef, TableSpec
from duckkit.models.enums import ResourceKind
from duckkit.models.policies import (
    FilterBindingRef,
    MaskBindingRef,
    binding_path,
    policy_path,
)
from duckkit.models.security import MemberRef, membership_path
from duckkit.models.state import DesiredState
from duckkit.models.storage import StorageCredentialSpec
from duckkit.models.transformations import (
    ContractSpec,
    FreshnessSpec,
    ModelConfigSpec,
    ModelTestSpec,
)
from duckkit.models.workflows import CellSpec, PipelineJobSpec, job_path
from duckkit.plan import FieldDiff, Plan

logger = logging.getLogger(__name__)

R = TypeVar("R")


def diff(desired: DesiredState, actual: DesiredState) -> Plan:
    """
    Compute the plan that turns ``actual`` into ``desired``.

    Args:
        desired: State loaded from configuration
        actual: State read from the server

    Returns:
        Sorted Plan; plan errors are collected rather than raised
    """
    plan = Plan()
    differ = _Differ(plan)

    differ.principals(desired, actual)
    differ.groups(desired, actual)
    differ.grants(desired, actual)
    differ.api_keys(desired, actual)
    differ.catalogs(desired, actual)
    differ.schemas(desired, actual)
    differ.tables(desired, actual)
    differ.views(desired, actual)
    differ.volumes(desired, actual)
    differ.row_filters(desired, actual)
    differ.column_masks(desired, actual)
    differ.tags(desired, actual)
    differ.tag_assignments(desired, actual)
    differ.storage_credentials(desired, actual)
    differ.external_locations(desired, actual)
    differ.compute_endpoints(desired, actual)
    differ.compute_assignments(desired, actual)
    differ.notebooks(desired, actual)
    differ.pipelines(desired, actual)
    differ.macros(desired, actual)
    differ.models(desired, actual)

    plan.sort_actions()
    summary = plan.summary()
    logger.debug(
        f"Diff complete: {summary['create']} create, {summary['update']} update, "
        f"{summary['delete']} delete, {summary['errors']} error(s)"
    )
    return plan


# =============================================================================
# FIELD COMPARISON
# =============================================================================

class _Changes:
    """Accumulates FieldDiffs for one resource."""

    def __init__(self) -> None:
        self.items: List[FieldDiff] = []

    def __bool__(self) -> bool:
        return bool(self.items)

    def field(self, name: str, old: str, new: str) -> None:
        old = old or ""
        new = new or ""
        if old != new:
            self.items.append(FieldDiff(name, old, new))

    def flag(self, name: str, old: bool, new: bool) -> None:
        self.field(name, _bool(old), _bool(new))

    def number(self, name: str, old: Optional[int], new: Optional[int]) -> None:
        self.field(name, "" if old is None else str(old), "" if new is None else str(new))

    def mapping(self, name: str, old: Dict[str, str], new: Dict[str, str]) -> None:
        self.field(name, render_map(old or {}), render_map(new or {}))


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _index(items: Iterable[R], key) -> Dict[str, R]:
    return {key(item): item for item in items}


# =============================================================================
# RENDERING HELPERS
# =============================================================================

def _render_sorted(values: Sequence[str]) -> str:
    return ",".join(sorted(values))


def _render_config(config: Optional[ModelConfigSpec]) -> str:
    if config is None:
        return ""
    return (
        f"unique_key={render_list(config.unique_key)}; "
        f"incremental_strategy={config.incremental_strategy}; "
        f"on_schema_change={config.on_schema_change}"
    )


def _render_contract(contract: Optional[ContractSpec]) -> str:
    if contract is None:
        return ""
    columns = ", ".join(
        f"{c.name} {c.type}{'' if c.nullable else ' NOT NULL'}" for c in contract.columns
    )
    return f"enforce={_bool(contract.enforce)}; columns=[{columns}]"


def _render_freshness(freshness: Optional[FreshnessSpec]) -> str:
    if freshness is None:
        return ""
    return f"max_lag_seconds={freshness.max_lag_seconds}; cron_schedule={freshness.cron_schedule}"


def _tests_equal(old: List[ModelTestSpec], new: List[ModelTestSpec]) -> bool:
    def key(t: ModelTestSpec) -> str:
        return t.name

    return [t.signature() for t in sorted(old, key=key)] == [t.signature() for t in sorted(new, key=key)]


def _cells_equal(old: List[CellSpec], new: List[CellSpec]) -> bool:
    return [(c.type, c.content) for c in old] == [(c.type, c.content) for c in new]


# =============================================================================
# DIFFER
# =============================================================================

class _Differ:
    """One diff pass writing into a single plan."""

    def __init__(self, plan: Plan) -> None:
        self.plan = plan

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    def principals(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.PRINCIPAL
        existing = _index(actual.principals, lambda p: p.path)
        for d in desired.principals:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                continue
            changes = _Changes()
            changes.field("type", a.type, d.type)
            changes.flag("is_admin", a.is_admin, d.is_admin)
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
        for a in existing.values():
            self.plan.add_delete(kind, a.path, a)

    def groups(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.GROUP
        existing = _index(actual.groups, lambda g: g.path)
        for d in desired.groups:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                self._members(d.name, d.members, [])
                continue
            changes = _Changes()
            changes.field("description", a.description, d.description)
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
            self._members(d.name, d.members, a.members)
        for a in existing.values():
            self._members(a.name, [], a.members)
            self.plan.add_delete(kind, a.path, a)

    def _members(self, group: str, desired: List[MemberRef], actual: List[MemberRef]) -> None:
        kind = ResourceKind.GROUP_MEMBERSHIP
        existing = _index(actual, lambda m: m.key)
        for d in desired:
            if existing.pop(d.key, None) is None:
                self.plan.add_create(kind, membership_path(group, d), d)
        for a in existing.values():
            self.plan.add_delete(kind, membership_path(group, a), a)

    def grants(self, desired: DesiredState, actual: DesiredState) -> None:
        self._create_delete_only(ResourceKind.PRIVILEGE_GRANT, desired.grants, actual.grants)

    def api_keys(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.API_KEY
        existing = _index(actual.api_keys, lambda k: k.path)
        for d in desired.api_keys:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                continue
            changes = _Changes()
            changes.field("principal", a.principal, d.principal)
            changes.field("expires_at", a.expires_at or "", d.expires_at or "")
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
        for a in existing.values():
            self.plan.add_delete(kind, a.path, a)

    def _create_delete_only(self, kind: ResourceKind, desired: list, actual: list) -> None:
        """Kinds whose identity is their whole content: no updates."""
        existing = _index(actual, lambda r: r.path)
        for d in desired:
            if existing.pop(d.path, None) is None:
                self.plan.add_create(kind, d.path, d)
        for a in existing.values():
            self.plan.add_delete(kind, a.path, a)

    # -------------------------------------------------------------------------
    # Catalog tree
    # -------------------------------------------------------------------------

    def _protected_delete(self, kind: ResourceKind, label: str, resource) -> None:
        if resource.deletion_protection:
            self.plan.add_error(kind, resource.path, f"cannot delete {label}: deletion_protection is enabled")
        else:
            self.plan.add_delete(kind, resource.path, resource)

    def catalogs(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.CATALOG_REGISTRATION
        existing = _index(actual.catalogs, lambda c: c.path)
        for d in desired.catalogs:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                continue
            changes = _Changes()
            changes.field("metastore_type", a.spec.metastore_type, d.spec.metastore_type)
            changes.field("dsn", a.spec.dsn, d.spec.dsn)
            changes.field("data_path", a.spec.data_path, d.spec.data_path)
            changes.flag("is_default", a.spec.is_default, d.spec.is_default)
            changes.field("comment", a.spec.comment, d.spec.comment)
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
        for a in existing.values():
            self._protected_delete(kind, "catalog", a)

    def schemas(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.SCHEMA
        existing = _index(actual.schemas, lambda s: s.path)
        for d in desired.schemas:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                continue
            changes = _Changes()
            changes.field("comment", a.spec.comment, d.spec.comment)
            changes.field("owner", a.spec.owner, d.spec.owner)
            changes.field("location_name", a.spec.location_name, d.spec.location_name)
            changes.mapping("properties", a.spec.properties, d.spec.properties)
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
        for a in existing.values():
            self._protected_delete(kind, "schema", a)

    def tables(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.TABLE
        existing = _index(actual.tables, lambda t: t.path)
        for d in desired.tables:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                continue
            changes = _Changes()
            type_error = self._table_spec(d.path, changes, a.spec, d.spec)
            if changes and not type_error:
                self.plan.add_update(kind, d.path, d, a, changes.items)
        for a in existing.values():
            self._protected_delete(kind, "table", a)

    def _table_spec(self, path: str, changes: _Changes, old: TableSpec, new: TableSpec) -> bool:
        changes.field("table_type", old.table_type, new.table_type)
        changes.field("comment", old.comment, new.comment)
        changes.field("owner", old.owner, new.owner)
        changes.mapping("properties", old.properties, new.properties)
        changes.field("source_path", old.source_path, new.source_path)
        changes.field("file_format", old.file_format, new.file_format)
        changes.field("location_name", old.location_name, new.location_name)
        return self._columns(path, changes, old.columns, new.columns)

    def _columns(self, path: str, changes: _Changes, old: List[ColumnDef], new: List[ColumnDef]) -> bool:
        """Diff columns; returns True when a type change made the table unplannable."""
        existing = _index(old, lambda c: c.name)
        type_error = False
        for col in new:
            current = existing.pop(col.name, None)
            if current is None:
                changes.field(f"columns.{col.name}", "", f"{col.name} {col.type}")
                continue
            if current.type != col.type:
                self.plan.add_error(
                    ResourceKind.TABLE,
                    path,
                    f'column "{col.name}": cannot change type from "{current.type}" to "{col.type}"',
                )
                type_error = True
                continue
            changes.field(f"columns.{col.name}.comment", current.comment, col.comment)
        for col in existing.values():
            changes.field(f"columns.{col.name}", f"{col.name} {col.type}", "")
        return type_error

    def views(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.VIEW
        existing = _index(actual.views, lambda v: v.path)
        for d in desired.views:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                continue
            changes = _Changes()
            changes.field("view_definition", a.spec.view_definition, d.spec.view_definition)
            changes.field("comment", a.spec.comment, d.spec.comment)
            changes.field("owner", a.spec.owner, d.spec.owner)
            changes.mapping("properties", a.spec.properties, d.spec.properties)
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
        for a in existing.values():
            self.plan.add_delete(kind, a.path, a)

    def volumes(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.VOLUME
        existing = _index(actual.volumes, lambda v: v.path)
        for d in desired.volumes:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                continue
            changes = _Changes()
            changes.field("volume_type", a.spec.volume_type, d.spec.volume_type)
            changes.field("storage_location", a.spec.storage_location, d.spec.storage_location)
            changes.field("comment", a.spec.comment, d.spec.comment)
            changes.field("owner", a.spec.owner, d.spec.owner)
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
        for a in existing.values():
            self.plan.add_delete(kind, a.path, a)

    # -------------------------------------------------------------------------
    # Policies
    # -------------------------------------------------------------------------

    def row_filters(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.ROW_FILTER
        existing = {
            policy_path(r.table_path, f.name): f for r in actual.row_filters for f in r.filters
        }
        for resource in desired.row_filters:
            for d in resource.filters:
                path = policy_path(resource.table_path, d.name)
                a = existing.pop(path, None)
                if a is None:
                    self.plan.add_create(kind, path, d)
                    self._filter_bindings(path, d.bindings, [])
                    continue
                changes = _Changes()
                changes.field("filter_sql", a.filter_sql, d.filter_sql)
                changes.field("description", a.description, d.description)
                if changes:
                    self.plan.add_update(kind, path, d, a, changes.items)
                self._filter_bindings(path, d.bindings, a.bindings)
        for path, a in existing.items():
            self._filter_bindings(path, [], a.bindings)
            self.plan.add_delete(kind, path, a)

    def _filter_bindings(
        self, policy: str, desired: List[FilterBindingRef], actual: List[FilterBindingRef]
    ) -> None:
        kind = ResourceKind.ROW_FILTER_BINDING
        existing = _index(actual, lambda b: b.key)
        for d in desired:
            if existing.pop(d.key, None) is None:
                self.plan.add_create(kind, binding_path(policy, d.principal_type, d.principal), d)
        for a in existing.values():
            self.plan.add_delete(kind, binding_path(policy, a.principal_type, a.principal), a)

    def column_masks(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.COLUMN_MASK
        existing = {
            policy_path(r.table_path, m.name): m for r in actual.column_masks for m in r.masks
        }
        for resource in desired.column_masks:
            for d in resource.masks:
                path = policy_path(resource.table_path, d.name)
                a = existing.pop(path, None)
                if a is None:
                    self.plan.add_create(kind, path, d)
                    self._mask_bindings(path, d.bindings, [])
                    continue
                changes = _Changes()
                changes.field("column_name", a.column_name, d.column_name)
                changes.field("mask_expression", a.mask_expression, d.mask_expression)
                changes.field("description", a.description, d.description)
                if changes:
                    self.plan.add_update(kind, path, d, a, changes.items)
                self._mask_bindings(path, d.bindings, a.bindings)
        for path, a in existing.items():
            self._mask_bindings(path, [], a.bindings)
            self.plan.add_delete(kind, path, a)

    def _mask_bindings(
        self, policy: str, desired: List[MaskBindingRef], actual: List[MaskBindingRef]
    ) -> None:
        kind = ResourceKind.COLUMN_MASK_BINDING
        existing = _index(actual, lambda b: b.key)
        for d in desired:
            name = binding_path(policy, d.principal_type, d.principal)
            a = existing.pop(d.key, None)
            if a is None:
                self.plan.add_create(kind, name, d)
                continue
            changes = _Changes()
            changes.flag("see_original", a.see_original, d.see_original)
            if changes:
                self.plan.add_update(kind, name, d, a, changes.items)
        for a in existing.values():
            self.plan.add_delete(kind, binding_path(policy, a.principal_type, a.principal), a)

    # -------------------------------------------------------------------------
    # Governance
    # -------------------------------------------------------------------------

    def tags(self, desired: DesiredState, actual: DesiredState) -> None:
        self._create_delete_only(ResourceKind.TAG, desired.tags, actual.tags)

    def tag_assignments(self, desired: DesiredState, actual: DesiredState) -> None:
        self._create_delete_only(ResourceKind.TAG_ASSIGNMENT, desired.tag_assignments, actual.tag_assignments)

    # -------------------------------------------------------------------------
    # Storage & compute
    # -------------------------------------------------------------------------

    def storage_credentials(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.STORAGE_CREDENTIAL
        existing = _index(actual.storage_credentials, lambda c: c.path)
        for d in desired.storage_credentials:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                continue
            changes = _Changes()
            changes.field("credential_type", a.credential_type, d.credential_type)
            changes.field("comment", a.comment, d.comment)
            _credential_details(changes, a, d)
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
        for a in existing.values():
            self.plan.add_delete(kind, a.path, a)

    def external_locations(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.EXTERNAL_LOCATION
        existing = _index(actual.external_locations, lambda loc: loc.path)
        for d in desired.external_locations:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                continue
            changes = _Changes()
            changes.field("url", a.url, d.url)
            changes.field("credential_name", a.credential_name, d.credential_name)
            changes.field("storage_type", a.storage_type, d.storage_type)
            changes.field("comment", a.comment, d.comment)
            changes.flag("read_only", a.read_only, d.read_only)
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
        for a in existing.values():
            self.plan.add_delete(kind, a.path, a)

    def compute_endpoints(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.COMPUTE_ENDPOINT
        existing = _index(actual.compute_endpoints, lambda e: e.path)
        for d in desired.compute_endpoints:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                continue
            changes = _Changes()
            changes.field("url", a.url, d.url)
            changes.field("type", a.type, d.type)
            changes.field("size", a.size, d.size)
            changes.number("max_memory_gb", a.max_memory_gb, d.max_memory_gb)
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
        for a in existing.values():
            self.plan.add_delete(kind, a.path, a)

    def compute_assignments(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.COMPUTE_ASSIGNMENT
        existing = _index(actual.compute_assignments, lambda c: c.path)
        for d in desired.compute_assignments:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                continue
            changes = _Changes()
            changes.flag("is_default", a.is_default, d.is_default)
            changes.flag("fallback_local", a.fallback_local, d.fallback_local)
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
        for a in existing.values():
            self.plan.add_delete(kind, a.path, a)

    # -------------------------------------------------------------------------
    # Workflows
    # -------------------------------------------------------------------------

    def notebooks(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.NOTEBOOK
        existing = _index(actual.notebooks, lambda n: n.path)
        for d in desired.notebooks:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                continue
            changes = _Changes()
            changes.field("description", a.spec.description, d.spec.description)
            changes.field("owner", a.spec.owner, d.spec.owner)
            if not _cells_equal(a.spec.cells, d.spec.cells):
                changes.items.append(
                    FieldDiff("cells", f"{len(a.spec.cells)} cells", f"{len(d.spec.cells)} cells")
                )
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
        for a in existing.values():
            self.plan.add_delete(kind, a.path, a)

    def pipelines(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.PIPELINE
        existing = _index(actual.pipelines, lambda p: p.path)
        for d in desired.pipelines:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                self._jobs(d.name, d.spec.jobs, [])
                continue
            changes = _Changes()
            changes.field("description", a.spec.description, d.spec.description)
            changes.field("schedule_cron", a.spec.schedule_cron, d.spec.schedule_cron)
            changes.flag("is_paused", a.spec.is_paused, d.spec.is_paused)
            changes.number("concurrency_limit", a.spec.concurrency_limit, d.spec.concurrency_limit)
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
            self._jobs(d.name, d.spec.jobs, a.spec.jobs)
        for a in existing.values():
            self._jobs(a.name, [], a.spec.jobs)
            self.plan.add_delete(kind, a.path, a)

    def _jobs(self, pipeline: str, desired: List[PipelineJobSpec], actual: List[PipelineJobSpec]) -> None:
        kind = ResourceKind.PIPELINE_JOB
        existing = _index(actual, lambda j: j.name)
        for d in desired:
            path = job_path(pipeline, d.name)
            a = existing.pop(d.name, None)
            if a is None:
                self.plan.add_create(kind, path, d)
                continue
            changes = _Changes()
            changes.field("notebook", a.notebook, d.notebook)
            changes.field("compute_endpoint", a.compute_endpoint, d.compute_endpoint)
            changes.field("depends_on", _render_sorted(a.depends_on), _render_sorted(d.depends_on))
            changes.number("timeout_seconds", a.timeout_seconds, d.timeout_seconds)
            changes.number("retry_count", a.retry_count, d.retry_count)
            changes.number("order", a.order, d.order)
            if changes:
                self.plan.add_update(kind, path, d, a, changes.items)
        for a in existing.values():
            self.plan.add_delete(kind, job_path(pipeline, a.name), a)

    # -------------------------------------------------------------------------
    # Transformations
    # -------------------------------------------------------------------------

    def macros(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.MACRO
        existing = _index(actual.macros, lambda m: m.path)
        for d in desired.macros:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                continue
            old, new = a.spec, d.spec
            changes = _Changes()
            changes.field("macro_type", old.macro_type, new.macro_type)
            changes.field("parameters", render_list(old.parameters), render_list(new.parameters))
            changes.field("body", old.body, new.body)
            changes.field("description", old.description, new.description)
            changes.field("catalog_name", old.catalog_name, new.catalog_name)
            changes.field("project_name", old.project_name, new.project_name)
            changes.field("visibility", old.visibility, new.visibility)
            changes.field("owner", old.owner, new.owner)
            changes.mapping("properties", old.properties, new.properties)
            changes.field("tags", render_list(old.tags), render_list(new.tags))
            changes.field("status", old.status, new.status)
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
        for a in existing.values():
            self.plan.add_delete(kind, a.path, a)

    def models(self, desired: DesiredState, actual: DesiredState) -> None:
        kind = ResourceKind.MODEL
        existing = _index(actual.models, lambda m: m.path)
        for d in desired.models:
            a = existing.pop(d.path, None)
            if a is None:
                self.plan.add_create(kind, d.path, d)
                continue
            old, new = a.spec, d.spec
            changes = _Changes()
            changes.field("materialization", old.materialization, new.materialization)
            changes.field("description", old.description, new.description)
            changes.field("tags", render_list(old.tags), render_list(new.tags))
            changes.field("sql", old.sql, new.sql)
            changes.field("config", _render_config(old.config), _render_config(new.config))
            changes.field("contract", _render_contract(old.contract), _render_contract(new.contract))
            changes.field("freshness", _render_freshness(old.freshness), _render_freshness(new.freshness))
            if not _tests_equal(old.tests, new.tests):
                changes.items.append(
                    FieldDiff("tests", f"{len(old.tests)} tests", f"{len(new.tests)} tests")
                )
            if changes:
                self.plan.add_update(kind, d.path, d, a, changes.items)
        for a in existing.values():
            self.plan.add_delete(kind, a.path, a)


def _credential_details(
    changes: _Changes, old: StorageCredentialSpec, new: StorageCredentialSpec
) -> None:
    """Compare non-secret provider fields; a provider block appearing or vanishing is one change."""
    if old.s3 is not None and new.s3 is not None:
        changes.field("s3.endpoint", old.s3.endpoint, new.s3.endpoint)
        changes.field("s3.region", old.s3.region, new.s3.region)
        changes.field("s3.url_style", old.s3.url_style, new.s3.url_style)
    else:
        changes.field("s3", _configured(old.s3), _configured(new.s3))

    if old.azure is not None and new.azure is not None:
        changes.field("azure.tenant_id", old.azure.tenant_id, new.azure.tenant_id)
    else:
        changes.field("azure", _configured(old.azure), _configured(new.azure))

    if old.gcs is not None and new.gcs is not None:
        changes.field("gcs.key_file_path", old.gcs.key_file_path, new.gcs.key_file_path)
    else:
        changes.field("gcs", _configured(old.gcs), _configured(new.gcs))


def _configured(block: object) -> str:
    return "configured" if block is not None else ""


__all__ = ["diff"]
