"""
Structural and referential validation of a DesiredState.

Validation is local to the loaded configuration: references must point at
resources declared in the same tree. Every problem is collected; nothing
stops at the first error and the state is never mutated.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Set

from duckkit.errors import ValidationError, ValidationIssue
from duckkit.models.enums import (
    CellType,
    ComputeType,
    CredentialType,
    GrantPrincipalType,
    MacroType,
    Materialization,
    MemberType,
    MetastoreType,
    ModelTestType,
    PrincipalType,
    Privilege,
    SecurableType,
    TableType,
    TagSecurableType,
    VolumeType,
    allowed_values,
)
from duckkit.models.state import DesiredState
from duckkit.models.transformations import ContractSpec, ModelTestSpec

logger = logging.getLogger(__name__)

PRINCIPAL_TYPES = allowed_values(PrincipalType)
MEMBER_TYPES = allowed_values(MemberType)
GRANT_PRINCIPAL_TYPES = allowed_values(GrantPrincipalType)
SECURABLE_TYPES = allowed_values(SecurableType)
PRIVILEGES = allowed_values(Privilege)
METASTORE_TYPES = allowed_values(MetastoreType)
TABLE_TYPES = allowed_values(TableType)
VOLUME_TYPES = allowed_values(VolumeType)
CREDENTIAL_TYPES = allowed_values(CredentialType)
COMPUTE_TYPES = allowed_values(ComputeType)
CELL_TYPES = allowed_values(CellType)
TAG_SECURABLE_TYPES = allowed_values(TagSecurableType)
MATERIALIZATIONS = allowed_values(Materialization)
TEST_TYPES = allowed_values(ModelTestType)
MACRO_TYPES = allowed_values(MacroType)

# Number of dot-separated segments expected for each grant securable type
SECURABLE_PATH_PARTS = {
    "catalog": (1, "a single name"),
    "schema": (2, '"catalog.schema"'),
    "table": (3, '"catalog.schema.table"'),
    "external_location": (1, "a single name"),
    "storage_credential": (1, "a single name"),
    "volume": (3, '"catalog.schema.volume"'),
}


def validate(state: DesiredState) -> List[ValidationIssue]:
    """
    Check a desired state for structural correctness and referential integrity.

    Args:
        state: Loaded desired state

    Returns:
        Every issue found; an empty list means the state is valid
    """
    issues = _Validator(state).run()
    if issues:
        logger.debug(f"Validation found {len(issues)} issue(s)")
    return issues


def validate_or_raise(state: DesiredState) -> None:
    """
    Validate and raise when any issue is found.

    Raises:
        ValidationError: Carrying every issue
    """
    issues = validate(state)
    if issues:
        raise ValidationError(issues)


def find_cycles(edges: Dict[str, List[str]], nodes: Iterable[str]) -> List[List[str]]:
    """
    Find cycles in a directed graph with a depth-first walk.

    Each cycle is returned as the node sequence closing on its first node,
    e.g. ``["a", "b", "a"]``.
    """
    cycles: List[List[str]] = []
    done: Set[str] = set()
    stack: List[str] = []
    on_stack: Set[str] = set()

    def visit(node: str) -> None:
        stack.append(node)
        on_stack.add(node)
        for nxt in edges.get(node, []):
            if nxt in on_stack:
                cycles.append(stack[stack.index(nxt):] + [nxt])
                break
            if nxt not in done:
                visit(nxt)
        stack.pop()
        on_stack.discard(node)
        done.add(node)

    for node in nodes:
        if node and node not in done:
            visit(node)
    return cycles


class _Validator:
    """Runs every check against one state, collecting issues in order."""

    def __init__(self, state: DesiredState) -> None:
        self.state = state
        self.issues: List[ValidationIssue] = []

        self.principals = {p.name for p in state.principals}
        self.groups = {g.name for g in state.groups}
        self.catalogs = {c.catalog_name for c in state.catalogs}
        self.schemas = {s.path for s in state.schemas}
        self.tables = {t.path for t in state.tables}
        self.volumes = {v.path for v in state.volumes}
        self.credentials = {c.name for c in state.storage_credentials}
        self.locations = {loc.name for loc in state.external_locations}
        self.endpoints = {e.name for e in state.compute_endpoints}
        self.notebooks = {n.name for n in state.notebooks}
        self.tag_keys = {t.path for t in state.tags}
        # Only tables that declare columns take part in column checks
        self.table_columns: Dict[str, Set[str]] = {
            t.path: {c.name for c in t.spec.columns} for t in state.tables if t.spec.columns
        }

    def add(self, path: str, message: str) -> None:
        self.issues.append(ValidationIssue(path=path, message=message))

    def run(self) -> List[ValidationIssue]:
        self._principals()
        self._groups()
        self._grants()
        self._catalogs()
        self._schemas()
        self._tables()
        self._views()
        self._volumes()
        self._row_filters()
        self._column_masks()
        self._tags()
        self._tag_assignments()
        self._storage_credentials()
        self._external_locations()
        self._compute_endpoints()
        self._compute_assignments()
        self._api_keys()
        self._notebooks()
        self._pipelines()
        self._models()
        self._macros()
        return self.issues

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _path(prefix: str, index: int, name: str) -> str:
        return f"{prefix}[{name}]" if name else f"{prefix}[{index}]"

    def _check_duplicate(self, seen: Set[str], key: str, path: str, message: str) -> None:
        if not key:
            return
        if key in seen:
            self.add(path, message)
        seen.add(key)

    def _principal_exists(self, name: str, principal_type: str) -> bool:
        if principal_type in ("user", "service_principal"):
            return name in self.principals
        if principal_type == "group":
            return name in self.groups
        return False

    def _check_binding(self, path: str, principal: str, principal_type: str) -> None:
        if principal_type not in GRANT_PRINCIPAL_TYPES:
            self.add(path, f'principal_type must be "user" or "group", got "{principal_type}"')
        if not principal:
            self.add(path, "principal is required")
        elif not self._principal_exists(principal, principal_type):
            self.add(path, f'references unknown principal "{principal}" (type "{principal_type}")')

    # =========================================================================
    # SECURITY
    # =========================================================================

    def _principals(self) -> None:
        seen: Set[str] = set()
        for i, p in enumerate(self.state.principals):
            path = self._path("principal", i, p.name)
            if not p.name:
                self.add(path, "name is required")
            if p.type not in PRINCIPAL_TYPES:
                self.add(path, f'type must be "user" or "service_principal", got "{p.type}"')
            self._check_duplicate(seen, p.name, path, f'duplicate principal name "{p.name}"')

    def _groups(self) -> None:
        seen: Set[str] = set()
        for i, g in enumerate(self.state.groups):
            path = self._path("group", i, g.name)
            if not g.name:
                self.add(path, "name is required")
            self._check_duplicate(seen, g.name, path, f'duplicate group name "{g.name}"')

            for j, m in enumerate(g.members):
                mpath = f"{path}.members[{j}]"
                if m.type not in MEMBER_TYPES:
                    self.add(mpath, f'member type must be "user" or "group", got "{m.type}"')
                if m.type == "user" and m.name not in self.principals:
                    self.add(mpath, f'member "{m.name}" references unknown principal')
                if m.type == "group" and m.name not in self.groups:
                    self.add(mpath, f'member "{m.name}" references unknown group')

        edges: Dict[str, List[str]] = {}
        for g in self.state.groups:
            edges.setdefault(g.name, []).extend(m.name for m in g.members if m.type == "group")
        for cycle in find_cycles(edges, [g.name for g in self.state.groups]):
            self.add("groups", f"circular membership detected: {' -> '.join(cycle)}")

    def _grants(self) -> None:
        seen: Set[str] = set()
        for i, g in enumerate(self.state.grants):
            path = f"grant[{i}]"
            if not g.principal:
                self.add(path, "principal is required")
            if g.principal_type not in GRANT_PRINCIPAL_TYPES:
                self.add(path, f'principal_type must be "user" or "group", got "{g.principal_type}"')
            if g.principal_type == "user" and g.principal and g.principal not in self.principals:
                self.add(path, f'principal "{g.principal}" references unknown user')
            if g.principal_type == "group" and g.principal and g.principal not in self.groups:
                self.add(path, f'principal "{g.principal}" references unknown group')

            if g.securable_type not in SECURABLE_TYPES:
                self.add(
                    path,
                    "securable_type must be one of [catalog, schema, table, external_location, "
                    f'storage_credential, volume], got "{g.securable_type}"',
                )
            if not g.securable:
                self.add(path, "securable is required")
            if g.privilege not in PRIVILEGES:
                self.add(path, f'unknown privilege "{g.privilege}"')

            if g.securable and g.securable_type in SECURABLE_TYPES:
                self._grant_securable(path, g.securable_type, g.securable)

            key = "|".join((g.principal, g.principal_type, g.securable_type, g.securable, g.privilege))
            self._check_duplicate(seen, key, path, "duplicate grant")

    def _grant_securable(self, path: str, securable_type: str, securable: str) -> None:
        expected_parts, shape = SECURABLE_PATH_PARTS[securable_type]
        if len(securable.split(".")) != expected_parts:
            self.add(path, f'{securable_type} securable must be {shape}, got "{securable}"')
            return

        known = {
            "catalog": self.catalogs,
            "schema": self.schemas,
            "table": self.tables,
            "external_location": self.locations,
            "storage_credential": self.credentials,
            "volume": self.volumes,
        }[securable_type]
        if securable not in known:
            label = securable_type.replace("_", " ")
            self.add(path, f'securable references unknown {label} "{securable}"')

    def _api_keys(self) -> None:
        seen: Set[str] = set()
        for i, k in enumerate(self.state.api_keys):
            path = self._path("api_key", i, k.name)
            if not k.name:
                self.add(path, "name is required")
            if not k.principal:
                self.add(path, "principal is required")
            elif k.principal not in self.principals:
                self.add(path, f'references unknown principal "{k.principal}"')
            self._check_duplicate(seen, k.name, path, f'duplicate API key name "{k.name}"')

    # =========================================================================
    # CATALOG TREE
    # =========================================================================

    def _catalogs(self) -> None:
        seen: Set[str] = set()
        for i, c in enumerate(self.state.catalogs):
            path = self._path("catalog", i, c.catalog_name)
            if not c.catalog_name:
                self.add(path, "name is required")
            if c.spec.metastore_type not in METASTORE_TYPES:
                self.add(path, f'metastore_type must be "sqlite" or "postgres", got "{c.spec.metastore_type}"')
            if not c.spec.dsn:
                self.add(path, "dsn is required")
            if not c.spec.data_path:
                self.add(path, "data_path is required")
            self._check_duplicate(seen, c.catalog_name, path, f'duplicate catalog name "{c.catalog_name}"')

    def _schemas(self) -> None:
        seen: Set[str] = set()
        for i, s in enumerate(self.state.schemas):
            path = self._path("schema", i, s.path if s.catalog_name and s.schema_name else "")
            if not s.catalog_name:
                self.add(path, "catalog_name is required")
            if not s.schema_name:
                self.add(path, "schema_name is required")
            if s.catalog_name and s.catalog_name not in self.catalogs:
                self.add(path, f'references unknown catalog "{s.catalog_name}"')
            if s.catalog_name and s.schema_name:
                self._check_duplicate(seen, s.path, path, f'duplicate schema "{s.path}"')

    def _check_parent_schema(self, path: str, catalog: str, schema: str) -> None:
        schema_path = f"{catalog}.{schema}"
        if catalog and schema and schema_path not in self.schemas:
            self.add(path, f'references unknown schema "{schema_path}"')

    def _tables(self) -> None:
        seen: Set[str] = set()
        for i, t in enumerate(self.state.tables):
            complete = bool(t.catalog_name and t.schema_name and t.table_name)
            path = self._path("table", i, t.path if complete else "")
            if not t.catalog_name:
                self.add(path, "catalog_name is required")
            if not t.schema_name:
                self.add(path, "schema_name is required")
            if not t.table_name:
                self.add(path, "table_name is required")
            self._check_parent_schema(path, t.catalog_name, t.schema_name)

            spec = t.spec
            if spec.table_type and spec.table_type not in TABLE_TYPES:
                self.add(path, f'table_type must be "MANAGED" or "EXTERNAL", got "{spec.table_type}"')
            if spec.table_type == TableType.EXTERNAL.value:
                if not spec.source_path:
                    self.add(path, "source_path is required for EXTERNAL tables")
                if not spec.file_format:
                    self.add(path, "file_format is required for EXTERNAL tables")

            col_seen: Set[str] = set()
            for j, col in enumerate(spec.columns):
                cpath = f"{path}.columns[{j}]"
                if not col.name:
                    self.add(cpath, "column name is required")
                if not col.type:
                    self.add(cpath, "column type is required")
                self._check_duplicate(col_seen, col.name, cpath, f'duplicate column name "{col.name}"')

            if complete:
                self._check_duplicate(seen, t.path, path, f'duplicate table "{t.path}"')

    def _views(self) -> None:
        seen: Set[str] = set()
        for i, v in enumerate(self.state.views):
            complete = bool(v.catalog_name and v.schema_name and v.view_name)
            path = self._path("view", i, v.path if complete else "")
            if not v.catalog_name:
                self.add(path, "catalog_name is required")
            if not v.schema_name:
                self.add(path, "schema_name is required")
            if not v.view_name:
                self.add(path, "view_name is required")
            self._check_parent_schema(path, v.catalog_name, v.schema_name)
            if not v.spec.view_definition:
                self.add(path, "view_definition is required")
            if complete:
                self._check_duplicate(seen, v.path, path, f'duplicate view "{v.path}"')

    def _volumes(self) -> None:
        seen: Set[str] = set()
        for i, v in enumerate(self.state.volumes):
            complete = bool(v.catalog_name and v.schema_name and v.volume_name)
            path = self._path("volume", i, v.path if complete else "")
            if not v.catalog_name:
                self.add(path, "catalog_name is required")
            if not v.schema_name:
                self.add(path, "schema_name is required")
            if not v.volume_name:
                self.add(path, "volume_name is required")
            self._check_parent_schema(path, v.catalog_name, v.schema_name)

            spec = v.spec
            if spec.volume_type and spec.volume_type not in VOLUME_TYPES:
                self.add(path, f'volume_type must be "MANAGED" or "EXTERNAL", got "{spec.volume_type}"')
            if spec.volume_type == VolumeType.EXTERNAL.value and not spec.storage_location:
                self.add(path, "storage_location is required for EXTERNAL volumes")
            if complete:
                self._check_duplicate(seen, v.path, path, f'duplicate volume "{v.path}"')

    # =========================================================================
    # POLICIES
    # =========================================================================

    def _row_filters(self) -> None:
        for rf in self.state.row_filters:
            table = rf.table_path
            path = f"row_filter[{table}]"
            if table not in self.tables:
                self.add(path, f'references unknown table "{table}"')

            seen: Set[str] = set()
            for j, f in enumerate(rf.filters):
                fpath = f"{path}.filter[{f.name or j}]"
                if not f.name:
                    self.add(fpath, "filter name is required")
                if not f.filter_sql:
                    self.add(fpath, "filter_sql is required")
                self._check_duplicate(
                    seen, f.name, fpath, f'duplicate filter name "{f.name}" within table "{table}"'
                )
                for k, b in enumerate(f.bindings):
                    self._check_binding(f"{fpath}.bindings[{k}]", b.principal, b.principal_type)

    def _column_masks(self) -> None:
        for cm in self.state.column_masks:
            table = cm.table_path
            path = f"column_mask[{table}]"
            if table not in self.tables:
                self.add(path, f'references unknown table "{table}"')
            columns = self.table_columns.get(table)

            seen: Set[str] = set()
            for j, m in enumerate(cm.masks):
                mpath = f"{path}.mask[{m.name or j}]"
                if not m.name:
                    self.add(mpath, "mask name is required")
                if not m.column_name:
                    self.add(mpath, "column_name is required")
                if not m.mask_expression:
                    self.add(mpath, "mask_expression is required")
                if m.column_name and columns is not None and m.column_name not in columns:
                    self.add(mpath, f'column "{m.column_name}" not found in table "{table}"')
                self._check_duplicate(
                    seen, m.name, mpath, f'duplicate mask name "{m.name}" within table "{table}"'
                )
                for k, b in enumerate(m.bindings):
                    self._check_binding(f"{mpath}.bindings[{k}]", b.principal, b.principal_type)

    # =========================================================================
    # GOVERNANCE
    # =========================================================================

    def _tags(self) -> None:
        seen: Set[str] = set()
        for i, t in enumerate(self.state.tags):
            path = self._path("tag", i, t.path if t.key else "")
            if not t.key:
                self.add(path, "key is required")
                continue
            self._check_duplicate(seen, t.path, path, f'duplicate tag "{t.path}"')

    def _tag_assignments(self) -> None:
        for i, a in enumerate(self.state.tag_assignments):
            path = f"tag_assignment[{i}]"
            if not a.tag:
                self.add(path, "tag is required")
            elif a.tag not in self.tag_keys:
                self.add(path, f'references unknown tag "{a.tag}"')
            if a.securable_type not in TAG_SECURABLE_TYPES:
                self.add(path, f'securable_type must be one of [schema, table, column], got "{a.securable_type}"')
            if not a.securable:
                self.add(path, "securable is required")
                continue

            if a.securable_type == "schema" and a.securable not in self.schemas:
                self.add(path, f'references unknown schema "{a.securable}"')
            elif a.securable_type == "table" and a.securable not in self.tables:
                self.add(path, f'references unknown table "{a.securable}"')
            elif a.securable_type == "column":
                if not a.column_name:
                    self.add(path, "column_name is required for column tag assignments")
                columns = self.table_columns.get(a.securable)
                if a.securable not in self.tables:
                    self.add(path, f'references unknown table "{a.securable}"')
                elif a.column_name and columns is not None and a.column_name not in columns:
                    self.add(path, f'column "{a.column_name}" not found in table "{a.securable}"')

    # =========================================================================
    # STORAGE & COMPUTE
    # =========================================================================

    def _storage_credentials(self) -> None:
        seen: Set[str] = set()
        for i, c in enumerate(self.state.storage_credentials):
            path = self._path("storage_credential", i, c.name)
            if not c.name:
                self.add(path, "name is required")
            if c.credential_type not in CREDENTIAL_TYPES:
                self.add(path, f'credential_type must be "S3", "AZURE", or "GCS", got "{c.credential_type}"')

            if c.credential_type == "S3":
                if c.s3 is None:
                    self.add(path, 's3 spec is required when credential_type is "S3"')
                else:
                    if not c.s3.key_id_from_env:
                        self.add(path, "s3.key_id_from_env is required")
                    if not c.s3.secret_from_env:
                        self.add(path, "s3.secret_from_env is required")
            elif c.credential_type == "AZURE":
                if c.azure is None:
                    self.add(path, 'azure spec is required when credential_type is "AZURE"')
                elif not c.azure.account_name_from_env:
                    self.add(path, "azure.account_name_from_env is required")
            elif c.credential_type == "GCS" and c.gcs is None:
                self.add(path, 'gcs spec is required when credential_type is "GCS"')

            self._check_duplicate(seen, c.name, path, f'duplicate storage credential name "{c.name}"')

    def _external_locations(self) -> None:
        seen: Set[str] = set()
        for i, loc in enumerate(self.state.external_locations):
            path = self._path("external_location", i, loc.name)
            if not loc.name:
                self.add(path, "name is required")
            if not loc.url:
                self.add(path, "url is required")
            if not loc.credential_name:
                self.add(path, "credential_name is required")
            elif loc.credential_name not in self.credentials:
                self.add(path, f'references unknown storage credential "{loc.credential_name}"')
            self._check_duplicate(seen, loc.name, path, f'duplicate external location name "{loc.name}"')

    def _compute_endpoints(self) -> None:
        seen: Set[str] = set()
        for i, e in enumerate(self.state.compute_endpoints):
            path = self._path("compute_endpoint", i, e.name)
            if not e.name:
                self.add(path, "name is required")
            if e.type not in COMPUTE_TYPES:
                self.add(path, f'type must be "LOCAL" or "REMOTE", got "{e.type}"')
            if e.type == ComputeType.REMOTE.value and not e.url:
                self.add(path, "url is required for REMOTE compute endpoints")
            self._check_duplicate(seen, e.name, path, f'duplicate compute endpoint name "{e.name}"')

    def _compute_assignments(self) -> None:
        seen: Set[str] = set()
        for i, a in enumerate(self.state.compute_assignments):
            path = f"compute_assignment[{i}]"
            if not a.endpoint:
                self.add(path, "endpoint is required")
            elif a.endpoint not in self.endpoints:
                self.add(path, f'references unknown compute endpoint "{a.endpoint}"')
            self._check_binding(path, a.principal, a.principal_type)
            key = "|".join((a.endpoint, a.principal, a.principal_type))
            self._check_duplicate(seen, key, path, "duplicate compute assignment")

    # =========================================================================
    # WORKFLOWS
    # =========================================================================

    def _notebooks(self) -> None:
        seen: Set[str] = set()
        for i, n in enumerate(self.state.notebooks):
            path = self._path("notebook", i, n.name)
            if not n.name:
                self.add(path, "name is required")
            for j, cell in enumerate(n.spec.cells):
                cpath = f"{path}.cells[{j}]"
                if cell.type not in CELL_TYPES:
                    self.add(cpath, f'cell type must be "sql" or "markdown", got "{cell.type}"')
                if not cell.content:
                    self.add(cpath, "content is required")
            self._check_duplicate(seen, n.name, path, f'duplicate notebook name "{n.name}"')

    def _pipelines(self) -> None:
        seen: Set[str] = set()
        for i, p in enumerate(self.state.pipelines):
            path = self._path("pipeline", i, p.name)
            if not p.name:
                self.add(path, "name is required")

            job_names = {job.name for job in p.spec.jobs if job.name}
            job_seen: Set[str] = set()
            for j, job in enumerate(p.spec.jobs):
                jpath = f"{path}.job[{job.name or j}]"
                if not job.name:
                    self.add(jpath, "job name is required")
                if not job.notebook:
                    self.add(jpath, "notebook is required")
                elif job.notebook not in self.notebooks:
                    self.add(jpath, f'references unknown notebook "{job.notebook}"')
                if job.compute_endpoint and job.compute_endpoint not in self.endpoints:
                    self.add(jpath, f'references unknown compute endpoint "{job.compute_endpoint}"')
                for dep in job.depends_on:
                    if dep not in job_names:
                        self.add(jpath, f'depends_on references unknown job "{dep}" in pipeline "{p.name}"')
                self._check_duplicate(
                    job_seen, job.name, jpath, f'duplicate job name "{job.name}" within pipeline "{p.name}"'
                )

            edges = {job.name: list(job.depends_on) for job in p.spec.jobs if job.name}
            for cycle in find_cycles(edges, [job.name for job in p.spec.jobs]):
                self.add(path, f"circular job dependency detected: {' -> '.join(cycle)}")

            self._check_duplicate(seen, p.name, path, f'duplicate pipeline name "{p.name}"')

    # =========================================================================
    # TRANSFORMATIONS
    # =========================================================================

    def _models(self) -> None:
        seen: Set[str] = set()
        for i, m in enumerate(self.state.models):
            complete = bool(m.project_name and m.model_name)
            path = self._path("model", i, m.path if complete else "")
            if not m.project_name:
                self.add(path, "project_name is required")
            if not m.model_name:
                self.add(path, "model_name is required")
            if not m.spec.sql:
                self.add(path, "sql is required")
            if m.spec.materialization and m.spec.materialization not in MATERIALIZATIONS:
                self.add(
                    path,
                    "materialization must be one of [VIEW, TABLE, INCREMENTAL, EPHEMERAL], "
                    f'got "{m.spec.materialization}"',
                )
            if m.spec.contract is not None:
                self._contract(path, m.spec.contract)
            self._model_tests(path, m.spec.tests)
            if complete:
                self._check_duplicate(seen, m.path, path, f'duplicate model "{m.path}"')

    def _contract(self, parent: str, contract: ContractSpec) -> None:
        seen: Set[str] = set()
        for i, col in enumerate(contract.columns):
            cpath = f"{parent}.contract.columns[{i}]"
            if not col.name:
                self.add(cpath, "column name is required")
            if not col.type:
                self.add(cpath, "column type is required")
            self._check_duplicate(seen, col.name, cpath, f'duplicate contract column name "{col.name}"')

    def _model_tests(self, parent: str, tests: List[ModelTestSpec]) -> None:
        seen: Set[str] = set()
        for i, t in enumerate(tests):
            tpath = self._path(f"{parent}.tests", i, t.name)
            if not t.name:
                self.add(tpath, "test name is required")
            if t.type not in TEST_TYPES:
                self.add(
                    tpath,
                    "test type must be one of [not_null, unique, accepted_values, relationships, "
                    f'custom_sql], got "{t.type}"',
                )
            for problem in _test_requirements(t):
                self.add(tpath, problem)
            if t.type == "accepted_values" and not t.values:
                self.add(tpath, "values are required for accepted_values tests")
            self._check_duplicate(seen, t.name, tpath, f'duplicate test name "{t.name}"')

    def _macros(self) -> None:
        seen: Set[str] = set()
        for i, m in enumerate(self.state.macros):
            path = self._path("macro", i, m.name)
            if not m.name:
                self.add(path, "name is required")
            if not m.spec.body:
                self.add(path, "body is required")
            if m.spec.macro_type not in MACRO_TYPES:
                self.add(path, f'macro_type must be "SCALAR" or "TABLE", got "{m.spec.macro_type}"')
            self._check_duplicate(seen, m.name, path, f'duplicate macro name "{m.name}"')


def _test_requirements(test: ModelTestSpec) -> List[str]:
    """Fields a test of the given type is missing."""
    problems = []
    if test.type in ("not_null", "unique", "accepted_values", "relationships") and not test.column:
        problems.append(f"column is required for {test.type} tests")
    if test.type == "relationships" and not (test.to_model and test.to_column):
        problems.append("to_model and to_column are required for relationships tests")
    if test.type == "custom_sql" and not test.sql:
        problems.append("sql is required for custom_sql tests")
    return problems


__all__ = ["find_cycles", "validate", "validate_or_raise"]
