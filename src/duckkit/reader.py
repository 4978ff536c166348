"""
State reader: builds the actual state from the platform API.

Collections are read in ascending layer order so that every identifier a
relationship row points at has been indexed before the row is resolved.
Relationship rows come back from the server keyed by identifiers; they are
translated to names through the session's ResourceIndex, and rows that
reference something the index does not know are dropped.

Usage:
    reader = StateReader(client)
    actual = reader.read_state()
    reader.index      # identifiers for the apply that follows
    reader.warnings   # optional endpoints that were skipped
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from duckkit.capabilities import CompatibilityMode, is_optional_read_error, optional_read_warning
from duckkit.client import DEFAULT_PAGE_SIZE, APIClient, is_not_found
from duckkit.errors import APIError, ReadStateError, TransportError
from duckkit.index import SECURABLE_KINDS, TAG_SECURABLE_KINDS, ResourceIndex
from duckkit.models import (
    APIKeySpec,
    AzureCredentialSpec,
    CatalogResource,
    CatalogSpec,
    CellSpec,
    ColumnDef,
    ColumnMaskResource,
    ColumnMaskSpec,
    ComputeAssignmentSpec,
    ComputeEndpointSpec,
    ContractColumn,
    ContractSpec,
    DesiredState,
    ExternalLocationSpec,
    FilterBindingRef,
    FreshnessSpec,
    GCSCredentialSpec,
    GrantSpec,
    GroupSpec,
    MacroResource,
    MacroSpec,
    MaskBindingRef,
    MemberRef,
    ModelConfigSpec,
    ModelResource,
    ModelSpec,
    ModelTestSpec,
    NotebookResource,
    NotebookSpec,
    PipelineJobSpec,
    PipelineResource,
    PipelineSpec,
    PrincipalSpec,
    RowFilterResource,
    RowFilterSpec,
    S3CredentialSpec,
    SchemaResource,
    SchemaSpec,
    StorageCredentialSpec,
    TableResource,
    TableSpec,
    TagAssignmentSpec,
    TagSpec,
    ViewResource,
    ViewSpec,
    VolumeResource,
    VolumeSpec,
)
from duckkit.models.enums import ResourceKind
from duckkit.models.policies import policy_path
from duckkit.models.workflows import job_path

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

# Strategy names that cannot travel over the wire verbatim
WIRE_INCREMENTAL_STRATEGIES = {"delete+insert": "delete_insert"}
CONFIG_INCREMENTAL_STRATEGIES = {v: k for k, v in WIRE_INCREMENTAL_STRATEGIES.items()}


# =============================================================================
# ROW HELPERS
# =============================================================================

def row_id(row: Row, *fields: str) -> str:
    """First non-empty identifier among ``fields`` then ``id``."""
    for name in fields + ("id",):
        value = row.get(name)
        if value not in (None, ""):
            return str(value)
    return ""


def _text(row: Row, key: str) -> str:
    value = row.get(key)
    return "" if value is None else str(value)


def _flag(row: Row, key: str) -> bool:
    return bool(row.get(key) or False)


def _number(row: Row, key: str) -> Optional[int]:
    value = row.get(key)
    if value in (None, ""):
        return None
    return int(value)


def _strings(row: Row, key: str) -> List[str]:
    return [str(v) for v in row.get(key) or []]


def _properties(row: Row) -> Dict[str, str]:
    return {str(k): "" if v is None else str(v) for k, v in (row.get("properties") or {}).items()}


# =============================================================================
# READER
# =============================================================================

class StateReader:
    """
    Reads every managed collection and indexes server identifiers.

    Mandatory endpoints raise ReadStateError on any failure. The model, macro
    and API key endpoints are optional: a failure the compatibility mode
    classifies as "absent" leaves the collection empty and records a warning.
    """

    def __init__(
        self,
        client: APIClient,
        index: Optional[ResourceIndex] = None,
        compatibility_mode: CompatibilityMode = CompatibilityMode.STRICT,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.client = client
        self.index = index if index is not None else ResourceIndex()
        self.compatibility_mode = CompatibilityMode.parse(compatibility_mode)
        self.page_size = page_size
        self.warnings: List[str] = []

    def read_state(self) -> DesiredState:
        """
        Read the full actual state.

        Returns:
            The observed state, in the same shape as the desired state

        Raises:
            ReadStateError: If a mandatory endpoint fails or pagination loops
        """
        state = DesiredState()

        # Layer 0
        self._read_principals(state)
        self._read_storage_credentials(state)
        self._read_external_locations(state)
        self._read_compute_endpoints(state)
        self._read_tags(state)
        self._read_notebooks(state)
        self._read_macros(state)

        # Layers 1 and up; groups come first so bindings can name them
        self._read_groups(state)
        self._read_catalogs(state)
        self._read_api_keys(state)
        self._read_pipelines(state)

        # Relationships
        self._read_group_members(state)
        self._read_compute_assignments(state)
        self._read_models(state)
        self._read_grants(state)
        self._read_tag_assignments(state)

        logger.info(f"Read actual state: {len(self.index)} identifiers indexed")
        return state

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def _list(self, resource: str, path: str) -> List[Row]:
        try:
            return self.client.list_all(path, page_size=self.page_size)
        except (APIError, TransportError) as e:
            raise ReadStateError(resource, e) from e

    def _get(self, resource: str, path: str) -> Row:
        try:
            return self.client.get(path)
        except (APIError, TransportError) as e:
            raise ReadStateError(resource, e) from e

    def _list_optional(self, resource: str, path: str) -> Optional[List[Row]]:
        """List an optional endpoint; None means the endpoint is absent."""
        try:
            return self.client.list_all(path, page_size=self.page_size)
        except (APIError, TransportError) as e:
            if not is_optional_read_error(e, self.compatibility_mode):
                raise ReadStateError(resource, e) from e
            warning = optional_read_warning(resource, e)
            logger.warning(warning)
            self.warnings.append(warning)
            return None

    def _drop(self, what: str, reason: str) -> None:
        logger.debug(f"Dropping {what}: {reason}")

    def _principal(self, row: Row, id_field: str, type_field: str) -> Optional[str]:
        return self.index.principal_name_for(row.get(id_field), _text(row, type_field))

    # =========================================================================
    # SECURITY
    # =========================================================================

    def _read_principals(self, state: DesiredState) -> None:
        for row in self._list("principals", "/principals"):
            principal = PrincipalSpec(
                name=_text(row, "name"),
                type=_text(row, "type"),
                is_admin=_flag(row, "is_admin"),
            )
            self.index.register(ResourceKind.PRINCIPAL, principal.path, row_id(row))
            state.principals.append(principal)

    def _read_groups(self, state: DesiredState) -> None:
        for row in self._list("groups", "/groups"):
            group = GroupSpec(name=_text(row, "name"), description=_text(row, "description"))
            self.index.register(ResourceKind.GROUP, group.path, row_id(row))
            state.groups.append(group)

    def _read_group_members(self, state: DesiredState) -> None:
        for group in state.groups:
            group_id = self.index.lookup(ResourceKind.GROUP, group.path)
            if group_id is None:
                continue
            for row in self._list(f"group {group.name!r} members", f"/groups/{group_id}/members"):
                member_type = _text(row, "member_type") or _text(row, "type")
                member_id = _text(row, "member_id")
                name = self.index.principal_name_for(member_id, member_type) or _text(row, "name")
                if not name:
                    self._drop(f"member of group {group.name!r}", f"unknown {member_type} id {member_id!r}")
                    continue
                group.members.append(MemberRef(name=name, type=member_type, member_id=member_id))

    def _read_api_keys(self, state: DesiredState) -> None:
        rows = self._list_optional("api-keys", "/api-keys")
        for row in rows or []:
            principal = self.index.name_for(ResourceKind.PRINCIPAL, row.get("principal_id"))
            if principal is None:
                self._drop(f"api key {_text(row, 'name')!r}", f"unknown principal id {row.get('principal_id')!r}")
                continue
            key = APIKeySpec(
                name=_text(row, "name"),
                principal=principal,
                expires_at=row.get("expires_at") or None,
            )
            self.index.register(ResourceKind.API_KEY, key.path, row_id(row))
            state.api_keys.append(key)

    def _read_grants(self, state: DesiredState) -> None:
        for row in self._list("grants", "/grants"):
            principal = self._principal(row, "principal_id", "principal_type")
            if principal is None:
                self._drop("grant", f"unknown principal id {row.get('principal_id')!r}")
                continue
            securable_type = _text(row, "securable_type")
            kind = SECURABLE_KINDS.get(securable_type)
            securable = self.index.name_for(kind, row.get("securable_id")) if kind else None
            if securable is None:
                self._drop("grant", f"unknown {securable_type} id {row.get('securable_id')!r}")
                continue
            state.grants.append(GrantSpec(
                principal=principal,
                principal_type=_text(row, "principal_type"),
                securable_type=securable_type,
                securable=securable,
                privilege=_text(row, "privilege"),
            ))

    # =========================================================================
    # CATALOG TREE
    # =========================================================================

    def _read_catalogs(self, state: DesiredState) -> None:
        for row in self._list("catalogs", "/catalogs"):
            catalog = CatalogResource(
                catalog_name=_text(row, "name"),
                deletion_protection=_flag(row, "deletion_protection"),
                spec=CatalogSpec(
                    metastore_type=_text(row, "metastore_type"),
                    dsn=_text(row, "dsn"),
                    data_path=_text(row, "data_path"),
                    is_default=_flag(row, "is_default"),
                    comment=_text(row, "comment"),
                ),
            )
            self.index.register(ResourceKind.CATALOG_REGISTRATION, catalog.path, row_id(row))
            state.catalogs.append(catalog)
            self._read_schemas(state, catalog.catalog_name)

    def _read_schemas(self, state: DesiredState, catalog: str) -> None:
        for row in self._list(f"catalog {catalog!r} schemas", f"/catalogs/{catalog}/schemas"):
            schema = schema_from_row(catalog, row)
            self.index.register(ResourceKind.SCHEMA, schema.path, row_id(row, "schema_id"))
            state.schemas.append(schema)

            base = f"/catalogs/{catalog}/schemas/{schema.schema_name}"
            self._read_tables(state, schema.path, base)
            self._read_views(state, schema.path, base)
            self._read_volumes(state, schema.path, base)

    def _read_tables(self, state: DesiredState, schema_path: str, base: str) -> None:
        catalog, schema = schema_path.split(".", 1)
        for row in self._list(f"schema {schema_path!r} tables", f"{base}/tables"):
            table = table_from_row(catalog, schema, row)
            table_id = row_id(row, "table_id")
            self.index.register(ResourceKind.TABLE, table.path, table_id)
            state.tables.append(table)
            if table_id:
                self._read_row_filters(state, table, table_id)
                self._read_column_masks(state, table, table_id)

    def _read_views(self, state: DesiredState, schema_path: str, base: str) -> None:
        catalog, schema = schema_path.split(".", 1)
        for row in self._list(f"schema {schema_path!r} views", f"{base}/views"):
            view = ViewResource(
                catalog_name=catalog,
                schema_name=schema,
                view_name=_text(row, "name"),
                spec=ViewSpec(
                    view_definition=_text(row, "view_definition"),
                    comment=_text(row, "comment"),
                    owner=_text(row, "owner"),
                    properties=_properties(row),
                ),
            )
            self.index.register(ResourceKind.VIEW, view.path, row_id(row))
            state.views.append(view)

    def _read_volumes(self, state: DesiredState, schema_path: str, base: str) -> None:
        catalog, schema = schema_path.split(".", 1)
        for row in self._list(f"schema {schema_path!r} volumes", f"{base}/volumes"):
            volume = VolumeResource(
                catalog_name=catalog,
                schema_name=schema,
                volume_name=_text(row, "name"),
                spec=VolumeSpec(
                    volume_type=_text(row, "volume_type") or "MANAGED",
                    storage_location=_text(row, "storage_location"),
                    comment=_text(row, "comment"),
                    owner=_text(row, "owner"),
                ),
            )
            self.index.register(ResourceKind.VOLUME, volume.path, row_id(row))
            state.volumes.append(volume)

    # =========================================================================
    # POLICIES
    # =========================================================================

    def _read_row_filters(self, state: DesiredState, table: TableResource, table_id: str) -> None:
        rows = self._list(f"table {table.path!r} row filters", f"/tables/{table_id}/row-filters")
        if not rows:
            return
        resource = RowFilterResource(
            catalog_name=table.catalog_name,
            schema_name=table.schema_name,
            table_name=table.table_name,
        )
        for row in rows:
            spec = RowFilterSpec(
                name=_text(row, "name"),
                filter_sql=_text(row, "filter_sql"),
                description=_text(row, "description"),
            )
            path = policy_path(table.path, spec.name)
            filter_id = row_id(row)
            self.index.register(ResourceKind.ROW_FILTER, path, filter_id)
            if filter_id:
                for binding in self._list(f"row filter {path!r} bindings", f"/row-filters/{filter_id}/bindings"):
                    principal = self._principal(binding, "principal_id", "principal_type")
                    if principal is None:
                        self._drop(f"binding of {path!r}", f"unknown principal id {binding.get('principal_id')!r}")
                        continue
                    spec.bindings.append(FilterBindingRef(
                        principal=principal, principal_type=_text(binding, "principal_type"),
                    ))
            resource.filters.append(spec)
        state.row_filters.append(resource)

    def _read_column_masks(self, state: DesiredState, table: TableResource, table_id: str) -> None:
        rows = self._list(f"table {table.path!r} column masks", f"/tables/{table_id}/column-masks")
        if not rows:
            return
        resource = ColumnMaskResource(
            catalog_name=table.catalog_name,
            schema_name=table.schema_name,
            table_name=table.table_name,
        )
        for row in rows:
            spec = ColumnMaskSpec(
                name=_text(row, "name"),
                column_name=_text(row, "column_name"),
                mask_expression=_text(row, "mask_expression"),
                description=_text(row, "description"),
            )
            path = policy_path(table.path, spec.name)
            mask_id = row_id(row)
            self.index.register(ResourceKind.COLUMN_MASK, path, mask_id)
            if mask_id:
                for binding in self._list(f"column mask {path!r} bindings", f"/column-masks/{mask_id}/bindings"):
                    principal = self._principal(binding, "principal_id", "principal_type")
                    if principal is None:
                        self._drop(f"binding of {path!r}", f"unknown principal id {binding.get('principal_id')!r}")
                        continue
                    spec.bindings.append(MaskBindingRef(
                        principal=principal,
                        principal_type=_text(binding, "principal_type"),
                        see_original=_flag(binding, "see_original"),
                    ))
            resource.masks.append(spec)
        state.column_masks.append(resource)

    # =========================================================================
    # GOVERNANCE
    # =========================================================================

    def _read_tags(self, state: DesiredState) -> None:
        for row in self._list("tags", "/tags"):
            tag = TagSpec(key=_text(row, "key"), value=row.get("value") or None)
            self.index.register(ResourceKind.TAG, tag.path, row_id(row))
            state.tags.append(tag)

    def _read_tag_assignments(self, state: DesiredState) -> None:
        for row in self._list("tag assignments", "/tag-assignments"):
            tag = self.index.name_for(ResourceKind.TAG, row.get("tag_id"))
            if tag is None:
                self._drop("tag assignment", f"unknown tag id {row.get('tag_id')!r}")
                continue
            securable_type = _text(row, "securable_type")
            kind = TAG_SECURABLE_KINDS.get(securable_type)
            securable = self.index.name_for(kind, row.get("securable_id")) if kind else None
            if securable is None:
                self._drop("tag assignment", f"unknown {securable_type} id {row.get('securable_id')!r}")
                continue
            state.tag_assignments.append(TagAssignmentSpec(
                tag=tag,
                securable_type=securable_type,
                securable=securable,
                column_name=_text(row, "column_name"),
            ))

    # =========================================================================
    # STORAGE & COMPUTE
    # =========================================================================

    def _read_storage_credentials(self, state: DesiredState) -> None:
        for row in self._list("storage credentials", "/storage-credentials"):
            credential = storage_credential_from_row(row)
            self.index.register(ResourceKind.STORAGE_CREDENTIAL, credential.path, row_id(row))
            state.storage_credentials.append(credential)

    def _read_external_locations(self, state: DesiredState) -> None:
        for row in self._list("external locations", "/external-locations"):
            location = ExternalLocationSpec(
                name=_text(row, "name"),
                url=_text(row, "url"),
                credential_name=_text(row, "credential_name"),
                storage_type=_text(row, "storage_type"),
                comment=_text(row, "comment"),
                read_only=_flag(row, "read_only"),
            )
            self.index.register(ResourceKind.EXTERNAL_LOCATION, location.path, row_id(row))
            state.external_locations.append(location)

    def _read_compute_endpoints(self, state: DesiredState) -> None:
        for row in self._list("compute endpoints", "/compute-endpoints"):
            endpoint = ComputeEndpointSpec(
                name=_text(row, "name"),
                url=_text(row, "url"),
                type=_text(row, "type"),
                size=_text(row, "size"),
                max_memory_gb=_number(row, "max_memory_gb"),
            )
            self.index.register(ResourceKind.COMPUTE_ENDPOINT, endpoint.path, row_id(row))
            state.compute_endpoints.append(endpoint)

    def _read_compute_assignments(self, state: DesiredState) -> None:
        for endpoint in state.compute_endpoints:
            path = f"/compute-endpoints/{endpoint.name}/assignments"
            for row in self._list(f"endpoint {endpoint.name!r} assignments", path):
                principal = self._principal(row, "principal_id", "principal_type")
                if principal is None:
                    self._drop(
                        f"assignment of endpoint {endpoint.name!r}",
                        f"unknown principal id {row.get('principal_id')!r}",
                    )
                    continue
                assignment = ComputeAssignmentSpec(
                    endpoint=endpoint.name,
                    principal=principal,
                    principal_type=_text(row, "principal_type"),
                    is_default=_flag(row, "is_default"),
                    fallback_local=_flag(row, "fallback_local"),
                )
                self.index.register(ResourceKind.COMPUTE_ASSIGNMENT, assignment.path, row_id(row))
                state.compute_assignments.append(assignment)

    # =========================================================================
    # WORKFLOWS
    # =========================================================================

    def _read_notebooks(self, state: DesiredState) -> None:
        for row in self._list("notebooks", "/notebooks"):
            notebook = NotebookResource(
                name=_text(row, "name"),
                spec=NotebookSpec(description=_text(row, "description"), owner=_text(row, "owner")),
            )
            notebook_id = row_id(row)
            self.index.register(ResourceKind.NOTEBOOK, notebook.path, notebook_id)
            if notebook_id:
                detail = self._get(f"notebook {notebook.name!r}", f"/notebooks/{notebook_id}")
                notebook.spec.cells.extend(cells_from_rows(detail.get("cells") or []))
            state.notebooks.append(notebook)

    def _read_pipelines(self, state: DesiredState) -> None:
        for row in self._list("pipelines", "/pipelines"):
            pipeline = PipelineResource(
                name=_text(row, "name"),
                spec=PipelineSpec(
                    description=_text(row, "description"),
                    schedule_cron=_text(row, "schedule_cron"),
                    is_paused=_flag(row, "is_paused"),
                    concurrency_limit=_number(row, "concurrency_limit"),
                ),
            )
            self.index.register(ResourceKind.PIPELINE, pipeline.path, row_id(row))
            self._read_jobs(pipeline)
            state.pipelines.append(pipeline)

    def _read_jobs(self, pipeline: PipelineResource) -> None:
        path = f"/pipelines/{pipeline.name}/jobs"
        for row in self._list(f"pipeline {pipeline.name!r} jobs", path):
            name = _text(row, "name")
            notebook = self.index.name_for(ResourceKind.NOTEBOOK, row.get("notebook_id"))
            if notebook is None:
                self._drop(f"job {name!r}", f"unknown notebook id {row.get('notebook_id')!r}")
                continue
            endpoint = ""
            if row.get("compute_endpoint_id"):
                endpoint = self.index.name_for(ResourceKind.COMPUTE_ENDPOINT, row.get("compute_endpoint_id"))
                if endpoint is None:
                    self._drop(f"job {name!r}", f"unknown compute endpoint id {row.get('compute_endpoint_id')!r}")
                    continue
            job = PipelineJobSpec(
                name=name,
                notebook=notebook,
                compute_endpoint=endpoint,
                depends_on=_strings(row, "depends_on"),
                timeout_seconds=_number(row, "timeout_seconds"),
                retry_count=_number(row, "retry_count"),
                order=_number(row, "job_order"),
            )
            self.index.register(ResourceKind.PIPELINE_JOB, job_path(pipeline.name, name), row_id(row))
            pipeline.spec.jobs.append(job)

    # =========================================================================
    # TRANSFORMATIONS
    # =========================================================================

    def _read_macros(self, state: DesiredState) -> None:
        rows = self._list_optional("macros", "/macros")
        for row in rows or []:
            macro = MacroResource(
                name=_text(row, "name"),
                spec=MacroSpec(
                    macro_type=_text(row, "macro_type"),
                    parameters=_strings(row, "parameters"),
                    body=_text(row, "body"),
                    description=_text(row, "description"),
                    catalog_name=_text(row, "catalog_name"),
                    project_name=_text(row, "project_name"),
                    visibility=_text(row, "visibility"),
                    owner=_text(row, "owner"),
                    properties=_properties(row),
                    tags=_strings(row, "tags"),
                    status=_text(row, "status"),
                ),
            )
            self.index.register(ResourceKind.MACRO, macro.path, row_id(row))
            state.macros.append(macro)

    def _read_models(self, state: DesiredState) -> None:
        rows = self._list_optional("models", "/models")
        for row in rows or []:
            model = model_from_row(row)
            self.index.register(ResourceKind.MODEL, model.path, row_id(row))
            model.spec.tests.extend(self._read_model_tests(model))
            state.models.append(model)

    def _read_model_tests(self, model: ModelResource) -> List[ModelTestSpec]:
        path = f"/models/{model.project_name}/{model.model_name}/tests"
        try:
            rows = self.client.list_all(path, page_size=self.page_size)
        except APIError as e:
            if is_not_found(e):
                return []
            raise ReadStateError(f"model {model.path!r} tests", e) from e
        except TransportError as e:
            raise ReadStateError(f"model {model.path!r} tests", e) from e
        return [model_test_from_row(row) for row in rows]


# =============================================================================
# ROW CONVERSION
# =============================================================================

def schema_from_row(catalog: str, row: Row) -> SchemaResource:
    return SchemaResource(
        catalog_name=catalog,
        schema_name=_text(row, "name"),
        deletion_protection=_flag(row, "deletion_protection"),
        spec=SchemaSpec(
            comment=_text(row, "comment"),
            owner=_text(row, "owner"),
            location_name=_text(row, "location_name"),
            properties=_properties(row),
        ),
    )


def table_from_row(catalog: str, schema: str, row: Row) -> TableResource:
    columns = [
        ColumnDef(name=_text(c, "name"), type=_text(c, "type"), comment=_text(c, "comment"))
        for c in row.get("columns") or []
    ]
    return TableResource(
        catalog_name=catalog,
        schema_name=schema,
        table_name=_text(row, "name"),
        deletion_protection=_flag(row, "deletion_protection"),
        spec=TableSpec(
            table_type=_text(row, "table_type") or "MANAGED",
            comment=_text(row, "comment"),
            owner=_text(row, "owner"),
            columns=columns,
            properties=_properties(row),
            source_path=_text(row, "source_path"),
            file_format=_text(row, "file_format"),
            location_name=_text(row, "location_name"),
        ),
    )


def storage_credential_from_row(row: Row) -> StorageCredentialSpec:
    """
    Rebuild a credential from its flat, secret-free wire form.

    The provider block is implied by ``credential_type``; secrets are never
    returned, so only the non-secret provider fields are filled in.
    """
    credential_type = _text(row, "credential_type")
    credential = StorageCredentialSpec(
        name=_text(row, "name"),
        credential_type=credential_type,
        comment=_text(row, "comment"),
    )
    if credential_type == "S3":
        credential.s3 = S3CredentialSpec(
            endpoint=_text(row, "s3_endpoint"),
            region=_text(row, "s3_region"),
            url_style=_text(row, "s3_url_style"),
        )
    elif credential_type == "AZURE":
        credential.azure = AzureCredentialSpec(tenant_id=_text(row, "azure_tenant_id"))
    elif credential_type == "GCS":
        credential.gcs = GCSCredentialSpec(key_file_path=_text(row, "gcs_key_file_path"))
    return credential


def cells_from_rows(rows: List[Row]) -> List[CellSpec]:
    ordered = sorted(rows, key=lambda c: _number(c, "position") or 0)
    return [CellSpec(type=_text(c, "cell_type"), content=_text(c, "content")) for c in ordered]


def model_from_row(row: Row) -> ModelResource:
    config = None
    raw_config = row.get("config") or {}
    if raw_config:
        strategy = _text(raw_config, "incremental_strategy")
        config = ModelConfigSpec(
            unique_key=_strings(raw_config, "unique_key"),
            incremental_strategy=CONFIG_INCREMENTAL_STRATEGIES.get(strategy, strategy),
            on_schema_change=_text(raw_config, "on_schema_change"),
        )

    contract = None
    raw_contract = row.get("contract") or {}
    if raw_contract:
        contract = ContractSpec(
            enforce=_flag(raw_contract, "enforce"),
            columns=[
                ContractColumn(
                    name=_text(c, "name"),
                    type=_text(c, "type"),
                    nullable=c.get("nullable", True) is not False,
                )
                for c in raw_contract.get("columns") or []
            ],
        )

    freshness = None
    raw_freshness = row.get("freshness_policy") or row.get("freshness") or {}
    if raw_freshness:
        freshness = FreshnessSpec(
            max_lag_seconds=_number(raw_freshness, "max_lag_seconds") or 0,
            cron_schedule=_text(raw_freshness, "cron_schedule"),
        )

    return ModelResource(
        project_name=_text(row, "project_name"),
        model_name=_text(row, "name"),
        spec=ModelSpec(
            materialization=_text(row, "materialization"),
            description=_text(row, "description"),
            tags=_strings(row, "tags"),
            sql=_text(row, "sql"),
            config=config,
            contract=contract,
            freshness=freshness,
        ),
    )


def model_test_from_row(row: Row) -> ModelTestSpec:
    config = row.get("config") or {}
    return ModelTestSpec(
        name=_text(row, "name"),
        type=_text(row, "test_type"),
        column=_text(row, "column"),
        values=_strings(config, "values"),
        to_model=_text(config, "to_model"),
        to_column=_text(config, "to_column"),
        sql=_text(config, "sql"),
    )


__all__ = [
    "CONFIG_INCREMENTAL_STRATEGIES",
    "StateReader",
    "WIRE_INCREMENTAL_STRATEGIES",
    "cells_from_rows",
    "model_from_row",
    "row_id",
    "storage_credential_from_row",
    "model_test_from_row",
]
