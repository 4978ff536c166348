"""
Desired-state loader.

Reads a configuration directory into a DesiredState. The directory layout
determines resource identity: catalog, schema, table, view, volume, notebook,
pipeline, macro and model names come from directory and file names, and each
document's ``metadata.name`` must agree with them.

Every file and sub-directory is optional. The loader never touches the
network.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Type, TypeVar

import yaml
from pydantic import ValidationError as PydanticValidationError

from duckkit.errors import ConfigError
from duckkit.models.base import ALLOW_UNKNOWN_FIELDS
from duckkit.models.catalogs import (
    CatalogResource,
    SchemaResource,
    TableResource,
    ViewResource,
    VolumeResource,
)
from duckkit.models.policies import ColumnMaskResource, RowFilterResource
from duckkit.models.state import DesiredState
from duckkit.models.transformations import MacroResource, ModelResource
from duckkit.models.workflows import NotebookResource, PipelineResource

from .schema import (
    API_VERSION,
    DOCUMENT_KINDS,
    APIKeyListDoc,
    CatalogDoc,
    ColumnMaskListDoc,
    ComputeAssignmentListDoc,
    ComputeEndpointListDoc,
    Document,
    ExternalLocationListDoc,
    GrantListDoc,
    GroupListDoc,
    MacroDoc,
    ModelDoc,
    NamedDocument,
    NotebookDoc,
    PipelineDoc,
    PrincipalListDoc,
    RowFilterListDoc,
    SchemaDoc,
    StorageCredentialListDoc,
    TableDoc,
    TagConfigDoc,
    ViewDoc,
    VolumeDoc,
)

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=Document)

YAML_SUFFIX = ".yaml"


@dataclass(frozen=True)
class LoadOptions:
    """Loader behaviour switches."""

    allow_unknown_fields: bool = False


def load_directory(path: str | Path, options: Optional[LoadOptions] = None) -> DesiredState:
    """
    Load a desired-state directory.

    Args:
        path: Root of the configuration tree
        options: Loader options; unknown fields are rejected by default

    Returns:
        DesiredState with every declared resource

    Raises:
        ConfigError: If the root is missing, a file cannot be parsed, a
            document has the wrong apiVersion or kind, or a name does not
            match its directory or file name
    """
    root = Path(path)
    if not root.exists():
        raise ConfigError("config directory does not exist", path=str(root))
    if not root.is_dir():
        raise ConfigError("config path is not a directory", path=str(root))

    loader = _DirectoryLoader(root, options or LoadOptions())
    state = loader.load()
    logger.info(f"Loaded desired state from {root} ({loader.documents} document(s))")
    return state


class _DirectoryLoader:
    """Walks one configuration tree, accumulating a DesiredState."""

    def __init__(self, root: Path, options: LoadOptions) -> None:
        self.root = root
        self.options = options
        self.state = DesiredState()
        self.documents = 0

    def load(self) -> DesiredState:
        self._load_security()
        self._load_governance()
        self._load_storage()
        self._load_compute()
        self._load_catalogs()
        self._load_notebooks()
        self._load_pipelines()
        self._load_macros()
        self._load_models()
        return self.state

    # =========================================================================
    # FILE HANDLING
    # =========================================================================

    def _read(self, path: Path, doc_cls: Type[D]) -> Optional[D]:
        """Parse one document; returns None when the file does not exist."""
        if not path.is_file():
            return None

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML: {e}", path=str(path)) from e
        except OSError as e:
            raise ConfigError(f"cannot read file: {e}", path=str(path)) from e

        if data is None:
            raise ConfigError("empty document", path=str(path))
        if not isinstance(data, dict):
            raise ConfigError("document must be a mapping", path=str(path))

        self._check_header(path, data, DOCUMENT_KINDS[doc_cls])

        context = {ALLOW_UNKNOWN_FIELDS: self.options.allow_unknown_fields}
        try:
            doc = doc_cls.model_validate(data, context=context)
        except PydanticValidationError as e:
            raise ConfigError(_format_pydantic_error(e), path=str(path)) from e

        self.documents += 1
        logger.debug(f"Loaded {DOCUMENT_KINDS[doc_cls]} document from {path}")
        return doc

    @staticmethod
    def _check_header(path: Path, data: Dict[str, Any], expected_kind: str) -> None:
        api_version = data.get("apiVersion")
        if api_version != API_VERSION:
            raise ConfigError(
                f"unsupported apiVersion {api_version!r} (expected {API_VERSION!r})",
                path=str(path),
            )
        kind = data.get("kind")
        if kind != expected_kind:
            raise ConfigError(
                f"unexpected kind {kind!r} (expected {expected_kind!r})", path=str(path)
            )

    @staticmethod
    def _check_name(path: Path, doc: NamedDocument, expected: str, what: str) -> None:
        if doc.metadata.name != expected:
            raise ConfigError(
                f"metadata.name {doc.metadata.name!r} does not match {what} name {expected!r}",
                path=str(path),
            )

    @staticmethod
    def _subdirs(path: Path) -> Iterator[Path]:
        if not path.is_dir():
            return iter(())
        return iter(sorted(p for p in path.iterdir() if p.is_dir()))

    @staticmethod
    def _yaml_files(path: Path) -> Iterator[Path]:
        if not path.is_dir():
            return iter(())
        return iter(sorted(p for p in path.iterdir() if p.is_file() and p.suffix == YAML_SUFFIX))

    # =========================================================================
    # FLAT SECTIONS
    # =========================================================================

    def _load_security(self) -> None:
        sec = self.root / "security"

        doc = self._read(sec / "principals.yaml", PrincipalListDoc)
        if doc:
            self.state.principals.extend(doc.principals)

        doc = self._read(sec / "groups.yaml", GroupListDoc)
        if doc:
            self.state.groups.extend(doc.groups)

        doc = self._read(sec / "grants.yaml", GrantListDoc)
        if doc:
            self.state.grants.extend(doc.grants)

        doc = self._read(sec / "api-keys.yaml", APIKeyListDoc)
        if doc:
            self.state.api_keys.extend(doc.api_keys)

    def _load_governance(self) -> None:
        doc = self._read(self.root / "governance" / "tags.yaml", TagConfigDoc)
        if doc:
            self.state.tags.extend(doc.tags)
            self.state.tag_assignments.extend(doc.assignments)

    def _load_storage(self) -> None:
        storage = self.root / "storage"

        doc = self._read(storage / "credentials.yaml", StorageCredentialListDoc)
        if doc:
            self.state.storage_credentials.extend(doc.credentials)

        doc = self._read(storage / "locations.yaml", ExternalLocationListDoc)
        if doc:
            self.state.external_locations.extend(doc.locations)

    def _load_compute(self) -> None:
        compute = self.root / "compute"

        doc = self._read(compute / "endpoints.yaml", ComputeEndpointListDoc)
        if doc:
            self.state.compute_endpoints.extend(doc.endpoints)

        doc = self._read(compute / "assignments.yaml", ComputeAssignmentListDoc)
        if doc:
            self.state.compute_assignments.extend(doc.assignments)

    # =========================================================================
    # CATALOG TREE
    # =========================================================================

    def _load_catalogs(self) -> None:
        for catalog_dir in self._subdirs(self.root / "catalogs"):
            catalog = catalog_dir.name
            path = catalog_dir / "catalog.yaml"
            doc = self._read(path, CatalogDoc)
            if doc:
                self._check_name(path, doc, catalog, "directory")
                self.state.catalogs.append(CatalogResource(
                    catalog_name=catalog,
                    deletion_protection=doc.metadata.deletion_protection,
                    spec=doc.spec,
                ))

            for schema_dir in self._subdirs(catalog_dir / "schemas"):
                self._load_schema(schema_dir, catalog)

    def _load_schema(self, schema_dir: Path, catalog: str) -> None:
        schema = schema_dir.name
        path = schema_dir / "schema.yaml"
        doc = self._read(path, SchemaDoc)
        if doc:
            self._check_name(path, doc, schema, "directory")
            self.state.schemas.append(SchemaResource(
                catalog_name=catalog,
                schema_name=schema,
                deletion_protection=doc.metadata.deletion_protection,
                spec=doc.spec,
            ))

        for table_dir in self._subdirs(schema_dir / "tables"):
            self._load_table(table_dir, catalog, schema)

        for path in self._yaml_files(schema_dir / "views"):
            view = self._read(path, ViewDoc)
            self._check_name(path, view, path.stem, "file")
            self.state.views.append(ViewResource(
                catalog_name=catalog, schema_name=schema, view_name=path.stem, spec=view.spec,
            ))

        for path in self._yaml_files(schema_dir / "volumes"):
            volume = self._read(path, VolumeDoc)
            self._check_name(path, volume, path.stem, "file")
            self.state.volumes.append(VolumeResource(
                catalog_name=catalog, schema_name=schema, volume_name=path.stem, spec=volume.spec,
            ))

    def _load_table(self, table_dir: Path, catalog: str, schema: str) -> None:
        table = table_dir.name
        path = table_dir / "table.yaml"
        doc = self._read(path, TableDoc)
        if doc:
            self._check_name(path, doc, table, "directory")
            self.state.tables.append(TableResource(
                catalog_name=catalog,
                schema_name=schema,
                table_name=table,
                deletion_protection=doc.metadata.deletion_protection,
                spec=doc.spec,
            ))

        filters = self._read(table_dir / "row-filters.yaml", RowFilterListDoc)
        if filters:
            self.state.row_filters.append(RowFilterResource(
                catalog_name=catalog, schema_name=schema, table_name=table, filters=filters.filters,
            ))

        masks = self._read(table_dir / "column-masks.yaml", ColumnMaskListDoc)
        if masks:
            self.state.column_masks.append(ColumnMaskResource(
                catalog_name=catalog, schema_name=schema, table_name=table, masks=masks.masks,
            ))

    # =========================================================================
    # NAMED FILES
    # =========================================================================

    def _load_notebooks(self) -> None:
        for path in self._yaml_files(self.root / "notebooks"):
            doc = self._read(path, NotebookDoc)
            self._check_name(path, doc, path.stem, "file")
            self.state.notebooks.append(NotebookResource(name=path.stem, spec=doc.spec))

    def _load_pipelines(self) -> None:
        for path in self._yaml_files(self.root / "pipelines"):
            doc = self._read(path, PipelineDoc)
            self._check_name(path, doc, path.stem, "file")
            self.state.pipelines.append(PipelineResource(name=path.stem, spec=doc.spec))

    def _load_macros(self) -> None:
        for path in self._yaml_files(self.root / "macros"):
            doc = self._read(path, MacroDoc)
            self._check_name(path, doc, path.stem, "file")
            self.state.macros.append(MacroResource(name=path.stem, spec=doc.spec))

    def _load_models(self) -> None:
        for project_dir in self._subdirs(self.root / "models"):
            self._load_models_recursive(project_dir, project_dir.name)

    def _load_models_recursive(self, directory: Path, project: str) -> None:
        # Sub-directories only organise files; they do not affect identity.
        for sub in self._subdirs(directory):
            self._load_models_recursive(sub, project)
        for path in self._yaml_files(directory):
            doc = self._read(path, ModelDoc)
            self._check_name(path, doc, path.stem, "file")
            self.state.models.append(ModelResource(
                project_name=project, model_name=path.stem, spec=doc.spec,
            ))


def _format_pydantic_error(error: PydanticValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(p) for p in err["loc"])
        parts.append(f"{location}: {err['msg']}" if location else err["msg"])
    return "; ".join(parts)


__all__ = ["LoadOptions", "load_directory"]
