"""
Executors for the catalog tree: catalogs, schemas, tables, views and volumes.

Every level is addressed by name under its parent, e.g.
``/catalogs/{catalog}/schemas/{schema}/tables/{table}``.
"""

import logging
from typing import Any, Dict

from duckkit.models import (
    CatalogResource,
    SchemaResource,
    TableResource,
    ViewResource,
    VolumeResource,
)
from duckkit.models.enums import ResourceKind
from duckkit.plan import Action

from .base import BaseExecutor, ExecutionResult

logger = logging.getLogger(__name__)


def _schema_url(catalog: str, schema: str) -> str:
    return f"/catalogs/{catalog}/schemas/{schema}"


class CatalogExecutor(BaseExecutor[CatalogResource]):
    """Executor for catalog registrations."""

    resource_kind = ResourceKind.CATALOG_REGISTRATION

    @staticmethod
    def _payload(resource: CatalogResource) -> Dict[str, Any]:
        spec = resource.spec
        return {
            "name": resource.catalog_name,
            "metastore_type": spec.metastore_type,
            "dsn": spec.dsn,
            "data_path": spec.data_path,
            "is_default": spec.is_default,
            "comment": spec.comment,
        }

    def create(self, action: Action) -> ExecutionResult:
        resource: CatalogResource = action.desired
        return self._create(
            action, "/catalogs", self._payload(resource),
            lookup=lambda: self._get_or_none(f"/catalogs/{resource.catalog_name}"),
        )

    def update(self, action: Action) -> ExecutionResult:
        resource: CatalogResource = action.desired
        self.client.patch(f"/catalogs/{resource.catalog_name}", json=self._payload(resource))
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        resource: CatalogResource = action.actual
        self.client.delete(f"/catalogs/{resource.catalog_name}")
        self.index.forget(self.resource_kind, resource.path)
        return self._success(action, "Deleted successfully")


class SchemaExecutor(BaseExecutor[SchemaResource]):
    """Executor for schema operations."""

    resource_kind = ResourceKind.SCHEMA
    id_fields = ("schema_id",)

    @staticmethod
    def _payload(resource: SchemaResource) -> Dict[str, Any]:
        spec = resource.spec
        return {
            "name": resource.schema_name,
            "comment": spec.comment,
            "owner": spec.owner,
            "location_name": spec.location_name,
            "properties": dict(spec.properties),
        }

    def create(self, action: Action) -> ExecutionResult:
        resource: SchemaResource = action.desired
        return self._create(
            action, f"/catalogs/{resource.catalog_name}/schemas", self._payload(resource),
            lookup=lambda: self._get_or_none(_schema_url(resource.catalog_name, resource.schema_name)),
        )

    def update(self, action: Action) -> ExecutionResult:
        resource: SchemaResource = action.desired
        self.client.patch(_schema_url(resource.catalog_name, resource.schema_name), json=self._payload(resource))
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        resource: SchemaResource = action.actual
        self.client.delete(_schema_url(resource.catalog_name, resource.schema_name))
        self.index.forget(self.resource_kind, resource.path)
        return self._success(action, "Deleted successfully")


class TableExecutor(BaseExecutor[TableResource]):
    """Executor for managed and external tables."""

    resource_kind = ResourceKind.TABLE
    id_fields = ("table_id",)

    @staticmethod
    def _payload(resource: TableResource) -> Dict[str, Any]:
        spec = resource.spec
        payload: Dict[str, Any] = {
            "name": resource.table_name,
            "table_type": spec.table_type,
            "comment": spec.comment,
            "owner": spec.owner,
            "columns": [
                {"name": c.name, "type": c.type, "comment": c.comment} for c in spec.columns
            ],
            "properties": dict(spec.properties),
        }
        if spec.table_type == "EXTERNAL":
            payload["source_path"] = spec.source_path
            payload["file_format"] = spec.file_format
            payload["location_name"] = spec.location_name
        return payload

    def create(self, action: Action) -> ExecutionResult:
        resource: TableResource = action.desired
        base = _schema_url(resource.catalog_name, resource.schema_name)
        return self._create(
            action, f"{base}/tables", self._payload(resource),
            lookup=lambda: self._get_or_none(f"{base}/tables/{resource.table_name}"),
        )

    def update(self, action: Action) -> ExecutionResult:
        resource: TableResource = action.desired
        base = _schema_url(resource.catalog_name, resource.schema_name)
        self.client.patch(f"{base}/tables/{resource.table_name}", json=self._payload(resource))
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        resource: TableResource = action.actual
        base = _schema_url(resource.catalog_name, resource.schema_name)
        self.client.delete(f"{base}/tables/{resource.table_name}")
        self.index.forget(self.resource_kind, resource.path)
        return self._success(action, "Deleted successfully")


class ViewExecutor(BaseExecutor[ViewResource]):
    resource_kind = ResourceKind.VIEW

    @staticmethod
    def _payload(resource: ViewResource) -> Dict[str, Any]:
        spec = resource.spec
        return {
            "name": resource.view_name,
            "view_definition": spec.view_definition,
            "comment": spec.comment,
            "owner": spec.owner,
            "properties": dict(spec.properties),
        }

    def create(self, action: Action) -> ExecutionResult:
        resource: ViewResource = action.desired
        base = _schema_url(resource.catalog_name, resource.schema_name)
        return self._create(
            action, f"{base}/views", self._payload(resource),
            lookup=lambda: self._get_or_none(f"{base}/views/{resource.view_name}"),
        )

    def update(self, action: Action) -> ExecutionResult:
        resource: ViewResource = action.desired
        base = _schema_url(resource.catalog_name, resource.schema_name)
        self.client.patch(f"{base}/views/{resource.view_name}", json=self._payload(resource))
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        resource: ViewResource = action.actual
        base = _schema_url(resource.catalog_name, resource.schema_name)
        self.client.delete(f"{base}/views/{resource.view_name}")
        self.index.forget(self.resource_kind, resource.path)
        return self._success(action, "Deleted successfully")


class VolumeExecutor(BaseExecutor[VolumeResource]):
    resource_kind = ResourceKind.VOLUME

    @staticmethod
    def _payload(resource: VolumeResource) -> Dict[str, Any]:
        spec = resource.spec
        return {
            "name": resource.volume_name,
            "volume_type": spec.volume_type,
            "storage_location": spec.storage_location,
            "comment": spec.comment,
            "owner": spec.owner,
        }

    def create(self, action: Action) -> ExecutionResult:
        resource: VolumeResource = action.desired
        base = _schema_url(resource.catalog_name, resource.schema_name)
        return self._create(
            action, f"{base}/volumes", self._payload(resource),
            lookup=lambda: self._get_or_none(f"{base}/volumes/{resource.volume_name}"),
        )

    def update(self, action: Action) -> ExecutionResult:
        resource: VolumeResource = action.desired
        base = _schema_url(resource.catalog_name, resource.schema_name)
        self.client.patch(f"{base}/volumes/{resource.volume_name}", json=self._payload(resource))
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        resource: VolumeResource = action.actual
        base = _schema_url(resource.catalog_name, resource.schema_name)
        self.client.delete(f"{base}/volumes/{resource.volume_name}")
        self.index.forget(self.resource_kind, resource.path)
        return self._success(action, "Deleted successfully")
