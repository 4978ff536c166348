"""
Aggregate state: the full set of declared (or observed) resources.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import List

from .catalogs import CatalogResource, SchemaResource, TableResource, ViewResource, VolumeResource
from .compute import ComputeAssignmentSpec, ComputeEndpointSpec
from .governance import TagAssignmentSpec, TagSpec
from .policies import ColumnMaskResource, RowFilterResource
from .security import APIKeySpec, GrantSpec, GroupSpec, PrincipalSpec
from .storage import ExternalLocationSpec, StorageCredentialSpec
from .transformations import MacroResource, ModelResource
from .workflows import NotebookResource, PipelineResource


@dataclass
class DesiredState:
    """
    One list per resource collection.

    The same type carries the server's actual state after a read. Order of
    entries carries no meaning.
    """

    principals: List[PrincipalSpec] = field(default_factory=list)
    groups: List[GroupSpec] = field(default_factory=list)
    grants: List[GrantSpec] = field(default_factory=list)
    api_keys: List[APIKeySpec] = field(default_factory=list)

    catalogs: List[CatalogResource] = field(default_factory=list)
    schemas: List[SchemaResource] = field(default_factory=list)
    tables: List[TableResource] = field(default_factory=list)
    views: List[ViewResource] = field(default_factory=list)
    volumes: List[VolumeResource] = field(default_factory=list)

    row_filters: List[RowFilterResource] = field(default_factory=list)
    column_masks: List[ColumnMaskResource] = field(default_factory=list)

    tags: List[TagSpec] = field(default_factory=list)
    tag_assignments: List[TagAssignmentSpec] = field(default_factory=list)

    storage_credentials: List[StorageCredentialSpec] = field(default_factory=list)
    external_locations: List[ExternalLocationSpec] = field(default_factory=list)

    compute_endpoints: List[ComputeEndpointSpec] = field(default_factory=list)
    compute_assignments: List[ComputeAssignmentSpec] = field(default_factory=list)

    notebooks: List[NotebookResource] = field(default_factory=list)
    pipelines: List[PipelineResource] = field(default_factory=list)

    macros: List[MacroResource] = field(default_factory=list)
    models: List[ModelResource] = field(default_factory=list)

    def is_empty(self) -> bool:
        return all(not getattr(self, f.name) for f in fields(self))


ActualState = DesiredState
