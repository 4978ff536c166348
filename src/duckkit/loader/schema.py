"""
Document schemas for declarative YAML files.

Every file is one document with an ``apiVersion`` and a ``kind``. List
documents hold a collection under a kind-specific key; named documents
carry ``metadata`` and a ``spec`` body.
"""

from __future__ import annotations

from typing import Dict, List, Type

from pydantic import Field

from duckkit.models.base import BaseSpecModel
from duckkit.models.catalogs import CatalogSpec, SchemaSpec, TableSpec, ViewSpec, VolumeSpec
from duckkit.models.compute import ComputeAssignmentSpec, ComputeEndpointSpec
from duckkit.models.governance import TagAssignmentSpec, TagSpec
from duckkit.models.policies import ColumnMaskSpec, RowFilterSpec
from duckkit.models.security import APIKeySpec, GrantSpec, GroupSpec, PrincipalSpec
from duckkit.models.storage import ExternalLocationSpec, StorageCredentialSpec
from duckkit.models.transformations import MacroSpec, ModelSpec
from duckkit.models.workflows import NotebookSpec, PipelineSpec

API_VERSION = "duck/v1"

# =============================================================================
# ENVELOPES
# =============================================================================

class ObjectMeta(BaseSpecModel):
    name: str = ""
    deletion_protection: bool = False


class Document(BaseSpecModel):
    """Fields common to every document."""

    api_version: str = Field(default="", alias="apiVersion")
    kind: str = ""


class NamedDocument(Document):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)


# =============================================================================
# LIST DOCUMENTS
# =============================================================================

class PrincipalListDoc(Document):
    principals: List[PrincipalSpec] = Field(default_factory=list)


class GroupListDoc(Document):
    groups: List[GroupSpec] = Field(default_factory=list)


class GrantListDoc(Document):
    grants: List[GrantSpec] = Field(default_factory=list)


class APIKeyListDoc(Document):
    api_keys: List[APIKeySpec] = Field(default_factory=list)


class TagConfigDoc(Document):
    tags: List[TagSpec] = Field(default_factory=list)
    assignments: List[TagAssignmentSpec] = Field(default_factory=list)


class StorageCredentialListDoc(Document):
    credentials: List[StorageCredentialSpec] = Field(default_factory=list)


class ExternalLocationListDoc(Document):
    locations: List[ExternalLocationSpec] = Field(default_factory=list)


class ComputeEndpointListDoc(Document):
    endpoints: List[ComputeEndpointSpec] = Field(default_factory=list)


class ComputeAssignmentListDoc(Document):
    assignments: List[ComputeAssignmentSpec] = Field(default_factory=list)


class RowFilterListDoc(Document):
    filters: List[RowFilterSpec] = Field(default_factory=list)


class ColumnMaskListDoc(Document):
    masks: List[ColumnMaskSpec] = Field(default_factory=list)


# =============================================================================
# NAMED DOCUMENTS
# =============================================================================

class CatalogDoc(NamedDocument):
    spec: CatalogSpec = Field(default_factory=CatalogSpec)


class SchemaDoc(NamedDocument):
    spec: SchemaSpec = Field(default_factory=SchemaSpec)


class TableDoc(NamedDocument):
    spec: TableSpec = Field(default_factory=TableSpec)


class ViewDoc(NamedDocument):
    spec: ViewSpec = Field(default_factory=ViewSpec)


class VolumeDoc(NamedDocument):
    spec: VolumeSpec = Field(default_factory=VolumeSpec)


class NotebookDoc(NamedDocument):
    spec: NotebookSpec = Field(default_factory=NotebookSpec)


class PipelineDoc(NamedDocument):
    spec: PipelineSpec = Field(default_factory=PipelineSpec)


class MacroDoc(NamedDocument):
    spec: MacroSpec = Field(default_factory=MacroSpec)


class ModelDoc(NamedDocument):
    spec: ModelSpec = Field(default_factory=ModelSpec)


# Document kind expected by each schema class
DOCUMENT_KINDS: Dict[Type[Document], str] = {
    PrincipalListDoc: "PrincipalList",
    GroupListDoc: "GroupList",
    GrantListDoc: "GrantList",
    APIKeyListDoc: "APIKeyList",
    TagConfigDoc: "TagConfig",
    StorageCredentialListDoc: "StorageCredentialList",
    ExternalLocationListDoc: "ExternalLocationList",
    ComputeEndpointListDoc: "ComputeEndpointList",
    ComputeAssignmentListDoc: "ComputeAssignmentList",
    RowFilterListDoc: "RowFilterList",
    ColumnMaskListDoc: "ColumnMaskList",
    CatalogDoc: "Catalog",
    SchemaDoc: "Schema",
    TableDoc: "Table",
    ViewDoc: "View",
    VolumeDoc: "Volume",
    NotebookDoc: "Notebook",
    PipelineDoc: "Pipeline",
    MacroDoc: "Macro",
    ModelDoc: "Model",
}
