"""
Resource model for declarative platform configuration.

Re-exports every spec and resource type together with the kind enums.
"""

from .base import ALLOW_UNKNOWN_FIELDS, BaseSpecModel
from .catalogs import (
    CatalogResource,
    CatalogSpec,
    ColumnDef,
    SchemaResource,
    SchemaSpec,
    TableResource,
    TableSpec,
    ViewResource,
    ViewSpec,
    VolumeResource,
    VolumeSpec,
)
from .compute import ComputeAssignmentSpec, ComputeEndpointSpec
from .enums import Operation, ResourceKind
from .governance import TagAssignmentSpec, TagSpec
from .policies import (
    ColumnMaskResource,
    ColumnMaskSpec,
    FilterBindingRef,
    MaskBindingRef,
    RowFilterResource,
    RowFilterSpec,
)
from .security import APIKeySpec, GrantSpec, GroupSpec, MemberRef, PrincipalSpec
from .state import ActualState, DesiredState
from .storage import (
    AzureCredentialSpec,
    ExternalLocationSpec,
    GCSCredentialSpec,
    S3CredentialSpec,
    StorageCredentialSpec,
)
from .transformations import (
    ContractColumn,
    ContractSpec,
    FreshnessSpec,
    MacroResource,
    MacroSpec,
    ModelConfigSpec,
    ModelResource,
    ModelSpec,
    ModelTestSpec,
)
from .workflows import (
    CellSpec,
    NotebookResource,
    NotebookSpec,
    PipelineJobSpec,
    PipelineResource,
    PipelineSpec,
)

__all__ = [
    "ALLOW_UNKNOWN_FIELDS",
    "APIKeySpec",
    "ActualState",
    "AzureCredentialSpec",
    "BaseSpecModel",
    "CatalogResource",
    "CatalogSpec",
    "CellSpec",
    "ColumnDef",
    "ColumnMaskResource",
    "ColumnMaskSpec",
    "ComputeAssignmentSpec",
    "ComputeEndpointSpec",
    "ContractColumn",
    "ContractSpec",
    "DesiredState",
    "ExternalLocationSpec",
    "FilterBindingRef",
    "FreshnessSpec",
    "GCSCredentialSpec",
    "GrantSpec",
    "GroupSpec",
    "MacroResource",
    "MacroSpec",
    "MaskBindingRef",
    "MemberRef",
    "ModelConfigSpec",
    "ModelResource",
    "ModelSpec",
    "ModelTestSpec",
    "NotebookResource",
    "NotebookSpec",
    "Operation",
    "PipelineJobSpec",
    "PipelineResource",
    "PipelineSpec",
    "PrincipalSpec",
    "ResourceKind",
    "RowFilterResource",
    "RowFilterSpec",
    "S3CredentialSpec",
    "SchemaResource",
    "SchemaSpec",
    "StorageCredentialSpec",
    "TableResource",
    "TableSpec",
    "TagAssignmentSpec",
    "TagSpec",
    "ViewResource",
    "ViewSpec",
    "VolumeResource",
    "VolumeSpec",
]
