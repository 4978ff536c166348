"""
Executor modules for applying plan actions via the platform API.
"""

from .base import BaseExecutor, ExecutionResult, RelationshipExecutor
from .catalog import CatalogExecutor, SchemaExecutor, TableExecutor, ViewExecutor, VolumeExecutor
from .compute import ComputeAssignmentExecutor, ComputeEndpointExecutor
from .dispatcher import HANDLERS, Executor
from .policy import (
    ColumnMaskBindingExecutor,
    ColumnMaskExecutor,
    RowFilterBindingExecutor,
    RowFilterExecutor,
)
from .security import (
    APIKeyExecutor,
    GrantExecutor,
    GroupExecutor,
    GroupMembershipExecutor,
    PrincipalExecutor,
)
from .storage import ExternalLocationExecutor, StorageCredentialExecutor
from .tag import TagAssignmentExecutor, TagExecutor
from .transformation import MacroExecutor, ModelExecutor
from .workflow import NotebookExecutor, PipelineExecutor, PipelineJobExecutor

__all__ = [
    # Base classes
    'BaseExecutor',
    'ExecutionResult',
    'RelationshipExecutor',

    # Dispatch
    'Executor',
    'HANDLERS',

    # Security executors (layers 0-3)
    'PrincipalExecutor',
    'GroupExecutor',
    'GroupMembershipExecutor',
    'GrantExecutor',
    'APIKeyExecutor',

    # Catalog tree executors
    'CatalogExecutor',
    'SchemaExecutor',
    'TableExecutor',
    'ViewExecutor',
    'VolumeExecutor',

    # Policy executors
    'RowFilterExecutor',
    'ColumnMaskExecutor',
    'RowFilterBindingExecutor',
    'ColumnMaskBindingExecutor',

    # Governance executors
    'TagExecutor',
    'TagAssignmentExecutor',

    # Infrastructure executors
    'StorageCredentialExecutor',
    'ExternalLocationExecutor',
    'ComputeEndpointExecutor',
    'ComputeAssignmentExecutor',

    # Workflow executors
    'NotebookExecutor',
    'PipelineExecutor',
    'PipelineJobExecutor',

    # Transformation executors
    'MacroExecutor',
    'ModelExecutor',
]
