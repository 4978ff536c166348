"""
Action dispatch: routes each plan action to the handler for its kind.
"""

import logging
from typing import Dict, List, Type

from duckkit.client import APIClient
from duckkit.index import ResourceIndex
from duckkit.models.enums import ResourceKind
from duckkit.plan import Action

from .base import BaseExecutor, ExecutionResult
from .catalog import CatalogExecutor, SchemaExecutor, TableExecutor, ViewExecutor, VolumeExecutor
from .compute import ComputeAssignmentExecutor, ComputeEndpointExecutor
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

logger = logging.getLogger(__name__)

HANDLERS: List[Type[BaseExecutor]] = [
    PrincipalExecutor,
    GroupExecutor,
    GroupMembershipExecutor,
    GrantExecutor,
    APIKeyExecutor,
    CatalogExecutor,
    SchemaExecutor,
    TableExecutor,
    ViewExecutor,
    VolumeExecutor,
    RowFilterExecutor,
    ColumnMaskExecutor,
    RowFilterBindingExecutor,
    ColumnMaskBindingExecutor,
    TagExecutor,
    TagAssignmentExecutor,
    StorageCredentialExecutor,
    ExternalLocationExecutor,
    ComputeEndpointExecutor,
    ComputeAssignmentExecutor,
    NotebookExecutor,
    PipelineExecutor,
    PipelineJobExecutor,
    MacroExecutor,
    ModelExecutor,
]


class Executor:
    """
    Executes plan actions against the platform, one at a time.

    Usage:
        executor = Executor(client, reader.index)
        for action in plan.actions:
            result = executor.execute(action)
    """

    def __init__(self, client: APIClient, index: ResourceIndex):
        self.client = client
        self.index = index
        self._handlers: Dict[ResourceKind, BaseExecutor] = {
            cls.resource_kind: cls(client, index) for cls in HANDLERS
        }

    def handler_for(self, kind: ResourceKind) -> BaseExecutor:
        return self._handlers[kind]

    def execute(self, action: Action) -> ExecutionResult:
        """
        Execute one action.

        Returns:
            ExecutionResult; failures are reported in the result, not raised
        """
        return self.handler_for(action.resource_kind).execute(action)


__all__ = ["Executor", "HANDLERS"]
