"""
Base executor class for platform operations.

Provides the shared machinery every kind handler relies on: timing, error
classification, identifier registration, conflict adoption, reference
resolution and secret lookup.
"""

import logging
import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from duckkit.client import APIClient, is_conflict, is_not_found
from duckkit.errors import APIError, ConfigError, ExecutionError, ResolutionError
from duckkit.index import ResourceIndex
from duckkit.models.enums import Operation, ResourceKind
from duckkit.plan import Action
from duckkit.reader import row_id

logger = logging.getLogger(__name__)

T = TypeVar('T')  # Spec type carried by the actions a handler accepts

Row = Dict[str, Any]


@dataclass
class ExecutionResult:
    """Result of executing one action."""

    success: bool
    operation: Operation
    resource_type: str
    resource_name: str
    message: str = ""
    error: Optional[Exception] = None
    duration_seconds: float = 0.0
    changes: Dict[str, Any] = field(default_factory=dict)
    adopted: bool = False  # create found the resource already present

    def __str__(self) -> str:
        """String representation of the result."""
        status = "✅" if self.success else "❌"
        return (
            f"{status} {self.operation.value} {self.resource_type} "
            f"{self.resource_name}: {self.message}"
        )


class BaseExecutor(ABC, Generic[T]):
    """
    Base class for all kind handlers.

    Subclasses set ``resource_kind`` (and ``id_fields`` when the server's
    create response names its identifier something other than ``id``) and
    implement create, update and delete for one kind.
    """

    resource_kind: ResourceKind
    id_fields: tuple = ()

    def __init__(self, client: APIClient, index: ResourceIndex):
        """
        Initialize the executor.

        Args:
            client: API client of the current session
            index: Session index used to resolve and record identifiers
        """
        self.client = client
        self.index = index
        self.results: List[ExecutionResult] = []

    @abstractmethod
    def create(self, action: Action) -> ExecutionResult:
        """
        Create the resource described by ``action.desired``.

        Args:
            action: The create action

        Returns:
            ExecutionResult indicating success
        """
        pass

    @abstractmethod
    def update(self, action: Action) -> ExecutionResult:
        """
        Bring an existing resource in line with ``action.desired``.

        Args:
            action: The update action

        Returns:
            ExecutionResult indicating success
        """
        pass

    @abstractmethod
    def delete(self, action: Action) -> ExecutionResult:
        """
        Delete the resource described by ``action.actual``.

        Args:
            action: The delete action

        Returns:
            ExecutionResult indicating success
        """
        pass

    def get_resource_type(self) -> str:
        """Get the type of resource this executor handles."""
        return self.resource_kind.value

    def execute(self, action: Action) -> ExecutionResult:
        """
        Run one action; failures are returned, never raised.

        Args:
            action: Action whose kind matches this handler

        Returns:
            ExecutionResult with timing filled in
        """
        start_time = time.time()
        operations: Dict[Operation, Callable[[Action], ExecutionResult]] = {
            Operation.CREATE: self.create,
            Operation.UPDATE: self.update,
            Operation.DELETE: self.delete,
        }
        try:
            result = operations[action.operation](action)
        except Exception as e:
            return self._handle_error(action, e, start_time)

        result.duration_seconds = time.time() - start_time
        if action.changes:
            result.changes = {c.field: c.new_value for c in action.changes}
        self.results.append(result)
        logger.info(f"{result}")
        return result

    def _success(self, action: Action, message: str) -> ExecutionResult:
        return ExecutionResult(
            success=True,
            operation=action.operation,
            resource_type=self.get_resource_type(),
            resource_name=action.resource_name,
            message=message,
        )

    def _handle_error(self, action: Action, error: Exception, start_time: float) -> ExecutionResult:
        """
        Record a failed action.

        Args:
            action: The action that failed
            error: The exception that occurred
            start_time: When the action started

        Returns:
            ExecutionResult with error details
        """
        if isinstance(error, APIError) and error.status_code == 403:
            message = f"Permission denied: {error}. Check that the session's principal holds the required privileges."
        elif isinstance(error, APIError) and error.status_code == 404:
            message = f"Resource not found: {error}"
        elif isinstance(error, APIError) and error.status_code == 409:
            message = f"Resource already exists: {error}"
        elif isinstance(error, APIError) and error.status_code == 400:
            message = f"Invalid parameter: {error}. Check input values."
        elif isinstance(error, APIError) and error.status_code == 401:
            message = f"Authentication failed: {error}. Check credentials and host."
        elif isinstance(error, ResolutionError):
            message = f"Unresolved reference: {error}"
        else:
            message = str(error)

        wrapped = ExecutionError(
            self.get_resource_type(), action.resource_name, action.operation.value, error
        )
        result = ExecutionResult(
            success=False,
            operation=action.operation,
            resource_type=self.get_resource_type(),
            resource_name=action.resource_name,
            message=message,
            error=wrapped,
            duration_seconds=time.time() - start_time,
        )

        self.results.append(result)
        logger.error(f"Operation failed: {result}")
        return result

    # =========================================================================
    # CREATE HELPERS
    # =========================================================================

    def _register(self, path: str, row: Row) -> None:
        """Record the identifier from a response; a response without one is fine."""
        self.index.register(self.resource_kind, path, row_id(row, *self.id_fields))

    def _create(
        self,
        action: Action,
        url: str,
        payload: Row,
        lookup: Callable[[], Optional[Row]],
        path: Optional[str] = None,
    ) -> ExecutionResult:
        """
        POST a new resource, adopting an existing one on conflict.

        Args:
            action: The create action
            url: Collection endpoint
            payload: Request body
            lookup: Fetches the existing resource after a conflict
            path: Identity path to index under (defaults to the action name)

        Raises:
            APIError: If the create fails and no existing resource is found
        """
        path = path or action.resource_name
        try:
            response = self.client.post(url, json=payload)
        except APIError as e:
            if not is_conflict(e):
                raise
            existing = lookup()
            if existing is None:
                raise
            self._register(path, existing)
            logger.warning(f"{self.get_resource_type()} {path!r} already exists; adopted existing resource")
            result = self._success(action, "Already exists (adopted)")
            result.adopted = True
            return result

        self._register(path, response)
        return self._success(action, "Created successfully")

    def _identifier(self, path: str, lookup: Callable[[], Optional[Row]]) -> str:
        """
        Identifier of a resource this handler just created or adopted.

        Falls back to ``lookup`` when the create response carried no identifier.

        Raises:
            ResolutionError: If neither the response nor the lookup names one
        """
        if self.index.lookup(self.resource_kind, path) is None:
            row = lookup()
            if row is not None:
                self._register(path, row)
        return self.index.resolve(self.resource_kind, path)

    def _create_relationship(self, action: Action, url: str, payload: Row) -> ExecutionResult:
        """POST a relationship row; one that already exists counts as created."""
        try:
            self.client.post(url, json=payload)
        except APIError as e:
            if not is_conflict(e):
                raise
            logger.warning(f"{self.get_resource_type()} {action.resource_name!r} already exists")
            return self._success(action, "Already exists")
        return self._success(action, "Created successfully")

    def _get_or_none(self, url: str) -> Optional[Row]:
        try:
            return self.client.get(url)
        except APIError as e:
            if is_not_found(e):
                return None
            raise

    def _find(self, url: str, match: Callable[[Row], bool]) -> Optional[Row]:
        for row in self.client.list_all(url):
            if match(row):
                return row
        return None

    def _find_by_name(self, url: str, name: str) -> Optional[Row]:
        return self._find(url, lambda row: row.get("name") == name)

    # =========================================================================
    # RESOLUTION
    # =========================================================================

    def resolve(self, kind: ResourceKind, path: str) -> str:
        """
        Resolve a reference, hydrating catalog tree entries on a miss.

        Raises:
            ResolutionError: If the reference cannot be found
        """
        identifier = self.index.lookup(kind, path)
        if identifier is not None:
            return identifier
        if kind in _HYDRATED_KINDS:
            self._hydrate(kind, path)
        return self.index.resolve(kind, path)

    def resolve_principal(self, name: str, principal_type: str) -> str:
        return self.index.resolve_principal(name, principal_type)

    def _hydrate(self, kind: ResourceKind, path: str) -> None:
        depth, id_field = _HYDRATED_KINDS[kind]
        parts = path.split(".")
        if len(parts) != depth or not all(parts):
            raise ResolutionError(kind.value, path)

        url = f"/catalogs/{parts[0]}"
        if depth > 1:
            url += f"/schemas/{parts[1]}"
        if depth > 2:
            url += f"/tables/{parts[2]}"

        try:
            row = self.client.get(url)
        except APIError as e:
            if is_not_found(e):
                raise ResolutionError(kind.value, path) from e
            raise
        logger.debug(f"Hydrated {kind.value} {path!r} from {url}")
        self.index.register(kind, path, row_id(row, id_field) if id_field else row_id(row))

    # =========================================================================
    # SECRETS
    # =========================================================================

    @staticmethod
    def secret_from_env(variable: str) -> Optional[str]:
        """
        Read a secret named by a ``*_from_env`` field.

        Returns:
            The value, or None when no variable is configured

        Raises:
            ConfigError: If the variable is configured but not set
        """
        if not variable:
            return None
        value = os.environ.get(variable)
        if not value:
            raise ConfigError(f"environment variable {variable!r} is not set")
        return value


class RelationshipExecutor(BaseExecutor[T]):
    """Handlers for rows that can only be created or deleted."""

    def update(self, action: Action) -> ExecutionResult:
        raise NotImplementedError(f"{self.get_resource_type()} cannot be updated in place")


# Catalog tree kinds that can be fetched by path: (path depth, id field)
_HYDRATED_KINDS = {
    ResourceKind.CATALOG_REGISTRATION: (1, ""),
    ResourceKind.SCHEMA: (2, "schema_id"),
    ResourceKind.TABLE: (3, "table_id"),
}
