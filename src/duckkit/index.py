"""
Resource index: the session's name-to-identifier map.

The server addresses most relationships by opaque identifiers while the
configuration uses names and paths. The index is populated while reading
state and extended as creates return new identifiers. It lives for one
plan/apply session and is never persisted.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from duckkit.errors import ResolutionError
from duckkit.models.enums import ResourceKind

logger = logging.getLogger(__name__)

# Kinds whose identifiers other resources reference
INDEXED_KINDS = (
    ResourceKind.PRINCIPAL,
    ResourceKind.GROUP,
    ResourceKind.CATALOG_REGISTRATION,
    ResourceKind.SCHEMA,
    ResourceKind.TABLE,
    ResourceKind.VIEW,
    ResourceKind.VOLUME,
    ResourceKind.STORAGE_CREDENTIAL,
    ResourceKind.EXTERNAL_LOCATION,
    ResourceKind.TAG,
    ResourceKind.ROW_FILTER,
    ResourceKind.COLUMN_MASK,
    ResourceKind.COMPUTE_ENDPOINT,
    ResourceKind.COMPUTE_ASSIGNMENT,
    ResourceKind.NOTEBOOK,
    ResourceKind.PIPELINE,
    ResourceKind.PIPELINE_JOB,
    ResourceKind.API_KEY,
    ResourceKind.MACRO,
    ResourceKind.MODEL,
)

# Grant securable types to the kind whose index holds them
SECURABLE_KINDS = {
    "catalog": ResourceKind.CATALOG_REGISTRATION,
    "schema": ResourceKind.SCHEMA,
    "table": ResourceKind.TABLE,
    "volume": ResourceKind.VOLUME,
    "external_location": ResourceKind.EXTERNAL_LOCATION,
    "storage_credential": ResourceKind.STORAGE_CREDENTIAL,
}

# Column tags are addressed through their table
TAG_SECURABLE_KINDS = {
    "schema": ResourceKind.SCHEMA,
    "table": ResourceKind.TABLE,
    "column": ResourceKind.TABLE,
}


class ResourceIndex:
    """
    Forward and reverse maps between identity paths and server identifiers.

    Not thread-safe; owned by a single session.
    """

    def __init__(self) -> None:
        self._ids: Dict[ResourceKind, Dict[str, str]] = {kind: {} for kind in INDEXED_KINDS}
        self._names: Dict[ResourceKind, Dict[str, str]] = {kind: {} for kind in INDEXED_KINDS}

    def register(self, kind: ResourceKind, path: str, identifier: object) -> None:
        """Record an identifier; empty identifiers are ignored."""
        if identifier is None or identifier == "":
            return
        identifier = str(identifier)
        self._ids[kind][path] = identifier
        self._names[kind][identifier] = path

    def forget(self, kind: ResourceKind, path: str) -> None:
        identifier = self._ids[kind].pop(path, None)
        if identifier is not None:
            self._names[kind].pop(identifier, None)

    def lookup(self, kind: ResourceKind, path: str) -> Optional[str]:
        return self._ids[kind].get(path)

    def resolve(self, kind: ResourceKind, path: str) -> str:
        """
        Resolve a path to its identifier.

        Raises:
            ResolutionError: If the path is not indexed
        """
        identifier = self._ids[kind].get(path)
        if identifier is None:
            raise ResolutionError(kind.value, path)
        return identifier

    def name_for(self, kind: ResourceKind, identifier: object) -> Optional[str]:
        """Reverse lookup of an identifier to its path."""
        if identifier is None or identifier == "":
            return None
        return self._names[kind].get(str(identifier))

    # Principals and groups share one reference namespace keyed by type

    @staticmethod
    def principal_kind(principal_type: str) -> ResourceKind:
        if principal_type == "group":
            return ResourceKind.GROUP
        return ResourceKind.PRINCIPAL

    def resolve_principal(self, name: str, principal_type: str) -> str:
        return self.resolve(self.principal_kind(principal_type), name)

    def principal_name_for(self, identifier: object, principal_type: str) -> Optional[str]:
        return self.name_for(self.principal_kind(principal_type), identifier)

    def __len__(self) -> int:
        return sum(len(m) for m in self._ids.values())


__all__ = ["INDEXED_KINDS", "SECURABLE_KINDS", "TAG_SECURABLE_KINDS", "ResourceIndex"]
