"""
Enum definitions for the declarative resource model.

ResourceKind drives plan ordering: kinds are grouped into dependency layers
and, inside a layer, ordered by their declaration order below. The remaining
enums enumerate the values the validator accepts for spec fields.
"""

from enum import Enum
from typing import Dict, FrozenSet, Type


class ResourceKind(str, Enum):
    """Every resource type the engine can plan and apply."""
    # Layer 0: no dependencies
    PRINCIPAL = "principal"
    CATALOG_REGISTRATION = "catalog-registration"
    STORAGE_CREDENTIAL = "storage-credential"
    EXTERNAL_LOCATION = "external-location"
    COMPUTE_ENDPOINT = "compute-endpoint"
    TAG = "tag"
    NOTEBOOK = "notebook"
    MACRO = "macro"

    # Layer 1
    GROUP = "group"
    SCHEMA = "schema"
    API_KEY = "api-key"
    PIPELINE = "pipeline"

    # Layer 2
    GROUP_MEMBERSHIP = "group-membership"
    TABLE = "table"
    VIEW = "view"
    VOLUME = "volume"
    COMPUTE_ASSIGNMENT = "compute-assignment"
    PIPELINE_JOB = "pipeline-job"
    MODEL = "model"

    # Layer 3
    PRIVILEGE_GRANT = "privilege-grant"
    TAG_ASSIGNMENT = "tag-assignment"
    ROW_FILTER = "row-filter"
    COLUMN_MASK = "column-mask"

    # Layer 4
    ROW_FILTER_BINDING = "row-filter-binding"
    COLUMN_MASK_BINDING = "column-mask-binding"

    @property
    def layer(self) -> int:
        """Dependency layer; a kind only references kinds in lower layers."""
        return _LAYERS[self]

    @property
    def ordinal(self) -> int:
        """Declaration position, used to break ties within a layer."""
        return _ORDINALS[self]

    @property
    def sort_key(self):
        return (self.layer, self.ordinal)


_LAYERS: Dict[ResourceKind, int] = {
    ResourceKind.PRINCIPAL: 0,
    ResourceKind.CATALOG_REGISTRATION: 0,
    ResourceKind.STORAGE_CREDENTIAL: 0,
    ResourceKind.EXTERNAL_LOCATION: 0,
    ResourceKind.COMPUTE_ENDPOINT: 0,
    ResourceKind.TAG: 0,
    ResourceKind.NOTEBOOK: 0,
    ResourceKind.MACRO: 0,
    ResourceKind.GROUP: 1,
    ResourceKind.SCHEMA: 1,
    ResourceKind.API_KEY: 1,
    ResourceKind.PIPELINE: 1,
    ResourceKind.GROUP_MEMBERSHIP: 2,
    ResourceKind.TABLE: 2,
    ResourceKind.VIEW: 2,
    ResourceKind.VOLUME: 2,
    ResourceKind.COMPUTE_ASSIGNMENT: 2,
    ResourceKind.PIPELINE_JOB: 2,
    ResourceKind.MODEL: 2,
    ResourceKind.PRIVILEGE_GRANT: 3,
    ResourceKind.TAG_ASSIGNMENT: 3,
    ResourceKind.ROW_FILTER: 3,
    ResourceKind.COLUMN_MASK: 3,
    ResourceKind.ROW_FILTER_BINDING: 4,
    ResourceKind.COLUMN_MASK_BINDING: 4,
}

_ORDINALS: Dict[ResourceKind, int] = {kind: i for i, kind in enumerate(ResourceKind)}


class Operation(str, Enum):
    """What an action does to a resource."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


# =============================================================================
# FIELD VALUE ENUMS
# =============================================================================

class PrincipalType(str, Enum):
    USER = "user"
    SERVICE_PRINCIPAL = "service_principal"


class MemberType(str, Enum):
    USER = "user"
    GROUP = "group"


class GrantPrincipalType(str, Enum):
    """Principal types that can receive grants and policy bindings."""
    USER = "user"
    GROUP = "group"


class SecurableType(str, Enum):
    CATALOG = "catalog"
    SCHEMA = "schema"
    TABLE = "table"
    EXTERNAL_LOCATION = "external_location"
    STORAGE_CREDENTIAL = "storage_credential"
    VOLUME = "volume"


class Privilege(str, Enum):
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    USAGE = "USAGE"
    CREATE_TABLE = "CREATE_TABLE"
    CREATE_SCHEMA = "CREATE_SCHEMA"
    ALL_PRIVILEGES = "ALL_PRIVILEGES"
    CREATE_EXTERNAL_LOCATION = "CREATE_EXTERNAL_LOCATION"
    CREATE_STORAGE_CREDENTIAL = "CREATE_STORAGE_CREDENTIAL"
    CREATE_VOLUME = "CREATE_VOLUME"
    READ_VOLUME = "READ_VOLUME"
    WRITE_VOLUME = "WRITE_VOLUME"
    READ_FILES = "READ_FILES"
    WRITE_FILES = "WRITE_FILES"
    MANAGE_COMPUTE = "MANAGE_COMPUTE"
    MANAGE_PIPELINES = "MANAGE_PIPELINES"


class MetastoreType(str, Enum):
    SQLITE = "sqlite"
    POSTGRES = "postgres"


class TableType(str, Enum):
    MANAGED = "MANAGED"
    EXTERNAL = "EXTERNAL"


class VolumeType(str, Enum):
    MANAGED = "MANAGED"
    EXTERNAL = "EXTERNAL"


class CredentialType(str, Enum):
    S3 = "S3"
    AZURE = "AZURE"
    GCS = "GCS"


class ComputeType(str, Enum):
    LOCAL = "LOCAL"
    REMOTE = "REMOTE"


class CellType(str, Enum):
    SQL = "sql"
    MARKDOWN = "markdown"


class TagSecurableType(str, Enum):
    SCHEMA = "schema"
    TABLE = "table"
    COLUMN = "column"


class Materialization(str, Enum):
    VIEW = "VIEW"
    TABLE = "TABLE"
    INCREMENTAL = "INCREMENTAL"
    EPHEMERAL = "EPHEMERAL"


class ModelTestType(str, Enum):
    NOT_NULL = "not_null"
    UNIQUE = "unique"
    ACCEPTED_VALUES = "accepted_values"
    RELATIONSHIPS = "relationships"
    CUSTOM_SQL = "custom_sql"


class MacroType(str, Enum):
    SCALAR = "SCALAR"
    TABLE = "TABLE"


def allowed_values(enum_cls: Type[Enum]) -> FrozenSet[str]:
    """Accepted string values for an enum, as used by the validator."""
    return frozenset(member.value for member in enum_cls)
