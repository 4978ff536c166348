"""
SQL transformation resources: macros and models.

Models are grouped by project; their data tests are reconciled as part of
the model rather than as separate plan actions.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field, ValidationInfo, field_validator

from .base import BaseSpecModel, or_server_default
from .enums import MacroType, Materialization

# Stored by the server when a macro leaves these unset
DEFAULT_MACRO_VISIBILITY = "project"
DEFAULT_MACRO_STATUS = "ACTIVE"

# =============================================================================
# MACRO
# =============================================================================

class MacroSpec(BaseSpecModel):
    macro_type: str = MacroType.SCALAR.value
    parameters: List[str] = Field(default_factory=list)
    body: str = ""
    description: str = ""
    catalog_name: str = ""
    project_name: str = ""
    visibility: str = DEFAULT_MACRO_VISIBILITY
    owner: str = ""
    properties: Dict[str, str] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    status: str = DEFAULT_MACRO_STATUS

    @field_validator("macro_type", "visibility", "status", mode="before")
    @classmethod
    def _server_defaults(cls, v: Any, info: ValidationInfo) -> Any:
        defaults = {
            "macro_type": MacroType.SCALAR.value,
            "visibility": DEFAULT_MACRO_VISIBILITY,
            "status": DEFAULT_MACRO_STATUS,
        }
        return or_server_default(v, defaults[info.field_name])


class MacroResource(BaseSpecModel):
    name: str
    spec: MacroSpec = Field(default_factory=MacroSpec)

    @property
    def path(self) -> str:
        return self.name


# =============================================================================
# MODEL
# =============================================================================

class ModelConfigSpec(BaseSpecModel):
    unique_key: List[str] = Field(default_factory=list)
    incremental_strategy: str = ""
    on_schema_change: str = ""


class ContractColumn(BaseSpecModel):
    name: str = ""
    type: str = ""
    nullable: bool = True


class ContractSpec(BaseSpecModel):
    enforce: bool = False
    columns: List[ContractColumn] = Field(default_factory=list)


class ModelTestSpec(BaseSpecModel):
    """A data test attached to a model; required fields depend on ``type``."""

    name: str = ""
    type: str = ""
    column: str = ""
    values: List[str] = Field(default_factory=list)
    to_model: str = ""
    to_column: str = ""
    sql: str = ""

    def signature(self) -> Dict[str, Any]:
        """Comparable form of the test, independent of server identifiers."""
        return {
            "name": self.name,
            "type": self.type,
            "column": self.column,
            "values": list(self.values),
            "to_model": self.to_model,
            "to_column": self.to_column,
            "sql": self.sql,
        }


class FreshnessSpec(BaseSpecModel):
    max_lag_seconds: int = 0
    cron_schedule: str = ""


class ModelSpec(BaseSpecModel):
    materialization: str = Materialization.VIEW.value
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    sql: str = ""
    config: Optional[ModelConfigSpec] = None
    contract: Optional[ContractSpec] = None
    tests: List[ModelTestSpec] = Field(default_factory=list)
    freshness: Optional[FreshnessSpec] = None

    @field_validator("materialization", mode="before")
    @classmethod
    def _default_materialization(cls, v: Any) -> Any:
        return or_server_default(v, Materialization.VIEW.value)


class ModelResource(BaseSpecModel):
    model_config = ConfigDict(protected_namespaces=())

    project_name: str
    model_name: str
    spec: ModelSpec = Field(default_factory=ModelSpec)

    @property
    def path(self) -> str:
        return f"{self.project_name}.{self.model_name}"
