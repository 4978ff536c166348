"""
Base classes for the declarative resource model.

All resource specs are immutable-by-convention pydantic models sharing one
configuration. Unknown keys are rejected unless the validation context asks
for them to be dropped, which is how the loader implements its
allow-unknown-fields option.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, ValidationInfo, model_validator

logger = logging.getLogger(__name__)

# Validation context key understood by every model
ALLOW_UNKNOWN_FIELDS = "allow_unknown_fields"

# =============================================================================
# BASE CONFIGURATION
# =============================================================================

class BaseSpecModel(BaseModel):
    """
    Base model for all resource specs.

    Strings are stripped and unknown keys forbidden. Passing
    ``context={"allow_unknown_fields": True}`` to ``model_validate`` drops
    unknown keys at every nesting level instead.
    """

    model_config = ConfigDict(
        populate_by_name=True,  # Allow field population by name
        str_strip_whitespace=True,  # Strip whitespace from strings
        use_enum_values=True,
        validate_default=True,
        extra="forbid",
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_unknown_fields(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, dict) or not info.context:
            return data
        if not info.context.get(ALLOW_UNKNOWN_FIELDS):
            return data

        known = set()
        for name, field in cls.model_fields.items():
            known.add(name)
            if field.alias:
                known.add(field.alias)
        dropped = [key for key in data if key not in known]
        if dropped:
            logger.debug(f"Ignoring unknown fields on {cls.__name__}: {sorted(dropped)}")
        return {key: value for key, value in data.items() if key in known}


def or_server_default(value: Any, default: str) -> Any:
    """Map an unset value to the one the server stores in its place."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    return value


def render_map(values: Dict[str, str]) -> str:
    """Render a string map deterministically as ``k=v, k2=v2``."""
    return ", ".join(f"{k}={values[k]}" for k in sorted(values))


def render_list(values: List[str]) -> str:
    return ", ".join(values)
