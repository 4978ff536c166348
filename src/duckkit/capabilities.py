"""
Server capability handling.

Older or partially-deployed servers may not expose every endpoint. The
compatibility mode decides which read failures mean "this feature is absent"
and which are real errors. Before apply, actions that need optional
endpoints are gated by a cheap probe.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Optional

from duckkit.client import APIClient
from duckkit.errors import APIError, CapabilityError, TransportError
from duckkit.models.enums import ResourceKind

logger = logging.getLogger(__name__)

OPTIONAL_STATUS_CODES = frozenset({404, 405, 501})

# Substrings of transport failures that legacy servers produce when a route
# is missing behind a proxy.
LEGACY_TRANSIENT_MARKERS = ("eof", "connection reset by peer", "broken pipe")


class CompatibilityMode(str, Enum):
    """How strictly missing optional endpoints are treated."""
    STRICT = "strict"
    LEGACY = "legacy"

    @classmethod
    def parse(cls, value: object) -> "CompatibilityMode":
        """Normalise user input; anything unrecognised means strict."""
        if isinstance(value, CompatibilityMode):
            return value
        text = str(value or "").strip().lower()
        if text == cls.LEGACY.value:
            return cls.LEGACY
        return cls.STRICT


def is_optional_read_error(error: Exception, mode: CompatibilityMode) -> bool:
    """
    Classify a read failure of an optional endpoint.

    Args:
        error: The failure raised by the client
        mode: Active compatibility mode

    Returns:
        True when the failure means the endpoint is absent
    """
    if isinstance(error, APIError) and error.status_code in OPTIONAL_STATUS_CODES:
        return True
    if mode != CompatibilityMode.LEGACY:
        return False
    if isinstance(error, TransportError):
        return True
    text = str(error).lower()
    return any(marker in text for marker in LEGACY_TRANSIENT_MARKERS)


def optional_read_warning(resource: str, error: Exception) -> str:
    """Build the warning recorded when an optional endpoint is skipped."""
    if isinstance(error, APIError) and error.status_code in OPTIONAL_STATUS_CODES:
        return (
            f"{resource} endpoint unavailable (HTTP {error.status_code}); "
            f"continuing without {resource} state"
        )
    return f"{resource} endpoint read failed in compatibility mode: {error}"


# Kinds whose mutations need an optional endpoint, with the endpoint to probe.
_GATED_ENDPOINTS = (
    (ResourceKind.MODEL, "model", "/models"),
    (ResourceKind.MACRO, "macro", "/macros"),
)


def validate_apply_capabilities(
    client: APIClient,
    actions: Iterable,
    mode: Optional[CompatibilityMode] = None,
) -> None:
    """
    Refuse an apply whose actions the server cannot accept.

    Probes each gated endpoint with ``max_results=1`` only when at least one
    action of the matching kind is present.

    Raises:
        CapabilityError: If a required endpoint is absent or cannot be probed
    """
    mode = CompatibilityMode.parse(mode)
    kinds = {action.resource_kind for action in actions}

    for kind, label, endpoint in _GATED_ENDPOINTS:
        if kind not in kinds:
            continue
        try:
            client.get(endpoint, params={"max_results": 1})
        except (APIError, TransportError) as e:
            if is_optional_read_error(e, mode):
                raise CapabilityError(
                    f"{label} actions present but {endpoint} endpoint is unavailable: {e}"
                ) from e
            raise CapabilityError(f"cannot probe {endpoint} endpoint: {e}") from e
        logger.debug(f"Capability probe succeeded for {endpoint}")


__all__ = [
    "CompatibilityMode",
    "is_optional_read_error",
    "optional_read_warning",
    "validate_apply_capabilities",
]
