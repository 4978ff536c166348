"""
Self-lockout guard.

An apply authenticated with an API key must not revoke that same key: the
session would lose access halfway through the plan.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from duckkit.client import APIClient
from duckkit.errors import APIError, ReadStateError, SafetyError, TransportError
from duckkit.models.enums import Operation, ResourceKind
from duckkit.plan import Action

logger = logging.getLogger(__name__)


def _key_actions(actions: Iterable[Action]) -> List[Action]:
    return [
        a for a in actions
        if a.resource_kind == ResourceKind.API_KEY
        and a.operation in (Operation.DELETE, Operation.UPDATE)
    ]


def validate_no_self_api_key_deletion(client: APIClient, actions: Iterable[Action]) -> None:
    """
    Refuse a plan that would revoke the session's own API key.

    Updates count as revocations because an API key update is a delete
    followed by a create.

    Args:
        client: Client whose credentials are checked
        actions: Actions of the plan about to be applied

    Raises:
        SafetyError: If a targeted key is the session key, or the key list
            cannot be read to prove otherwise
    """
    if not client.uses_api_key:
        return
    targets = _key_actions(actions)
    if not targets:
        return

    try:
        keys = client.list_all("/api-keys")
    except (APIError, TransportError, ReadStateError) as e:
        raise SafetyError(f"cannot verify API key actions against the current session: {e}") from e

    session_key = client.api_key or ""
    for action in targets:
        spec = action.actual if action.actual is not None else action.desired
        principal = getattr(spec, "principal", "") or ""
        for row in keys:
            if row.get("name") != action.resource_name:
                continue
            if principal and row.get("principal") and row.get("principal") != principal:
                continue
            prefix = str(row.get("key_prefix") or "")
            if prefix and session_key.startswith(prefix):
                raise SafetyError(
                    f"refusing to {action.operation.value} API key {action.resource_name!r}: "
                    f"it is the currently-authenticated API key"
                )
    logger.debug(f"Checked {len(targets)} API key action(s) against the session key")


__all__ = ["validate_no_self_api_key_deletion"]
