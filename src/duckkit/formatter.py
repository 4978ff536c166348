"""
Plan rendering for humans (text) and machines (JSON).
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from duckkit.models.enums import Operation
from duckkit.plan import Plan

NO_CHANGES = "No changes. Infrastructure is up-to-date."

# ANSI color codes
RESET = "\033[0m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
CYAN = "\033[36m"
DIM = "\033[2m"

_SYMBOLS = {
    Operation.CREATE: ("+", GREEN, "will be created"),
    Operation.UPDATE: ("~", YELLOW, "will be updated"),
    Operation.DELETE: ("-", RED, "will be deleted"),
}


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def format_text(plan: Plan, color: bool = False) -> str:
    """
    Render a plan as human-readable text.

    Actions are grouped under a ``# <kind>`` header in plan order, followed
    by plan errors and a one-line summary.

    Args:
        plan: Plan to render
        color: Emit ANSI color codes

    Returns:
        Rendered text, newline-terminated
    """
    def c(code: str) -> str:
        return code if color else ""

    if not plan.actions and not plan.errors:
        return NO_CHANGES + "\n"

    lines: List[str] = []
    current_kind = None
    for action in plan.actions:
        if action.resource_kind != current_kind:
            current_kind = action.resource_kind
            lines.append("")
            lines.append(f"{c(CYAN)}# {current_kind.value}{c(RESET)}")

        symbol, code, verb = _SYMBOLS[action.operation]
        lines.append(
            f"  {c(code)}{symbol}{c(RESET)} {action.resource_kind.value} "
            f"{_quote(action.resource_name)} {verb}"
        )
        for change in action.changes:
            lines.append(
                f"      {change.field}: {_quote(change.old_value)} → {_quote(change.new_value)}"
            )

    if plan.errors:
        lines.append("")
    for error in plan.errors:
        lines.append(
            f"  {c(RED)}✗{c(RESET)} {error.resource_kind.value} "
            f"{_quote(error.resource_name)}: {error.message}"
        )

    summary = plan.summary()
    line = (
        f"{c(DIM)}Plan:{c(RESET)} {summary['create']} to create, "
        f"{summary['update']} to update, {summary['delete']} to delete."
    )
    if summary["errors"]:
        line += f" {c(RED)}{summary['errors']} error(s).{c(RESET)}"
    lines.append("")
    lines.append(line)
    return "\n".join(lines) + "\n"


def plan_to_dict(plan: Plan) -> Dict[str, Any]:
    """JSON-ready representation of a plan."""
    actions = []
    for action in plan.actions:
        entry: Dict[str, Any] = {
            "operation": action.operation.value,
            "resource_type": action.resource_kind.value,
            "resource_name": action.resource_name,
        }
        if action.changes:
            entry["changes"] = [
                {"field": c.field, "old_value": c.old_value, "new_value": c.new_value}
                for c in action.changes
            ]
        actions.append(entry)

    result: Dict[str, Any] = {"actions": actions}
    if plan.errors:
        result["errors"] = [
            {
                "resource_type": e.resource_kind.value,
                "resource_name": e.resource_name,
                "message": e.message,
            }
            for e in plan.errors
        ]
    summary = plan.summary()
    result["summary"] = {
        "creates": summary["create"],
        "updates": summary["update"],
        "deletes": summary["delete"],
        "errors": summary["errors"],
    }
    return result


def format_json(plan: Plan) -> str:
    return json.dumps(plan_to_dict(plan), indent=2, ensure_ascii=False)


__all__ = ["NO_CHANGES", "format_json", "format_text", "plan_to_dict"]
