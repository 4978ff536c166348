"""
Plan types: the ordered list of actions that reconciles actual with desired.

A plan is a pure value. It is produced by the differ, rendered by the
formatter, and consumed by the executor; nothing here touches the network.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from duckkit.models.enums import Operation, ResourceKind


@dataclass(frozen=True)
class FieldDiff:
    """One changed field of an update, rendered as strings."""

    field: str
    old_value: str
    new_value: str


@dataclass(frozen=True)
class Action:
    """
    A single create, update or delete.

    ``desired`` is set for create and update, ``actual`` for update and
    delete. ``changes`` lists the fields an update modifies.
    """

    operation: Operation
    resource_kind: ResourceKind
    resource_name: str
    desired: Optional[Any] = None
    actual: Optional[Any] = None
    changes: List[FieldDiff] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.operation.value} {self.resource_kind.value} {self.resource_name!r}"


@dataclass(frozen=True)
class PlanError:
    """A desired change the engine refuses to plan."""

    resource_kind: ResourceKind
    resource_name: str
    message: str

    def __str__(self) -> str:
        return f'{self.resource_kind.value} "{self.resource_name}": {self.message}'


@dataclass
class Plan:
    """Ordered actions plus any errors found while diffing."""

    actions: List[Action] = field(default_factory=list)
    errors: List[PlanError] = field(default_factory=list)

    def add_create(self, kind: ResourceKind, name: str, desired: Any) -> None:
        self.actions.append(Action(Operation.CREATE, kind, name, desired=desired))

    def add_update(
        self, kind: ResourceKind, name: str, desired: Any, actual: Any, changes: List[FieldDiff]
    ) -> None:
        self.actions.append(
            Action(Operation.UPDATE, kind, name, desired=desired, actual=actual, changes=list(changes))
        )

    def add_delete(self, kind: ResourceKind, name: str, actual: Any) -> None:
        self.actions.append(Action(Operation.DELETE, kind, name, actual=actual))

    def add_error(self, kind: ResourceKind, name: str, message: str) -> None:
        self.errors.append(PlanError(kind, name, message))

    def sort_actions(self) -> None:
        """
        Order actions for execution.

        Creates and updates run first, lowest layer first. Deletes follow in
        reverse layer order so dependents go before what they depend on. Both
        sorts are stable, so actions of the same kind keep diff order.
        """
        forward = [a for a in self.actions if a.operation != Operation.DELETE]
        deletes = [a for a in self.actions if a.operation == Operation.DELETE]
        forward.sort(key=lambda a: a.resource_kind.sort_key)
        deletes.sort(key=lambda a: a.resource_kind.sort_key, reverse=True)
        self.actions = forward + deletes

    def has_changes(self) -> bool:
        return len(self.actions) > 0

    def summary(self) -> Dict[str, int]:
        counts = {"create": 0, "update": 0, "delete": 0}
        for action in self.actions:
            counts[action.operation.value] += 1
        counts["errors"] = len(self.errors)
        return counts

    def actions_of(self, kind: ResourceKind) -> List[Action]:
        return [a for a in self.actions if a.resource_kind == kind]


__all__ = ["Action", "FieldDiff", "Plan", "PlanError"]
