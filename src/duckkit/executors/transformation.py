"""
Macro and model executors.

A model's data tests are reconciled after every model create or update:
tests are compared by value, so a changed test is deleted and created
again rather than patched.
"""

import logging
from typing import Any, Dict, List

from duckkit.client import is_not_found
from duckkit.errors import APIError
from duckkit.models import MacroResource, ModelResource, ModelTestSpec
from duckkit.models.enums import ResourceKind
from duckkit.plan import Action
from duckkit.reader import WIRE_INCREMENTAL_STRATEGIES, model_test_from_row

from .base import BaseExecutor, ExecutionResult

logger = logging.getLogger(__name__)


class MacroExecutor(BaseExecutor[MacroResource]):
    """Executor for SQL macros."""

    resource_kind = ResourceKind.MACRO

    @staticmethod
    def _payload(resource: MacroResource) -> Dict[str, Any]:
        spec = resource.spec
        return {
            "name": resource.name,
            "macro_type": spec.macro_type,
            "parameters": list(spec.parameters),
            "body": spec.body,
            "description": spec.description,
            "catalog_name": spec.catalog_name,
            "project_name": spec.project_name,
            "visibility": spec.visibility,
            "owner": spec.owner,
            "properties": dict(spec.properties),
            "tags": list(spec.tags),
            "status": spec.status,
        }

    def create(self, action: Action) -> ExecutionResult:
        resource: MacroResource = action.desired
        return self._create(
            action, "/macros", self._payload(resource),
            lookup=lambda: self._get_or_none(f"/macros/{resource.name}"),
        )

    def update(self, action: Action) -> ExecutionResult:
        resource: MacroResource = action.desired
        self.client.patch(f"/macros/{resource.name}", json=self._payload(resource))
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        self.client.delete(f"/macros/{action.resource_name}")
        self.index.forget(self.resource_kind, action.resource_name)
        return self._success(action, "Deleted successfully")


def model_payload(resource: ModelResource) -> Dict[str, Any]:
    """Wire form of a model, without its tests."""
    spec = resource.spec
    payload: Dict[str, Any] = {
        "project_name": resource.project_name,
        "name": resource.model_name,
        "materialization": spec.materialization,
        "description": spec.description,
        "tags": list(spec.tags),
        "sql": spec.sql,
    }
    if spec.config is not None:
        strategy = spec.config.incremental_strategy
        payload["config"] = {
            "unique_key": list(spec.config.unique_key),
            "incremental_strategy": WIRE_INCREMENTAL_STRATEGIES.get(strategy, strategy),
            "on_schema_change": spec.config.on_schema_change,
        }
    if spec.contract is not None:
        payload["contract"] = {
            "enforce": spec.contract.enforce,
            "columns": [
                {"name": c.name, "type": c.type, "nullable": c.nullable}
                for c in spec.contract.columns
            ],
        }
    if spec.freshness is not None:
        payload["freshness_policy"] = {
            "max_lag_seconds": spec.freshness.max_lag_seconds,
            "cron_schedule": spec.freshness.cron_schedule,
        }
    return payload


def model_test_payload(test: ModelTestSpec) -> Dict[str, Any]:
    config: Dict[str, Any] = {}
    if test.values:
        config["values"] = list(test.values)
    if test.to_model:
        config["to_model"] = test.to_model
    if test.to_column:
        config["to_column"] = test.to_column
    if test.sql:
        config["sql"] = test.sql
    payload: Dict[str, Any] = {"name": test.name, "test_type": test.type, "config": config}
    if test.column:
        payload["column"] = test.column
    return payload


class ModelExecutor(BaseExecutor[ModelResource]):
    """Executor for SQL models and their tests."""

    resource_kind = ResourceKind.MODEL

    @staticmethod
    def _url(resource: ModelResource) -> str:
        return f"/models/{resource.project_name}/{resource.model_name}"

    def create(self, action: Action) -> ExecutionResult:
        resource: ModelResource = action.desired
        result = self._create(
            action, "/models", model_payload(resource),
            lookup=lambda: self._get_or_none(self._url(resource)),
        )
        self._reconcile_tests(resource)
        return result

    def update(self, action: Action) -> ExecutionResult:
        resource: ModelResource = action.desired
        self.client.patch(self._url(resource), json=model_payload(resource))
        self._reconcile_tests(resource)
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        resource: ModelResource = action.actual
        self.client.delete(self._url(resource))
        self.index.forget(self.resource_kind, resource.path)
        return self._success(action, "Deleted successfully")

    def _reconcile_tests(self, resource: ModelResource) -> None:
        """
        Make the server's tests for a model match the desired list.

        A model whose tests endpoint returns 404 is left alone.
        """
        url = f"{self._url(resource)}/tests"
        try:
            rows = self.client.list_all(url)
        except APIError as e:
            if is_not_found(e):
                logger.debug(f"Model {resource.path!r} has no tests endpoint; skipping tests")
                return
            raise

        existing: Dict[str, Dict[str, Any]] = {str(row.get("name")): row for row in rows}
        created: List[str] = []
        for test in resource.spec.tests:
            row = existing.pop(test.name, None)
            if row is not None:
                if model_test_from_row(row).signature() == test.signature():
                    continue
                self.client.delete(f"{url}/{row['id']}")
            self.client.post(url, json=model_test_payload(test))
            created.append(test.name)

        for row in existing.values():
            self.client.delete(f"{url}/{row['id']}")

        if created or existing:
            logger.info(
                f"Reconciled tests of model {resource.path}: "
                f"{len(created)} written, {len(existing)} removed"
            )
