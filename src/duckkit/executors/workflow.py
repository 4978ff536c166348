"""
Workflow executors: notebooks (with their cells), pipelines and pipeline jobs.
"""

import logging
from typing import Any, Dict, List

from duckkit.models import CellSpec, NotebookResource, PipelineJobSpec, PipelineResource
from duckkit.models.enums import ResourceKind
from duckkit.plan import Action

from .base import BaseExecutor, ExecutionResult

logger = logging.getLogger(__name__)


class NotebookExecutor(BaseExecutor[NotebookResource]):
    """
    Executor for notebooks.

    Cells have no stable identity in configuration, so whenever they differ
    the server's cells are replaced wholesale.
    """

    resource_kind = ResourceKind.NOTEBOOK

    def create(self, action: Action) -> ExecutionResult:
        resource: NotebookResource = action.desired

        def lookup():
            return self._find_by_name("/notebooks", resource.name)

        result = self._create(
            action,
            "/notebooks",
            {"name": resource.name, "description": resource.spec.description, "owner": resource.spec.owner},
            lookup=lookup,
        )
        notebook_id = self._identifier(resource.path, lookup)
        if result.adopted:
            self._replace_cells(notebook_id, resource.spec.cells)
        else:
            self._add_cells(notebook_id, resource.spec.cells)
        return result

    def update(self, action: Action) -> ExecutionResult:
        resource: NotebookResource = action.desired
        notebook_id = self.resolve(self.resource_kind, resource.path)
        self.client.patch(
            f"/notebooks/{notebook_id}",
            json={"description": resource.spec.description, "owner": resource.spec.owner},
        )
        if any(change.field == "cells" for change in action.changes):
            self._replace_cells(notebook_id, resource.spec.cells)
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        notebook_id = self.resolve(self.resource_kind, action.resource_name)
        self.client.delete(f"/notebooks/{notebook_id}")
        self.index.forget(self.resource_kind, action.resource_name)
        return self._success(action, "Deleted successfully")

    def _add_cells(self, notebook_id: str, cells: List[CellSpec]) -> None:
        for position, cell in enumerate(cells):
            self.client.post(
                f"/notebooks/{notebook_id}/cells",
                json={"cell_type": cell.type, "content": cell.content, "position": position},
            )

    def _replace_cells(self, notebook_id: str, cells: List[CellSpec]) -> None:
        detail = self.client.get(f"/notebooks/{notebook_id}")
        for cell in detail.get("cells") or []:
            self.client.delete(f"/notebooks/{notebook_id}/cells/{cell['id']}")
        self._add_cells(notebook_id, cells)
        logger.debug(f"Replaced cells of notebook {notebook_id} with {len(cells)} cell(s)")


class PipelineExecutor(BaseExecutor[PipelineResource]):
    """Executor for pipelines; jobs are handled as their own actions."""

    resource_kind = ResourceKind.PIPELINE

    @staticmethod
    def _payload(resource: PipelineResource) -> Dict[str, Any]:
        spec = resource.spec
        payload: Dict[str, Any] = {
            "name": resource.name,
            "description": spec.description,
            "schedule_cron": spec.schedule_cron,
            "is_paused": spec.is_paused,
        }
        if spec.concurrency_limit is not None:
            payload["concurrency_limit"] = spec.concurrency_limit
        return payload

    def create(self, action: Action) -> ExecutionResult:
        resource: PipelineResource = action.desired
        return self._create(
            action, "/pipelines", self._payload(resource),
            lookup=lambda: self._get_or_none(f"/pipelines/{resource.name}"),
        )

    def update(self, action: Action) -> ExecutionResult:
        resource: PipelineResource = action.desired
        self.client.patch(f"/pipelines/{resource.name}", json=self._payload(resource))
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        self.client.delete(f"/pipelines/{action.resource_name}")
        self.index.forget(self.resource_kind, action.resource_name)
        return self._success(action, "Deleted successfully")


class PipelineJobExecutor(BaseExecutor[PipelineJobSpec]):
    """
    Executor for pipeline jobs.

    The action name is ``pipeline/job``. Jobs have no update endpoint; a
    changed job is deleted and created again.
    """

    resource_kind = ResourceKind.PIPELINE_JOB

    def _payload(self, job: PipelineJobSpec) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": job.name,
            "notebook_id": self.resolve(ResourceKind.NOTEBOOK, job.notebook),
            "depends_on": list(job.depends_on),
        }
        if job.compute_endpoint:
            payload["compute_endpoint_id"] = self.resolve(ResourceKind.COMPUTE_ENDPOINT, job.compute_endpoint)
        if job.timeout_seconds is not None:
            payload["timeout_seconds"] = job.timeout_seconds
        if job.retry_count is not None:
            payload["retry_count"] = job.retry_count
        if job.order is not None:
            payload["job_order"] = job.order
        return payload

    def create(self, action: Action) -> ExecutionResult:
        job: PipelineJobSpec = action.desired
        pipeline = action.resource_name.split("/", 1)[0]
        url = f"/pipelines/{pipeline}/jobs"
        return self._create(
            action, url, self._payload(job),
            lookup=lambda: self._find_by_name(url, job.name),
        )

    def update(self, action: Action) -> ExecutionResult:
        self._remove(action.resource_name)
        self.create(action)
        return self._success(action, "Recreated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        self._remove(action.resource_name)
        return self._success(action, "Deleted successfully")

    def _remove(self, path: str) -> None:
        pipeline = path.split("/", 1)[0]
        job_id = self.resolve(self.resource_kind, path)
        self.client.delete(f"/pipelines/{pipeline}/jobs/{job_id}")
        self.index.forget(self.resource_kind, path)
