"""
Notebooks, pipelines and pipeline jobs.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from .base import BaseSpecModel


class CellSpec(BaseSpecModel):
    type: str = ""
    content: str = ""


class NotebookSpec(BaseSpecModel):
    description: str = ""
    owner: str = ""
    cells: List[CellSpec] = Field(default_factory=list)


class NotebookResource(BaseSpecModel):
    name: str
    spec: NotebookSpec = Field(default_factory=NotebookSpec)

    @property
    def path(self) -> str:
        return self.name


class PipelineJobSpec(BaseSpecModel):
    """One notebook run inside a pipeline, ordered by ``depends_on``."""

    name: str = ""
    notebook: str = ""
    compute_endpoint: str = ""
    depends_on: List[str] = Field(default_factory=list)
    timeout_seconds: Optional[int] = None
    retry_count: Optional[int] = None
    order: Optional[int] = None


class PipelineSpec(BaseSpecModel):
    description: str = ""
    schedule_cron: str = ""
    is_paused: bool = False
    concurrency_limit: Optional[int] = None
    jobs: List[PipelineJobSpec] = Field(default_factory=list)


class PipelineResource(BaseSpecModel):
    name: str
    spec: PipelineSpec = Field(default_factory=PipelineSpec)

    @property
    def path(self) -> str:
        return self.name


def job_path(pipeline: str, job: str) -> str:
    return f"{pipeline}/{job}"
