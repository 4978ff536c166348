"""Test fixtures for duckkit."""

from .model_factories import (
    make_api_key,
    make_catalog,
    make_column,
    make_column_masks,
    make_compute_assignment,
    make_compute_endpoint,
    make_grant,
    make_group,
    make_member,
    make_model,
    make_model_test,
    make_notebook,
    make_pipeline,
    make_principal,
    make_schema,
    make_table,
    make_tag,
    make_tag_assignment,
)

__all__ = [
    "make_principal",
    "make_group",
    "make_member",
    "make_grant",
    "make_api_key",
    "make_catalog",
    "make_schema",
    "make_table",
    "make_column",
    "make_column_masks",
    "make_tag",
    "make_tag_assignment",
    "make_compute_endpoint",
    "make_compute_assignment",
    "make_notebook",
    "make_pipeline",
    "make_model",
    "make_model_test",
]
