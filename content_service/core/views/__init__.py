"""Aggregate view engine: declarative pipelines and materialized read models."""

from __future__ import annotations

from .base import AggregateView
from .pipeline import (
    AddFields,
    Document,
    Expression,
    Literal,
    Lookup,
    Match,
    Now,
    Pipeline,
    PipelineContext,
    Project,
    Ref,
    Size,
    Stage,
    WeightedSum,
    resolve_path,
)

__all__ = [
    "AddFields",
    "AggregateView",
    "Document",
    "Expression",
    "Literal",
    "Lookup",
    "Match",
    "Now",
    "Pipeline",
    "PipelineContext",
    "Project",
    "Ref",
    "Size",
    "Stage",
    "WeightedSum",
    "resolve_path",
]
