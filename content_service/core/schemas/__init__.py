"""Shared API schemas."""

from __future__ import annotations

from .base import CustomBase, ReadModel
from .problem_details import ProblemDetails

__all__ = ["CustomBase", "ProblemDetails", "ReadModel"]
