"""Prometheus metrics and tracking helpers."""

from __future__ import annotations

from .prometheus import REGISTRY

__all__ = ["REGISTRY"]
