"""Repository errors, independent of the HTTP layer."""

from __future__ import annotations

from typing import Any


class NotFoundError(LookupError):
    """No ``model_name`` row matches ``identifier``.

    The API renders this as 404 with problem type ``<model>-not-found``.
    """

    def __init__(self, model_name: str, identifier: dict[str, Any]) -> None:
        self.model_name = model_name
        self.identifier = identifier
        keys = ", ".join(f"{key}={value!r}" for key, value in identifier.items())
        super().__init__(f"{model_name} with {keys} not found")


__all__ = ["NotFoundError"]
