"""Base schema classes for API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CustomBase(BaseModel):
    """Base model for request payloads.

    Example:
        class TopicCreate(CustomBase):
            topic_name: str
    """

    model_config = ConfigDict(
        # Strip leading/trailing whitespace from strings
        str_strip_whitespace=True,
        # Ignore extra fields (silently drop unexpected data)
        extra="ignore",
    )


class ReadModel(BaseModel):
    """Base model for aggregate reads.

    Serializes with camelCase keys, the same names clients use in
    ``filter.<field>`` and ``sort`` parameters. Validates from ORM rows or
    from snake_case dicts.
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


__all__ = ["CustomBase", "ReadModel"]
