"""Shared Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema that speaks camelCase on the wire and snake_case in Python.

    Input accepts either spelling; responses are serialized with the camelCase
    aliases because FastAPI dumps response models ``by_alias``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class TimestampSchema(CamelModel):
    """Timestamps maintained by the database."""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ModifiedCount(CamelModel):
    """Result of an update that may touch many rows."""

    modified_count: int = Field(description="Number of rows the update matched and modified")


class DeletedCount(CamelModel):
    """Result of a delete operation."""

    deleted_count: int = Field(description="Number of rows removed")
