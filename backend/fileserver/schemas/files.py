"""Pydantic schemas for the file-manager REST API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileRecord(_CamelModel):
    """Metadata for a single file or directory entry.

    ``id`` is the absolute path of the entry. ``size`` is only set for files.
    """

    id: str
    name: str
    is_dir: bool
    size: int | None = None
    created_at: datetime | None = None
    modified_at: datetime


class FileContent(_CamelModel):
    """A file's text content alongside a subset of its metadata."""

    path: str
    name: str
    content: str
    size: int
    mod_date: datetime


class CreateItemRequest(_CamelModel):
    path: str = Field(min_length=1)
    is_dir: bool = False
    content: str = ""


class UpdateItemRequest(_CamelModel):
    path: str = Field(min_length=1)
    content: str


class DeleteResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
