"""Pydantic schemas for Note requests and responses."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NoteCreate(BaseModel):
    """Schema for POST /notes. Both fields are optional."""

    title: str | None = Field(default=None, max_length=255)
    content: str | None = None


class NoteUpdate(BaseModel):
    """Schema for PUT /notes/{id}.

    Only fields present in the request body are applied; callers must use
    ``model_dump(exclude_unset=True)``.
    """

    title: str | None = Field(default=None, max_length=255)
    content: str | None = None


class NoteResponse(BaseModel):
    """Note as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
