"""Pydantic schemas for video checklist items."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ChecklistItemCreate(BaseModel):
    """Body of POST /video-projects/{id}/checklist.

    ``display_order`` overrides the computed append position when given.
    """

    text: str | None = Field(default=None, max_length=500)
    category: str | None = Field(default=None, max_length=100)
    completed: bool | None = None
    display_order: int | None = None


class ChecklistItemUpdate(BaseModel):
    """Body of PUT /video-projects/{id}/checklist.

    ``item_id`` selects the row; the remaining fields are a partial update.
    """

    item_id: int | None = None
    text: str | None = Field(default=None, max_length=500)
    category: str | None = Field(default=None, max_length=100)
    completed: bool | None = None
    display_order: int | None = None


class ChecklistItemResponse(BaseModel):
    """Checklist item as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    video_project_id: int
    text: str
    category: str
    completed: bool
    display_order: int
    created_at: datetime
    updated_at: datetime
