"""Pydantic schemas for validation and serialization."""

from planner.schemas.checklist import (
    ChecklistItemCreate,
    ChecklistItemResponse,
    ChecklistItemUpdate,
)
from planner.schemas.note import NoteCreate, NoteResponse, NoteUpdate
from planner.schemas.settings import API_KEY_MASK, SettingsResponse, SettingsUpdate
from planner.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from planner.schemas.video_project import (
    GenerateConceptRequest,
    SuggestionsRequest,
    SuggestionsResponse,
    VideoProjectCreate,
    VideoProjectResponse,
    VideoProjectUpdate,
)

__all__ = [
    "API_KEY_MASK",
    "ChecklistItemCreate",
    "ChecklistItemResponse",
    "ChecklistItemUpdate",
    "GenerateConceptRequest",
    "NoteCreate",
    "NoteResponse",
    "NoteUpdate",
    "SettingsResponse",
    "SettingsUpdate",
    "SuggestionsRequest",
    "SuggestionsResponse",
    "TaskCreate",
    "TaskResponse",
    "TaskUpdate",
    "VideoProjectCreate",
    "VideoProjectResponse",
    "VideoProjectUpdate",
]
