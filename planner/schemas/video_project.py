"""Pydantic schemas for video projects and AI generation requests."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from planner.models import VideoStatus


class VideoProjectCreate(BaseModel):
    """Schema for POST /video-projects.

    Defaults: status ideation, progress 0. Optional text fields are
    trimmed and blank values stored as null.
    """

    title: str | None = Field(default=None, max_length=255)
    hook: str | None = Field(default=None, max_length=500)
    rough_sketch: str | None = None
    status: VideoStatus | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    notes: str | None = None
    production_date: date | None = None
    release_date: date | None = None


class VideoProjectUpdate(BaseModel):
    """Schema for PUT /video-projects/{id} (partial update)."""

    title: str | None = Field(default=None, max_length=255)
    hook: str | None = Field(default=None, max_length=500)
    rough_sketch: str | None = None
    generated_concept: str | None = None
    status: VideoStatus | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    notes: str | None = None
    production_date: date | None = None
    release_date: date | None = None


class VideoProjectResponse(BaseModel):
    """Video project as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    title: str
    hook: str | None = None
    rough_sketch: str | None = None
    generated_concept: str | None = None
    status: VideoStatus
    progress: int
    notes: str | None = None
    production_date: date | None = None
    release_date: date | None = None
    created_at: datetime
    updated_at: datetime


class GenerateConceptRequest(BaseModel):
    """Body of POST /video-projects/generate-concept."""

    video_project_id: int | None = None
    title: str | None = None
    hook: str | None = None
    rough_sketch: str | None = None


class SuggestionsRequest(BaseModel):
    """Body of POST /video-projects/suggestions."""

    title: str | None = None


class HookSuggestion(BaseModel):
    """Opening line proposed for a video."""

    hook: str
    reasoning: str = ""


class VideoSuggestion(BaseModel):
    """Follow-up video idea related to the current project."""

    title: str
    description: str = ""
    reasoning: str = ""


class SuggestionsResponse(BaseModel):
    """Hooks and related video ideas produced by Gemini."""

    hooks: list[HookSuggestion]
    related_videos: list[VideoSuggestion]
