"""Pydantic schemas for Task model validation and serialization.

Schema Naming Convention:
    - TaskCreate: For POST requests (creating new tasks)
    - TaskUpdate: For PUT requests (partial updates)
    - TaskResponse: For API responses (serializing from database)

Title presence is checked by the task service, not here, so that a missing
or blank title surfaces as ``{"error": "Title is required"}``.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from planner.models import TaskStatus


class TaskCreate(BaseModel):
    """Schema for creating a new task.

    Defaults (applied by the service when omitted):
        - status: todo
        - progress: 0
        - tags / assignees: empty lists
    """

    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    status: TaskStatus | None = None
    category: str | None = Field(default=None, max_length=100)
    tags: list[str] | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    due_date: date | None = None
    assignees: list[str] | None = None


class TaskUpdate(BaseModel):
    """Schema for updating an existing task.

    All fields are optional to support partial updates. Explicit ``null``
    clears nullable fields; absent fields are left unchanged.
    """

    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    status: TaskStatus | None = None
    category: str | None = Field(default=None, max_length=100)
    tags: list[str] | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    due_date: date | None = None
    assignees: list[str] | None = None


class TaskResponse(BaseModel):
    """Schema for Task API responses.

    Enum values are serialized as strings (e.g., "todo", "in_review").
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    title: str
    description: str | None = None
    status: TaskStatus
    category: str | None = None
    tags: list[str]
    progress: int
    due_date: date | None = None
    assignees: list[str]
    created_at: datetime
    updated_at: datetime
