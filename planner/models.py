"""SQLAlchemy 2.0 ORM models.

This module contains all SQLAlchemy models for the planner service.
All models use the Mapped[type] annotation pattern required by SQLAlchemy 2.0.

Tenancy:
    Every table carries a ``user_id`` column holding the identifier issued by
    the identity provider. Repositories filter every statement on it; there is
    no cross-user access path.

Encrypted Fields Pattern:
    The per-user Gemini API key is stored encrypted using Fernet symmetric
    encryption in ``gemini_key_encrypted`` (LargeBinary, Fernet outputs bytes).

    NEVER expose encrypted fields in __repr__ or log statements.
"""

import enum
from datetime import date, datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Get current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class TaskStatus(enum.Enum):
    """Kanban column of a task."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    DONE = "done"


class VideoStatus(enum.Enum):
    """Production stage of a video project.

    Flow:
        ideation → filming → editing → publishing → completed

    Stages are informational; any stage may be set directly.
    """

    IDEATION = "ideation"
    FILMING = "filming"
    EDITING = "editing"
    PUBLISHING = "publishing"
    COMPLETED = "completed"


# Default checklist taxonomy, seeded per video project by the client.
CHECKLIST_CATEGORIES: dict[str, list[str]] = {
    "Ideation": [
        "Title Drafted",
        "Target Audience Defined",
        "Research Completed",
        "3-Sec HOOK",
        "Intro Stated",
        "Whole Script Finalize",
        "Memorize/Rehearsed",
    ],
    "Filming": [
        "Shot-list created",
        "Location/Studio prep",
        "Equipment Check",
        "Main footage shoot",
        "B-rolls shot",
        "Extra Overlays/Screenshots",
        "Files Organized/Rename",
    ],
    "Video Editing": [
        "Sound Cleanup",
        "Music Added",
        "Sound Effects Add",
        "Filler words/pause X",
        "Text/Subtitle Added",
        "Graphics Added",
        "Jump Cuts/Transition Applied",
    ],
    "Publish/Market": [
        "Thumbnail Design",
        "SEO Title/Description",
        "Tags Research + Add",
        "Upload / Schedule",
        "Promos? Or Not",
        "First Hour Engagement",
    ],
}


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """Creation and last-update timestamps (UTC timezone-aware)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )


class Note(TimestampMixin, Base):
    """Free-form note owned by a single user."""

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="Untitled Note")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return f"<Note(id={self.id}, title={self.title!r})>"


class Task(TimestampMixin, Base):
    """Kanban task.

    Attributes:
        title: Required, stored trimmed.
        status: Kanban column (todo/in_progress/in_review/done).
        tags: Ordered list of tag strings (JSON).
        progress: Completion percentage, 0-100.
        due_date: Optional calendar date.
        assignees: Ordered list of assignee names (JSON).
    """

    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[TaskStatus] = mapped_column(
        Enum(
            TaskStatus,
            native_enum=True,
            name="taskstatus",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=TaskStatus.TODO,
    )
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    assignees: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        # Owner + status filter used by GET /tasks?status=
        Index("ix_tasks_user_id_status", "user_id", "status"),
    )

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return f"<Task(id={self.id}, title={self.title!r}, status={self.status.value!r})>"


class VideoProject(TimestampMixin, Base):
    """Video project moving from ideation to release.

    Attributes:
        hook: Opening line of the video.
        rough_sketch: Free-form outline typed by the user.
        generated_concept: Script produced asynchronously by Gemini.
        production_date: Day the video is filmed (schedule production track).
        release_date: Day the video goes live (schedule release track).
    """

    __tablename__ = "video_projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    hook: Mapped[str | None] = mapped_column(String(500), nullable=True)
    rough_sketch: Mapped[str | None] = mapped_column(Text, nullable=True)
    generated_concept: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[VideoStatus] = mapped_column(
        Enum(
            VideoStatus,
            native_enum=True,
            name="videostatus",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=VideoStatus.IDEATION,
    )
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    production_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    release_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        """Return string representation for debugging.

        Shows concept presence (not value) to keep log lines short.
        """
        concept_info = "set" if self.generated_concept else "not_set"
        return (
            f"<VideoProject(id={self.id}, title={self.title!r}, "
            f"status={self.status.value!r}, concept={concept_info})>"
        )


class ChecklistItem(TimestampMixin, Base):
    """Production checklist entry belonging to one video project.

    The (video_project_id, user_id, text, category) tuple is unique so that
    concurrent seeding of the default taxonomy cannot produce duplicates.

    Foreign Key:
        video_project_id references video_projects.id without a database
        cascade. Project deletion removes items explicitly in the service.
    """

    __tablename__ = "video_checklist_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    video_project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("video_projects.id"),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(String(500), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "video_project_id",
            "user_id",
            "text",
            "category",
            name="uq_checklist_items_project_user_text_category",
        ),
        Index("ix_checklist_items_project_category", "video_project_id", "category"),
    )

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return (
            f"<ChecklistItem(id={self.id}, project={self.video_project_id}, "
            f"category={self.category!r}, text={self.text!r})>"
        )


class UserSettings(TimestampMixin, Base):
    """Per-user settings, at most one row per user.

    Attributes:
        gemini_key_encrypted: Fernet-encrypted Gemini API key.
        shared_key_uses: Generations billed to the shared default key on
            ``shared_key_uses_on``.
        shared_key_uses_on: Day the counter above refers to.

    Note:
        Use SettingsService to read or write the key - NEVER access
        the encrypted field directly.
    """

    __tablename__ = "user_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    gemini_key_encrypted: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    shared_key_uses: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )
    shared_key_uses_on: Mapped[date | None] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        """Return string representation for debugging.

        Note:
            NEVER expose encrypted fields in repr - security risk.
        """
        key_info = "set" if self.gemini_key_encrypted else "not_set"
        return f"<UserSettings(user_id={self.user_id!r}, gemini_key={key_info})>"
