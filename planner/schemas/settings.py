"""Pydantic schemas for user settings.

The stored Gemini key never leaves the server: responses carry
API_KEY_MASK when a key is stored and null otherwise.
"""

from datetime import datetime

from pydantic import BaseModel

API_KEY_MASK = "***"


class SettingsUpdate(BaseModel):
    """Body of PUT /settings. ``null`` or blank clears the stored key."""

    gemini_api_key: str | None = None


class SettingsResponse(BaseModel):
    """Settings as returned by the API."""

    id: int | None = None
    user_id: str
    gemini_api_key: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
