"""Business logic services for the planner API."""

from planner.services.crud import OwnedRepository
from planner.services.settings import SettingsService

__all__ = [
    "OwnedRepository",
    "SettingsService",
]
