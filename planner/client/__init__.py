"""Headless client state layer for the planner API.

Mirrors what a UI needs on top of the HTTP API: optimistic mutations,
debounced autosave, schedule date buckets, concept polling and checklist
seeding. Everything runs on asyncio and talks to the server through
PlannerAPIClient.
"""

from planner.client.api import PlannerAPIClient, PlannerAPIError
from planner.client.autosave import AutosaveEditor, SaveState
from planner.client.checklist import ChecklistState, seed_default_checklist
from planner.client.concept_poller import ConceptPoller
from planner.client.optimistic import optimistic_mutation
from planner.client.schedule import ScheduleBoard, ScheduleEvent

__all__ = [
    "AutosaveEditor",
    "ChecklistState",
    "ConceptPoller",
    "PlannerAPIClient",
    "PlannerAPIError",
    "SaveState",
    "ScheduleBoard",
    "ScheduleEvent",
    "optimistic_mutation",
    "seed_default_checklist",
]
