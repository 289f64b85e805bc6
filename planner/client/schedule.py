"""Production/release schedule built from video projects.

Each project contributes up to two events:
- ``production`` on ``production_date``, shown at 10:00
- ``release`` on ``release_date``, shown at 14:00

Events are keyed "{project_id}:{kind}" and bucketed into day cells keyed
YYYY-MM-DD. Dates are calendar dates: no timezone conversion happens
anywhere between the stored value and the day cell.

Dragging an event to another day moves it locally at once, then updates
only the matching date field on the server. A failed update reloads every
event from the server.
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any

import structlog

from planner.client.api import PlannerAPIClient, PlannerAPIError
from planner.client.optimistic import optimistic_mutation

log = structlog.get_logger(__name__)

PRODUCTION = "production"
RELEASE = "release"

EVENT_TIMES = {
    PRODUCTION: time(10, 0),
    RELEASE: time(14, 0),
}
DATE_FIELDS = {
    PRODUCTION: "production_date",
    RELEASE: "release_date",
}

DEFAULT_REFRESH_SECONDS = 30.0
MONTH_GRID_DAYS = 42


@dataclass
class ScheduleEvent:
    """One calendar entry derived from a project date."""

    project_id: int
    kind: str
    title: str
    subtitle: str
    start: datetime

    @property
    def key(self) -> str:
        return event_key(self.project_id, self.kind)

    @property
    def day_key(self) -> str:
        return day_key(self.start)


def event_key(project_id: int, kind: str) -> str:
    return f"{project_id}:{kind}"


def day_key(value: date) -> str:
    """Format a date (or datetime) as a YYYY-MM-DD day-cell key."""
    return value.strftime("%Y-%m-%d")


def parse_day_key(key: str) -> date:
    """Parse a YYYY-MM-DD day-cell key.

    Raises:
        ValueError: ``key`` is not a valid date.
    """
    return date.fromisoformat(key)


def _parse_stored_date(value: Any) -> date | None:
    if not value:
        return None
    if isinstance(value, date):
        return value
    # Keep only the calendar part of "YYYY-MM-DD" or an ISO timestamp
    return date.fromisoformat(str(value)[:10])


def events_from_projects(projects: Iterable[dict[str, Any]]) -> list[ScheduleEvent]:
    """Map projects to their production and release events."""
    events = []
    for project in projects:
        production_day = _parse_stored_date(project.get("production_date"))
        if production_day is not None:
            events.append(
                ScheduleEvent(
                    project_id=project["id"],
                    kind=PRODUCTION,
                    title=project["title"],
                    subtitle=project.get("rough_sketch") or "Production",
                    start=datetime.combine(production_day, EVENT_TIMES[PRODUCTION]),
                )
            )
        release_day = _parse_stored_date(project.get("release_date"))
        if release_day is not None:
            events.append(
                ScheduleEvent(
                    project_id=project["id"],
                    kind=RELEASE,
                    title=project["title"],
                    subtitle="Release",
                    start=datetime.combine(release_day, EVENT_TIMES[RELEASE]),
                )
            )
    return events


def _sunday_on_or_before(day: date) -> date:
    # date.weekday(): Monday == 0 ... Sunday == 6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def month_grid(anchor: date) -> list[date]:
    """Return the 42 days of the month view containing ``anchor``, from Sunday."""
    start = _sunday_on_or_before(anchor.replace(day=1))
    return [start + timedelta(days=offset) for offset in range(MONTH_GRID_DAYS)]


def week_grid(anchor: date) -> list[date]:
    """Return the Sunday-to-Saturday week containing ``anchor``."""
    start = _sunday_on_or_before(anchor)
    return [start + timedelta(days=offset) for offset in range(7)]


def events_for_day(
    events: Iterable[ScheduleEvent],
    day: date,
    kind: str | None = None,
) -> list[ScheduleEvent]:
    """Return events falling on ``day``, optionally only one track."""
    key = day_key(day)
    return [
        event
        for event in events
        if event.day_key == key and (kind is None or event.kind == kind)
    ]


class ScheduleBoard:
    """Client-side schedule state with drag-and-drop and periodic refresh.

    Args:
        api: Planner API client.
        refresh_interval: Seconds between background reloads.

    Attributes:
        events: Current events by event key.
        active_track: Track shown in day cells ("production" or "release").
        error: Message of the last failed load or move.
    """

    def __init__(self, api: PlannerAPIClient, refresh_interval: float = DEFAULT_REFRESH_SECONDS):
        self.api = api
        self.refresh_interval = refresh_interval
        self.events: dict[str, ScheduleEvent] = {}
        self.active_track = PRODUCTION
        self.error: str | None = None
        self._refresh_task: asyncio.Task[None] | None = None

    async def load(self) -> None:
        """Replace all events with the server's current projects."""
        projects = await self.api.list_video_projects()
        self.events = {event.key: event for event in events_from_projects(projects)}
        log.debug("schedule_loaded", events=len(self.events))

    def events_on(self, day: date) -> list[ScheduleEvent]:
        """Events for a day cell on the active track."""
        return events_for_day(self.events.values(), day, self.active_track)

    async def move_event(self, key: str, target_day_key: str) -> bool:
        """Drop event ``key`` on the day cell ``target_day_key``.

        The event keeps its time of day. Only the date field matching the
        event's kind is sent to the server.

        Returns:
            True if the server accepted the move, False if it failed (events
            are reloaded and ``error`` is set).

        Raises:
            KeyError: No event with that key.
            ValueError: ``target_day_key`` is not a YYYY-MM-DD date.
        """
        event = self.events[key]
        target_day = parse_day_key(target_day_key)
        target_key = day_key(target_day)
        if event.day_key == target_key:
            return True

        def apply() -> datetime:
            previous = event.start
            event.start = datetime.combine(target_day, previous.time())
            return previous

        def restore(previous: datetime) -> None:
            event.start = previous

        try:
            await optimistic_mutation(
                apply,
                lambda: self.api.update_video_project(
                    event.project_id, {DATE_FIELDS[event.kind]: target_key}
                ),
                restore,
            )
        except PlannerAPIError as e:
            self.error = e.message
            log.warning(
                "schedule_move_failed",
                project_id=event.project_id,
                kind=event.kind,
                status_code=e.status_code,
            )
            await self.load()
            return False

        self.error = None
        log.info(
            "schedule_event_moved",
            project_id=event.project_id,
            kind=event.kind,
            day=target_key,
        )
        return True

    def start(self) -> None:
        """Start the background refresh loop."""
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.create_task(self._refresh_loop())

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self.refresh_interval)
            try:
                await self.load()
            except PlannerAPIError as e:
                self.error = e.message
                log.warning("schedule_refresh_failed", status_code=e.status_code)

    async def close(self) -> None:
        """Stop the refresh loop."""
        if self._refresh_task is None:
            return
        self._refresh_task.cancel()
        try:
            await self._refresh_task
        except asyncio.CancelledError:
            log.debug("schedule_refresh_cancelled")
        self._refresh_task = None
