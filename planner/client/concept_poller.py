"""Background script generation for a freshly opened video project.

Creating a project returns immediately. When a project without a concept
is opened, the client:
    1. Fires POST /video-projects/generate-concept (failures are logged)
    2. Waits 3 s, then polls GET /video-projects/{id} every 4 s
    3. Stops on the first non-null ``generated_concept``, after 10 polls,
       or on close()
"""

import asyncio
from typing import Any

import structlog

from planner.client.api import PlannerAPIClient, PlannerAPIError

log = structlog.get_logger(__name__)

DEFAULT_INITIAL_DELAY = 3.0
DEFAULT_POLL_INTERVAL = 4.0
DEFAULT_MAX_POLLS = 10


class ConceptPoller:
    """Triggers concept generation and polls until the script appears.

    Args:
        api: Planner API client.
        project: Project row as returned by the API.
        initial_delay: Seconds before the first poll.
        interval: Seconds between polls.
        max_polls: Upper bound on GET requests.

    Attributes:
        project: Latest project row (updated when the concept arrives).
        polls: Number of GET requests issued so far.
    """

    def __init__(
        self,
        api: PlannerAPIClient,
        project: dict[str, Any],
        initial_delay: float = DEFAULT_INITIAL_DELAY,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_polls: int = DEFAULT_MAX_POLLS,
    ):
        self.api = api
        self.project = dict(project)
        self.initial_delay = initial_delay
        self.interval = interval
        self.max_polls = max_polls
        self.polls = 0
        self._trigger_task: asyncio.Task[None] | None = None
        self._poll_task: asyncio.Task[None] | None = None

    @property
    def concept(self) -> str | None:
        return self.project.get("generated_concept")

    @property
    def generating(self) -> bool:
        """True while the poll loop is still waiting for a concept."""
        return self._poll_task is not None and not self._poll_task.done()

    def start(self, trigger: bool = True) -> None:
        """Start polling, and generation too when ``trigger`` is set.

        Does nothing if the project already has a concept.
        """
        if self.concept or self._poll_task is not None:
            return
        if trigger:
            self._trigger_task = asyncio.create_task(self._trigger())
        self._poll_task = asyncio.create_task(self._poll())

    async def wait(self) -> str | None:
        """Wait for polling to end; returns the concept if one arrived."""
        tasks = [task for task in (self._trigger_task, self._poll_task) if task is not None]
        if tasks:
            await asyncio.gather(*tasks)
        return self.concept

    async def close(self) -> None:
        """Stop triggering and polling."""
        for task in (self._trigger_task, self._poll_task):
            if task is None or task.done():
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                log.debug("concept_poller_cancelled", project_id=self.project["id"])

    async def _trigger(self) -> None:
        try:
            await self.api.generate_concept(
                self.project["id"],
                self.project["title"],
                hook=self.project.get("hook") or None,
                rough_sketch=self.project.get("rough_sketch") or None,
            )
        except PlannerAPIError as e:
            log.warning(
                "concept_trigger_failed",
                project_id=self.project["id"],
                status_code=e.status_code,
                error=e.message,
            )

    async def _poll(self) -> None:
        await asyncio.sleep(self.initial_delay)
        while self.polls < self.max_polls:
            self.polls += 1
            try:
                row = await self.api.get_video_project(self.project["id"])
            except PlannerAPIError as e:
                log.debug("concept_poll_failed", project_id=self.project["id"], error=e.message)
            else:
                if row.get("generated_concept"):
                    self.project = row
                    log.info(
                        "concept_received",
                        project_id=self.project["id"],
                        polls=self.polls,
                    )
                    return
            if self.polls < self.max_polls:
                await asyncio.sleep(self.interval)
        log.info("concept_polling_exhausted", project_id=self.project["id"], polls=self.polls)
