# =============================================================================
# Step Replay — Client-Side Progress State Machine
# =============================================================================
#
# The server returns all three steps in one response. ProgressReplay walks
# through them with a fixed pause between steps so the user sees the
# pipeline advance stage by stage:
#
#   IDLE ──submit──▶ RUNNING(0) ─▶ RUNNING(1) ─▶ RUNNING(2) ─▶ COMPLETED
#                       │                                  └─▶ ERRORED
#                       └──────── fetch failed ──────────────▶ ERRORED
#
# Each submission starts a new generation. Every state change checks the
# generation first, so a replay that was superseded by a newer submission
# stops touching state as soon as it wakes up.
# =============================================================================

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from app.agents.stages import STAGES
from app.client.research_client import ResearchRequestError
from app.models.responses import ResearchResponse, ResearchStep

logger = logging.getLogger(__name__)

NO_RESULTS = "No results returned from research"


class RunPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ERRORED = "errored"


@dataclass
class ClientRunState:
    """What the UI shows for the current research run."""

    run_id: int = 0
    phase: RunPhase = RunPhase.IDLE
    active_stage_index: int | None = None
    active_agent: str | None = None
    revealed_steps: list[ResearchStep] = field(default_factory=list)
    final_response: str = ""
    error: str | None = None


Fetch = Callable[[str], Awaitable[ResearchResponse]]
Listener = Callable[[ClientRunState], None]
Sleep = Callable[[float], Awaitable[None]]


class ProgressReplay:
    """Reveal research steps one at a time, keyed to the latest run.

    Args:
        fetch: Coroutine function that sends the query and returns the full
            response, raising ResearchRequestError on failure.
        interval: Seconds to wait before revealing each step.
        on_change: Called with a snapshot after every state change.
        sleep: Pacing function; swapped out in tests.
    """

    def __init__(
        self,
        fetch: Fetch,
        interval: float = 1.0,
        on_change: Listener | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self._fetch = fetch
        self._interval = interval
        self._on_change = on_change
        self._sleep = sleep
        self._generation = 0
        self._state = ClientRunState()

    @property
    def state(self) -> ClientRunState:
        return copy.deepcopy(self._state)

    def is_current(self, run_id: int) -> bool:
        return run_id == self._generation

    def begin(self) -> int:
        """Start a new run, superseding any replay still in progress."""
        self._generation += 1
        first = STAGES[0]
        self._state = ClientRunState(
            run_id=self._generation,
            phase=RunPhase.RUNNING,
            active_stage_index=0,
            active_agent=first.stage.value,
            revealed_steps=[
                ResearchStep(agent=first.stage.value, status=first.status_message)
            ],
        )
        self._notify()
        return self._generation

    async def submit(self, query: str) -> bool:
        """Fetch and replay a research run.

        Returns True if this run reached COMPLETED. Blank queries are
        ignored and return False.
        """
        if not query.strip():
            return False

        run_id = self.begin()
        logger.debug("Run %d: submitting query '%s'", run_id, query[:80])

        try:
            response = await self._fetch(query)
        except ResearchRequestError as e:
            self._fail(run_id, str(e) or "An unexpected error occurred")
            return False

        return await self.reveal(run_id, response)

    async def reveal(self, run_id: int, response: ResearchResponse) -> bool:
        """Replay `response` for run `run_id`; stop if it gets superseded."""
        for index, step in enumerate(response.steps):
            if not self._update(run_id, _activate, index, step.agent):
                return False
            await self._sleep(self._interval)
            if not self._update(run_id, _reveal, index, step):
                return False

        if not response.final_response:
            self._fail(run_id, NO_RESULTS)
            return False

        return self._update(run_id, _complete, response.final_response)

    def _fail(self, run_id: int, message: str) -> None:
        logger.warning("Run %d failed: %s", run_id, message)
        self._update(run_id, _error, message)

    def _update(self, run_id: int, mutate, *args) -> bool:
        if not self.is_current(run_id):
            logger.debug(
                "Run %d superseded by run %d; dropping update",
                run_id, self._generation,
            )
            return False
        mutate(self._state, *args)
        self._notify()
        return True

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.state)


# ---------------------------------------------------------------------------
# State transitions
# ---------------------------------------------------------------------------


def _activate(state: ClientRunState, index: int, agent: str) -> None:
    state.active_stage_index = index
    state.active_agent = agent


def _reveal(state: ClientRunState, index: int, step: ResearchStep) -> None:
    if index < len(state.revealed_steps):
        state.revealed_steps[index] = step
    else:
        state.revealed_steps.append(step)


def _complete(state: ClientRunState, final_response: str) -> None:
    state.final_response = final_response
    state.phase = RunPhase.COMPLETED
    state.active_stage_index = None
    state.active_agent = None


def _error(state: ClientRunState, message: str) -> None:
    state.error = message
    state.phase = RunPhase.ERRORED
    state.active_stage_index = None
    state.active_agent = None
