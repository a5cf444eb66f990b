from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional

from warrior.application.dtos import TickResult
from warrior.application.services.event_bus import EventBus
from warrior.application.services.progression_service import finite_non_negative
from warrior.application.services.simulation_service import tick
from warrior.domain.events import SimulationEvent
from warrior.domain.models.config import GameConfig
from warrior.domain.models.state import SimulationState

logger = logging.getLogger(__name__)

DEFAULT_MAX_FRAME_MS = 100.0


class FixedStepDriver:
    """Feed real frame times into ``tick`` in whole simulation steps.

    Frames are clamped to ``max_frame_ms`` so a stalled host does not trigger
    a burst of catch-up ticks; whatever is left below one step carries over.
    """

    def __init__(
        self,
        config: GameConfig,
        *,
        max_frame_ms: float = DEFAULT_MAX_FRAME_MS,
        event_bus: EventBus | None = None,
        on_autosave: Optional[Callable[[SimulationState], None]] = None,
    ) -> None:
        self.config = config
        self.max_frame_ms = max(0.0, float(max_frame_ms))
        self.event_bus = event_bus
        self.on_autosave = on_autosave
        self._accumulator_ms = 0.0
        self._since_autosave_ms = 0.0

    @property
    def step_ms(self) -> float:
        return self.config.timing.simulation_dt_ms

    @property
    def accumulator_ms(self) -> float:
        return self._accumulator_ms

    def reset(self) -> None:
        self._accumulator_ms = 0.0
        self._since_autosave_ms = 0.0

    def advance(self, state: SimulationState, frame_ms: float, rng: random.Random | None = None) -> TickResult:
        step = self.step_ms
        frame = min(self.max_frame_ms, finite_non_negative(frame_ms))
        if step <= 0:
            logger.debug("Simulation step %s is not positive; frame ignored", step)
            return TickResult(state=state, events=[], steps=0, alpha=0.0)

        self._accumulator_ms += frame
        events: List[SimulationEvent] = []
        steps = 0
        while self._accumulator_ms >= step:
            result = tick(state, step, self.config, rng)
            state = result.state
            events.extend(result.events)
            self._accumulator_ms -= step
            steps += 1

        if self.event_bus is not None and events:
            self.event_bus.publish_all(events)

        self._maybe_autosave(state, steps * step)
        return TickResult(state=state, events=events, steps=steps, alpha=self._accumulator_ms / step)

    def run_for(self, state: SimulationState, duration_ms: float, rng: random.Random | None = None) -> TickResult:
        """Headless helper: feed ``duration_ms`` through ``advance`` in max-size frames."""
        remaining = finite_non_negative(duration_ms)
        events: List[SimulationEvent] = []
        steps = 0
        result = TickResult(state=state, events=[], steps=0)
        frame_size = self.max_frame_ms
        if frame_size <= 0:
            return result
        while remaining > 0:
            frame = min(frame_size, remaining)
            result = self.advance(state, frame, rng)
            state = result.state
            events.extend(result.events)
            steps += result.steps
            remaining -= frame
        return TickResult(state=state, events=events, steps=steps, alpha=result.alpha)

    def _maybe_autosave(self, state: SimulationState, simulated_ms: float) -> None:
        if self.on_autosave is None:
            return
        interval = self.config.timing.autosave_ms
        self._since_autosave_ms += simulated_ms
        if interval <= 0 or self._since_autosave_ms < interval:
            return
        self._since_autosave_ms = 0.0
        self.on_autosave(state)
