from __future__ import annotations

import logging
import math

from warrior.application.dtos import OfflineReport, OfflineResult
from warrior.application.services.progression_service import (
    credit_cultivation_essence,
    finite_non_negative,
    resolve_level_ups,
    update_highest_levels,
)
from warrior.domain.models.config import GameConfig
from warrior.domain.models.state import SimulationState

logger = logging.getLogger(__name__)

MS_PER_HOUR = 60 * 60 * 1000
MIN_OFFLINE_MS = 1000


def offline_cap_ms(config: GameConfig) -> float:
    return max(0.0, config.timing.offline_cap_hours * MS_PER_HOUR)


def passive_essence_rate(state: SimulationState, config: GameConfig) -> float:
    """Flat essence per second while away.

    Keyed only on best depth and strength/endurance prestige, so it drifts
    from what live play would have earned.
    """
    persistence = config.persistence
    prestige_levels = state.persistent.strength_prestige_level + state.persistent.endurance_prestige_level
    return (
        persistence.offline_essence_per_second_base
        + state.world.best_depth * persistence.offline_essence_per_best_depth
        + prestige_levels * persistence.offline_essence_per_prestige_level
    )


def apply_offline_progress(state: SimulationState, elapsed_ms: float, config: GameConfig) -> OfflineResult:
    capped_ms = min(finite_non_negative(elapsed_ms), offline_cap_ms(config))
    next_state = state.copy()
    if capped_ms <= MIN_OFFLINE_MS:
        return OfflineResult(state=next_state)

    seconds_away = capped_ms / 1000
    passive_gain = math.floor(seconds_away * passive_essence_rate(next_state, config))
    next_state.resources.essence += max(0, passive_gain)

    flow_spent = 0.0
    if next_state.unlocks.cultivation:
        max_spend = (
            seconds_away
            * config.cultivation.max_flow_essence_per_second
            * config.persistence.offline_flow_efficiency
        )
        flow_spent = max(0.0, min(next_state.resources.essence, max_spend))
        next_state.resources.essence -= flow_spent
        credit_cultivation_essence(next_state.run, flow_spent, next_state.cultivation, config)

    events = resolve_level_ups(next_state.run, next_state.persistent, config, next_state.statistics)
    update_highest_levels(next_state.statistics, next_state.run, next_state.persistent)
    next_state.elapsed_ms += capped_ms

    report = OfflineReport(
        away_seconds=math.floor(seconds_away),
        passive_essence_gain=max(0, passive_gain),
        flow_essence_spent=math.floor(flow_spent),
    )
    logger.debug(
        "Offline catch-up: %ss away, +%s essence, %s spent on cultivation, %s level-ups",
        report.away_seconds,
        report.passive_essence_gain,
        report.flow_essence_spent,
        len(events),
    )
    return OfflineResult(state=next_state, report=report, events=events)
