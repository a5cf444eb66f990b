from __future__ import annotations

import logging
import random
from typing import List

from warrior.application.dtos import TickResult
from warrior.application.services import combat_service, progression_service, world_service
from warrior.domain.events import Defeat, SimulationEvent, Victory
from warrior.domain.models.config import GameConfig
from warrior.domain.models.state import (
    ActivityMode,
    BattlePositions,
    CultivationFlow,
    RunState,
    SimulationState,
    WorldState,
)

logger = logging.getLogger(__name__)


def create_initial_state(config: GameConfig) -> SimulationState:
    state = SimulationState()
    state.run.hp = float(progression_service.max_hp(state.run, config))
    state.statistics.enemies_defeated_by_rarity = {tier.key: 0 for tier in config.combat.rarity_tiers}
    return state


def clear_combat(state: SimulationState) -> None:
    state.enemy = None
    state.battle_positions.enemy_hex = None
    state.combat_timers.reset()


def apply_victory(
    state: SimulationState,
    config: GameConfig,
    events: List[SimulationEvent],
    rng: random.Random | None = None,
) -> None:
    defeated = state.enemy
    if defeated is None:
        return

    reward = progression_service.essence_reward(defeated.distance, defeated.rarity, config)
    state.resources.essence += reward

    world = state.world
    chained = world.pending_encounters > 0
    if chained:
        world.pending_encounters -= 1
    events.append(Victory(reward=reward, depth=defeated.distance, pending_encounters=world.pending_encounters))

    if chained:
        spawned = world_service.try_spawn_encounter(
            state,
            config,
            events,
            world_service.SPAWN_REASON_CHAIN,
            world_service.chain_spawn_chance(config),
            rng,
        )
        if not spawned:
            world.pending_encounters = 0
            clear_combat(state)
    else:
        clear_combat(state)

    run = state.run
    run.hp = min(
        progression_service.max_hp(run, config),
        run.hp + progression_service.hp_regen_per_second(run, config),
    )

    statistics = state.statistics
    statistics.total_enemies_defeated += 1
    rarity_key = defeated.rarity.key
    statistics.enemies_defeated_by_rarity[rarity_key] = statistics.enemies_defeated_by_rarity.get(rarity_key, 0) + 1


def apply_defeat_reset(state: SimulationState, config: GameConfig, events: List[SimulationEvent]) -> None:
    """End the run: only persistent progress and cultivation prestige survive."""
    previous = state.run
    depth = state.world.travel_depth
    state.run = RunState(
        body_prestige_level=previous.body_prestige_level,
        body_prestige_xp=previous.body_prestige_xp,
        mind_prestige_level=previous.mind_prestige_level,
        mind_prestige_xp=previous.mind_prestige_xp,
        spirit_prestige_level=previous.spirit_prestige_level,
        spirit_prestige_xp=previous.spirit_prestige_xp,
    )
    state.run.hp = float(progression_service.max_hp(state.run, config))
    state.world = WorldState(best_depth=state.world.best_depth)
    state.unlocks.cultivation = True
    state.enemy = None
    state.battle_positions = BattlePositions()
    state.combat_timers.reset()
    state.statistics.total_deaths += 1
    logger.debug("Run ended at depth %s (deaths=%s)", depth, state.statistics.total_deaths)
    events.append(Defeat(depth=depth))


def _resolve_encounter(
    state: SimulationState,
    config: GameConfig,
    events: List[SimulationEvent],
    rng: random.Random | None,
) -> None:
    outcome = combat_service.encounter_outcome(state)
    if outcome == combat_service.OUTCOME_DEFEAT:
        apply_defeat_reset(state, config, events)
    elif outcome == combat_service.OUTCOME_VICTORY:
        apply_victory(state, config, events, rng)


def tick(
    state: SimulationState,
    dt_ms: float,
    config: GameConfig,
    rng: random.Random | None = None,
) -> TickResult:
    """Advance ``state`` by ``dt_ms`` and return the new state with this tick's events.

    The input state is never mutated. A zero (or invalid) ``dt_ms`` returns an
    equal copy and no events.
    """
    next_state = state.copy()
    events: List[SimulationEvent] = []
    dt = progression_service.finite_non_negative(dt_ms)
    if dt <= 0:
        return TickResult(state=next_state, events=events)

    world_service.tick_movement(next_state, dt, config, events, rng)
    combat_service.tick_combat_intervals(next_state, dt, config, events)
    _resolve_encounter(next_state, config, events, rng)

    progression_service.apply_regeneration(next_state, dt, config)
    progression_service.apply_cultivation_flow(next_state, dt, config)
    events.extend(
        progression_service.resolve_level_ups(
            next_state.run, next_state.persistent, config, next_state.statistics
        )
    )
    progression_service.update_highest_levels(next_state.statistics, next_state.run, next_state.persistent)

    next_state.elapsed_ms += dt
    return TickResult(state=next_state, events=events)


def set_activity_mode(state: SimulationState, mode: ActivityMode | str) -> SimulationState:
    """Return a copy in ``mode``; cultivation is refused until it has been unlocked."""
    resolved = ActivityMode(mode)
    next_state = state.copy()
    if resolved == ActivityMode.CULTIVATION and not next_state.unlocks.cultivation:
        logger.debug("Cultivation is still locked; staying in %s", next_state.activity_mode.value)
        return next_state
    next_state.activity_mode = resolved
    return next_state


def set_flow_rates(state: SimulationState, body: float, mind: float, spirit: float) -> SimulationState:
    next_state = state.copy()
    next_state.cultivation = CultivationFlow(
        body=progression_service.finite_non_negative(body),
        mind=progression_service.finite_non_negative(mind),
        spirit=progression_service.finite_non_negative(spirit),
    )
    return next_state
