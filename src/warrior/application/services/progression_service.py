from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, List

from warrior.domain.events import LevelUp, PrestigeLevelUp, SimulationEvent
from warrior.domain.models.config import GameConfig, RarityTier
from warrior.domain.models.state import (
    CULTIVATION_STATS,
    ActivityMode,
    CultivationFlow,
    PersistentState,
    RunState,
    SimulationState,
    Statistics,
)


def finite_non_negative(value: object) -> float:
    """Coerce rate inputs: negative, NaN, infinite or non-numeric become 0."""
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


# --- thresholds ---------------------------------------------------------------


def run_xp_threshold(level: int, config: GameConfig) -> int:
    progression = config.progression
    return math.floor(progression.run_xp_base * (1 + progression.run_xp_growth_rate) ** max(0, level - 1))


def prestige_xp_threshold(level: int, config: GameConfig) -> int:
    progression = config.progression
    return math.floor(progression.prestige_xp_base * (1 + progression.prestige_xp_growth_rate) ** max(0, level))


def cultivation_xp_threshold(stat: str, level: int, config: GameConfig) -> int:
    cultivation = config.cultivation
    base = getattr(cultivation, f"{stat}_xp_base")
    exponent = getattr(cultivation, f"{stat}_xp_exponent")
    return math.floor(base * (max(0, level) + 1) ** exponent)


# --- derived stats ------------------------------------------------------------


def _scaled_gain(level_progress: int, per_level: float, growth_rate: float) -> float:
    return level_progress * per_level * (1 + growth_rate) ** level_progress


def max_hp(run: RunState, config: GameConfig) -> int:
    combat = config.combat
    level_progress = max(0, run.endurance_level - 1)
    return math.floor(
        combat.player_base_hp
        + _scaled_gain(level_progress, combat.endurance_hp_per_level, combat.endurance_hp_growth_rate)
    )


def max_ki(run: RunState, config: GameConfig) -> float:
    cultivation = config.cultivation
    level_progress = max(0, run.spirit_level)
    return cultivation.ki_max_base + _scaled_gain(
        level_progress, cultivation.ki_max_per_spirit_level, cultivation.ki_spirit_growth_rate
    )


def hp_regen_per_second(run: RunState, config: GameConfig) -> float:
    cultivation = config.cultivation
    level_progress = max(0, run.body_level)
    return cultivation.hp_regen_base_per_second + _scaled_gain(
        level_progress, cultivation.hp_regen_per_body_level, cultivation.hp_regen_body_growth_rate
    )


def ki_regen_per_second(run: RunState, config: GameConfig) -> float:
    cultivation = config.cultivation
    return cultivation.ki_base_regen_per_second + max(0, run.spirit_level) * cultivation.ki_regen_per_spirit_level


def mind_attack_speed_multiplier(mind_level: int, config: GameConfig) -> float:
    cultivation = config.cultivation
    level = max(0, mind_level)
    raw = 1 + math.log1p(level) * cultivation.mind_speed_log_factor + level * cultivation.mind_speed_per_level
    return min(cultivation.max_attack_speed_multiplier, raw)


# --- experience from combat and rewards ---------------------------------------


def strength_xp_gain(damage_dealt: int, persistent: PersistentState, config: GameConfig) -> int:
    progression = config.progression
    multiplier = 1 + persistent.strength_prestige_level * progression.strength_xp_boost_per_prestige_level
    return math.floor(damage_dealt * progression.strength_xp_per_damage * multiplier)


def endurance_xp_gain(damage_taken: int, persistent: PersistentState, config: GameConfig) -> int:
    progression = config.progression
    multiplier = 1 + persistent.endurance_prestige_level * progression.endurance_xp_boost_per_prestige_level
    return math.floor(damage_taken * progression.endurance_xp_per_damage * multiplier)


def prestige_xp_gain(run_xp_gain: float, gain_rate: float) -> int:
    if run_xp_gain <= 0 or gain_rate <= 0:
        return 0
    return max(1, math.floor(run_xp_gain * gain_rate))


def essence_reward(distance: int, rarity: RarityTier | None, config: GameConfig) -> int:
    rarity_multiplier = rarity.essence if rarity is not None else 1.0
    rewards = config.rewards
    return math.floor(rewards.essence_base * max(1, distance) ** rewards.essence_exponent * rarity_multiplier)


# --- cultivation --------------------------------------------------------------


def normalize_flow_rates(flow: CultivationFlow | None) -> CultivationFlow:
    if flow is None:
        return CultivationFlow(body=1 / 3, mind=1 / 3, spirit=1 / 3)
    body = finite_non_negative(flow.body)
    mind = finite_non_negative(flow.mind)
    spirit = finite_non_negative(flow.spirit)
    total = body + mind + spirit
    if total <= 0:
        return CultivationFlow(body=1 / 3, mind=1 / 3, spirit=1 / 3)
    return CultivationFlow(body=body / total, mind=mind / total, spirit=spirit / total)


def cultivation_xp_gain(allocated_essence: float, prestige_level: int, config: GameConfig) -> float:
    if allocated_essence <= 0:
        return 0.0
    multiplier = 1 + max(0, prestige_level) * config.cultivation.xp_boost_per_prestige_level
    return allocated_essence * multiplier


def credit_cultivation_essence(run: RunState, essence: float, flow: CultivationFlow, config: GameConfig) -> None:
    """Split ``essence`` by the normalized flow and credit each stat.

    The boosted amount feeds the run pool and the prestige pool alike. Live
    ticks and offline catch-up both credit through here.
    """
    rates = normalize_flow_rates(flow)
    for stat in CULTIVATION_STATS:
        allocated = essence * getattr(rates, stat)
        gained = cultivation_xp_gain(allocated, getattr(run, f"{stat}_prestige_level"), config)
        if gained <= 0:
            continue
        setattr(run, f"{stat}_xp", getattr(run, f"{stat}_xp") + gained)
        setattr(run, f"{stat}_prestige_xp", getattr(run, f"{stat}_prestige_xp") + gained)


def can_cultivate(state: SimulationState) -> bool:
    return (
        state.unlocks.cultivation
        and state.activity_mode == ActivityMode.CULTIVATION
        and state.enemy is None
    )


def apply_cultivation_flow(state: SimulationState, dt_ms: float, config: GameConfig) -> float:
    """Draw essence into cultivation for ``dt_ms``; returns the essence spent."""
    if not can_cultivate(state):
        return 0.0
    requested = finite_non_negative(dt_ms) / 1000 * config.cultivation.max_flow_essence_per_second
    spent = min(state.resources.essence, requested)
    if spent <= 0:
        return 0.0
    state.resources.essence = max(0.0, state.resources.essence - spent)
    credit_cultivation_essence(state.run, spent, state.cultivation, config)
    return spent


def apply_regeneration(state: SimulationState, dt_ms: float, config: GameConfig) -> None:
    run = state.run
    if run.hp <= 0:
        return
    seconds = finite_non_negative(dt_ms) / 1000
    run.hp = min(max_hp(run, config), run.hp + hp_regen_per_second(run, config) * seconds)
    run.ki = min(max_ki(run, config), run.ki + ki_regen_per_second(run, config) * seconds)


# --- level-up drains ----------------------------------------------------------


@dataclass(frozen=True)
class _LevelTrack:
    owner: str  # "run" | "persistent"
    level_attr: str
    xp_attr: str
    counter: str
    threshold: Callable[[int, GameConfig], int]
    event: Callable[[int], SimulationEvent]


def _cultivation_threshold(stat: str) -> Callable[[int, GameConfig], int]:
    return lambda level, config: cultivation_xp_threshold(stat, level, config)


def _level_up(stat: str) -> Callable[[int], SimulationEvent]:
    return lambda level: LevelUp(stat=stat, level=level)


def _prestige_level_up(stat: str) -> Callable[[int], SimulationEvent]:
    return lambda level: PrestigeLevelUp(stat=stat, level=level)


_LEVEL_TRACKS: tuple[_LevelTrack, ...] = (
    _LevelTrack("run", "strength_level", "strength_xp", "strength", run_xp_threshold, _level_up("strength")),
    _LevelTrack("run", "endurance_level", "endurance_xp", "endurance", run_xp_threshold, _level_up("endurance")),
    _LevelTrack(
        "persistent",
        "strength_prestige_level",
        "strength_prestige_xp",
        "strength_prestige",
        prestige_xp_threshold,
        _prestige_level_up("strength"),
    ),
    _LevelTrack(
        "persistent",
        "endurance_prestige_level",
        "endurance_prestige_xp",
        "endurance_prestige",
        prestige_xp_threshold,
        _prestige_level_up("endurance"),
    ),
    _LevelTrack("run", "body_level", "body_xp", "body", _cultivation_threshold("body"), _level_up("body")),
    _LevelTrack(
        "run", "body_prestige_level", "body_prestige_xp", "body_prestige", prestige_xp_threshold, _prestige_level_up("body")
    ),
    _LevelTrack("run", "mind_level", "mind_xp", "mind", _cultivation_threshold("mind"), _level_up("mind")),
    _LevelTrack(
        "run", "mind_prestige_level", "mind_prestige_xp", "mind_prestige", prestige_xp_threshold, _prestige_level_up("mind")
    ),
    _LevelTrack("run", "spirit_level", "spirit_xp", "spirit", _cultivation_threshold("spirit"), _level_up("spirit")),
    _LevelTrack(
        "run",
        "spirit_prestige_level",
        "spirit_prestige_xp",
        "spirit_prestige",
        prestige_xp_threshold,
        _prestige_level_up("spirit"),
    ),
)


def resolve_level_ups(
    run: RunState,
    persistent: PersistentState,
    config: GameConfig,
    statistics: Statistics | None = None,
) -> List[SimulationEvent]:
    """Drain every track until its pool is below the next threshold.

    A single injection may cross several thresholds, so each track loops.
    Afterwards HP is clamped to the (possibly new) ceiling; it is never raised.
    """
    events: List[SimulationEvent] = []
    for track in _LEVEL_TRACKS:
        target = run if track.owner == "run" else persistent
        while True:
            level = getattr(target, track.level_attr)
            # A non-positive threshold would never drain.
            required = max(1, track.threshold(level, config))
            pool = getattr(target, track.xp_attr)
            if pool < required:
                break
            setattr(target, track.xp_attr, pool - required)
            setattr(target, track.level_attr, level + 1)
            if statistics is not None:
                counters = statistics.total_levels_gained
                setattr(counters, track.counter, getattr(counters, track.counter) + 1)
            events.append(track.event(level + 1))

    run.hp = min(run.hp, max_hp(run, config))
    return events


def update_highest_levels(statistics: Statistics, run: RunState, persistent: PersistentState) -> None:
    highest = statistics.highest_levels
    observed = {
        "strength": run.strength_level,
        "endurance": run.endurance_level,
        "body": run.body_level,
        "mind": run.mind_level,
        "spirit": run.spirit_level,
        "strength_prestige": persistent.strength_prestige_level,
        "endurance_prestige": persistent.endurance_prestige_level,
        "body_prestige": run.body_prestige_level,
        "mind_prestige": run.mind_prestige_level,
        "spirit_prestige": run.spirit_prestige_level,
    }
    for key, level in observed.items():
        setattr(highest, key, max(getattr(highest, key), int(level)))
