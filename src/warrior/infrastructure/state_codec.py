from __future__ import annotations

import math
from dataclasses import fields, is_dataclass
from typing import Any, Dict, Mapping, Optional

from warrior.application.services.balance_tables import biome_from_mapping, rarity_tier_from_mapping
from warrior.application.services.progression_service import max_hp
from warrior.application.services.simulation_service import create_initial_state
from warrior.domain.models.config import Biome, GameConfig, RarityTier
from warrior.domain.models.hex import Hex
from warrior.domain.models.state import (
    CULTIVATION_STATS,
    ActivityMode,
    BattlePositions,
    Enemy,
    SimulationState,
)

_PLAIN_SECTIONS = ("run", "persistent", "world", "combat_timers", "cultivation", "resources", "unlocks")


def _record_to_dict(record: Any) -> Dict[str, Any]:
    return {item.name: getattr(record, item.name) for item in fields(record)}


def _hex_to_payload(value: Optional[Hex]) -> Optional[Dict[str, int]]:
    return value.to_dict() if value is not None else None


def _enemy_to_payload(enemy: Optional[Enemy]) -> Optional[Dict[str, Any]]:
    if enemy is None:
        return None
    return {
        "hp": enemy.hp,
        "max_hp": enemy.max_hp,
        "attack": enemy.attack,
        "distance": enemy.distance,
        "biome": {"key": enemy.biome.key, "name": enemy.biome.name, "enemy_color": enemy.biome.enemy_color},
        "rarity": {
            "key": enemy.rarity.key,
            "name": enemy.rarity.name,
            "chance": enemy.rarity.chance,
            "hp": enemy.rarity.hp,
            "attack": enemy.rarity.attack,
            "essence": enemy.rarity.essence,
            "color": enemy.rarity.color,
        },
    }


def state_to_payload(state: SimulationState) -> Dict[str, Any]:
    """Flatten ``state`` into JSON-safe primitives."""
    payload: Dict[str, Any] = {name: _record_to_dict(getattr(state, name)) for name in _PLAIN_SECTIONS}
    statistics = state.statistics
    payload["statistics"] = {
        "total_deaths": statistics.total_deaths,
        "total_enemies_defeated": statistics.total_enemies_defeated,
        "enemies_defeated_by_rarity": dict(statistics.enemies_defeated_by_rarity),
        "total_levels_gained": statistics.total_levels_gained.as_dict(),
        "highest_levels": statistics.highest_levels.as_dict(),
    }
    positions = state.battle_positions
    payload["battle_positions"] = {
        "player_hex": _hex_to_payload(positions.player_hex),
        "enemy_hex": _hex_to_payload(positions.enemy_hex),
        "movement_ms": positions.movement_ms,
    }
    payload["enemy"] = _enemy_to_payload(state.enemy)
    payload["activity_mode"] = state.activity_mode.value
    payload["elapsed_ms"] = state.elapsed_ms
    return payload


# --- hydration ----------------------------------------------------------------


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _coerce_field(type_name: str, value: Any) -> tuple[bool, Any]:
    """Return ``(accepted, value)`` for ``value`` against a declared field type.

    Every saved level, counter, pool and timer is non-negative, so negative
    numbers are rejected and the field keeps its default.
    """
    if type_name == "bool":
        return isinstance(value, bool), value
    if type_name == "int":
        if _is_number(value) and value >= 0 and float(value).is_integer():
            return True, int(value)
        return False, None
    if type_name == "float":
        if _is_number(value) and value >= 0:
            return True, float(value)
        return False, None
    return False, None


def _overlay(record: Any, raw: Any) -> None:
    if not is_dataclass(record) or not isinstance(raw, Mapping):
        return
    for item in fields(record):
        if item.name not in raw:
            continue
        default = getattr(record, item.name)
        if is_dataclass(default):
            _overlay(default, raw[item.name])
            continue
        accepted, value = _coerce_field(str(item.type), raw[item.name])
        if accepted:
            setattr(record, item.name, value)


def _hex_from_payload(raw: Any) -> Optional[Hex]:
    if not isinstance(raw, Mapping):
        return None
    q, r = raw.get("q"), raw.get("r")
    if not (_is_number(q) and _is_number(r)):
        return None
    return Hex(int(q), int(r))


def _resolve_biome(raw: Any, config: GameConfig) -> Optional[Biome]:
    if not isinstance(raw, Mapping):
        return None
    key = raw.get("key")
    for biome in config.world.biomes:
        if biome.key == key:
            return biome
    return biome_from_mapping(raw)


def _resolve_rarity(raw: Any, config: GameConfig) -> Optional[RarityTier]:
    if not isinstance(raw, Mapping):
        return None
    key = raw.get("key")
    for tier in config.combat.rarity_tiers:
        if tier.key == key:
            return tier
    try:
        return rarity_tier_from_mapping(raw)
    except (TypeError, ValueError):
        return None


def _enemy_from_payload(raw: Any, config: GameConfig) -> Optional[Enemy]:
    if not isinstance(raw, Mapping):
        return None
    numbers = [raw.get(key) for key in ("hp", "max_hp", "attack", "distance")]
    if not all(_is_number(value) for value in numbers):
        return None
    biome = _resolve_biome(raw.get("biome"), config)
    rarity = _resolve_rarity(raw.get("rarity"), config)
    if biome is None or rarity is None:
        return None
    hp, enemy_max_hp, attack, distance = (int(value) for value in numbers)
    if enemy_max_hp < 1 or hp < 1:
        return None
    return Enemy(
        hp=min(hp, enemy_max_hp),
        max_hp=enemy_max_hp,
        attack=max(1, attack),
        biome=biome,
        rarity=rarity,
        distance=max(1, distance),
    )


def _statistics_from_payload(state: SimulationState, raw: Any) -> None:
    if not isinstance(raw, Mapping):
        return
    statistics = state.statistics
    _overlay(statistics, {key: value for key, value in raw.items() if key != "enemies_defeated_by_rarity"})
    by_rarity = raw.get("enemies_defeated_by_rarity")
    if isinstance(by_rarity, Mapping):
        for key, value in by_rarity.items():
            if _is_number(value) and value >= 0:
                statistics.enemies_defeated_by_rarity[str(key)] = int(value)


def state_from_payload(payload: Any, config: GameConfig) -> SimulationState:
    """Rebuild a state, keeping the fresh default for anything missing or malformed."""
    state = create_initial_state(config)
    if not isinstance(payload, Mapping):
        return state

    for name in _PLAIN_SECTIONS:
        _overlay(getattr(state, name), payload.get(name))
    _statistics_from_payload(state, payload.get("statistics"))

    positions_raw = payload.get("battle_positions")
    if isinstance(positions_raw, Mapping):
        player_hex = _hex_from_payload(positions_raw.get("player_hex"))
        movement_ms = positions_raw.get("movement_ms")
        state.battle_positions = BattlePositions(
            player_hex=player_hex if player_hex is not None else state.battle_positions.player_hex,
            enemy_hex=_hex_from_payload(positions_raw.get("enemy_hex")),
            movement_ms=float(movement_ms) if _is_number(movement_ms) and movement_ms >= 0 else 0.0,
        )

    state.enemy = _enemy_from_payload(payload.get("enemy"), config)
    if state.enemy is None or state.battle_positions.enemy_hex is None:
        state.enemy = None
        state.battle_positions.enemy_hex = None
        state.combat_timers.reset()

    try:
        state.activity_mode = ActivityMode(payload.get("activity_mode", state.activity_mode.value))
    except ValueError:
        state.activity_mode = ActivityMode.BATTLE
    if state.activity_mode == ActivityMode.CULTIVATION and not state.unlocks.cultivation:
        state.activity_mode = ActivityMode.BATTLE

    elapsed = payload.get("elapsed_ms")
    if _is_number(elapsed) and elapsed >= 0:
        state.elapsed_ms = float(elapsed)

    _enforce_invariants(state, config)
    return state


def _enforce_invariants(state: SimulationState, config: GameConfig) -> None:
    world = state.world
    world.best_depth = max(world.best_depth, world.travel_depth)
    state.resources.essence = max(0.0, state.resources.essence)
    run = state.run
    run.strength_level = max(1, run.strength_level)
    run.endurance_level = max(1, run.endurance_level)
    for stat in CULTIVATION_STATS:
        setattr(run, f"{stat}_level", max(0, getattr(run, f"{stat}_level")))
    run.hp = max(0.0, min(run.hp, max_hp(run, config)))
