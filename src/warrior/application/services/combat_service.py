from __future__ import annotations

import math
import random
from typing import List, Optional

from warrior.application.services.progression_service import (
    endurance_xp_gain,
    mind_attack_speed_multiplier,
    prestige_xp_gain,
    strength_xp_gain,
)
from warrior.domain.events import EnemyHit, PlayerHit, SimulationEvent
from warrior.domain.models.config import Biome, BiomeModifier, GameConfig, RarityTier
from warrior.domain.models.state import Enemy, RunState, SimulationState
from warrior.domain.services.hex_geometry import hex_distance

_NEUTRAL_MODIFIER = BiomeModifier()
_FALLBACK_RARITY = RarityTier(key="common", name="Common", chance=1.0)

OUTCOME_VICTORY = "victory"
OUTCOME_DEFEAT = "defeat"


def _depth_log(depth: float) -> float:
    return math.log1p(max(0.0, depth))


def enemy_max_hp(depth: int, config: GameConfig) -> int:
    combat = config.combat
    current = max(1, depth)
    scale = 1 + _depth_log(current) * combat.enemy_hp_log_factor + current * combat.enemy_hp_depth_factor
    return math.floor(combat.enemy_hp_base * max(0.0, scale) ** combat.enemy_hp_exponent)


def enemy_attack(depth: int, config: GameConfig) -> int:
    combat = config.combat
    current = max(1, depth)
    ramp = _depth_log(current) * combat.enemy_attack_log_factor + current * combat.enemy_attack_depth_factor
    return math.floor(combat.enemy_attack_base + max(0.0, ramp) ** combat.enemy_attack_exponent)


def roll_rarity(config: GameConfig, rng: random.Random | None = None) -> RarityTier:
    """Walk one uniform roll against the cumulative tier table.

    A roll past the last boundary (rounding, or chances not summing to 1)
    lands on the last tier.
    """
    tiers = config.combat.rarity_tiers
    if not tiers:
        return _FALLBACK_RARITY
    rng = rng or random
    roll = rng.random()
    cumulative = 0.0
    for tier in tiers:
        cumulative += tier.chance
        if roll <= cumulative:
            return tier
    return tiers[-1]


def create_enemy(
    distance: int,
    config: GameConfig,
    *,
    biome: Biome,
    current_depth: int | None = None,
    rarity: RarityTier | None = None,
    rng: random.Random | None = None,
) -> Enemy:
    rarity = rarity or roll_rarity(config, rng)
    modifier = config.combat.biome_modifiers.get(biome.key, _NEUTRAL_MODIFIER)
    depth = max(1, current_depth if current_depth is not None else distance)
    hp = max(1, math.floor(enemy_max_hp(depth, config) * modifier.hp * rarity.hp))
    attack = max(1, math.floor(enemy_attack(depth, config) * modifier.attack * rarity.attack))
    return Enemy(hp=hp, max_hp=hp, attack=attack, biome=biome, rarity=rarity, distance=distance)


def player_damage(run: RunState, config: GameConfig) -> int:
    combat = config.combat
    level_progress = max(0, run.strength_level - 1)
    scaled = level_progress * combat.strength_attack_per_level * (1 + combat.strength_attack_growth_rate) ** level_progress
    return max(combat.min_damage, math.floor(combat.player_base_attack + scaled))


def incoming_damage(attack: float, config: GameConfig) -> int:
    return max(config.combat.min_damage, math.floor(attack))


def player_attack_interval_ms(run: RunState, config: GameConfig) -> float:
    combat = config.combat
    multiplier = mind_attack_speed_multiplier(run.mind_level, config)
    return max(combat.min_attack_interval_ms, combat.player_attack_interval_ms / max(multiplier, 1e-9))


def is_within_effective_range(state: SimulationState, config: GameConfig) -> bool:
    positions = state.battle_positions
    if state.enemy is None or positions.enemy_hex is None:
        return False
    return hex_distance(positions.player_hex, positions.enemy_hex) <= config.combat.effective_range_hex


def _player_attack(state: SimulationState, config: GameConfig, events: List[SimulationEvent]) -> None:
    enemy = state.enemy
    if enemy is None:
        return
    damage = player_damage(state.run, config)
    xp_gain = strength_xp_gain(damage, state.persistent, config)
    prestige_gain = prestige_xp_gain(xp_gain, config.progression.strength_prestige_gain)
    state.run.strength_xp += xp_gain
    state.persistent.strength_prestige_xp += prestige_gain
    enemy.hp = max(0, enemy.hp - damage)
    events.append(PlayerHit(amount=damage, strength_xp_gain=xp_gain, strength_prestige_xp_gain=prestige_gain))


def _enemy_attack(state: SimulationState, config: GameConfig, events: List[SimulationEvent]) -> None:
    enemy = state.enemy
    if enemy is None:
        return
    damage = incoming_damage(enemy.attack, config)
    xp_gain = endurance_xp_gain(damage, state.persistent, config)
    prestige_gain = prestige_xp_gain(xp_gain, config.progression.endurance_prestige_gain)
    state.run.endurance_xp += xp_gain
    state.persistent.endurance_prestige_xp += prestige_gain
    state.run.hp = max(0.0, state.run.hp - damage)
    events.append(EnemyHit(amount=damage, endurance_xp_gain=xp_gain, endurance_prestige_xp_gain=prestige_gain))


def tick_combat_intervals(
    state: SimulationState,
    dt_ms: float,
    config: GameConfig,
    events: List[SimulationEvent],
) -> None:
    """Advance both attack timers; at most one swing per side per call.

    Out of range (or with no enemy) the timers are zeroed instead.
    """
    timers = state.combat_timers
    if not is_within_effective_range(state, config):
        timers.reset()
        return

    timers.player_ms += dt_ms
    timers.enemy_ms += dt_ms

    player_interval = player_attack_interval_ms(state.run, config)
    if timers.player_ms >= player_interval:
        timers.player_ms -= player_interval
        _player_attack(state, config, events)

    if state.enemy is not None and state.enemy.hp <= 0:
        return

    enemy_interval = config.combat.enemy_attack_interval_ms
    if timers.enemy_ms >= enemy_interval:
        timers.enemy_ms -= enemy_interval
        _enemy_attack(state, config, events)


def encounter_outcome(state: SimulationState) -> Optional[str]:
    if state.run.hp <= 0:
        return OUTCOME_DEFEAT
    if state.enemy is not None and state.enemy.hp <= 0:
        return OUTCOME_VICTORY
    return None
