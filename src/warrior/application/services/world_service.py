from __future__ import annotations

import logging
import math
import random
from typing import List, Tuple

from warrior.application.services.combat_service import create_enemy
from warrior.domain.events import ChainSpawnMiss, RevealHex, SimulationEvent, SpawnEnemy
from warrior.domain.models.config import UNKNOWN_BIOME, Biome, GameConfig
from warrior.domain.models.hex import HEX_DIRECTIONS, Hex
from warrior.domain.models.state import ActivityMode, BattlePositions, SimulationState
from warrior.domain.services.hex_geometry import (
    direction_for_index,
    distance_from_origin,
    hex_distance,
    step_toward,
)

logger = logging.getLogger(__name__)

WANDER_CHANCE = 0.2

SPAWN_REASON_REVEAL = "reveal"
SPAWN_REASON_CHAIN = "chain"
SPAWN_REASON_GUARANTEE = "guarantee"


def spawn_chance(miss_streak: int, config: GameConfig) -> float:
    world = config.world
    chance = world.reveal_spawn_chance_base + max(0, miss_streak) * world.reveal_spawn_chance_miss_increment
    return max(0.0, min(world.reveal_spawn_chance_cap, chance))


def chain_spawn_chance(config: GameConfig) -> float:
    world = config.world
    return max(0.0, min(world.reveal_spawn_chance_cap, world.chain_spawn_chance))


def chain_encounter_count(travel_depth: int, config: GameConfig) -> int:
    world = config.world
    return world.consecutive_enemies_base + math.floor(travel_depth / max(1, world.consecutive_enemies_depth_step))


def get_world_region(hex_coord: Hex, config: GameConfig) -> Biome:
    """Pick the biome band for ``hex_coord``.

    Bands are radial with a directional skew so regions are not plain rings;
    the index wraps in both directions over the configured biome list.
    """
    biomes = config.world.biomes
    if not biomes:
        return UNKNOWN_BIOME
    band_size = max(1, config.world.biome_band_size)
    distance = distance_from_origin(hex_coord)
    skew = math.floor((hex_coord.q * 2 + hex_coord.r) / band_size)
    band_index = math.floor(distance / band_size) + skew
    return biomes[band_index % len(biomes)]


def encounter_placement(player_hex: Hex, move_direction_index: int, config: GameConfig) -> Tuple[Hex, int]:
    combat = config.combat
    gap = max(combat.effective_range_hex + 1, combat.starting_hex_gap)
    enemy_hex = player_hex.offset(direction_for_index(move_direction_index), gap)
    return enemy_hex, max(1, distance_from_origin(enemy_hex))


def spawn_encounter(
    state: SimulationState,
    config: GameConfig,
    events: List[SimulationEvent],
    reason: str,
    rng: random.Random | None = None,
) -> None:
    enemy_hex, distance = encounter_placement(
        state.battle_positions.player_hex, state.world.move_direction_index, config
    )
    biome = get_world_region(enemy_hex, config)
    state.battle_positions.enemy_hex = enemy_hex
    state.enemy = create_enemy(
        distance,
        config,
        biome=biome,
        current_depth=max(1, state.world.travel_depth),
        rng=rng,
    )
    state.combat_timers.reset()
    events.append(
        SpawnEnemy(
            reason=reason,
            depth=state.world.travel_depth,
            pending_encounters=state.world.pending_encounters,
            rarity=state.enemy.rarity.key,
            biome=biome.name,
        )
    )


def try_spawn_encounter(
    state: SimulationState,
    config: GameConfig,
    events: List[SimulationEvent],
    reason: str,
    chance: float,
    rng: random.Random | None = None,
) -> bool:
    rng = rng or random
    if rng.random() > chance:
        if reason == SPAWN_REASON_CHAIN:
            events.append(ChainSpawnMiss(depth=state.world.travel_depth, spawn_chance=chance))
        return False
    spawn_encounter(state, config, events, reason, rng)
    return True


def reveal_next_hex(
    state: SimulationState,
    config: GameConfig,
    events: List[SimulationEvent],
    rng: random.Random | None = None,
) -> None:
    world = state.world
    world.revealed_hexes += 1
    world.travel_depth = distance_from_origin(state.battle_positions.player_hex)
    world.best_depth = max(world.best_depth, world.travel_depth)

    chance = spawn_chance(world.spawn_miss_streak, config)
    guarantee = config.world.reveal_spawn_guarantee_misses
    if guarantee > 0 and world.spawn_miss_streak >= guarantee:
        world.pending_encounters = max(0, chain_encounter_count(world.travel_depth, config) - 1)
        spawn_encounter(state, config, events, SPAWN_REASON_GUARANTEE, rng)
        spawned = True
    else:
        # Queue the chain first so the spawn event reports it.
        queued = max(0, chain_encounter_count(world.travel_depth, config) - 1)
        previous = world.pending_encounters
        world.pending_encounters = queued
        spawned = try_spawn_encounter(state, config, events, SPAWN_REASON_REVEAL, chance, rng)
        if not spawned:
            world.pending_encounters = previous

    if spawned:
        world.spawn_miss_streak = 0
    else:
        world.spawn_miss_streak += 1
    events.append(RevealHex(spawned=spawned, depth=world.travel_depth, spawn_chance=chance))


def advance_towards_range(positions: BattlePositions, effective_range_hex: int) -> None:
    """Close the gap by one step each: the player first, then the enemy if still out of range."""
    if positions.enemy_hex is None:
        return
    if hex_distance(positions.player_hex, positions.enemy_hex) <= effective_range_hex:
        return
    positions.player_hex = step_toward(positions.player_hex, positions.enemy_hex)
    if hex_distance(positions.player_hex, positions.enemy_hex) <= effective_range_hex:
        return
    positions.enemy_hex = step_toward(positions.enemy_hex, positions.player_hex)


def _move_player_forward(state: SimulationState, rng: random.Random | None = None) -> None:
    rng = rng or random
    world = state.world
    positions = state.battle_positions
    positions.player_hex = positions.player_hex.offset(direction_for_index(world.move_direction_index))
    if rng.random() < WANDER_CHANCE:
        turn = 1 + math.floor(rng.random() * 2)
        world.move_direction_index = (world.move_direction_index + turn) % len(HEX_DIRECTIONS)


def tick_movement(
    state: SimulationState,
    dt_ms: float,
    config: GameConfig,
    events: List[SimulationEvent],
    rng: random.Random | None = None,
) -> None:
    """Advance the movement clock and take every whole step it affords.

    Channelling with no enemy keeps the player still. With an enemy present
    both sides close in; otherwise the player explores one hex per step.
    """
    if state.activity_mode == ActivityMode.CULTIVATION and state.enemy is None:
        return

    interval = config.combat.movement_interval_ms
    positions = state.battle_positions
    positions.movement_ms += dt_ms
    if interval <= 0:
        logger.debug("Movement interval %s is not positive; skipping movement", interval)
        positions.movement_ms = 0.0
        return

    while positions.movement_ms >= interval:
        positions.movement_ms -= interval
        if state.enemy is not None:
            advance_towards_range(positions, config.combat.effective_range_hex)
            continue
        _move_player_forward(state, rng)
        reveal_next_hex(state, config, events, rng)
