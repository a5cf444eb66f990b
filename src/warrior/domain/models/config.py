from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class Biome:
    key: str
    name: str
    enemy_color: str = "#f97316"
    # Renderer-only fields, carried through untouched.
    visuals: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)


UNKNOWN_BIOME = Biome(key="unknown", name="Unknown", enemy_color="#f97316")


@dataclass(frozen=True)
class RarityTier:
    key: str
    name: str
    chance: float
    hp: float = 1.0
    attack: float = 1.0
    essence: float = 1.0
    color: str = "#e5e7eb"


@dataclass(frozen=True)
class BiomeModifier:
    hp: float = 1.0
    attack: float = 1.0


@dataclass(frozen=True)
class TimingConfig:
    simulation_dt_ms: float = 100.0
    autosave_ms: float = 10_000.0
    offline_cap_hours: float = 8.0


@dataclass(frozen=True)
class ProgressionConfig:
    strength_xp_per_damage: float = 1.0
    endurance_xp_per_damage: float = 1.0
    strength_xp_boost_per_prestige_level: float = 0.02
    endurance_xp_boost_per_prestige_level: float = 0.02
    run_xp_base: float = 20.0
    run_xp_growth_rate: float = 0.15
    prestige_xp_base: float = 120.0
    prestige_xp_growth_rate: float = 0.25
    strength_prestige_gain: float = 0.08
    endurance_prestige_gain: float = 0.08


@dataclass(frozen=True)
class CombatConfig:
    player_attack_interval_ms: float = 650.0
    enemy_attack_interval_ms: float = 950.0
    min_attack_interval_ms: float = 200.0
    movement_interval_ms: float = 280.0
    starting_hex_gap: int = 8
    effective_range_hex: int = 1
    player_base_attack: float = 6.0
    strength_attack_per_level: float = 1.6
    strength_attack_growth_rate: float = 0.04
    player_base_hp: float = 90.0
    endurance_hp_per_level: float = 13.0
    endurance_hp_growth_rate: float = 0.03
    enemy_hp_base: float = 30.0
    enemy_hp_log_factor: float = 0.6
    enemy_hp_depth_factor: float = 0.08
    enemy_hp_exponent: float = 1.35
    enemy_attack_base: float = 4.0
    enemy_attack_log_factor: float = 1.2
    enemy_attack_depth_factor: float = 0.15
    enemy_attack_exponent: float = 1.18
    min_damage: int = 1
    biome_modifiers: Mapping[str, BiomeModifier] = field(default_factory=dict, hash=False)
    rarity_tiers: tuple[RarityTier, ...] = ()


@dataclass(frozen=True)
class RewardsConfig:
    essence_base: float = 10.0
    essence_exponent: float = 1.2


@dataclass(frozen=True)
class CultivationConfig:
    body_xp_base: float = 25.0
    body_xp_exponent: float = 1.6
    mind_xp_base: float = 25.0
    mind_xp_exponent: float = 1.6
    spirit_xp_base: float = 25.0
    spirit_xp_exponent: float = 1.6
    mind_speed_log_factor: float = 0.18
    mind_speed_per_level: float = 0.01
    max_attack_speed_multiplier: float = 3.0
    hp_regen_base_per_second: float = 0.5
    hp_regen_per_body_level: float = 0.35
    hp_regen_body_growth_rate: float = 0.04
    ki_max_base: float = 20.0
    ki_max_per_spirit_level: float = 4.0
    ki_spirit_growth_rate: float = 0.03
    ki_base_regen_per_second: float = 0.2
    ki_regen_per_spirit_level: float = 0.002
    max_flow_essence_per_second: float = 5.0
    xp_boost_per_prestige_level: float = 0.05


@dataclass(frozen=True)
class PersistenceConfig:
    offline_essence_per_second_base: float = 0.2
    offline_essence_per_best_depth: float = 0.05
    offline_essence_per_prestige_level: float = 0.03
    offline_flow_efficiency: float = 0.5


@dataclass(frozen=True)
class WorldConfig:
    biome_band_size: int = 8
    reveal_spawn_chance_base: float = 0.25
    reveal_spawn_chance_miss_increment: float = 0.075
    reveal_spawn_chance_cap: float = 0.9
    reveal_spawn_guarantee_misses: int = 12
    chain_spawn_chance: float = 0.85
    consecutive_enemies_base: int = 1
    consecutive_enemies_depth_step: int = 10
    biomes: tuple[Biome, ...] = ()


@dataclass(frozen=True)
class GameConfig:
    timing: TimingConfig = field(default_factory=TimingConfig)
    progression: ProgressionConfig = field(default_factory=ProgressionConfig)
    combat: CombatConfig = field(default_factory=CombatConfig)
    rewards: RewardsConfig = field(default_factory=RewardsConfig)
    cultivation: CultivationConfig = field(default_factory=CultivationConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    world: WorldConfig = field(default_factory=WorldConfig)
