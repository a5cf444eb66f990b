from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Dict, Optional

from warrior.domain.models.config import Biome, RarityTier
from warrior.domain.models.hex import ORIGIN, Hex


CULTIVATION_STATS: tuple[str, ...] = ("body", "mind", "spirit")


class ActivityMode(str, Enum):
    BATTLE = "battle"
    CULTIVATION = "cultivation"


@dataclass
class RunState:
    """Per-life progress. Replaced on defeat except the cultivation prestige fields."""

    strength_level: int = 1
    strength_xp: float = 0.0
    endurance_level: int = 1
    endurance_xp: float = 0.0
    hp: float = 0.0
    body_level: int = 0
    body_xp: float = 0.0
    body_prestige_level: int = 0
    body_prestige_xp: float = 0.0
    mind_level: int = 0
    mind_xp: float = 0.0
    mind_prestige_level: int = 0
    mind_prestige_xp: float = 0.0
    spirit_level: int = 0
    spirit_xp: float = 0.0
    spirit_prestige_level: int = 0
    spirit_prestige_xp: float = 0.0
    ki: float = 0.0


@dataclass
class PersistentState:
    strength_prestige_level: int = 0
    strength_prestige_xp: float = 0.0
    endurance_prestige_level: int = 0
    endurance_prestige_xp: float = 0.0


@dataclass
class WorldState:
    travel_depth: int = 0
    best_depth: int = 0
    revealed_hexes: int = 0
    pending_encounters: int = 0
    move_direction_index: int = 0
    spawn_miss_streak: int = 0


@dataclass
class BattlePositions:
    player_hex: Hex = ORIGIN
    enemy_hex: Optional[Hex] = None
    movement_ms: float = 0.0


@dataclass
class CombatTimers:
    player_ms: float = 0.0
    enemy_ms: float = 0.0

    def reset(self) -> None:
        self.player_ms = 0.0
        self.enemy_ms = 0.0


@dataclass
class Enemy:
    hp: int
    max_hp: int
    attack: int
    biome: Biome
    rarity: RarityTier
    distance: int


@dataclass
class CultivationFlow:
    """Raw flow weights as the player set them; normalized whenever consumed."""

    body: float = 0.34
    mind: float = 0.33
    spirit: float = 0.33


@dataclass
class LevelCounters:
    strength: int = 0
    endurance: int = 0
    body: int = 0
    mind: int = 0
    spirit: int = 0
    strength_prestige: int = 0
    endurance_prestige: int = 0
    body_prestige: int = 0
    mind_prestige: int = 0
    spirit_prestige: int = 0

    def as_dict(self) -> dict[str, int]:
        return {item.name: int(getattr(self, item.name)) for item in fields(self)}


@dataclass
class Statistics:
    total_deaths: int = 0
    total_enemies_defeated: int = 0
    enemies_defeated_by_rarity: Dict[str, int] = field(default_factory=dict)
    total_levels_gained: LevelCounters = field(default_factory=LevelCounters)
    highest_levels: LevelCounters = field(default_factory=lambda: LevelCounters(strength=1, endurance=1))


@dataclass
class Resources:
    essence: float = 0.0


@dataclass
class Unlocks:
    cultivation: bool = False


@dataclass
class SimulationState:
    run: RunState = field(default_factory=RunState)
    persistent: PersistentState = field(default_factory=PersistentState)
    world: WorldState = field(default_factory=WorldState)
    battle_positions: BattlePositions = field(default_factory=BattlePositions)
    combat_timers: CombatTimers = field(default_factory=CombatTimers)
    enemy: Optional[Enemy] = None
    cultivation: CultivationFlow = field(default_factory=CultivationFlow)
    statistics: Statistics = field(default_factory=Statistics)
    resources: Resources = field(default_factory=Resources)
    unlocks: Unlocks = field(default_factory=Unlocks)
    activity_mode: ActivityMode = ActivityMode.BATTLE
    elapsed_ms: float = 0.0

    def copy(self) -> "SimulationState":
        """Return an independent value: every mutable record is copied, frozen ones are shared."""
        statistics = self.statistics
        return SimulationState(
            run=replace(self.run),
            persistent=replace(self.persistent),
            world=replace(self.world),
            battle_positions=replace(self.battle_positions),
            combat_timers=replace(self.combat_timers),
            enemy=replace(self.enemy) if self.enemy is not None else None,
            cultivation=replace(self.cultivation),
            statistics=Statistics(
                total_deaths=statistics.total_deaths,
                total_enemies_defeated=statistics.total_enemies_defeated,
                enemies_defeated_by_rarity=dict(statistics.enemies_defeated_by_rarity),
                total_levels_gained=replace(statistics.total_levels_gained),
                highest_levels=replace(statistics.highest_levels),
            ),
            resources=replace(self.resources),
            unlocks=replace(self.unlocks),
            activity_mode=self.activity_mode,
            elapsed_ms=self.elapsed_ms,
        )
