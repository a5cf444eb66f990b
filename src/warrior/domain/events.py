from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class PlayerHit:
    amount: int
    strength_xp_gain: int
    strength_prestige_xp_gain: int

    @property
    def name(self) -> str:
        return "playerHit"


@dataclass(frozen=True)
class EnemyHit:
    amount: int
    endurance_xp_gain: int
    endurance_prestige_xp_gain: int

    @property
    def name(self) -> str:
        return "enemyHit"


@dataclass(frozen=True)
class Victory:
    reward: int
    depth: int
    pending_encounters: int

    @property
    def name(self) -> str:
        return "victory"


@dataclass(frozen=True)
class Defeat:
    depth: int

    @property
    def name(self) -> str:
        return "defeat"


@dataclass(frozen=True)
class RevealHex:
    spawned: bool
    depth: int
    spawn_chance: float

    @property
    def name(self) -> str:
        return "revealHex"


@dataclass(frozen=True)
class SpawnEnemy:
    reason: str  # reveal | chain | guarantee
    depth: int
    pending_encounters: int
    rarity: str
    biome: str

    @property
    def name(self) -> str:
        return "spawnEnemy"


@dataclass(frozen=True)
class ChainSpawnMiss:
    depth: int
    spawn_chance: float

    @property
    def name(self) -> str:
        return "chainSpawnMiss"


@dataclass(frozen=True)
class LevelUp:
    stat: str
    level: int

    @property
    def name(self) -> str:
        return f"{self.stat}LevelUp"


@dataclass(frozen=True)
class PrestigeLevelUp:
    stat: str
    level: int

    @property
    def name(self) -> str:
        return f"{self.stat}PrestigeLevelUp"


SimulationEvent = Union[
    PlayerHit,
    EnemyHit,
    Victory,
    Defeat,
    RevealHex,
    SpawnEnemy,
    ChainSpawnMiss,
    LevelUp,
    PrestigeLevelUp,
]
