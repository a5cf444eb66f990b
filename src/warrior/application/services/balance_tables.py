from __future__ import annotations

import logging
import re
from dataclasses import fields, is_dataclass, replace
from typing import Any, Mapping

from warrior.domain.models.config import (
    Biome,
    BiomeModifier,
    CombatConfig,
    GameConfig,
    RarityTier,
    WorldConfig,
)

logger = logging.getLogger(__name__)


DEFAULT_BIOMES: tuple[Biome, ...] = (
    Biome(key="verdant_plains", name="Verdant Plains", enemy_color="#84cc16", visuals={"tile": "#1f3a1a"}),
    Biome(key="ashen_wastes", name="Ashen Wastes", enemy_color="#f97316", visuals={"tile": "#3b2a20"}),
    Biome(key="frost_peaks", name="Frost Peaks", enemy_color="#38bdf8", visuals={"tile": "#1e3a4a"}),
    Biome(key="shadow_marsh", name="Shadow Marsh", enemy_color="#a855f7", visuals={"tile": "#241a33"}),
    Biome(key="crystal_caverns", name="Crystal Caverns", enemy_color="#f472b6", visuals={"tile": "#2d1f2f"}),
)

DEFAULT_BIOME_MODIFIERS: dict[str, BiomeModifier] = {
    "verdant_plains": BiomeModifier(hp=1.0, attack=1.0),
    "ashen_wastes": BiomeModifier(hp=0.9, attack=1.2),
    "frost_peaks": BiomeModifier(hp=1.25, attack=0.9),
    "shadow_marsh": BiomeModifier(hp=1.1, attack=1.1),
    "crystal_caverns": BiomeModifier(hp=1.35, attack=1.15),
}

# Chances are cumulative-eligible: walked in order against one uniform roll.
DEFAULT_RARITY_TIERS: tuple[RarityTier, ...] = (
    RarityTier(key="common", name="Common", chance=0.60, hp=1.0, attack=1.0, essence=1.0, color="#e5e7eb"),
    RarityTier(key="uncommon", name="Uncommon", chance=0.25, hp=1.2, attack=1.1, essence=1.4, color="#4ade80"),
    RarityTier(key="rare", name="Rare", chance=0.10, hp=1.5, attack=1.25, essence=2.0, color="#60a5fa"),
    RarityTier(key="epic", name="Epic", chance=0.04, hp=2.0, attack=1.5, essence=3.5, color="#c084fc"),
    RarityTier(key="legendary", name="Legendary", chance=0.01, hp=3.0, attack=2.0, essence=6.0, color="#fbbf24"),
)

DEFAULT_GAME_CONFIG = GameConfig(
    combat=CombatConfig(
        biome_modifiers=dict(DEFAULT_BIOME_MODIFIERS),
        rarity_tiers=DEFAULT_RARITY_TIERS,
    ),
    world=WorldConfig(biomes=DEFAULT_BIOMES),
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _field_key(raw_key: object) -> str:
    return _CAMEL_BOUNDARY.sub("_", str(raw_key)).lower()


def biome_from_mapping(raw: Mapping[str, Any] | Biome) -> Biome:
    if isinstance(raw, Biome):
        return raw
    key = str(raw.get("key", "") or "unknown")
    name = str(raw.get("name", "") or key)
    enemy_color = str(raw.get("enemyColor", raw.get("enemy_color", "#f97316")))
    visuals = {
        str(item_key): item_value
        for item_key, item_value in raw.items()
        if item_key not in {"key", "name", "enemyColor", "enemy_color"}
    }
    return Biome(key=key, name=name, enemy_color=enemy_color, visuals=visuals)


def rarity_tier_from_mapping(raw: Mapping[str, Any] | RarityTier) -> RarityTier:
    if isinstance(raw, RarityTier):
        return raw
    key = str(raw.get("key", "") or "common")
    return RarityTier(
        key=key,
        name=str(raw.get("name", "") or key.title()),
        chance=float(raw.get("chance", 0.0) or 0.0),
        hp=float(raw.get("hp", 1.0)),
        attack=float(raw.get("attack", 1.0)),
        essence=float(raw.get("essence", 1.0)),
        color=str(raw.get("color", "#e5e7eb")),
    )


def _merge_biome_modifiers(
    base: Mapping[str, BiomeModifier],
    overrides: Mapping[str, Any],
) -> dict[str, BiomeModifier]:
    merged = dict(base)
    for raw_key, raw_value in overrides.items():
        key = str(raw_key)
        if isinstance(raw_value, BiomeModifier):
            merged[key] = raw_value
            continue
        if not isinstance(raw_value, Mapping):
            continue
        current = merged.get(key, BiomeModifier())
        merged[key] = BiomeModifier(
            hp=float(raw_value.get("hp", current.hp)),
            attack=float(raw_value.get("attack", current.attack)),
        )
    return merged


def _coerce_value(key: str, current: Any, value: Any) -> Any:
    if key == "biomes":
        return tuple(biome_from_mapping(item) for item in (value or ()))
    if key == "rarity_tiers":
        return tuple(rarity_tier_from_mapping(item) for item in (value or ()))
    if key == "biome_modifiers":
        if not isinstance(value, Mapping):
            return current
        return _merge_biome_modifiers(current, value)
    if isinstance(current, bool):
        return bool(value)
    if isinstance(current, int) and not isinstance(value, bool):
        try:
            return int(value)
        except (TypeError, ValueError):
            return current
    if isinstance(current, float):
        try:
            return float(value)
        except (TypeError, ValueError):
            return current
    return value


def _merge_dataclass(base: Any, overrides: Mapping[str, Any]) -> Any:
    known = {item.name for item in fields(base)}
    changes: dict[str, Any] = {}
    for raw_key, value in overrides.items():
        key = _field_key(raw_key)
        if key not in known:
            logger.debug("Ignoring unknown %s override %r", type(base).__name__, raw_key)
            continue
        current = getattr(base, key)
        if is_dataclass(current) and isinstance(value, Mapping):
            changes[key] = _merge_dataclass(current, value)
        elif is_dataclass(current) and is_dataclass(value):
            changes[key] = value
        else:
            changes[key] = _coerce_value(key, current, value)
    return replace(base, **changes) if changes else base


def create_config(overrides: Mapping[str, Any] | None = None, *, base: GameConfig | None = None) -> GameConfig:
    """Deep-merge ``overrides`` onto the default balance.

    Nested mappings merge group by group; any other value replaces the
    default. Keys may be camelCase or snake_case and must spell out field
    names in full (``enemyHpExponent``, not ``enemyHpExp``). Unknown keys are
    logged at debug level and ignored.
    """
    resolved = base or DEFAULT_GAME_CONFIG
    if not overrides:
        return resolved
    return _merge_dataclass(resolved, overrides)
