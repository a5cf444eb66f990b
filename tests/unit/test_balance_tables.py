import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from warrior.application.services.balance_tables import DEFAULT_GAME_CONFIG, create_config
from warrior.domain.models.config import BiomeModifier


class CreateConfigTests(unittest.TestCase):
    def test_no_overrides_returns_defaults(self) -> None:
        self.assertIs(DEFAULT_GAME_CONFIG, create_config())
        self.assertIs(DEFAULT_GAME_CONFIG, create_config({}))

    def test_camel_case_keys_merge_into_one_group_only(self) -> None:
        config = create_config({"progression": {"runXpBase": 10, "runXpGrowthRate": 0.15}})

        self.assertEqual(10.0, config.progression.run_xp_base)
        self.assertEqual(0.15, config.progression.run_xp_growth_rate)
        self.assertEqual(DEFAULT_GAME_CONFIG.progression.prestige_xp_base, config.progression.prestige_xp_base)
        self.assertEqual(DEFAULT_GAME_CONFIG.combat, config.combat)

    def test_unknown_keys_are_ignored(self) -> None:
        config = create_config({"world": {"notAField": 3}, "mystery": {"x": 1}})
        self.assertEqual(DEFAULT_GAME_CONFIG.world, config.world)

    def test_ignored_keys_are_logged(self) -> None:
        with self.assertLogs("warrior.application.services.balance_tables", level="DEBUG") as captured:
            config = create_config({"combat": {"enemyHpExp": 2.0, "enemyHpExponent": 1.5}})

        self.assertEqual(1.5, config.combat.enemy_hp_exponent)
        self.assertEqual(1, len(captured.records))
        self.assertIn("'enemyHpExp'", captured.output[0])
        self.assertIn("CombatConfig", captured.output[0])

    def test_biome_modifiers_merge_per_key(self) -> None:
        config = create_config({"combat": {"biomeModifiers": {"frost_peaks": {"attack": 2.0}, "new_land": {"hp": 3}}}})

        modifiers = config.combat.biome_modifiers
        self.assertEqual(BiomeModifier(hp=1.25, attack=2.0), modifiers["frost_peaks"])
        self.assertEqual(BiomeModifier(hp=3.0, attack=1.0), modifiers["new_land"])
        self.assertEqual(DEFAULT_GAME_CONFIG.combat.biome_modifiers["ashen_wastes"], modifiers["ashen_wastes"])

    def test_lists_replace_wholesale(self) -> None:
        config = create_config(
            {
                "combat": {"rarityTiers": [{"key": "only", "chance": 1.0, "essence": 2}]},
                "world": {"biomes": [{"key": "dunes", "name": "Dunes", "enemyColor": "#fff", "tile": "#000"}]},
            }
        )

        self.assertEqual(1, len(config.combat.rarity_tiers))
        self.assertEqual(2.0, config.combat.rarity_tiers[0].essence)
        self.assertEqual("dunes", config.world.biomes[0].key)
        self.assertEqual("#fff", config.world.biomes[0].enemy_color)
        self.assertEqual({"tile": "#000"}, dict(config.world.biomes[0].visuals))

    def test_merging_never_mutates_the_base(self) -> None:
        before = DEFAULT_GAME_CONFIG.timing.simulation_dt_ms
        create_config({"timing": {"simulationDtMs": 50}})
        self.assertEqual(before, DEFAULT_GAME_CONFIG.timing.simulation_dt_ms)


if __name__ == "__main__":
    unittest.main()
