import math
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from warrior.application.services.balance_tables import DEFAULT_GAME_CONFIG, create_config
from warrior.application.services.progression_service import (
    cultivation_xp_threshold,
    essence_reward,
    finite_non_negative,
    hp_regen_per_second,
    max_hp,
    normalize_flow_rates,
    prestige_xp_gain,
    prestige_xp_threshold,
    resolve_level_ups,
    run_xp_threshold,
    update_highest_levels,
)
from warrior.domain.events import LevelUp, PrestigeLevelUp
from warrior.domain.models.config import RarityTier
from warrior.domain.models.state import CultivationFlow, PersistentState, RunState, Statistics


class ThresholdTests(unittest.TestCase):
    def test_run_threshold_compounds_from_level_one(self) -> None:
        config = create_config({"progression": {"runXpBase": 10, "runXpGrowthRate": 0.15}})
        self.assertEqual([10, 11, 13, 15], [run_xp_threshold(level, config) for level in (1, 2, 3, 4)])

    def test_prestige_and_cultivation_thresholds(self) -> None:
        self.assertEqual(120, prestige_xp_threshold(0, DEFAULT_GAME_CONFIG))
        self.assertEqual(150, prestige_xp_threshold(1, DEFAULT_GAME_CONFIG))
        self.assertEqual(25, cultivation_xp_threshold("body", 0, DEFAULT_GAME_CONFIG))
        self.assertEqual(75, cultivation_xp_threshold("body", 1, DEFAULT_GAME_CONFIG))


class LevelUpTests(unittest.TestCase):
    def test_one_injection_can_cross_several_thresholds(self) -> None:
        config = create_config({"progression": {"runXpBase": 10, "runXpGrowthRate": 0.15}})
        run = RunState(strength_xp=35, hp=90)
        statistics = Statistics()

        events = resolve_level_ups(run, PersistentState(), config, statistics)

        self.assertEqual(4, run.strength_level)
        self.assertEqual(1, run.strength_xp)
        self.assertEqual([LevelUp("strength", 2), LevelUp("strength", 3), LevelUp("strength", 4)], events)
        self.assertEqual(3, statistics.total_levels_gained.strength)

    def test_prestige_tracks_drain_on_persistent_state(self) -> None:
        persistent = PersistentState(endurance_prestige_xp=130)

        events = resolve_level_ups(RunState(hp=90), persistent, DEFAULT_GAME_CONFIG)

        self.assertEqual(1, persistent.endurance_prestige_level)
        self.assertEqual(10, persistent.endurance_prestige_xp)
        self.assertEqual([PrestigeLevelUp("endurance", 1)], events)
        self.assertEqual("endurancePrestigeLevelUp", events[0].name)

    def test_endurance_level_raises_ceiling_but_not_hp(self) -> None:
        run = RunState(endurance_xp=20, hp=90)

        resolve_level_ups(run, PersistentState(), DEFAULT_GAME_CONFIG)

        self.assertEqual(2, run.endurance_level)
        self.assertEqual(103, max_hp(run, DEFAULT_GAME_CONFIG))
        self.assertEqual(90, run.hp)

    def test_hp_above_ceiling_is_clamped(self) -> None:
        run = RunState(hp=500)
        resolve_level_ups(run, PersistentState(), DEFAULT_GAME_CONFIG)
        self.assertEqual(90, run.hp)

    def test_zero_threshold_still_drains(self) -> None:
        config = create_config({"progression": {"runXpBase": 0}})
        run = RunState(strength_xp=3, hp=90)

        resolve_level_ups(run, PersistentState(), config)

        self.assertEqual(4, run.strength_level)
        self.assertEqual(0, run.strength_xp)

    def test_highest_levels_only_move_up(self) -> None:
        statistics = Statistics()
        statistics.highest_levels.strength = 7

        update_highest_levels(statistics, RunState(strength_level=3, mind_level=4), PersistentState())

        self.assertEqual(7, statistics.highest_levels.strength)
        self.assertEqual(4, statistics.highest_levels.mind)


class FormulaTests(unittest.TestCase):
    def test_rate_inputs_are_sanitized(self) -> None:
        self.assertEqual(0.0, finite_non_negative(-2))
        self.assertEqual(0.0, finite_non_negative(float("nan")))
        self.assertEqual(0.0, finite_non_negative(float("inf")))
        self.assertEqual(0.0, finite_non_negative("fast"))
        self.assertEqual(1.5, finite_non_negative("1.5"))

    def test_normalize_flow_rates(self) -> None:
        thirds = normalize_flow_rates(CultivationFlow(0, 0, 0))
        self.assertAlmostEqual(1 / 3, thirds.body)
        self.assertAlmostEqual(1 / 3, thirds.spirit)

        sanitized = normalize_flow_rates(CultivationFlow(float("nan"), -1, 2))
        self.assertEqual(CultivationFlow(body=0.0, mind=0.0, spirit=1.0), sanitized)

        self.assertEqual(CultivationFlow(body=0.25, mind=0.25, spirit=0.5), normalize_flow_rates(CultivationFlow(1, 1, 2)))

        for raw in (CultivationFlow(), CultivationFlow(0.7, 0.2, 0.3), CultivationFlow(1e-9, 5, 3e6)):
            rates = normalize_flow_rates(raw)
            self.assertAlmostEqual(1.0, rates.body + rates.mind + rates.spirit)

    def test_regen_grows_with_body_level(self) -> None:
        self.assertEqual(0.5, hp_regen_per_second(RunState(), DEFAULT_GAME_CONFIG))
        self.assertAlmostEqual(1.25712, hp_regen_per_second(RunState(body_level=2), DEFAULT_GAME_CONFIG))

    def test_prestige_gain_has_floor_of_one_for_positive_input(self) -> None:
        self.assertEqual(0, prestige_xp_gain(0, 0.08))
        self.assertEqual(1, prestige_xp_gain(1, 0.08))
        self.assertEqual(8, prestige_xp_gain(100, 0.08))
        self.assertEqual(0, prestige_xp_gain(100, 0))

    def test_essence_reward_scales_with_distance_and_rarity(self) -> None:
        shiny = RarityTier(key="shiny", name="Shiny", chance=1.0, essence=2.0)
        self.assertEqual(10, essence_reward(1, None, DEFAULT_GAME_CONFIG))
        self.assertEqual(10, essence_reward(0, None, DEFAULT_GAME_CONFIG))
        self.assertEqual(20, essence_reward(1, shiny, DEFAULT_GAME_CONFIG))
        self.assertEqual(math.floor(10 * 8 ** 1.2), essence_reward(8, None, DEFAULT_GAME_CONFIG))


if __name__ == "__main__":
    unittest.main()
