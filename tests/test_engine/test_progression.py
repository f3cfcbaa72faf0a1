"""Tests for level-based budgets."""

import pytest

from realms_forge.catalog import Archetype, ProgressionLookupError
from realms_forge.engine import ProgressionResolver
from realms_forge.engine.progression import (
    ability_points,
    armament_proficiency,
    creature_currency,
    creature_feat_points,
    creature_training_points,
    health_energy_pool,
    minimum_energy,
    minimum_health,
    player_training_points,
    proficiency_points,
    skill_points,
)


@pytest.fixture
def resolver(catalog) -> ProgressionResolver:
    return ProgressionResolver(catalog)


class TestFormulas:
    """Tests for the per-level formulas."""

    @pytest.mark.parametrize("level,expected", [(1, 7), (3, 7), (4, 8), (7, 9), (10, 10)])
    def test_ability_points(self, level, expected):
        """7 at level 1, +1 at levels 4, 7, 10..."""
        assert ability_points(level) == expected

    def test_skill_points(self):
        assert skill_points(1) == 5
        assert skill_points(2) == 8
        assert skill_points(10) == 32

    def test_health_energy_pool(self):
        assert health_energy_pool(1) == 18
        assert health_energy_pool(3) == 42
        assert health_energy_pool(1, creature=True) == 26

    @pytest.mark.parametrize("level,expected", [(1, 2), (4, 2), (5, 3), (10, 4), (20, 6)])
    def test_proficiency(self, level, expected):
        assert proficiency_points(level) == expected

    def test_player_training_points(self):
        assert player_training_points(1) == 22
        # 22 + 2 + (2 + 2) * 2
        assert player_training_points(3, highest_archetype_ability=2) == 32

    def test_creature_training_points(self):
        assert creature_training_points(1, 1) == 10
        assert creature_training_points(2, 1) == 12
        assert creature_training_points(0.5, 0) == 11

    def test_creature_feat_points(self):
        assert creature_feat_points(1) == 1.5
        assert creature_feat_points(3, martial_proficiency=1) == 4.5
        assert creature_feat_points(0.5) == 1

    def test_creature_currency(self):
        assert creature_currency(1) == 200
        assert creature_currency(2) == 290

    @pytest.mark.parametrize("martial,expected", [(0, 3), (1, 8), (2, 12), (3, 15), (4, 18)])
    def test_armament_proficiency(self, martial, expected):
        assert armament_proficiency(martial) == expected


class TestMinimums:
    """Tests for health and energy minimums."""

    def test_negative_vitality_applies_once(self):
        """-2 vitality costs 2 health no matter the level."""
        assert minimum_health(-2, 1) == 6
        assert minimum_health(-2, 2) == 6
        assert minimum_health(-2, 10) == 6

    def test_positive_vitality_per_level(self):
        assert minimum_health(3, 1) == 11
        assert minimum_health(3, 2) == 14

    def test_energy_per_level(self):
        assert minimum_energy(3, 1) == 3
        assert minimum_energy(3, 2) == 6

    def test_fractional_levels_use_level_one(self):
        """Partial levels are not interpolated."""
        assert minimum_health(3, 0.5) == 11
        assert minimum_health(3, 2.5) == 11
        assert minimum_energy(3, 2.5) == 3

    def test_max_values(self, resolver):
        assert resolver.max_health(5, 2, 2) == 17
        assert resolver.max_energy(4, 3, 2) == 10
        assert resolver.minimum_health(-1, 4) == 7
        assert resolver.minimum_energy(2, 3) == 6


class TestProgressionResolver:
    """Tests for the table-backed budgets."""

    def test_player_budget(self, resolver):
        budget = resolver.player_budget(5, "powered-martial", highest_archetype_ability=2)

        assert budget.archetype == Archetype.POWERED_MARTIAL
        assert budget.ability_points == 8
        assert budget.skill_points == 17
        assert budget.health_energy_pool == 66
        assert budget.training_points == 40
        assert budget.proficiency == 3
        assert budget.power_proficiency == 2
        assert budget.martial_proficiency == 1
        assert budget.armament_proficiency_cap == 8
        assert budget.feat_points == 5
        assert budget.bonus_feats == 1

    def test_player_budget_missing_level(self, resolver):
        with pytest.raises(ProgressionLookupError):
            resolver.player_budget(21, Archetype.POWER)

    def test_row(self, resolver):
        assert resolver.row(20, Archetype.MARTIAL).armament_proficiency_cap == 24

    def test_creature_sublevel_budget(self, resolver):
        """Sub-level creatures scale the level-1 values and round up."""
        budget = resolver.creature_budget(0.5, highest_non_vitality=2)

        assert budget.ability_points == 4
        assert budget.skill_points == 3
        assert budget.health_energy_pool == 13
        assert budget.training_points == 13
        assert budget.proficiency == 1
        assert budget.feat_points == 1
        assert budget.armament_proficiency_cap == 3

    def test_creature_budget(self, resolver):
        budget = resolver.creature_budget(2, highest_non_vitality=1, martial_proficiency=1)
        assert budget.health_energy_pool == 38
        assert budget.training_points == 12
        assert budget.feat_points == 3.5
        assert budget.currency == 290
        assert budget.armament_proficiency_cap == 8

    def test_proficiency_may_go_negative(self, resolver):
        """Overspending is reported, not prevented."""
        assert resolver.proficiency_remaining(1, power_proficiency=2, martial_proficiency=1) == -1
        assert resolver.proficiency_remaining(5, 1, 1, creature=False) == 1

    def test_level_difference(self, resolver):
        diff = resolver.level_difference(1, 4)
        assert diff.ability_points == 1
        assert diff.skill_points == 9
        assert diff.health_energy_pool == 36
        assert diff.training_points == 6
        assert diff.proficiency == 0

    def test_creature_level_difference(self, resolver):
        diff = resolver.level_difference(1, 2, highest_ability=1, creature=True)
        assert diff.training_points == 2
        assert diff.health_energy_pool == 12
