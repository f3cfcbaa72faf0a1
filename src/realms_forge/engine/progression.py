"""
Progression budgets for Realms Forge.

Level-based budgets for player characters and creatures: ability, skill,
health-energy, training and proficiency points, creature feat points and
currency, plus the per-archetype rows of the progression table.

Creatures may have sub-levels (e.g. level 0.5); their budgets scale the
level-1 value by the level and round up. Health and energy minimums use the
level-1 formula for every fractional level, and a negative vitality is
applied once rather than per level.
"""

import math
from dataclasses import dataclass

import structlog

from realms_forge.catalog import Archetype, CatalogSnapshot, ProgressionRow
from realms_forge.rules import (
    BASE_ABILITY_POINTS,
    BASE_HEALTH,
    BASE_PROFICIENCY,
    BASE_SKILL_POINTS,
    CREATURE_BASE_CURRENCY,
    CREATURE_BASE_FEAT_POINTS,
    CREATURE_BASE_HIT_ENERGY,
    CREATURE_BASE_TRAINING_POINTS,
    CREATURE_CURRENCY_GROWTH,
    CREATURE_SUBLEVEL_SKILL_POINTS,
    CREATURE_SUBLEVEL_TRAINING_POINTS,
    CREATURE_TP_PER_LEVEL,
    HIT_ENERGY_PER_LEVEL,
    PLAYER_BASE_HIT_ENERGY,
    PLAYER_BASE_TRAINING_POINTS,
    PLAYER_TP_PER_LEVEL,
    SKILL_POINTS_PER_LEVEL,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PlayerBudget:
    """Everything a player character has to spend at one level."""

    level: int
    archetype: Archetype
    ability_points: int
    skill_points: int
    health_energy_pool: int
    training_points: int
    proficiency: int
    power_proficiency: int
    martial_proficiency: int
    armament_proficiency_cap: int
    feat_points: int
    bonus_feats: int


@dataclass(frozen=True)
class CreatureBudget:
    """Everything a creature has to spend at one (possibly fractional) level."""

    level: float
    ability_points: int
    skill_points: int
    health_energy_pool: int
    training_points: float
    proficiency: int
    feat_points: float
    currency: int
    armament_proficiency_cap: int


@dataclass(frozen=True)
class LevelDifference:
    """Resources gained (or lost) between two levels."""

    ability_points: int
    skill_points: int
    health_energy_pool: float
    training_points: float
    proficiency: int


def _is_sublevel(level: float) -> bool:
    return level < 1


def _formula_level(level: float) -> int:
    """Level used by the health and energy minimums."""
    if level < 1 or not float(level).is_integer():
        return 1
    return int(level)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# ============================================================================
# Formulas
# ============================================================================


def ability_points(level: float, creature: bool = False) -> int:
    """7 at level 1, +1 every 3 levels (levels 4, 7, 10...)."""
    if creature and _is_sublevel(level):
        return math.ceil(BASE_ABILITY_POINTS * level)
    if level < 1:
        return 0
    return BASE_ABILITY_POINTS + math.floor((level - 1) / 3)


def skill_points(level: float, creature: bool = False) -> int:
    """2 + 3 per level."""
    if creature and _is_sublevel(level):
        return math.ceil(CREATURE_SUBLEVEL_SKILL_POINTS * level)
    return BASE_SKILL_POINTS + SKILL_POINTS_PER_LEVEL * math.floor(level)


def health_energy_pool(level: float, creature: bool = False) -> float:
    """18 (player) or 26 (creature), +12 per level after the first."""
    base = CREATURE_BASE_HIT_ENERGY if creature else PLAYER_BASE_HIT_ENERGY
    if creature and _is_sublevel(level):
        return math.ceil(base * level)
    return base + HIT_ENERGY_PER_LEVEL * (level - 1)


def proficiency_points(level: float, creature: bool = False) -> int:
    """2, +1 every 5 levels (levels 5, 10, 15...)."""
    if creature and _is_sublevel(level):
        return math.ceil(BASE_PROFICIENCY * level)
    if level < 1:
        return 0
    return BASE_PROFICIENCY + math.floor(level / 5)


def player_training_points(level: float, highest_archetype_ability: int = 0) -> float:
    """22 + a + (2 + a) per level after the first."""
    a = highest_archetype_ability
    return PLAYER_BASE_TRAINING_POINTS + a + (PLAYER_TP_PER_LEVEL + a) * (level - 1)


def creature_training_points(level: float, highest_non_vitality: int = 0) -> float:
    """9 + a + (1 + a) per level after the first."""
    a = highest_non_vitality
    if _is_sublevel(level):
        return math.ceil(CREATURE_SUBLEVEL_TRAINING_POINTS * level) + a
    return CREATURE_BASE_TRAINING_POINTS + a + (CREATURE_TP_PER_LEVEL + a) * (level - 1)


def creature_feat_points(level: float, martial_proficiency: int = 0) -> float:
    """1.5 + martial proficiency at level 1, +1 per level after."""
    base = CREATURE_BASE_FEAT_POINTS + martial_proficiency
    if _is_sublevel(level):
        return math.ceil(base * level)
    return base + (level - 1)


def creature_currency(level: float) -> int:
    return _round_half_up(CREATURE_BASE_CURRENCY * CREATURE_CURRENCY_GROWTH ** (level - 1))


def armament_proficiency(martial_proficiency: int) -> int:
    """
    Armament proficiency for a martial proficiency value.

    3, 8 and 12 for martial proficiency 0, 1 and 2, then +3 per point.
    """
    if martial_proficiency <= 0:
        return 3
    if martial_proficiency == 1:
        return 8
    return 12 + 3 * (martial_proficiency - 2)


def minimum_health(vitality: int, level: float) -> int:
    """
    Health before any health points are allocated.

    A positive vitality adds per level; a negative vitality is subtracted
    once no matter the level.
    """
    if vitality < 0:
        return BASE_HEALTH + vitality
    return BASE_HEALTH + vitality * _formula_level(level)


def minimum_energy(highest_non_vitality: int, level: float) -> int:
    return highest_non_vitality * _formula_level(level)


# ============================================================================
# Resolver
# ============================================================================


class ProgressionResolver:
    """
    Level-based budgets backed by a catalog snapshot's progression table.

    The formula budgets do not need the table; ``row`` and the player budget
    do, and raise ProgressionLookupError for levels the table lacks.
    """

    def __init__(self, snapshot: CatalogSnapshot) -> None:
        self.snapshot = snapshot

    def row(self, level: float, archetype: Archetype | str) -> ProgressionRow:
        return self.snapshot.get_progression_row(level, archetype)

    def player_budget(
        self,
        level: int,
        archetype: Archetype | str,
        highest_archetype_ability: int = 0,
    ) -> PlayerBudget:
        """
        Get a player character's budget at a level.

        Args:
            level: Character level (1 or higher)
            archetype: Character archetype
            highest_archetype_ability: Highest of the archetype's abilities

        Returns:
            PlayerBudget for the level

        Raises:
            ProgressionLookupError: If the progression table has no row
        """
        row = self.row(level, archetype)
        return PlayerBudget(
            level=level,
            archetype=row.archetype,
            ability_points=ability_points(level),
            skill_points=skill_points(level),
            health_energy_pool=int(health_energy_pool(level)),
            training_points=int(player_training_points(level, highest_archetype_ability)),
            proficiency=proficiency_points(level),
            power_proficiency=row.power_proficiency,
            martial_proficiency=row.martial_proficiency,
            armament_proficiency_cap=row.armament_proficiency_cap,
            feat_points=row.feat_points,
            bonus_feats=row.bonus_feats,
        )

    def creature_budget(
        self,
        level: float,
        highest_non_vitality: int = 0,
        martial_proficiency: int = 0,
    ) -> CreatureBudget:
        """Get a creature's budget at a level, including sub-levels."""
        return CreatureBudget(
            level=level,
            ability_points=ability_points(level, creature=True),
            skill_points=skill_points(level, creature=True),
            health_energy_pool=math.ceil(health_energy_pool(level, creature=True)),
            training_points=creature_training_points(level, highest_non_vitality),
            proficiency=proficiency_points(level, creature=True),
            feat_points=creature_feat_points(level, martial_proficiency),
            currency=creature_currency(level),
            armament_proficiency_cap=armament_proficiency(martial_proficiency),
        )

    def minimum_health(self, vitality: int, level: float) -> int:
        return minimum_health(vitality, level)

    def minimum_energy(self, highest_non_vitality: int, level: float) -> int:
        return minimum_energy(highest_non_vitality, level)

    def max_health(self, health_points: int, vitality: int, level: float) -> int:
        """Minimum health plus allocated health points."""
        return minimum_health(vitality, level) + health_points

    def max_energy(self, energy_points: int, highest_non_vitality: int, level: float) -> int:
        """Minimum energy plus allocated energy points."""
        return minimum_energy(highest_non_vitality, level) + energy_points

    def proficiency_remaining(
        self,
        level: float,
        power_proficiency: int,
        martial_proficiency: int,
        creature: bool = True,
    ) -> int:
        """
        Proficiency points left after an allocation.

        The result goes negative when the allocation overspends; the caller
        decides how to present that.
        """
        remaining = proficiency_points(level, creature) - power_proficiency - martial_proficiency
        if remaining < 0:
            logger.debug("proficiency_overspent", level=level, remaining=remaining)
        return remaining

    def armament_proficiency(self, martial_proficiency: int) -> int:
        return armament_proficiency(martial_proficiency)

    def level_difference(
        self,
        from_level: float,
        to_level: float,
        highest_ability: int = 0,
        creature: bool = False,
    ) -> LevelDifference:
        """Get the resources gained when moving from one level to another."""
        if creature:
            training = creature_training_points
        else:
            training = player_training_points

        return LevelDifference(
            ability_points=ability_points(to_level, creature) - ability_points(from_level, creature),
            skill_points=skill_points(to_level, creature) - skill_points(from_level, creature),
            health_energy_pool=(
                health_energy_pool(to_level, creature) - health_energy_pool(from_level, creature)
            ),
            training_points=training(to_level, highest_ability) - training(from_level, highest_ability),
            proficiency=(
                proficiency_points(to_level, creature) - proficiency_points(from_level, creature)
            ),
        )
