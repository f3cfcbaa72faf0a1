"""Game-rule constants shared by the engine modules."""

# ============================================================================
# Mechanic synthesis
# ============================================================================

# Named duration tiers per duration type. The option level of the synthesized
# duration part is the 1-based index of the chosen tier, not the raw value.
DURATION_TIERS: dict[str, tuple[int, ...]] = {
    "minute": (1, 10, 30),
    "hour": (1, 6, 12),
    "day": (1, 7, 14),
}

DURATION_UNITS = {
    "round": ("round", "rounds"),
    "minute": ("minute", "minutes"),
    "hour": ("hour", "hours"),
    "day": ("day", "days"),
}

# The round duration part at option level 0 lasts this many rounds; a single
# round is the unpriced baseline and has no duration part.
FIRST_PRICED_ROUND = 2

RANGE_SPACES_PER_STEP = 3
MAX_SUSTAIN_AP = 4

# Damage type -> damage family mechanic kind value
DAMAGE_FAMILIES: dict[str, str] = {
    "magic": "magic_damage",
    "light": "light_damage",
    "radiant": "light_damage",
    "elemental": "elemental_damage",
    "fire": "elemental_damage",
    "cold": "elemental_damage",
    "ice": "elemental_damage",
    "lightning": "elemental_damage",
    "acid": "elemental_damage",
    "poison": "poison_or_necrotic_damage",
    "necrotic": "poison_or_necrotic_damage",
    "sonic": "sonic_damage",
    "spiritual": "spiritual_damage",
    "psychic": "psychic_damage",
    "physical": "physical_damage",
    "bludgeoning": "physical_damage",
    "piercing": "physical_damage",
    "slashing": "physical_damage",
}

VALID_DIE_SIZES = (4, 6, 8, 10, 12)

# Float noise below this many decimals is ignored when rounding costs
ROUNDING_PLACES = 9

# ============================================================================
# Armament costing
# ============================================================================

# Each point of a property's currency value raises the price by 12.5%
CURRENCY_STEP = 0.125

# (rarity, lowest currency cost, lowest IP, highest IP)
RARITY_BRACKETS: tuple[tuple[str, int, float, float], ...] = (
    ("Common", 25, 0.0, 4.0),
    ("Uncommon", 100, 4.01, 6.0),
    ("Rare", 500, 6.01, 8.0),
    ("Epic", 2500, 8.01, 11.0),
    ("Legendary", 10000, 11.01, 14.0),
    ("Mythic", 50000, 14.01, 16.0),
    ("Ascended", 100000, 16.01, float("inf")),
)

# ============================================================================
# Progression
# ============================================================================

BASE_ABILITY_POINTS = 7
BASE_SKILL_POINTS = 2
SKILL_POINTS_PER_LEVEL = 3
BASE_PROFICIENCY = 2
HIT_ENERGY_PER_LEVEL = 12
BASE_HEALTH = 8

PLAYER_BASE_HIT_ENERGY = 18
PLAYER_BASE_TRAINING_POINTS = 22
PLAYER_TP_PER_LEVEL = 2

CREATURE_BASE_HIT_ENERGY = 26
CREATURE_BASE_TRAINING_POINTS = 9
CREATURE_TP_PER_LEVEL = 1
CREATURE_BASE_FEAT_POINTS = 1.5
CREATURE_BASE_CURRENCY = 200
CREATURE_CURRENCY_GROWTH = 1.45
# Sub-level creatures scale their training points from this base
CREATURE_SUBLEVEL_TRAINING_POINTS = 22
CREATURE_SUBLEVEL_SKILL_POINTS = 5
