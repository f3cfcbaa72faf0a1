"""
Derived display for Realms Forge.

Reads mechanic state back out of a composed part list (the inverse of the
synthesizer) and formats the action, range, area, duration and damage
summaries a creator or character sheet shows. Parts from older saves that
no longer resolve degrade to generic fallback text instead of failing.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog
from pydantic import BaseModel, ConfigDict

from realms_forge.build.models import (
    ActionSelection,
    ActionType,
    AreaSelection,
    AreaType,
    BuildConfiguration,
    BuildType,
    BuildWarning,
    DamageSelection,
    DurationSelection,
    DurationType,
    ExplicitPart,
    MechanicSelections,
    RangeSelection,
    SynthesizedPart,
    WarningCode,
    WeaponSelection,
)
from realms_forge.catalog import CatalogSnapshot, MechanicField, MechanicIdTable, MechanicKind
from realms_forge.rules import (
    DURATION_TIERS,
    DURATION_UNITS,
    FIRST_PRICED_ROUND,
    MAX_SUSTAIN_AP,
    RANGE_SPACES_PER_STEP,
)

from .synthesizer import AREA_KINDS, DURATION_KINDS, synthesize

logger = structlog.get_logger(__name__)

FALLBACK_TEXT: dict[MechanicField, str] = {
    MechanicField.ACTION: "Unknown Action",
    MechanicField.RANGE: "Unknown range",
    MechanicField.AREA: "Unknown area",
    MechanicField.DURATION: "Unknown duration",
    MechanicField.DAMAGE: "Unknown damage",
}

# Catalog categories of mechanic parts, for parts missing from the id table
_CATEGORY_FIELDS = {
    "action": MechanicField.ACTION,
    "range": MechanicField.RANGE,
    "area": MechanicField.AREA,
    "duration": MechanicField.DURATION,
    "damage": MechanicField.DAMAGE,
}

_AREA_TYPES = {kind: area for area, kind in AREA_KINDS.items()}
_DURATION_TYPES = {kind: duration for duration, kind in DURATION_KINDS.items()}

_DAMAGE_TYPES = {
    MechanicKind.MAGIC_DAMAGE: "magic",
    MechanicKind.LIGHT_DAMAGE: "light",
    MechanicKind.PHYSICAL_DAMAGE: "physical",
    MechanicKind.ELEMENTAL_DAMAGE: "elemental",
    MechanicKind.POISON_OR_NECROTIC_DAMAGE: "poison",
    MechanicKind.SONIC_DAMAGE: "sonic",
    MechanicKind.SPIRITUAL_DAMAGE: "spiritual",
    MechanicKind.PSYCHIC_DAMAGE: "psychic",
}

_ACTION_WORDS = {
    ActionType.BASIC: "Basic",
    ActionType.QUICK: "Quick",
    ActionType.FREE: "Free",
    ActionType.LONG: "Long (3)",
    ActionType.LONG4: "Long (4)",
}

_TECHNIQUE_KINDS = {
    MechanicKind.BASIC_ACTION,
    MechanicKind.QUICK_OR_FREE_ACTION,
    MechanicKind.LONG_ACTION,
    MechanicKind.REACTION,
    MechanicKind.ADD_WEAPON_ATTACK,
}


class Summaries(BaseModel):
    """Human-readable mechanic summaries of one build."""

    model_config = ConfigDict(frozen=True)

    action_text: str = "Basic Action"
    range_text: str = "1 space (melee)"
    area_text: str = "1 target"
    duration_text: str = "Instant"
    damage_text: str = ""


@dataclass
class MechanicReading:
    """Mechanic controls recovered from a part list."""

    selections: MechanicSelections = field(default_factory=MechanicSelections)
    build_type: BuildType | None = None
    damage_kind: MechanicKind | None = None
    unresolved_fields: set[MechanicField] = field(default_factory=set)
    warnings: list[BuildWarning] = field(default_factory=list)


# ============================================================================
# Classification
# ============================================================================


def mechanic_kind_of(
    instance: ExplicitPart | SynthesizedPart,
    mechanic_ids: MechanicIdTable,
    snapshot: CatalogSnapshot | None = None,
) -> MechanicKind | None:
    """
    Get the mechanic kind a part instance stands for, if any.

    Synthesized instances carry their kind. Explicit instances are looked up
    by id, then by catalog name for saves that stored names only.
    """
    if isinstance(instance, SynthesizedPart):
        return instance.trigger

    kind = mechanic_ids.kind_for(instance.part_id)
    if kind is None and snapshot is not None and instance.name:
        part = snapshot.get_part_by_name(instance.name)
        if part is not None:
            kind = mechanic_ids.kind_for(part.id)
    return kind


def _summary_field(kind: MechanicKind) -> MechanicField:
    if kind.field == MechanicField.DURATION_MODIFIER:
        return MechanicField.DURATION
    return kind.field


def partition_parts(
    parts: Iterable[ExplicitPart | SynthesizedPart],
    mechanic_ids: MechanicIdTable,
) -> tuple[list[ExplicitPart], list[ExplicitPart | SynthesizedPart]]:
    """
    Split a part list into user-facing chips and mechanic parts.

    Returns:
        Tuple of (hand-picked parts to list, mechanic parts shown as controls)
    """
    chips: list[ExplicitPart] = []
    mechanics: list[ExplicitPart | SynthesizedPart] = []
    for instance in parts:
        if mechanic_kind_of(instance, mechanic_ids) is None:
            chips.append(instance)
        else:
            mechanics.append(instance)
    return chips, mechanics


# ============================================================================
# Reading controls back
# ============================================================================


def _tier_value(
    kind: MechanicKind, duration_type: DurationType, level: int, reading: MechanicReading
) -> int:
    if duration_type == DurationType.ROUND:
        return level + FIRST_PRICED_ROUND
    if duration_type == DurationType.PERMANENT:
        return 1

    tiers = DURATION_TIERS[duration_type.value]
    if 1 <= level <= len(tiers):
        return tiers[level - 1]

    # Out-of-range levels come from saves made under older tier tables
    reading.warnings.append(
        BuildWarning(
            code=WarningCode.MALFORMED_FIELD,
            message=f"Duration level {level} is not a {duration_type.value} tier; using the first tier",
        )
    )
    logger.warning("duration_level_invalid", kind=kind.value, level=level)
    return DURATION_TIERS[duration_type.value][0]


def read_mechanics(
    parts: Iterable[ExplicitPart | SynthesizedPart],
    mechanic_ids: MechanicIdTable,
    snapshot: CatalogSnapshot | None = None,
) -> MechanicReading:
    """
    Recover basic-mechanic controls from a composed part list.

    Parts that are not mechanics are ignored. A part flagged as a mechanic in
    the catalog but absent from the id table marks its field unresolved so
    the summary falls back to generic text.

    Args:
        parts: Explicit and/or synthesized part instances
        mechanic_ids: Mechanic kind to catalog id table
        snapshot: Catalog snapshot, used for name fallback and categories

    Returns:
        MechanicReading with the recovered selections
    """
    reading = MechanicReading()
    action_type = ActionType.BASIC
    reaction = False
    range_sel = RangeSelection()
    area_sel = AreaSelection()
    duration: dict = {}
    weapon = WeaponSelection()
    damage_apply_duration = False

    for instance in parts:
        kind = mechanic_kind_of(instance, mechanic_ids, snapshot)
        if kind is None:
            part = snapshot.find_part(instance.part_id, instance.name) if snapshot else None
            if part is not None and part.mechanic:
                field_ = _CATEGORY_FIELDS.get(part.category.strip().lower())
                if field_ is not None:
                    reading.unresolved_fields.add(field_)
                logger.warning("mechanic_unresolved", part_id=part.id, name=part.name)
                reading.warnings.append(
                    BuildWarning(
                        code=WarningCode.UNRESOLVED_MECHANIC,
                        message=f"Mechanic part '{part.name}' is not a known mechanic",
                        part_id=part.id,
                    )
                )
            continue

        level = instance.option_levels[0]
        if kind in _TECHNIQUE_KINDS:
            reading.build_type = BuildType.TECHNIQUE
        elif kind.field != MechanicField.WEAPON:
            reading.build_type = reading.build_type or BuildType.POWER

        if kind in (MechanicKind.POWER_REACTION, MechanicKind.REACTION):
            reaction = True
        elif kind in (MechanicKind.POWER_QUICK_OR_FREE_ACTION, MechanicKind.QUICK_OR_FREE_ACTION):
            action_type = ActionType.FREE if level >= 1 else ActionType.QUICK
        elif kind in (MechanicKind.POWER_LONG_ACTION, MechanicKind.LONG_ACTION):
            action_type = ActionType.LONG4 if level >= 1 else ActionType.LONG
        elif kind in (MechanicKind.POWER_BASIC_ACTION, MechanicKind.BASIC_ACTION):
            action_type = ActionType.BASIC
        elif kind == MechanicKind.POWER_RANGE:
            range_sel = RangeSelection(steps=level, apply_duration=instance.apply_duration)
        elif kind in _AREA_TYPES:
            area_sel = AreaSelection(
                type=_AREA_TYPES[kind], level=level, apply_duration=instance.apply_duration
            )
        elif kind in _DURATION_TYPES:
            duration_type = _DURATION_TYPES[kind]
            duration["type"] = duration_type
            duration["value"] = _tier_value(kind, duration_type, level, reading)
        elif kind == MechanicKind.DURATION_FOCUS:
            duration["focus"] = True
        elif kind == MechanicKind.DURATION_NO_HARM:
            duration["no_harm"] = True
        elif kind == MechanicKind.DURATION_ENDS_ON_ACTIVATION:
            duration["ends_on_activation"] = True
        elif kind == MechanicKind.DURATION_SUSTAIN:
            duration["sustain"] = min(level + 1, MAX_SUSTAIN_AP)
        elif kind.field == MechanicField.DAMAGE:
            reading.damage_kind = kind
            damage_apply_duration = instance.apply_duration
        elif kind == MechanicKind.ADD_WEAPON_ATTACK:
            reading.build_type = BuildType.TECHNIQUE
            weapon = WeaponSelection(tp=level + 1)

    if duration and "type" not in duration:
        # Modifiers without a duration part belong to a single round
        duration["type"] = DurationType.ROUND
        duration["value"] = 1

    damage = DamageSelection()
    if reading.damage_kind is not None:
        damage = DamageSelection(
            type=_DAMAGE_TYPES[reading.damage_kind], apply_duration=damage_apply_duration
        )

    reading.selections = MechanicSelections(
        action=ActionSelection(type=action_type, reaction=reaction),
        range=range_sel,
        area=area_sel,
        duration=DurationSelection(**duration),
        damage=damage,
        weapon=weapon,
    )
    return reading


# ============================================================================
# Formatting
# ============================================================================


def _plural(value: int, unit: str) -> str:
    singular, plural = DURATION_UNITS[unit]
    return f"{value} {singular if value == 1 else plural}"


def format_action(action: ActionSelection) -> str:
    """Format an action selection, e.g. "Quick Reaction" or "Long (3) Action"."""
    word = _ACTION_WORDS[action.base_type]
    return f"{word} Reaction" if action.is_reaction else f"{word} Action"


def format_range(range_sel: RangeSelection) -> str:
    if range_sel.steps == 0:
        return "1 space (melee)"
    return f"{RANGE_SPACES_PER_STEP * range_sel.steps} spaces"


def format_area(area: AreaSelection) -> str:
    if area.type == AreaType.NONE:
        return "1 target"
    shape = area.type.value.capitalize()
    return shape if area.level == 0 else f"{shape} (level {area.level})"


def format_duration(duration: DurationSelection) -> str:
    """Format a duration with its modifiers, e.g. "3 rounds, Sustained 2 AP"."""
    if duration.is_instant:
        return "Instant"
    if duration.type == DurationType.PERMANENT:
        text = "Permanent"
    else:
        text = _plural(duration.value, duration.type.value)

    modifiers = []
    if duration.focus:
        modifiers.append("Focus")
    if duration.no_harm:
        modifiers.append("No Harm or Adaptation")
    if duration.ends_on_activation:
        modifiers.append("Ends on Activation")
    if duration.sustain > 0:
        modifiers.append(f"Sustained {duration.sustain} AP")
    return ", ".join([text, *modifiers])


def format_damage(damage: DamageSelection) -> str:
    if damage.is_none:
        return ""
    return f"{damage.amount}d{damage.size} {damage.type}"


def format_summaries(
    selections: MechanicSelections,
    unresolved_fields: Iterable[MechanicField] = (),
    damage_kind: MechanicKind | None = None,
) -> Summaries:
    """Format summaries, replacing unresolved fields with fallback text."""
    unresolved = set(unresolved_fields)

    damage_text = format_damage(selections.damage)
    if not damage_text and damage_kind is not None:
        damage_text = f"{_DAMAGE_TYPES[damage_kind]} damage"

    summaries = Summaries(
        action_text=format_action(selections.action),
        range_text=format_range(selections.range),
        area_text=format_area(selections.area),
        duration_text=format_duration(selections.duration),
        damage_text=damage_text,
    )

    overrides = {}
    for field_, attr in (
        (MechanicField.ACTION, "action_text"),
        (MechanicField.RANGE, "range_text"),
        (MechanicField.AREA, "area_text"),
        (MechanicField.DURATION, "duration_text"),
        (MechanicField.DAMAGE, "damage_text"),
    ):
        if field_ in unresolved:
            overrides[attr] = FALLBACK_TEXT[field_]
    return summaries.model_copy(update=overrides) if overrides else summaries


def summarize_parts(
    parts: Iterable[ExplicitPart | SynthesizedPart],
    snapshot: CatalogSnapshot,
    mechanic_ids: MechanicIdTable,
) -> Summaries:
    """Summarize a raw part list, such as one read from a saved build."""
    reading = read_mechanics(parts, mechanic_ids, snapshot)
    return format_summaries(reading.selections, reading.unresolved_fields, reading.damage_kind)


def derive_summaries(
    config: BuildConfiguration,
    snapshot: CatalogSnapshot,
    mechanic_ids: MechanicIdTable,
) -> Summaries:
    """
    Derive the summaries of a build from its composed part list.

    Controls are synthesized, read back out of the synthesized and
    hand-picked parts, and formatted. The damage dice are not part of any
    mechanic part, so they come from the damage control. A mechanic the
    catalog could not supply shows fallback text for its field.
    """
    synthesis = synthesize(config.mechanics, snapshot, mechanic_ids, config.build_type)
    reading = read_mechanics([*synthesis.parts, *config.parts], mechanic_ids, snapshot)

    unresolved = set(reading.unresolved_fields)
    for warning in synthesis.warnings:
        if warning.mechanic is not None:
            unresolved.add(_summary_field(warning.mechanic))

    update = {"damage": config.mechanics.damage}
    if config.build_type == BuildType.POWER and reading.selections.duration.is_instant:
        # A bare single round synthesizes no part to read back
        update["duration"] = config.mechanics.duration
    selections = reading.selections.model_copy(update=update)
    return format_summaries(selections, unresolved)
