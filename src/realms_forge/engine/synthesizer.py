"""
Mechanic synthesis for Realms Forge.

Translates the basic-mechanic controls of a build (action type, range, area,
duration and its modifiers, damage type, weapon) into synthesized part
instances drawn from the catalog. Synthesized parts are priced by the same
composer as hand-picked parts.
"""

from dataclasses import dataclass, field

import structlog

from realms_forge.build.models import (
    ActionSelection,
    ActionType,
    AreaType,
    BuildType,
    BuildWarning,
    DurationSelection,
    DurationType,
    MechanicSelections,
    SynthesizedPart,
    WarningCode,
)
from realms_forge.catalog import CatalogSnapshot, MechanicIdTable, MechanicKind
from realms_forge.rules import DAMAGE_FAMILIES, DURATION_TIERS, FIRST_PRICED_ROUND

logger = structlog.get_logger(__name__)

# (quick-or-free, long, basic, reaction) kinds per creator
_POWER_ACTIONS = (
    MechanicKind.POWER_QUICK_OR_FREE_ACTION,
    MechanicKind.POWER_LONG_ACTION,
    MechanicKind.POWER_BASIC_ACTION,
    MechanicKind.POWER_REACTION,
)
_TECHNIQUE_ACTIONS = (
    MechanicKind.QUICK_OR_FREE_ACTION,
    MechanicKind.LONG_ACTION,
    MechanicKind.BASIC_ACTION,
    MechanicKind.REACTION,
)

AREA_KINDS: dict[AreaType, MechanicKind] = {
    AreaType.SPHERE: MechanicKind.SPHERE_OF_EFFECT,
    AreaType.CYLINDER: MechanicKind.CYLINDER_OF_EFFECT,
    AreaType.CONE: MechanicKind.CONE_OF_EFFECT,
    AreaType.LINE: MechanicKind.LINE_OF_EFFECT,
    AreaType.TRAIL: MechanicKind.TRAIL_OF_EFFECT,
}

DURATION_KINDS: dict[DurationType, MechanicKind] = {
    DurationType.ROUND: MechanicKind.DURATION_ROUND,
    DurationType.MINUTE: MechanicKind.DURATION_MINUTE,
    DurationType.HOUR: MechanicKind.DURATION_HOUR,
    DurationType.DAY: MechanicKind.DURATION_DAY,
    DurationType.PERMANENT: MechanicKind.DURATION_PERMANENT,
}


@dataclass(frozen=True)
class MechanicRequest:
    """A mechanic part the controls ask for, before catalog resolution."""

    kind: MechanicKind
    level: int = 0
    apply_duration: bool = False


@dataclass
class Synthesis:
    """Synthesized parts plus the mechanics the catalog could not supply."""

    parts: list[SynthesizedPart] = field(default_factory=list)
    warnings: list[BuildWarning] = field(default_factory=list)


def duration_level(duration: DurationSelection) -> int:
    """
    Get the option level of the duration part for a duration selection.

    Rounds are priced per round beyond the first, so two rounds is level 0.
    Minutes, hours and days use the 1-based index of the chosen tier.
    Permanent has a single tier at level 0.
    """
    if duration.type == DurationType.ROUND:
        return duration.value - FIRST_PRICED_ROUND
    tiers = DURATION_TIERS.get(duration.type.value)
    if tiers is None:
        return 0
    return tiers.index(duration.value) + 1


def action_requests(action: ActionSelection, build_type: BuildType) -> list[MechanicRequest]:
    """
    Map an action selection to action mechanics.

    A reaction replaces the basic action part; for quick, free and long
    actions it is added alongside the action part.
    """
    quick_or_free, long_action, basic, reaction = (
        _TECHNIQUE_ACTIONS if build_type == BuildType.TECHNIQUE else _POWER_ACTIONS
    )

    requests: list[MechanicRequest] = []
    if action.is_reaction:
        requests.append(MechanicRequest(reaction))

    base = action.base_type
    if base == ActionType.BASIC:
        if not action.is_reaction:
            requests.append(MechanicRequest(basic))
    elif base == ActionType.QUICK:
        requests.append(MechanicRequest(quick_or_free, 0))
    elif base == ActionType.FREE:
        requests.append(MechanicRequest(quick_or_free, 1))
    elif base == ActionType.LONG:
        requests.append(MechanicRequest(long_action, 0))
    elif base == ActionType.LONG4:
        requests.append(MechanicRequest(long_action, 1))
    return requests


def power_requests(selections: MechanicSelections) -> list[MechanicRequest]:
    """Every mechanic a power's controls ask for, in display order."""
    requests = action_requests(selections.action, BuildType.POWER)

    if selections.range.steps >= 1:
        requests.append(
            MechanicRequest(
                MechanicKind.POWER_RANGE,
                selections.range.steps,
                selections.range.apply_duration,
            )
        )

    area = selections.area
    if area.type != AreaType.NONE:
        requests.append(MechanicRequest(AREA_KINDS[area.type], area.level, area.apply_duration))

    duration = selections.duration
    if not duration.is_instant:
        level = duration_level(duration)
        if level >= 0:
            requests.append(MechanicRequest(DURATION_KINDS[duration.type], level))
        if duration.focus:
            requests.append(MechanicRequest(MechanicKind.DURATION_FOCUS))
        if duration.no_harm:
            requests.append(MechanicRequest(MechanicKind.DURATION_NO_HARM))
        if duration.ends_on_activation:
            requests.append(MechanicRequest(MechanicKind.DURATION_ENDS_ON_ACTIVATION))
        if duration.sustain > 0:
            requests.append(MechanicRequest(MechanicKind.DURATION_SUSTAIN, duration.sustain - 1))

    damage = selections.damage
    if not damage.is_none:
        family = MechanicKind(DAMAGE_FAMILIES[damage.type])
        requests.append(MechanicRequest(family, 0, damage.apply_duration))

    return requests


def technique_requests(selections: MechanicSelections) -> list[MechanicRequest]:
    requests = action_requests(selections.action, BuildType.TECHNIQUE)
    if selections.weapon.tp >= 1:
        requests.append(MechanicRequest(MechanicKind.ADD_WEAPON_ATTACK, selections.weapon.tp - 1))
    return requests


def synthesize(
    selections: MechanicSelections,
    snapshot: CatalogSnapshot,
    mechanic_ids: MechanicIdTable,
    build_type: BuildType = BuildType.POWER,
) -> Synthesis:
    """
    Synthesize mechanic parts from basic-mechanic controls.

    A mechanic whose catalog part is missing, or is not flagged as a
    mechanic, yields nothing and a warning; the other mechanics are still
    synthesized.

    Args:
        selections: Basic-mechanic control state
        snapshot: Catalog snapshot to resolve mechanic parts against
        mechanic_ids: Mechanic kind to catalog id table
        build_type: Creator the controls belong to

    Returns:
        Synthesis with parts in display order and any warnings
    """
    if build_type == BuildType.POWER:
        requests = power_requests(selections)
    elif build_type == BuildType.TECHNIQUE:
        requests = technique_requests(selections)
    else:
        requests = []

    result = Synthesis()
    for request in requests:
        part_id = mechanic_ids.id_for(request.kind)
        part = snapshot.get_part_by_id(part_id)

        if part is None or not part.mechanic:
            reason = "missing from catalog" if part is None else "not a mechanic part"
            logger.warning(
                "mechanic_part_unavailable",
                kind=request.kind.value,
                part_id=part_id,
                reason=reason,
            )
            result.warnings.append(
                BuildWarning(
                    code=WarningCode.MECHANIC_UNAVAILABLE,
                    message=f"Mechanic '{request.kind.value}' is unavailable: part {part_id} {reason}",
                    part_id=part_id,
                    mechanic=request.kind,
                )
            )
            continue

        result.parts.append(
            SynthesizedPart(
                trigger=request.kind,
                part_id=part.id,
                name=part.name,
                option_levels=(request.level, 0, 0),
                apply_duration=request.apply_duration,
            )
        )

    return result


def synthesize_mechanic_parts(
    selections: MechanicSelections,
    snapshot: CatalogSnapshot,
    mechanic_ids: MechanicIdTable,
    build_type: BuildType = BuildType.POWER,
) -> list[SynthesizedPart]:
    """Synthesize mechanic parts, discarding warnings."""
    return synthesize(selections, snapshot, mechanic_ids, build_type).parts
