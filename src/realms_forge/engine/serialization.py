"""
Build persistence records for Realms Forge.

``dump_build`` turns a build into plain nested data for a document store.
Mechanic controls are saved as the mechanic parts they synthesize, each
tagged with its kind, so a saved build prices the same way without the
engine. The duration control is stored as well, since a single round has no
part. ``load_build`` reverses this: mechanic parts re-populate the controls
and everything else becomes a hand-picked part.

Loading never fails on stored data. Unknown references are dropped and
malformed fields fall back to defaults, each with a warning.
"""

from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic import ValidationError

from realms_forge.build.models import (
    BuildConfiguration,
    BuildType,
    BuildWarning,
    DamageSelection,
    DurationSelection,
    ExplicitPart,
    PropertyInstance,
    SynthesizedPart,
    WarningCode,
    WeaponSelection,
)
from realms_forge.catalog import CatalogSnapshot, MechanicIdTable, MechanicKind

from .display import read_mechanics
from .synthesizer import synthesize

logger = structlog.get_logger(__name__)

_LEVEL_KEYS = ("op_1_lvl", "op_2_lvl", "op_3_lvl")
# Older saves used camelCase option keys
_LEGACY_LEVEL_KEYS = ("opt1Level", "opt2Level", "opt3Level")


@dataclass
class LoadedBuild:
    """A build rehydrated from a stored record."""

    config: BuildConfiguration
    warnings: list[BuildWarning] = field(default_factory=list)

    @property
    def has_unresolved_references(self) -> bool:
        return any(warning.is_unresolved_reference for warning in self.warnings)


# ============================================================================
# Dump
# ============================================================================


def _dump_part(instance: ExplicitPart | SynthesizedPart) -> dict[str, Any]:
    record: dict[str, Any] = {"id": instance.part_id, "name": instance.name}
    for key, level in zip(_LEVEL_KEYS, instance.option_levels):
        record[key] = level
    record["apply_duration"] = instance.apply_duration
    if isinstance(instance, SynthesizedPart):
        record["mechanic"] = instance.trigger.value
    return record


def dump_build(
    config: BuildConfiguration,
    snapshot: CatalogSnapshot,
    mechanic_ids: MechanicIdTable,
) -> dict[str, Any]:
    """
    Serialize a build to plain data.

    Args:
        config: Build to serialize
        snapshot: Catalog snapshot used to synthesize the mechanic parts
        mechanic_ids: Mechanic kind to catalog id table

    Returns:
        Dictionary of plain values (str, int, float, bool, list, dict)
    """
    synthesis = synthesize(config.mechanics, snapshot, mechanic_ids, config.build_type)
    damage = config.mechanics.damage
    weapon = config.mechanics.weapon

    return {
        "name": config.name,
        "description": config.description,
        "build_type": config.build_type.value,
        "parts": [_dump_part(p) for p in config.parts] + [_dump_part(p) for p in synthesis.parts],
        "properties": [
            {"id": p.property_id, "name": p.name, "op_1_lvl": p.level} for p in config.properties
        ],
        "damage": [
            {
                "amount": damage.amount,
                "size": damage.size,
                "type": damage.type,
                "apply_duration": damage.apply_duration,
            }
        ],
        "weapon": {"id": weapon.id, "name": weapon.name, "tp": weapon.tp},
        "duration": config.mechanics.duration.model_dump(mode="json"),
    }


# ============================================================================
# Load
# ============================================================================


def _malformed(warnings: list[BuildWarning], message: str, **context: Any) -> None:
    logger.warning("stored_field_malformed", detail=message, **context)
    warnings.append(BuildWarning(code=WarningCode.MALFORMED_FIELD, message=message))


def _read_int(value: Any, default: int, name: str, warnings: list[BuildWarning]) -> int:
    """Read a non-negative integer, accepting whole floats and digit strings."""
    if value is None:
        return default
    if isinstance(value, bool):
        _malformed(warnings, f"'{name}' must be a number, got {value!r}")
        return default
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int) or value < 0:
        _malformed(warnings, f"'{name}' must be a non-negative integer, got {value!r}")
        return default
    return value


def _read_levels(record: dict[str, Any], warnings: list[BuildWarning]) -> tuple[int, int, int]:
    levels = []
    for key, legacy_key in zip(_LEVEL_KEYS, _LEGACY_LEVEL_KEYS):
        raw = record.get(key, record.get(legacy_key))
        levels.append(_read_int(raw, 0, key, warnings))
    return tuple(levels)


def _read_kind(
    record: dict[str, Any],
    part_id: int | None,
    snapshot: CatalogSnapshot,
    mechanic_ids: MechanicIdTable,
) -> MechanicKind | None:
    tag = record.get("mechanic")
    if isinstance(tag, str):
        try:
            return MechanicKind(tag)
        except ValueError:
            logger.warning("mechanic_tag_unknown", tag=tag, part_id=part_id)

    kind = mechanic_ids.kind_for(part_id)
    if kind is None and (part_id is None or snapshot.get_part_by_id(part_id) is None):
        name = record.get("name")
        part = snapshot.get_part_by_name(name) if isinstance(name, str) else None
        if part is not None:
            kind = mechanic_ids.kind_for(part.id)
    return kind


def _load_parts(
    records: Any,
    snapshot: CatalogSnapshot,
    mechanic_ids: MechanicIdTable,
    warnings: list[BuildWarning],
) -> tuple[list[ExplicitPart], list[SynthesizedPart]]:
    explicit: list[ExplicitPart] = []
    mechanics: list[SynthesizedPart] = []

    if records is None:
        return explicit, mechanics
    if not isinstance(records, list):
        _malformed(warnings, "'parts' must be a list")
        return explicit, mechanics

    for record in records:
        if not isinstance(record, dict):
            _malformed(warnings, f"Part record must be a mapping, got {record!r}")
            continue

        raw_id = record.get("id")
        part_id = raw_id if isinstance(raw_id, int) and not isinstance(raw_id, bool) else None
        name = record.get("name") if isinstance(record.get("name"), str) else ""
        levels = _read_levels(record, warnings)
        apply_duration = bool(record.get("apply_duration", record.get("applyDuration", False)))

        kind = _read_kind(record, part_id, snapshot, mechanic_ids)
        if kind is not None:
            mechanics.append(
                SynthesizedPart(
                    trigger=kind,
                    part_id=mechanic_ids.id_for(kind),
                    name=name,
                    option_levels=levels,
                    apply_duration=apply_duration,
                )
            )
            continue

        part = snapshot.find_part(part_id, name)
        if part is None:
            logger.warning("stored_part_dropped", part_id=raw_id, name=name)
            warnings.append(
                BuildWarning(
                    code=WarningCode.UNRESOLVED_PART,
                    message=f"Part {raw_id} ({name or 'unnamed'}) is no longer in the catalog",
                    part_id=part_id,
                )
            )
            continue

        if part.mechanic:
            logger.warning("stored_mechanic_dropped", part_id=part.id, name=part.name)
            warnings.append(
                BuildWarning(
                    code=WarningCode.UNRESOLVED_MECHANIC,
                    message=f"Mechanic part '{part.name}' has no matching control",
                    part_id=part.id,
                )
            )
            continue

        for slot, level in enumerate(levels, start=1):
            if level > 0 and not part.option_has_content(slot):
                _malformed(warnings, f"Part '{part.name}' has no option {slot}", part_id=part.id)
                levels = tuple(0 if s == slot else lv for s, lv in enumerate(levels, start=1))

        explicit.append(
            ExplicitPart(
                part_id=part.id,
                name=part.name,
                option_levels=levels,
                apply_duration=apply_duration,
            )
        )

    return explicit, mechanics


def _load_properties(
    records: Any, snapshot: CatalogSnapshot, warnings: list[BuildWarning]
) -> list[PropertyInstance]:
    properties: list[PropertyInstance] = []
    if records is None:
        return properties
    if not isinstance(records, list):
        _malformed(warnings, "'properties' must be a list")
        return properties

    for record in records:
        if not isinstance(record, dict):
            _malformed(warnings, f"Property record must be a mapping, got {record!r}")
            continue
        raw_id = record.get("id")
        property_id = raw_id if isinstance(raw_id, int) and not isinstance(raw_id, bool) else None
        name = record.get("name") if isinstance(record.get("name"), str) else ""

        prop = snapshot.find_property(property_id, name)
        if prop is None:
            logger.warning("stored_property_dropped", property_id=raw_id, name=name)
            warnings.append(
                BuildWarning(
                    code=WarningCode.UNRESOLVED_PROPERTY,
                    message=f"Property {raw_id} ({name or 'unnamed'}) is no longer in the catalog",
                    part_id=property_id,
                )
            )
            continue

        level = _read_int(record.get("op_1_lvl"), 0, "op_1_lvl", warnings)
        properties.append(PropertyInstance(property_id=prop.id, name=prop.name, level=level))

    return properties


def _load_damage(record: Any, warnings: list[BuildWarning]) -> DamageSelection:
    """Read the first damage entry, falling back to no damage."""
    if record is None:
        return DamageSelection()
    if isinstance(record, list):
        record = next((entry for entry in record if entry), None)
        if record is None:
            return DamageSelection()
    if not isinstance(record, dict):
        _malformed(warnings, f"Damage record must be a mapping, got {record!r}")
        return DamageSelection()

    damage_type = record.get("type", "none")
    if not isinstance(damage_type, str):
        _malformed(warnings, f"Damage type must be text, got {damage_type!r}")
        damage_type = "none"

    try:
        return DamageSelection(
            amount=_read_int(record.get("amount"), 0, "damage amount", warnings),
            size=_read_int(record.get("size"), 6, "damage size", warnings),
            type=damage_type,
            apply_duration=bool(record.get("apply_duration", False)),
        )
    except ValidationError as e:
        _malformed(warnings, f"Invalid damage record: {e.errors()[0]['msg']}")
        return DamageSelection()


def _load_weapon(record: Any, warnings: list[BuildWarning]) -> WeaponSelection:
    if record is None:
        return WeaponSelection()
    if not isinstance(record, dict):
        _malformed(warnings, f"Weapon record must be a mapping, got {record!r}")
        return WeaponSelection()
    weapon_id = record.get("id")
    return WeaponSelection(
        id=weapon_id if isinstance(weapon_id, int) and not isinstance(weapon_id, bool) else None,
        name=record.get("name") if isinstance(record.get("name"), str) else "",
        tp=_read_int(record.get("tp"), 0, "weapon tp", warnings),
    )


def _load_duration(record: Any, warnings: list[BuildWarning]) -> DurationSelection:
    """Read the stored duration control, falling back to instant."""
    if record is None:
        return DurationSelection()
    if not isinstance(record, dict):
        _malformed(warnings, f"Duration record must be a mapping, got {record!r}")
        return DurationSelection()
    try:
        return DurationSelection.model_validate(record)
    except ValidationError as e:
        _malformed(warnings, f"Invalid duration record: {e.errors()[0]['msg']}")
        return DurationSelection()


def load_build(
    record: Any,
    snapshot: CatalogSnapshot,
    mechanic_ids: MechanicIdTable,
) -> LoadedBuild:
    """
    Rehydrate a stored build record against the current catalog.

    Args:
        record: Plain data as produced by dump_build (or an older save)
        snapshot: Current catalog snapshot
        mechanic_ids: Mechanic kind to catalog id table

    Returns:
        LoadedBuild with the configuration and any warnings
    """
    warnings: list[BuildWarning] = []
    if not isinstance(record, dict):
        _malformed(warnings, f"Build record must be a mapping, got {type(record).__name__}")
        return LoadedBuild(config=BuildConfiguration(), warnings=warnings)

    explicit, mechanic_parts = _load_parts(record.get("parts"), snapshot, mechanic_ids, warnings)
    reading = read_mechanics(mechanic_parts, mechanic_ids, snapshot)
    warnings.extend(reading.warnings)

    raw_type = record.get("build_type")
    if raw_type is None:
        build_type = reading.build_type or BuildType.POWER
    else:
        try:
            build_type = BuildType(str(raw_type).lower())
        except ValueError:
            _malformed(warnings, f"Unknown build type {raw_type!r}; using power")
            build_type = BuildType.POWER

    damage = _load_damage(record.get("damage"), warnings)
    if damage.is_none and reading.damage_kind is not None:
        _malformed(warnings, "Damage part saved without damage dice; using 1d6")
        damage = reading.selections.damage.model_copy(update={"amount": 1, "size": 6})

    weapon = _load_weapon(record.get("weapon"), warnings)
    if weapon.tp == 0 and reading.selections.weapon.tp > 0:
        weapon = reading.selections.weapon

    duration = reading.selections.duration
    if duration.is_instant:
        # A bare single round is saved without a duration part
        duration = _load_duration(record.get("duration"), warnings)

    mechanics = reading.selections.model_copy(
        update={"damage": damage, "weapon": weapon, "duration": duration}
    )

    config = BuildConfiguration(
        name=str(record.get("name") or ""),
        description=str(record.get("description") or ""),
        build_type=build_type,
        parts=tuple(explicit),
        properties=tuple(_load_properties(record.get("properties"), snapshot, warnings)),
        mechanics=mechanics,
    )

    logger.info(
        "build_loaded",
        name=config.name,
        parts=len(config.parts),
        mechanics=len(mechanic_parts),
        warnings=len(warnings),
    )
    return LoadedBuild(config=config, warnings=warnings)
