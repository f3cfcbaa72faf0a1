"""
Editing operations for Realms Forge builds.

Every control change in a creator goes through one of these functions. They
validate the change and return a new BuildConfiguration; the costing path
downstream assumes input that already passed through here.
"""

from typing import Any

import structlog
from pydantic import ValidationError

from realms_forge.catalog import CatalogSnapshot, Part, Property

from .models import BuildConfiguration, ExplicitPart, MechanicSelections, PropertyInstance

logger = structlog.get_logger(__name__)


class InvalidOptionLevelError(ValueError):
    """Raised when an option level or mechanic value is out of range."""

    pass


class MechanicPartConflictError(ValueError):
    """Raised when hand-picking a part that a mechanic control already drives."""

    pass


def _check_level(level: Any) -> int:
    if isinstance(level, bool) or not isinstance(level, int):
        raise InvalidOptionLevelError(f"Option level must be an integer, got {level!r}")
    if level < 0:
        raise InvalidOptionLevelError(f"Option level must not be negative, got {level}")
    return level


def _check_part_levels(part: Part, option_levels: tuple[int, int, int]) -> tuple[int, int, int]:
    if len(option_levels) != 3:
        raise InvalidOptionLevelError("Exactly three option levels are required")

    for slot, level in enumerate(option_levels, start=1):
        _check_level(level)
        if level > 0 and not part.option_has_content(slot):
            raise InvalidOptionLevelError(f"Part '{part.name}' has no option {slot}")
    return tuple(option_levels)


def _check_index(items: tuple[Any, ...], index: int, kind: str) -> None:
    if not 0 <= index < len(items):
        raise IndexError(f"No {kind} at position {index}")


# ============================================================================
# Parts
# ============================================================================


def add_part(
    config: BuildConfiguration,
    part: Part,
    option_levels: tuple[int, int, int] = (0, 0, 0),
    apply_duration: bool = False,
) -> BuildConfiguration:
    """
    Append a hand-picked part.

    Args:
        config: Build to edit
        part: Catalog part to add
        option_levels: Level for each of the three option slots
        apply_duration: Multiply this part's energy by the build's duration

    Returns:
        New BuildConfiguration with the part appended

    Raises:
        MechanicPartConflictError: If the part is a mechanic part
        InvalidOptionLevelError: If a level is invalid for the part
    """
    if part.mechanic:
        raise MechanicPartConflictError(
            f"'{part.name}' is set through the basic mechanic controls, not added as a part"
        )

    levels = _check_part_levels(part, option_levels)
    instance = ExplicitPart(
        part_id=part.id,
        name=part.name,
        option_levels=levels,
        apply_duration=apply_duration,
    )
    logger.debug("part_added", part_id=part.id, option_levels=levels)
    return config.model_copy(update={"parts": config.parts + (instance,)})


def remove_part(config: BuildConfiguration, index: int) -> BuildConfiguration:
    """Remove the hand-picked part at a position."""
    _check_index(config.parts, index, "part")
    parts = config.parts[:index] + config.parts[index + 1 :]
    return config.model_copy(update={"parts": parts})


def set_option_level(
    config: BuildConfiguration,
    index: int,
    slot: int,
    level: int,
    snapshot: CatalogSnapshot,
) -> BuildConfiguration:
    """
    Change one option level of a hand-picked part.

    Raises:
        IndexError: If there is no part at ``index``
        InvalidOptionLevelError: If the slot is absent or the level invalid
    """
    _check_index(config.parts, index, "part")
    if slot not in (1, 2, 3):
        raise InvalidOptionLevelError(f"Option slot must be 1, 2 or 3, got {slot!r}")
    _check_level(level)

    instance = config.parts[index]
    part = snapshot.find_part(instance.part_id, instance.name)
    if part is not None and level > 0 and not part.option_has_content(slot):
        raise InvalidOptionLevelError(f"Part '{part.name}' has no option {slot}")

    levels = list(instance.option_levels)
    levels[slot - 1] = level
    updated = instance.model_copy(update={"option_levels": tuple(levels)})
    parts = config.parts[:index] + (updated,) + config.parts[index + 1 :]
    return config.model_copy(update={"parts": parts})


def set_apply_duration(config: BuildConfiguration, index: int, value: bool) -> BuildConfiguration:
    _check_index(config.parts, index, "part")
    updated = config.parts[index].model_copy(update={"apply_duration": bool(value)})
    parts = config.parts[:index] + (updated,) + config.parts[index + 1 :]
    return config.model_copy(update={"parts": parts})


# ============================================================================
# Properties
# ============================================================================


def add_property(config: BuildConfiguration, prop: Property, level: int = 0) -> BuildConfiguration:
    """
    Apply a property to an armament.

    Raises:
        InvalidOptionLevelError: If the level is invalid or the property has no option
    """
    _check_level(level)
    if level > 0 and not prop.has_option:
        raise InvalidOptionLevelError(f"Property '{prop.name}' has no option to level")

    instance = PropertyInstance(property_id=prop.id, name=prop.name, level=level)
    return config.model_copy(update={"properties": config.properties + (instance,)})


def remove_property(config: BuildConfiguration, index: int) -> BuildConfiguration:
    _check_index(config.properties, index, "property")
    properties = config.properties[:index] + config.properties[index + 1 :]
    return config.model_copy(update={"properties": properties})


def set_property_level(
    config: BuildConfiguration,
    index: int,
    level: int,
    snapshot: CatalogSnapshot,
) -> BuildConfiguration:
    _check_index(config.properties, index, "property")
    _check_level(level)

    instance = config.properties[index]
    prop = snapshot.find_property(instance.property_id, instance.name)
    if prop is not None and level > 0 and not prop.has_option:
        raise InvalidOptionLevelError(f"Property '{prop.name}' has no option to level")

    updated = instance.model_copy(update={"level": level})
    properties = config.properties[:index] + (updated,) + config.properties[index + 1 :]
    return config.model_copy(update={"properties": properties})


# ============================================================================
# Mechanic controls
# ============================================================================


def with_selections(config: BuildConfiguration, **changes: Any) -> BuildConfiguration:
    """
    Replace one or more basic-mechanic controls.

    Each keyword names a control (``action``, ``range``, ``area``,
    ``duration``, ``damage``, ``weapon``) and takes either a selection model
    or a mapping of the fields to change on the current selection.

    Example:
        with_selections(config, duration={"type": "minute", "value": 10})

    Raises:
        InvalidOptionLevelError: If a control value is out of range
        KeyError: If a keyword is not a control
    """
    current = config.mechanics.model_dump()
    for field, value in changes.items():
        if field not in current:
            raise KeyError(f"Unknown mechanic control '{field}'")
        if isinstance(value, dict):
            current[field] = {**current[field], **value}
        else:
            current[field] = value.model_dump()

    try:
        mechanics = MechanicSelections.model_validate(current)
    except ValidationError as e:
        raise InvalidOptionLevelError(f"Invalid mechanic selection: {e}") from e

    return config.model_copy(update={"mechanics": mechanics})
