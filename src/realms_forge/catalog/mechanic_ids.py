"""Mapping from semantic mechanic kinds to catalog part ids.

The ids live in a YAML table so that the engine logic never carries
literal catalog ids.
"""

from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from .loader import CatalogLoadError, CatalogValidationError


class MechanicField(StrEnum):
    """Basic-mechanic control a mechanic part stands for."""

    ACTION = "action"
    RANGE = "range"
    AREA = "area"
    DURATION = "duration"
    DURATION_MODIFIER = "duration_modifier"
    DAMAGE = "damage"
    WEAPON = "weapon"


class MechanicKind(StrEnum):
    """Every mechanic part the synthesizer can produce."""

    # Power actions
    POWER_BASIC_ACTION = "power_basic_action"
    POWER_QUICK_OR_FREE_ACTION = "power_quick_or_free_action"
    POWER_LONG_ACTION = "power_long_action"
    POWER_REACTION = "power_reaction"

    # Technique actions
    BASIC_ACTION = "basic_action"
    QUICK_OR_FREE_ACTION = "quick_or_free_action"
    LONG_ACTION = "long_action"
    REACTION = "reaction"

    POWER_RANGE = "power_range"

    # Areas of effect
    SPHERE_OF_EFFECT = "sphere_of_effect"
    CYLINDER_OF_EFFECT = "cylinder_of_effect"
    CONE_OF_EFFECT = "cone_of_effect"
    LINE_OF_EFFECT = "line_of_effect"
    TRAIL_OF_EFFECT = "trail_of_effect"

    # Durations
    DURATION_ROUND = "duration_round"
    DURATION_MINUTE = "duration_minute"
    DURATION_HOUR = "duration_hour"
    DURATION_DAY = "duration_day"
    DURATION_PERMANENT = "duration_permanent"

    # Duration modifiers
    DURATION_FOCUS = "duration_focus"
    DURATION_NO_HARM = "duration_no_harm"
    DURATION_ENDS_ON_ACTIVATION = "duration_ends_on_activation"
    DURATION_SUSTAIN = "duration_sustain"

    # Power damage families
    MAGIC_DAMAGE = "magic_damage"
    LIGHT_DAMAGE = "light_damage"
    PHYSICAL_DAMAGE = "physical_damage"
    ELEMENTAL_DAMAGE = "elemental_damage"
    POISON_OR_NECROTIC_DAMAGE = "poison_or_necrotic_damage"
    SONIC_DAMAGE = "sonic_damage"
    SPIRITUAL_DAMAGE = "spiritual_damage"
    PSYCHIC_DAMAGE = "psychic_damage"

    ADD_WEAPON_ATTACK = "add_weapon_attack"

    @property
    def field(self) -> MechanicField:
        """The control this kind is synthesized from."""
        return _KIND_FIELDS[self]


_KIND_FIELDS: dict[MechanicKind, MechanicField] = {
    MechanicKind.POWER_BASIC_ACTION: MechanicField.ACTION,
    MechanicKind.POWER_QUICK_OR_FREE_ACTION: MechanicField.ACTION,
    MechanicKind.POWER_LONG_ACTION: MechanicField.ACTION,
    MechanicKind.POWER_REACTION: MechanicField.ACTION,
    MechanicKind.BASIC_ACTION: MechanicField.ACTION,
    MechanicKind.QUICK_OR_FREE_ACTION: MechanicField.ACTION,
    MechanicKind.LONG_ACTION: MechanicField.ACTION,
    MechanicKind.REACTION: MechanicField.ACTION,
    MechanicKind.POWER_RANGE: MechanicField.RANGE,
    MechanicKind.SPHERE_OF_EFFECT: MechanicField.AREA,
    MechanicKind.CYLINDER_OF_EFFECT: MechanicField.AREA,
    MechanicKind.CONE_OF_EFFECT: MechanicField.AREA,
    MechanicKind.LINE_OF_EFFECT: MechanicField.AREA,
    MechanicKind.TRAIL_OF_EFFECT: MechanicField.AREA,
    MechanicKind.DURATION_ROUND: MechanicField.DURATION,
    MechanicKind.DURATION_MINUTE: MechanicField.DURATION,
    MechanicKind.DURATION_HOUR: MechanicField.DURATION,
    MechanicKind.DURATION_DAY: MechanicField.DURATION,
    MechanicKind.DURATION_PERMANENT: MechanicField.DURATION,
    MechanicKind.DURATION_FOCUS: MechanicField.DURATION_MODIFIER,
    MechanicKind.DURATION_NO_HARM: MechanicField.DURATION_MODIFIER,
    MechanicKind.DURATION_ENDS_ON_ACTIVATION: MechanicField.DURATION_MODIFIER,
    MechanicKind.DURATION_SUSTAIN: MechanicField.DURATION_MODIFIER,
    MechanicKind.MAGIC_DAMAGE: MechanicField.DAMAGE,
    MechanicKind.LIGHT_DAMAGE: MechanicField.DAMAGE,
    MechanicKind.PHYSICAL_DAMAGE: MechanicField.DAMAGE,
    MechanicKind.ELEMENTAL_DAMAGE: MechanicField.DAMAGE,
    MechanicKind.POISON_OR_NECROTIC_DAMAGE: MechanicField.DAMAGE,
    MechanicKind.SONIC_DAMAGE: MechanicField.DAMAGE,
    MechanicKind.SPIRITUAL_DAMAGE: MechanicField.DAMAGE,
    MechanicKind.PSYCHIC_DAMAGE: MechanicField.DAMAGE,
    MechanicKind.ADD_WEAPON_ATTACK: MechanicField.WEAPON,
}


class MechanicIdTable:
    """Bidirectional kind <-> catalog id table."""

    def __init__(self, ids: dict[MechanicKind, int]) -> None:
        missing = [kind.value for kind in MechanicKind if kind not in ids]
        if missing:
            raise CatalogValidationError(f"Mechanic id table missing kinds: {', '.join(missing)}")

        by_id: dict[int, MechanicKind] = {}
        for kind, part_id in ids.items():
            if part_id in by_id:
                raise CatalogValidationError(
                    f"Mechanic id {part_id} used by both '{by_id[part_id].value}' and '{kind.value}'"
                )
            by_id[part_id] = kind

        self._ids = MappingProxyType(dict(ids))
        self._kinds = MappingProxyType(by_id)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "MechanicIdTable":
        """Build a table from a plain {kind name: id} mapping."""
        ids: dict[MechanicKind, int] = {}
        for key, value in data.items():
            try:
                kind = MechanicKind(key)
            except ValueError:
                raise CatalogValidationError(f"Unknown mechanic kind '{key}'")
            if isinstance(value, bool) or not isinstance(value, int):
                raise CatalogValidationError(f"Mechanic '{key}' has invalid id (must be an integer)")
            ids[kind] = value
        return cls(ids)

    def id_for(self, kind: MechanicKind) -> int:
        return self._ids[kind]

    def kind_for(self, part_id: int | None) -> MechanicKind | None:
        """Get the mechanic kind a catalog id stands for, if any."""
        if part_id is None:
            return None
        return self._kinds.get(part_id)

    def is_mechanic_id(self, part_id: int | None) -> bool:
        return self.kind_for(part_id) is not None


def load_mechanic_ids(file_path: Path | None = None) -> MechanicIdTable:
    """
    Load the mechanic id table from YAML.

    Args:
        file_path: Path to the YAML file. If None, uses the configured path.

    Returns:
        MechanicIdTable instance

    Raises:
        CatalogLoadError: If the file cannot be read or parsed
        CatalogValidationError: If kinds are missing, unknown or duplicated
    """
    if file_path is None:
        from realms_forge.config import get_settings

        file_path = get_settings().mechanic_ids_path

    try:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogLoadError(f"YAML parsing error in {file_path}: {e}")
    except FileNotFoundError:
        raise CatalogLoadError(f"File not found: {file_path}")

    if not data or "mechanics" not in data:
        raise CatalogLoadError(f"Missing 'mechanics' key in {file_path}")
    if not isinstance(data["mechanics"], dict):
        raise CatalogLoadError(f"'mechanics' must be a mapping in {file_path}")

    return MechanicIdTable.from_mapping(data["mechanics"])
