"""Catalog records: parts, properties and progression rows.

Catalog records are immutable reference data. A build never mutates them;
it only points at them by id.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_OPTION_SLOTS = 3


class PartType(StrEnum):
    """What kind of construct a part belongs to."""

    POWER = "power"
    TECHNIQUE = "technique"


class PropertyType(StrEnum):
    """Armament family a property applies to."""

    WEAPON = "Weapon"
    ARMOR = "Armor"
    SHIELD = "Shield"
    GENERAL = "General"


class Archetype(StrEnum):
    """Character archetypes governing proficiency allocation."""

    POWER = "power"
    MARTIAL = "martial"
    POWERED_MARTIAL = "powered-martial"


class PartOption(BaseModel):
    """One leveled option of a part."""

    model_config = ConfigDict(frozen=True)

    description: str = ""
    en: float = 0.0
    tp: float = 0.0

    @property
    def has_content(self) -> bool:
        """An option exists if it is described or changes a cost."""
        return bool(self.description.strip()) or self.en != 0 or self.tp != 0


class Part(BaseModel):
    """
    Power/technique building block.

    Attributes:
        id: Catalog id
        name: Display name (e.g. "Power Range")
        base_en: Base energy. For percentage parts this is a multiplier.
        base_tp: Base training points
        options: Up to three leveled options
        mechanic: True if the part only exists to be synthesized from controls
        percentage: Energy fields are multipliers rather than amounts
        duration: Part prices a duration and multiplies duration-applied energy
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str = ""
    category: str = ""
    type: PartType = PartType.POWER
    base_en: float = 0.0
    base_tp: float = 0.0
    options: tuple[PartOption, ...] = Field(default_factory=tuple)
    mechanic: bool = False
    percentage: bool = False
    duration: bool = False

    @field_validator("options")
    @classmethod
    def _at_most_three_options(cls, value: tuple[PartOption, ...]) -> tuple[PartOption, ...]:
        if len(value) > MAX_OPTION_SLOTS:
            raise ValueError(f"a part has at most {MAX_OPTION_SLOTS} options")
        return value

    def option(self, slot: int) -> PartOption | None:
        """Get the option in a 1-based slot, or None if the slot is empty."""
        if 1 <= slot <= len(self.options):
            return self.options[slot - 1]
        return None

    def option_has_content(self, slot: int) -> bool:
        """Check whether a 1-based option slot exists for this part."""
        option = self.option(slot)
        return option is not None and option.has_content

    @property
    def option_slots(self) -> list[int]:
        """1-based slots that may carry a level."""
        return [slot for slot in range(1, MAX_OPTION_SLOTS + 1) if self.option_has_content(slot)]


class Property(BaseModel):
    """Armament modifier with item-point, training-point and currency costs."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str = ""
    type: PropertyType = PropertyType.GENERAL
    base_ip: float = 0.0
    base_tp: float = 0.0
    base_c: float = 0.0
    op_1_desc: str = ""
    op_1_ip: float = 0.0
    op_1_tp: float = 0.0
    op_1_c: float = 0.0

    @property
    def has_option(self) -> bool:
        return bool(self.op_1_desc.strip()) or any(
            value != 0 for value in (self.op_1_ip, self.op_1_tp, self.op_1_c)
        )


class ProgressionRow(BaseModel):
    """Per-level budgets for one archetype."""

    model_config = ConfigDict(frozen=True)

    level: int = Field(..., ge=1)
    archetype: Archetype
    power_proficiency: int = 0
    martial_proficiency: int = 0
    armament_proficiency_cap: int = 0
    feat_points: int = 0
    bonus_feats: int = 0
