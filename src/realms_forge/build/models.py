"""Build configuration records.

A build is what a player edits in a creator: explicit part picks, armament
properties, and the structured basic-mechanic controls. Mechanic parts are
never stored on the configuration itself; they are synthesized from the
controls whenever costs or summaries are computed.
"""

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from realms_forge.catalog.mechanic_ids import MechanicKind
from realms_forge.rules import DAMAGE_FAMILIES, DURATION_TIERS, MAX_SUSTAIN_AP

OptionLevels = tuple[
    Annotated[int, Field(ge=0)],
    Annotated[int, Field(ge=0)],
    Annotated[int, Field(ge=0)],
]


class BuildType(StrEnum):
    """Which creator a build belongs to."""

    POWER = "power"
    TECHNIQUE = "technique"
    ARMAMENT = "armament"


class ExplicitPart(BaseModel):
    """A part the user picked by hand."""

    model_config = ConfigDict(frozen=True)

    source: Literal["explicit"] = "explicit"
    part_id: int
    name: str = ""  # Legacy saves may only carry the name
    option_levels: OptionLevels = (0, 0, 0)
    apply_duration: bool = False

    def level(self, slot: int) -> int:
        return self.option_levels[slot - 1]


class SynthesizedPart(BaseModel):
    """A part produced from a basic-mechanic control."""

    model_config = ConfigDict(frozen=True)

    source: Literal["synthesized"] = "synthesized"
    trigger: MechanicKind
    part_id: int
    name: str = ""
    option_levels: OptionLevels = (0, 0, 0)
    apply_duration: bool = False

    def level(self, slot: int) -> int:
        return self.option_levels[slot - 1]


PartInstance = Annotated[ExplicitPart | SynthesizedPart, Field(discriminator="source")]


class PropertyInstance(BaseModel):
    """A property applied to an armament."""

    model_config = ConfigDict(frozen=True)

    property_id: int
    name: str = ""
    level: int = Field(default=0, ge=0)


# ============================================================================
# Basic-mechanic selections
# ============================================================================


class ActionType(StrEnum):
    BASIC = "basic"
    QUICK = "quick"
    FREE = "free"
    LONG = "long"
    LONG4 = "long4"
    REACTION = "reaction"


class AreaType(StrEnum):
    NONE = "none"
    SPHERE = "sphere"
    CYLINDER = "cylinder"
    CONE = "cone"
    LINE = "line"
    TRAIL = "trail"


class DurationType(StrEnum):
    INSTANT = "instant"
    ROUND = "round"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    PERMANENT = "permanent"


_DURATION_ALIASES = {
    "instantaneous": "instant",
    "rounds": "round",
    "minutes": "minute",
    "hours": "hour",
    "days": "day",
}


class ActionSelection(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ActionType = ActionType.BASIC
    reaction: bool = False

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str) and value.lower() == "long3":
            return ActionType.LONG
        return value

    @property
    def base_type(self) -> ActionType:
        """The action type with the reaction shorthand resolved to basic."""
        return ActionType.BASIC if self.type == ActionType.REACTION else self.type

    @property
    def is_reaction(self) -> bool:
        return self.reaction or self.type == ActionType.REACTION


class RangeSelection(BaseModel):
    model_config = ConfigDict(frozen=True)

    steps: int = Field(default=0, ge=0)  # 0 = melee
    apply_duration: bool = False


class AreaSelection(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: AreaType = AreaType.NONE
    level: int = Field(default=0, ge=0)
    apply_duration: bool = False


class DurationSelection(BaseModel):
    """Duration type, tier value and the four duration modifiers."""

    model_config = ConfigDict(frozen=True)

    type: DurationType = DurationType.INSTANT
    value: int = Field(default=1, ge=1)
    focus: bool = False
    no_harm: bool = False
    ends_on_activation: bool = False
    sustain: int = Field(default=0, ge=0, le=MAX_SUSTAIN_AP)

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            return _DURATION_ALIASES.get(lowered, lowered)
        return value

    @model_validator(mode="after")
    def _value_is_a_tier(self) -> "DurationSelection":
        tiers = DURATION_TIERS.get(self.type.value)
        if tiers is not None and self.value not in tiers:
            raise ValueError(
                f"{self.type.value} duration must be one of {', '.join(map(str, tiers))}"
            )
        return self

    @property
    def is_instant(self) -> bool:
        return self.type == DurationType.INSTANT


class DamageSelection(BaseModel):
    """Damage dice and type. The dice are descriptive only."""

    model_config = ConfigDict(frozen=True)

    amount: int = Field(default=0, ge=0)
    size: int = Field(default=6, ge=0)
    type: str = "none"
    apply_duration: bool = False

    @field_validator("type", mode="before")
    @classmethod
    def _known_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            if value != "none" and value not in DAMAGE_FAMILIES:
                raise ValueError(f"unknown damage type '{value}'")
        return value

    @property
    def is_none(self) -> bool:
        return self.type == "none" or self.amount <= 0


class WeaponSelection(BaseModel):
    """Weapon a technique is performed with."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    name: str = ""
    tp: int = Field(default=0, ge=0)


class MechanicSelections(BaseModel):
    """All structured controls that synthesize mechanic parts."""

    model_config = ConfigDict(frozen=True)

    action: ActionSelection = Field(default_factory=ActionSelection)
    range: RangeSelection = Field(default_factory=RangeSelection)
    area: AreaSelection = Field(default_factory=AreaSelection)
    duration: DurationSelection = Field(default_factory=DurationSelection)
    damage: DamageSelection = Field(default_factory=DamageSelection)
    weapon: WeaponSelection = Field(default_factory=WeaponSelection)


class BuildConfiguration(BaseModel):
    """
    Everything a creator edits for one power, technique or armament.

    Attributes:
        name: Display name
        description: Free text description
        build_type: Which creator the build belongs to
        parts: Hand-picked parts, in the order they were added
        properties: Armament properties
        mechanics: Basic-mechanic control state
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    description: str = ""
    build_type: BuildType = BuildType.POWER
    parts: tuple[ExplicitPart, ...] = ()
    properties: tuple[PropertyInstance, ...] = ()
    mechanics: MechanicSelections = Field(default_factory=MechanicSelections)


# ============================================================================
# Warnings
# ============================================================================


class WarningCode(StrEnum):
    """Recoverable problems found while costing or loading a build."""

    UNRESOLVED_PART = "unresolved_part"
    UNRESOLVED_PROPERTY = "unresolved_property"
    MECHANIC_UNAVAILABLE = "mechanic_unavailable"
    UNRESOLVED_MECHANIC = "unresolved_mechanic"
    MALFORMED_FIELD = "malformed_field"


class BuildWarning(BaseModel):
    """A problem the engine recovered from, for display in the UI."""

    model_config = ConfigDict(frozen=True)

    code: WarningCode
    message: str
    part_id: int | None = None
    mechanic: MechanicKind | None = None  # Set when a mechanic could not be synthesized

    @property
    def is_unresolved_reference(self) -> bool:
        return self.code in (WarningCode.UNRESOLVED_PART, WarningCode.UNRESOLVED_PROPERTY)
