"""Build records and the editing boundary."""

from .editing import (
    InvalidOptionLevelError,
    MechanicPartConflictError,
    add_part,
    add_property,
    remove_part,
    remove_property,
    set_apply_duration,
    set_option_level,
    set_property_level,
    with_selections,
)
from .models import (
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
    PartInstance,
    PropertyInstance,
    RangeSelection,
    SynthesizedPart,
    WarningCode,
    WeaponSelection,
)

__all__ = [
    # Records
    "BuildConfiguration",
    "BuildType",
    "ExplicitPart",
    "SynthesizedPart",
    "PartInstance",
    "PropertyInstance",
    # Mechanic controls
    "MechanicSelections",
    "ActionSelection",
    "ActionType",
    "RangeSelection",
    "AreaSelection",
    "AreaType",
    "DurationSelection",
    "DurationType",
    "DamageSelection",
    "WeaponSelection",
    # Warnings
    "BuildWarning",
    "WarningCode",
    # Editing
    "InvalidOptionLevelError",
    "MechanicPartConflictError",
    "add_part",
    "remove_part",
    "set_option_level",
    "set_apply_duration",
    "add_property",
    "remove_property",
    "set_property_level",
    "with_selections",
]
