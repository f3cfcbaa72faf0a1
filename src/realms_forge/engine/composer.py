"""
Part pricing for Realms Forge.

Turns one part instance plus its catalog definition into a priced line item.
Explicit and synthesized instances go through the same function, so a
mechanic chosen through a control costs exactly what the same part costs
when read back from a saved part list.
"""

import math

from pydantic import BaseModel, ConfigDict

from realms_forge.build.models import ExplicitPart, SynthesizedPart
from realms_forge.catalog import MechanicKind, Part
from realms_forge.catalog.models import MAX_OPTION_SLOTS
from realms_forge.rules import ROUNDING_PLACES


class LineItem(BaseModel):
    """
    One priced part.

    Attributes:
        part_id: Catalog id of the priced part
        name: Catalog name
        trigger: Mechanic kind for synthesized parts, None for hand-picked ones
        option_levels: Levels of the three option slots
        energy: Base energy plus option deltas. A multiplier for percentage
            parts and a duration factor for duration parts.
        training_points: Floored training points
        percentage: Energy is a multiplier
        duration: Energy scales duration-applied parts
        apply_duration: Part is multiplied by the build's duration
    """

    model_config = ConfigDict(frozen=True)

    part_id: int
    name: str
    trigger: MechanicKind | None = None
    option_levels: tuple[int, int, int] = (0, 0, 0)
    energy: float = 0.0
    training_points: int = 0
    percentage: bool = False
    duration: bool = False
    apply_duration: bool = False

    @property
    def is_synthesized(self) -> bool:
        return self.trigger is not None

    @property
    def label(self) -> str:
        """Part name with its non-zero option levels, e.g. "Bolster (Opt1 2)"."""
        text = self.name
        for slot, level in enumerate(self.option_levels, start=1):
            if level > 0:
                text += f" (Opt{slot} {level})"
        return text


def option_sum(part: Part, option_levels: tuple[int, int, int], attr: str) -> float:
    """Sum an option delta times its level over every slot the part has."""
    deltas = []
    for slot in range(1, MAX_OPTION_SLOTS + 1):
        option = part.option(slot)
        level = option_levels[slot - 1]
        if option is not None and level:
            deltas.append(getattr(option, attr) * level)
    return math.fsum(deltas)


def price_part(instance: ExplicitPart | SynthesizedPart, part: Part) -> LineItem:
    """
    Price one part instance against its catalog definition.

    Args:
        instance: Explicit or synthesized part instance
        part: The resolved catalog part

    Returns:
        LineItem with raw energy and floored training points
    """
    energy = part.base_en + option_sum(part, instance.option_levels, "en")
    raw_tp = part.base_tp + option_sum(part, instance.option_levels, "tp")

    trigger = instance.trigger if isinstance(instance, SynthesizedPart) else None

    return LineItem(
        part_id=part.id,
        name=part.name,
        trigger=trigger,
        option_levels=instance.option_levels,
        energy=energy,
        training_points=math.floor(round(raw_tp, ROUNDING_PLACES)),
        percentage=part.percentage,
        duration=part.duration,
        apply_duration=instance.apply_duration,
    )
