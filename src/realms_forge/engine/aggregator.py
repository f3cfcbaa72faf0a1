"""
Cost aggregation for Realms Forge.

Sums priced line items (explicit and synthesized) and armament properties
into total energy, training points, item points and currency.

Energy uses one equation for every build:

    total = flat * perc_all + dur * flat_dur * perc_dur

where ``flat`` sums the additive parts, ``perc_all`` multiplies every
percentage part, ``dur`` multiplies the duration parts (0 when there are
none) and the ``_dur`` terms cover only parts applied to the duration.
Sums use math.fsum and products run over sorted factors, so the result does
not depend on the order parts were added.
"""

import math
from collections.abc import Iterable
from enum import StrEnum

import structlog
from pydantic import BaseModel, ConfigDict

from realms_forge.build.models import (
    BuildConfiguration,
    BuildType,
    BuildWarning,
    PropertyInstance,
    WarningCode,
)
from realms_forge.catalog import CatalogSnapshot, MechanicIdTable, Property, PropertyType
from realms_forge.rules import CURRENCY_STEP, RARITY_BRACKETS, ROUNDING_PLACES

from .composer import LineItem, price_part
from .synthesizer import synthesize

logger = structlog.get_logger(__name__)


class TPSourceKind(StrEnum):
    """Where a share of the training-point total comes from."""

    PART = "part"
    PROPERTY = "property"
    PROFICIENCY = "proficiency"


class TPSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: TPSourceKind
    name: str
    training_points: int
    detail: str = ""

    def __str__(self) -> str:
        return f"{self.training_points} TP: {self.detail or self.name}"


class PropertyLineItem(BaseModel):
    """One priced armament property."""

    model_config = ConfigDict(frozen=True)

    property_id: int
    name: str
    type: PropertyType
    level: int = 0
    item_points: float = 0.0
    training_points: int = 0
    currency: float = 0.0

    @property
    def currency_multiplier(self) -> float:
        return 1 + CURRENCY_STEP * self.currency


class EnergyTotals(BaseModel):
    """Intermediate energy terms, kept for display and debugging."""

    model_config = ConfigDict(frozen=True)

    flat: float = 0.0
    flat_duration: float = 0.0
    percentage_all: float = 1.0
    percentage_duration: float = 1.0
    duration: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.flat * self.percentage_all
            + self.duration * self.flat_duration * self.percentage_duration
        )


class CostBreakdown(BaseModel):
    """
    Every cost of one build.

    Attributes:
        total_energy: Raw energy from the energy equation
        energy_cost: Energy a character sheet charges (rounded up)
        display_energy: Energy rounded up to one decimal place
        total_training_points: Part and property training points
        total_item_points: Armament item points
        total_currency_multiplier: Product of the property currency multipliers
        currency_cost: Armament price, None for powers and techniques
        rarity: Armament rarity, None for powers and techniques
        tp_sources: Every positive training-point contribution
        line_items: Priced parts, hand-picked first then synthesized
        property_items: Priced properties
        warnings: Recoverable problems met while costing
    """

    model_config = ConfigDict(frozen=True)

    total_energy: float = 0.0
    energy_cost: int = 0
    display_energy: float = 0.0
    total_training_points: int = 0
    total_item_points: float = 0.0
    total_currency_multiplier: float = 1.0
    currency_cost: int | None = None
    rarity: str | None = None
    tp_sources: tuple[TPSource, ...] = ()
    line_items: tuple[LineItem, ...] = ()
    property_items: tuple[PropertyLineItem, ...] = ()
    warnings: tuple[BuildWarning, ...] = ()

    @property
    def has_unresolved_references(self) -> bool:
        return any(warning.is_unresolved_reference for warning in self.warnings)


def ceil_to(value: float, places: int = 0) -> float:
    """Round up to a number of decimal places, ignoring float noise."""
    scale = 10**places
    return math.ceil(round(value * scale, ROUNDING_PLACES)) / scale


def product(factors: Iterable[float]) -> float:
    """Multiply factors in sorted order."""
    result = 1.0
    for factor in sorted(factors):
        result *= factor
    return result


def aggregate_energy(items: Iterable[LineItem]) -> EnergyTotals:
    """Split line items into the terms of the energy equation."""
    flat: list[float] = []
    flat_duration: list[float] = []
    percentage_all: list[float] = []
    percentage_duration: list[float] = []
    duration: list[float] = []

    for item in items:
        if item.duration:
            duration.append(item.energy)
        elif item.percentage:
            percentage_all.append(item.energy)
            if item.apply_duration:
                percentage_duration.append(item.energy)
        else:
            flat.append(item.energy)
            if item.apply_duration:
                flat_duration.append(item.energy)

    return EnergyTotals(
        flat=math.fsum(flat),
        flat_duration=math.fsum(flat_duration),
        percentage_all=product(percentage_all),
        percentage_duration=product(percentage_duration),
        duration=product(duration) if duration else 0.0,
    )


def price_property(instance: PropertyInstance, prop: Property) -> PropertyLineItem:
    level = instance.level
    return PropertyLineItem(
        property_id=prop.id,
        name=prop.name,
        type=prop.type,
        level=level,
        item_points=prop.base_ip + prop.op_1_ip * level,
        training_points=math.floor(round(prop.base_tp + prop.op_1_tp * level, ROUNDING_PLACES)),
        currency=prop.base_c + prop.op_1_c * level,
    )


def rarity_for(item_points: float) -> tuple[str, int]:
    """
    Get the rarity bracket for a total item-point value.

    Returns:
        Tuple of (rarity name, lowest currency cost of the bracket)
    """
    ip = max(0.0, item_points)
    for name, low, ip_low, ip_high in RARITY_BRACKETS:
        if ip_low <= ip <= ip_high:
            return name, low
    # Totals between bracket edges (e.g. 4.005) match no bracket and stay Common
    name, low, _, _ = RARITY_BRACKETS[0]
    return name, low


def currency_cost_for(item_points: float, currency_multiplier: float) -> tuple[str, int]:
    """
    Price an armament from its item points and currency multiplier.

    Returns:
        Tuple of (rarity, currency cost)
    """
    rarity, low = rarity_for(item_points)
    return rarity, math.floor(round(max(low, low * currency_multiplier), ROUNDING_PLACES))


def _part_source(item: LineItem) -> TPSource:
    return TPSource(
        kind=TPSourceKind.PART,
        name=item.name,
        training_points=item.training_points,
        detail=item.label,
    )


def _property_source(item: PropertyLineItem) -> TPSource:
    kind = TPSourceKind.PROFICIENCY if item.type == PropertyType.GENERAL else TPSourceKind.PROPERTY
    detail = item.name if item.level == 0 else f"{item.name} (Level {item.level})"
    return TPSource(kind=kind, name=item.name, training_points=item.training_points, detail=detail)


def compute_costs(
    config: BuildConfiguration,
    snapshot: CatalogSnapshot,
    mechanic_ids: MechanicIdTable,
) -> CostBreakdown:
    """
    Compute every cost of a build.

    Part and property references missing from the snapshot are dropped and
    reported as warnings; this function does not raise for catalog drift.

    Args:
        config: Build to price
        snapshot: Catalog snapshot to resolve references against
        mechanic_ids: Mechanic kind to catalog id table

    Returns:
        CostBreakdown for the build
    """
    warnings: list[BuildWarning] = []
    line_items: list[LineItem] = []

    for instance in config.parts:
        part = snapshot.find_part(instance.part_id, instance.name)
        if part is None:
            logger.warning("part_unresolved", part_id=instance.part_id, name=instance.name)
            warnings.append(
                BuildWarning(
                    code=WarningCode.UNRESOLVED_PART,
                    message=f"Part {instance.part_id} ({instance.name or 'unnamed'}) is not in the catalog",
                    part_id=instance.part_id,
                )
            )
            continue
        line_items.append(price_part(instance, part))

    synthesis = synthesize(config.mechanics, snapshot, mechanic_ids, config.build_type)
    warnings.extend(synthesis.warnings)
    for instance in synthesis.parts:
        # Synthesis only emits parts it resolved from this snapshot
        line_items.append(price_part(instance, snapshot.get_part_by_id(instance.part_id)))

    property_items: list[PropertyLineItem] = []
    for instance in config.properties:
        prop = snapshot.find_property(instance.property_id, instance.name)
        if prop is None:
            logger.warning("property_unresolved", property_id=instance.property_id)
            warnings.append(
                BuildWarning(
                    code=WarningCode.UNRESOLVED_PROPERTY,
                    message=f"Property {instance.property_id} ({instance.name or 'unnamed'}) is not in the catalog",
                    part_id=instance.property_id,
                )
            )
            continue
        property_items.append(price_property(instance, prop))

    energy = aggregate_energy(line_items)
    total_energy = energy.total

    tp_sources = [_part_source(item) for item in line_items if item.training_points > 0]
    tp_sources += [_property_source(item) for item in property_items if item.training_points > 0]
    total_tp = sum(item.training_points for item in line_items) + sum(
        item.training_points for item in property_items
    )

    total_ip = math.fsum(item.item_points for item in property_items)
    currency_multiplier = product(item.currency_multiplier for item in property_items)

    rarity: str | None = None
    currency_cost: int | None = None
    if config.build_type == BuildType.ARMAMENT:
        rarity, currency_cost = currency_cost_for(total_ip, currency_multiplier)

    breakdown = CostBreakdown(
        total_energy=total_energy,
        energy_cost=int(ceil_to(total_energy)),
        display_energy=ceil_to(total_energy, 1),
        total_training_points=total_tp,
        total_item_points=total_ip,
        total_currency_multiplier=currency_multiplier,
        currency_cost=currency_cost,
        rarity=rarity,
        tp_sources=tuple(tp_sources),
        line_items=tuple(line_items),
        property_items=tuple(property_items),
        warnings=tuple(warnings),
    )

    logger.debug(
        "costs_computed",
        build=config.name,
        energy=total_energy,
        training_points=total_tp,
        warnings=len(warnings),
    )
    return breakdown
