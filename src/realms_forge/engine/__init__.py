"""Costing, mechanic synthesis, derived display and progression."""

from .aggregator import (
    CostBreakdown,
    PropertyLineItem,
    TPSource,
    TPSourceKind,
    aggregate_energy,
    compute_costs,
    currency_cost_for,
    rarity_for,
)
from .composer import LineItem, price_part
from .display import (
    MechanicReading,
    Summaries,
    derive_summaries,
    format_summaries,
    partition_parts,
    read_mechanics,
    summarize_parts,
)
from .progression import CreatureBudget, LevelDifference, PlayerBudget, ProgressionResolver
from .serialization import LoadedBuild, dump_build, load_build
from .synthesizer import Synthesis, synthesize, synthesize_mechanic_parts

__all__ = [
    # Costing
    "compute_costs",
    "CostBreakdown",
    "LineItem",
    "PropertyLineItem",
    "TPSource",
    "TPSourceKind",
    "aggregate_energy",
    "price_part",
    "rarity_for",
    "currency_cost_for",
    # Synthesis
    "synthesize",
    "synthesize_mechanic_parts",
    "Synthesis",
    # Display
    "derive_summaries",
    "summarize_parts",
    "partition_parts",
    "read_mechanics",
    "format_summaries",
    "MechanicReading",
    "Summaries",
    # Persistence
    "dump_build",
    "load_build",
    "LoadedBuild",
    # Progression
    "ProgressionResolver",
    "PlayerBudget",
    "CreatureBudget",
    "LevelDifference",
]
