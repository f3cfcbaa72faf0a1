"""Realms Forge - build cost and mechanic derivation engine for Realms RPG."""

__version__ = "0.1.0"

from realms_forge.build import BuildConfiguration, BuildType, MechanicSelections
from realms_forge.catalog import CatalogSnapshot, MechanicIdTable, load_catalog, load_mechanic_ids
from realms_forge.engine import (
    CostBreakdown,
    ProgressionResolver,
    Summaries,
    compute_costs,
    derive_summaries,
    dump_build,
    load_build,
    synthesize_mechanic_parts,
)

__all__ = [
    "BuildConfiguration",
    "BuildType",
    "MechanicSelections",
    "CatalogSnapshot",
    "MechanicIdTable",
    "load_catalog",
    "load_mechanic_ids",
    "CostBreakdown",
    "Summaries",
    "ProgressionResolver",
    "compute_costs",
    "derive_summaries",
    "synthesize_mechanic_parts",
    "dump_build",
    "load_build",
]
