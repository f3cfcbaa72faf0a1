"""Catalog store - parts, properties, progression tables and mechanic ids."""

from .loader import CatalogLoadError, CatalogValidationError, load_catalog
from .mechanic_ids import MechanicField, MechanicIdTable, MechanicKind, load_mechanic_ids
from .models import (
    Archetype,
    Part,
    PartOption,
    PartType,
    ProgressionRow,
    Property,
    PropertyType,
)
from .snapshot import CatalogSnapshot, ProgressionLookupError

__all__ = [
    "Archetype",
    "CatalogLoadError",
    "CatalogSnapshot",
    "CatalogValidationError",
    "MechanicField",
    "MechanicIdTable",
    "MechanicKind",
    "Part",
    "PartOption",
    "PartType",
    "ProgressionLookupError",
    "ProgressionRow",
    "Property",
    "PropertyType",
    "load_catalog",
    "load_mechanic_ids",
]
