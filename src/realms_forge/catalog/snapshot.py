"""Immutable, id-indexed view over one catalog load."""

from collections.abc import Iterable
from types import MappingProxyType

from .models import Archetype, Part, PartType, ProgressionRow, Property, PropertyType


class ProgressionLookupError(LookupError):
    """Raised when no progression row matches a level/archetype pair."""

    pass


class CatalogSnapshot:
    """
    Read-only catalog snapshot.

    Every record is indexed by id once at construction so that the costing
    path does a single dictionary lookup per part.
    """

    def __init__(
        self,
        parts: Iterable[Part] = (),
        properties: Iterable[Property] = (),
        progression: Iterable[ProgressionRow] = (),
    ) -> None:
        self._parts = MappingProxyType({part.id: part for part in parts})
        self._parts_by_name = MappingProxyType({part.name: part for part in self._parts.values()})
        self._properties = MappingProxyType({prop.id: prop for prop in properties})
        self._properties_by_name = MappingProxyType(
            {prop.name: prop for prop in self._properties.values()}
        )
        self._progression = MappingProxyType(
            {(row.archetype, row.level): row for row in progression}
        )

    @classmethod
    def from_records(
        cls,
        parts: Iterable[Part] = (),
        properties: Iterable[Property] = (),
        progression: Iterable[ProgressionRow] = (),
    ) -> "CatalogSnapshot":
        """Build a snapshot from already constructed records."""
        return cls(parts=parts, properties=properties, progression=progression)

    def __len__(self) -> int:
        return len(self._parts) + len(self._properties)

    # Parts

    def get_part_by_id(self, part_id: int) -> Part | None:
        return self._parts.get(part_id)

    def get_part_by_name(self, name: str) -> Part | None:
        return self._parts_by_name.get(name)

    def find_part(self, part_id: int | None = None, name: str | None = None) -> Part | None:
        """
        Find a part by id, falling back to name.

        Older saves stored only part names, so the name is tried when the id
        is missing or no longer resolves.
        """
        if part_id is not None:
            part = self._parts.get(part_id)
            if part is not None:
                return part
        if name:
            return self._parts_by_name.get(name)
        return None

    def list_parts(
        self,
        type: PartType | None = None,
        category: str | None = None,
        mechanic: bool | None = None,
    ) -> list[Part]:
        """List parts matching every given filter, ordered by id."""
        return [
            part
            for _, part in sorted(self._parts.items())
            if (type is None or part.type == type)
            and (category is None or part.category == category)
            and (mechanic is None or part.mechanic == mechanic)
        ]

    # Properties

    def get_property_by_id(self, property_id: int) -> Property | None:
        return self._properties.get(property_id)

    def find_property(
        self, property_id: int | None = None, name: str | None = None
    ) -> Property | None:
        if property_id is not None:
            prop = self._properties.get(property_id)
            if prop is not None:
                return prop
        if name:
            return self._properties_by_name.get(name)
        return None

    def list_properties(self, type: PropertyType | None = None) -> list[Property]:
        return [
            prop
            for _, prop in sorted(self._properties.items())
            if type is None or prop.type == type
        ]

    # Progression

    def get_progression_row(self, level: float, archetype: Archetype | str) -> ProgressionRow:
        """
        Look up the progression row for an exact level.

        Levels at or below 1 (including fractional creature levels) use the
        level-1 row; there is no interpolation between rows.

        Raises:
            ProgressionLookupError: If the level is fractional above 1 or absent
        """
        archetype = Archetype(archetype)
        if level <= 1:
            key_level = 1
        elif float(level).is_integer():
            key_level = int(level)
        else:
            raise ProgressionLookupError(f"No progression row for fractional level {level}")

        row = self._progression.get((archetype, key_level))
        if row is None:
            raise ProgressionLookupError(
                f"No progression row for level {key_level} ({archetype.value})"
            )
        return row

    @property
    def max_level(self) -> int:
        return max((level for _, level in self._progression), default=0)
