"""Tests for catalog records and the id-indexed snapshot."""

import pytest
from pydantic import ValidationError

from realms_forge.catalog import (
    Archetype,
    CatalogSnapshot,
    PartOption,
    PartType,
    ProgressionLookupError,
    ProgressionRow,
    Property,
    PropertyType,
)


class TestPartOptions:
    """Tests for option slot content rules."""

    def test_option_with_description_has_content(self, part_factory):
        part = part_factory(1, "A", options=[PartOption(description="Wider")])
        assert part.option_has_content(1)

    def test_option_with_delta_has_content(self, part_factory):
        part = part_factory(1, "A", options=[(0, 0.5)])
        assert part.option_has_content(1)

    def test_empty_option_is_absent(self, part_factory):
        """A blank option with zero deltas does not count as a slot."""
        part = part_factory(1, "A", options=[(0, 0), (1.0, 1)])
        assert not part.option_has_content(1)
        assert part.option_has_content(2)
        assert part.option_slots == [2]

    def test_missing_slot(self, part_factory):
        part = part_factory(1, "A", options=[(1.0, 0)])
        assert part.option(3) is None
        assert not part.option_has_content(3)

    def test_bundled_restrain_skips_first_slot(self, catalog):
        """Restrain has no first option, only a second one."""
        restrain = catalog.get_part_by_name("Restrain")
        assert restrain.option_slots == [2]


class TestCatalogSnapshot:
    """Tests for snapshot lookups."""

    def test_lookup_by_id_and_name(self, catalog):
        part = catalog.get_part_by_id(100)
        assert part.name == "Bolster"
        assert catalog.get_part_by_name("Bolster") is part

    def test_find_part_falls_back_to_name(self, catalog):
        """A stale id still resolves through the stored name."""
        part = catalog.find_part(99999, "Bolster")
        assert part.id == 100

    def test_find_part_unknown(self, catalog):
        assert catalog.find_part(99999, "Nothing") is None
        assert catalog.find_part() is None

    def test_list_parts_filters(self, catalog):
        """Filters combine and results are ordered by id."""
        mechanics = catalog.list_parts(mechanic=True)
        assert mechanics
        assert all(part.mechanic for part in mechanics)

        technique = catalog.list_parts(type=PartType.TECHNIQUE, mechanic=False)
        assert [part.name for part in technique] == ["Additional Damage", "Grapple"]

        ids = [part.id for part in catalog.list_parts()]
        assert ids == sorted(ids)

    def test_list_properties_by_type(self, catalog):
        general = catalog.list_properties(type=PropertyType.GENERAL)
        assert {prop.name for prop in general} == {"Weapon Proficiency", "Armor Proficiency"}

    def test_find_property(self, catalog):
        assert catalog.find_property(4).name == "Damage Reduction"
        assert catalog.find_property(None, "Reach").id == 5
        assert catalog.find_property(404) is None

    def test_from_records(self, part_factory):
        """Snapshots can be built in memory."""
        snapshot = CatalogSnapshot.from_records(
            parts=[part_factory(1, "A")],
            properties=[Property(id=2, name="P", type=PropertyType.ARMOR)],
        )
        assert len(snapshot) == 2
        assert snapshot.get_property_by_id(2).type == PropertyType.ARMOR

    def test_records_are_immutable(self, catalog):
        part = catalog.get_part_by_id(100)
        with pytest.raises(ValidationError):
            part.base_en = 99


class TestProgressionRows:
    """Tests for exact progression row lookups."""

    @pytest.fixture
    def snapshot(self):
        rows = [
            ProgressionRow(level=1, archetype=Archetype.POWER, power_proficiency=2, feat_points=1),
            ProgressionRow(level=2, archetype=Archetype.POWER, power_proficiency=2, feat_points=2),
        ]
        return CatalogSnapshot.from_records(progression=rows)

    def test_exact_level(self, snapshot):
        row = snapshot.get_progression_row(2, "power")
        assert row.feat_points == 2

    def test_fractional_levels_use_first_row(self, snapshot):
        """Levels at or below 1 share the level-1 row."""
        assert snapshot.get_progression_row(0.5, Archetype.POWER).level == 1
        assert snapshot.get_progression_row(1.0, Archetype.POWER).level == 1

    def test_fractional_level_above_one(self, snapshot):
        """Rows are never interpolated."""
        with pytest.raises(ProgressionLookupError, match="fractional level 1.5"):
            snapshot.get_progression_row(1.5, Archetype.POWER)

    def test_missing_level(self, snapshot):
        with pytest.raises(ProgressionLookupError, match="level 3"):
            snapshot.get_progression_row(3, Archetype.POWER)

    def test_missing_archetype(self, snapshot):
        with pytest.raises(ProgressionLookupError):
            snapshot.get_progression_row(1, Archetype.MARTIAL)

    def test_unknown_archetype_name(self, snapshot):
        with pytest.raises(ValueError):
            snapshot.get_progression_row(1, "wizard")
