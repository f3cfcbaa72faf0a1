"""Tests for derived display summaries and reading mechanics back."""

import pytest

from realms_forge.build import (
    ActionType,
    AreaType,
    BuildType,
    DurationType,
    ExplicitPart,
    MechanicSelections,
    WarningCode,
    add_part,
    with_selections,
)
from realms_forge.catalog import CatalogSnapshot, MechanicField
from realms_forge.engine import (
    derive_summaries,
    partition_parts,
    read_mechanics,
    summarize_parts,
    synthesize_mechanic_parts,
)
from realms_forge.engine.display import format_action, format_area, format_duration, format_range


class TestDeriveSummaries:
    """Tests for summaries of an edited build."""

    def test_defaults(self, catalog, mechanic_ids, power):
        summaries = derive_summaries(power, catalog, mechanic_ids)
        assert summaries.action_text == "Basic Action"
        assert summaries.range_text == "1 space (melee)"
        assert summaries.area_text == "1 target"
        assert summaries.duration_text == "Instant"
        assert summaries.damage_text == ""

    def test_full_power(self, catalog, mechanic_ids, power):
        config = with_selections(
            power,
            action={"type": "quick", "reaction": True},
            range={"steps": 2},
            area={"type": "sphere", "level": 1},
            duration={"type": "round", "value": 3, "sustain": 2},
            damage={"amount": 2, "size": 8, "type": "fire"},
        )
        summaries = derive_summaries(config, catalog, mechanic_ids)

        assert summaries.action_text == "Quick Reaction"
        assert summaries.range_text == "6 spaces"
        assert summaries.area_text == "Sphere (level 1)"
        assert summaries.duration_text == "3 rounds, Sustained 2 AP"
        assert summaries.damage_text == "2d8 fire"

    def test_technique(self, catalog, mechanic_ids, technique):
        config = with_selections(technique, action={"type": "long"}, weapon={"tp": 2})
        summaries = derive_summaries(config, catalog, mechanic_ids)
        assert summaries.action_text == "Long (3) Action"

    def test_hand_picked_parts_do_not_change_controls(self, catalog, mechanic_ids, power):
        config = add_part(power, catalog.get_part_by_name("Bolster"), (2, 0, 0))
        assert derive_summaries(config, catalog, mechanic_ids).action_text == "Basic Action"

    def test_single_round(self, catalog, mechanic_ids, power):
        config = with_selections(power, duration={"type": "round", "value": 1})
        assert derive_summaries(config, catalog, mechanic_ids).duration_text == "1 round"

        config = with_selections(power, duration={"type": "round", "value": 1, "focus": True})
        assert derive_summaries(config, catalog, mechanic_ids).duration_text == "1 round, Focus"


def without_part(catalog, part_id) -> CatalogSnapshot:
    return CatalogSnapshot.from_records(
        parts=[p for p in catalog.list_parts() if p.id != part_id],
        properties=catalog.list_properties(),
    )


class TestUnavailableMechanics:
    """Tests for configured mechanics the catalog cannot supply."""

    def test_missing_duration_part(self, catalog, mechanic_ids, power):
        """A configured duration without its part shows fallback text, not Instant."""
        config = with_selections(power, duration={"type": "minute", "value": 10})
        summaries = derive_summaries(config, without_part(catalog, 378), mechanic_ids)
        assert summaries.duration_text == "Unknown duration"

    def test_missing_range_part(self, catalog, mechanic_ids, power):
        config = with_selections(power, range={"steps": 3})
        summaries = derive_summaries(config, without_part(catalog, 292), mechanic_ids)
        assert summaries.range_text == "Unknown range"
        assert summaries.duration_text == "Instant"

    def test_missing_modifier_part(self, catalog, mechanic_ids, power):
        """Duration modifiers fall back as part of the duration text."""
        config = with_selections(power, duration={"type": "hour", "value": 1, "focus": True})
        summaries = derive_summaries(config, without_part(catalog, 304), mechanic_ids)
        assert summaries.duration_text == "Unknown duration"
        assert summaries.action_text == "Basic Action"


class TestFormatting:
    """Tests for individual summary formats."""

    @pytest.mark.parametrize(
        "action,text",
        [
            ({"type": "basic"}, "Basic Action"),
            ({"type": "free"}, "Free Action"),
            ({"type": "long4"}, "Long (4) Action"),
            ({"type": "reaction"}, "Basic Reaction"),
            ({"type": "long", "reaction": True}, "Long (3) Reaction"),
        ],
    )
    def test_action(self, action, text):
        selections = MechanicSelections.model_validate({"action": action})
        assert format_action(selections.action) == text

    @pytest.mark.parametrize(
        "duration,text",
        [
            ({"type": "round", "value": 1}, "1 round"),
            ({"type": "minute", "value": 10}, "10 minutes"),
            ({"type": "hour", "value": 6, "focus": True, "no_harm": True}, "6 hours, Focus, No Harm or Adaptation"),
            ({"type": "day", "value": 14, "ends_on_activation": True}, "14 days, Ends on Activation"),
            ({"type": "permanent"}, "Permanent"),
            ({"type": "instant", "focus": True}, "Instant"),
        ],
    )
    def test_duration(self, duration, text):
        selections = MechanicSelections.model_validate({"duration": duration})
        assert format_duration(selections.duration) == text

    def test_range_and_area(self):
        selections = MechanicSelections.model_validate(
            {"range": {"steps": 4}, "area": {"type": "cone"}}
        )
        assert format_range(selections.range) == "12 spaces"
        assert format_area(selections.area) == "Cone"


class TestReadMechanics:
    """Tests for recovering controls from part lists."""

    def test_reads_back_synthesized_controls(self, catalog, mechanic_ids):
        """Reading synthesized parts recovers the controls that made them."""
        controls = MechanicSelections.model_validate(
            {
                "action": {"type": "long4", "reaction": True},
                "range": {"steps": 3},
                "area": {"type": "trail", "level": 2},
                "duration": {"type": "hour", "value": 6, "focus": True, "sustain": 3},
            }
        )
        parts = synthesize_mechanic_parts(controls, catalog, mechanic_ids)
        reading = read_mechanics(parts, mechanic_ids, catalog)

        assert reading.selections.action == controls.action
        assert reading.selections.range == controls.range
        assert reading.selections.area == controls.area
        assert reading.selections.duration == controls.duration
        assert reading.build_type == BuildType.POWER
        assert reading.warnings == []

    def test_synthesis_round_trip_is_stable(self, catalog, mechanic_ids):
        """Synthesize, read back, synthesize again: same parts."""
        controls = MechanicSelections.model_validate(
            {"action": {"type": "free"}, "duration": {"type": "day", "value": 7, "no_harm": True}}
        )
        first = synthesize_mechanic_parts(controls, catalog, mechanic_ids)
        reading = read_mechanics(first, mechanic_ids, catalog)
        second = synthesize_mechanic_parts(reading.selections, catalog, mechanic_ids)
        assert first == second

    def test_reaction_only(self, catalog, mechanic_ids):
        """A lone reaction part reads as a basic reaction."""
        reading = read_mechanics([ExplicitPart(part_id=82)], mechanic_ids, catalog)
        assert reading.selections.action.type == ActionType.BASIC
        assert reading.selections.action.reaction

    def test_damage_family(self, catalog, mechanic_ids):
        reading = read_mechanics([ExplicitPart(part_id=301)], mechanic_ids, catalog)
        assert reading.selections.damage.type == "psychic"
        assert summarize_parts([ExplicitPart(part_id=301)], catalog, mechanic_ids).damage_text == "psychic damage"

    def test_technique_parts(self, catalog, mechanic_ids):
        parts = [ExplicitPart(part_id=23), ExplicitPart(part_id=7, option_levels=(2, 0, 0))]
        reading = read_mechanics(parts, mechanic_ids, catalog)
        assert reading.build_type == BuildType.TECHNIQUE
        assert reading.selections.weapon.tp == 3

    def test_modifiers_without_duration_read_as_single_round(self, catalog, mechanic_ids):
        """A single round saves only its modifier parts."""
        reading = read_mechanics([ExplicitPart(part_id=304)], mechanic_ids, catalog)
        assert reading.selections.duration.type == DurationType.ROUND
        assert reading.selections.duration.value == 1
        assert reading.selections.duration.focus

    def test_round_and_sustain_offsets(self, catalog, mechanic_ids):
        """Round level 1 is three rounds; sustain level 1 is two AP."""
        parts = [
            ExplicitPart(part_id=377, option_levels=(1, 0, 0)),
            ExplicitPart(part_id=305, option_levels=(1, 0, 0)),
        ]
        summaries = summarize_parts(parts, catalog, mechanic_ids)
        assert summaries.duration_text == "3 rounds, Sustained 2 AP"

    def test_base_round_part_is_two_rounds(self, catalog, mechanic_ids):
        reading = read_mechanics([ExplicitPart(part_id=377)], mechanic_ids, catalog)
        assert reading.selections.duration.value == 2
        assert reading.warnings == []

    def test_out_of_range_tier(self, catalog, mechanic_ids):
        """A tier level from an older table falls back to the first tier."""
        reading = read_mechanics(
            [ExplicitPart(part_id=378, option_levels=(5, 0, 0))], mechanic_ids, catalog
        )
        assert reading.selections.duration.value == 1
        assert reading.warnings[0].code == WarningCode.MALFORMED_FIELD

    def test_name_fallback(self, catalog, mechanic_ids):
        """Saves that only kept a name still resolve."""
        parts = [ExplicitPart(part_id=1, name="Power Range", option_levels=(4, 0, 0))]
        assert summarize_parts(parts, catalog, mechanic_ids).range_text == "12 spaces"

    def test_unresolved_mechanic_falls_back(self, catalog, mechanic_ids, part_factory):
        """A mechanic part the id table does not know shows generic text."""
        snapshot = CatalogSnapshot.from_records(
            parts=[
                *catalog.list_parts(),
                part_factory(999, "Old Range", mechanic=True, category="Range"),
            ]
        )
        parts = [ExplicitPart(part_id=999, option_levels=(2, 0, 0))]
        reading = read_mechanics(parts, mechanic_ids, snapshot)
        summaries = summarize_parts(parts, snapshot, mechanic_ids)

        assert MechanicField.RANGE in reading.unresolved_fields
        assert reading.warnings[0].code == WarningCode.UNRESOLVED_MECHANIC
        assert summaries.range_text == "Unknown range"
        assert summaries.action_text == "Basic Action"

    def test_area_level(self, catalog, mechanic_ids):
        reading = read_mechanics(
            [ExplicitPart(part_id=231, option_levels=(3, 0, 0))], mechanic_ids, catalog
        )
        assert reading.selections.area.type == AreaType.CYLINDER
        assert reading.selections.area.level == 3


class TestPartitionParts:
    def test_split_chips_and_mechanics(self, catalog, mechanic_ids):
        """Hand-picked parts are chips; mechanic parts are controls."""
        parts = [ExplicitPart(part_id=100), ExplicitPart(part_id=292)]
        parts += synthesize_mechanic_parts(MechanicSelections(), catalog, mechanic_ids)

        chips, mechanics = partition_parts(parts, mechanic_ids)
        assert [p.part_id for p in chips] == [100]
        assert [p.part_id for p in mechanics] == [292, 84]
