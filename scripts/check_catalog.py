#!/usr/bin/env python3
"""
Check script for the Realms Forge catalog.

Loads the configured catalog and mechanic id table, reports counts, and
prices a sample power to show the engine end to end.
"""

from realms_forge.build import BuildConfiguration, with_selections
from realms_forge.build.editing import add_part
from realms_forge.catalog import MechanicKind, load_catalog, load_mechanic_ids
from realms_forge.engine import compute_costs, derive_summaries


def main():
    """Main check function."""
    print("=" * 70)
    print("Realms Forge - Catalog Check")
    print("=" * 70)

    print("\nLoading catalog...")
    snapshot = load_catalog()
    mechanic_ids = load_mechanic_ids()

    parts = snapshot.list_parts()
    mechanics = snapshot.list_parts(mechanic=True)
    print(f"\nLoaded {len(parts)} parts ({len(mechanics)} mechanic parts)")
    print(f"Loaded {len(snapshot.list_properties())} properties")
    print(f"Progression table up to level {snapshot.max_level}")

    categories = {}
    for part in parts:
        categories[part.category] = categories.get(part.category, 0) + 1

    print("\nParts by category:")
    for category, count in sorted(categories.items()):
        print(f"  - {category or '(none)'}: {count}")

    print("\n" + "=" * 70)
    print("Mechanic Id Table")
    print("=" * 70)

    missing = []
    for kind in MechanicKind:
        part = snapshot.get_part_by_id(mechanic_ids.id_for(kind))
        if part is None or not part.mechanic:
            missing.append(kind.value)
    if missing:
        print(f"\nMechanics without a catalog part: {', '.join(missing)}")
    else:
        print(f"\nAll {len(MechanicKind)} mechanics resolve to mechanic parts")

    print("\n" + "=" * 70)
    print("Sample Power")
    print("=" * 70)

    config = BuildConfiguration(name="Sample Bolster")
    bolster = snapshot.get_part_by_name("Bolster")
    if bolster is not None:
        config = add_part(config, bolster, (2, 0, 0))
    config = with_selections(
        config,
        range={"steps": 2},
        duration={"type": "round", "value": 3, "sustain": 2},
    )

    costs = compute_costs(config, snapshot, mechanic_ids)
    summaries = derive_summaries(config, snapshot, mechanic_ids)
    print(f"\n{config.name}")
    print(f"   Action: {summaries.action_text}")
    print(f"   Range: {summaries.range_text}")
    print(f"   Duration: {summaries.duration_text}")
    print(f"   Energy: {costs.energy_cost} ({costs.display_energy})")
    print(f"   TP: {costs.total_training_points}")
    for warning in costs.warnings:
        print(f"   Warning: {warning.message}")

    print("\n" + "=" * 70)
    print("Catalog check completed")
    print("=" * 70)


if __name__ == "__main__":
    main()
