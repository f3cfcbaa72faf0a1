"""Command line entry point for Realms Forge."""

import argparse
import json
import sys
from pathlib import Path

import structlog
import yaml

from realms_forge.catalog import CatalogLoadError, CatalogValidationError, load_catalog, load_mechanic_ids
from realms_forge.config import get_settings
from realms_forge.engine import compute_costs, derive_summaries, load_build
from realms_forge.logging_setup import configure_logging

logger = structlog.get_logger(__name__)


def _read_build_file(path: Path) -> dict:
    """Read a stored build record from YAML or JSON."""
    with open(path, encoding="utf-8") as f:
        record = yaml.safe_load(f)
    if not isinstance(record, dict):
        raise ValueError(f"{path} does not contain a build record")
    return record


def price(args: argparse.Namespace) -> int:
    """Price a stored build and print its costs and summaries."""
    settings = get_settings()
    snapshot = load_catalog(args.catalog_dir or settings.catalog_dir)
    mechanic_ids = load_mechanic_ids(args.mechanic_ids or settings.mechanic_ids_path)

    loaded = load_build(_read_build_file(args.build_file), snapshot, mechanic_ids)
    config = loaded.config
    costs = compute_costs(config, snapshot, mechanic_ids)
    summaries = derive_summaries(config, snapshot, mechanic_ids)
    warnings = loaded.warnings + list(costs.warnings)

    if args.json:
        output = {
            "name": config.name,
            "build_type": config.build_type.value,
            "costs": costs.model_dump(mode="json", exclude={"line_items", "property_items"}),
            "summaries": summaries.model_dump(),
            "warnings": [w.model_dump(mode="json") for w in warnings],
        }
        print(json.dumps(output, indent=2))
        return 0

    print(f"{config.name or 'Unnamed build'} ({config.build_type.value})")
    print(f"  Action:   {summaries.action_text}")
    print(f"  Range:    {summaries.range_text}")
    print(f"  Area:     {summaries.area_text}")
    print(f"  Duration: {summaries.duration_text}")
    if summaries.damage_text:
        print(f"  Damage:   {summaries.damage_text}")
    print(f"  Energy:   {costs.energy_cost} ({costs.display_energy})")
    print(f"  TP:       {costs.total_training_points}")
    for source in costs.tp_sources:
        print(f"    - {source}")
    if costs.rarity is not None:
        print(f"  IP:       {costs.total_item_points:g}")
        print(f"  Rarity:   {costs.rarity}")
        print(f"  Currency: {costs.currency_cost}")
    for warning in warnings:
        print(f"  ! {warning.code.value}: {warning.message}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="realms-forge", description="Realms Forge build engine")
    parser.add_argument("--catalog-dir", type=Path, help="Catalog directory (overrides settings)")
    parser.add_argument("--mechanic-ids", type=Path, help="Mechanic id table (overrides settings)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    price_parser = subparsers.add_parser("price", help="Price a stored build")
    price_parser.add_argument("build_file", type=Path, help="YAML or JSON build record")
    price_parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    price_parser.set_defaults(handler=price)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()
    try:
        return args.handler(args)
    except (CatalogLoadError, CatalogValidationError) as e:
        logger.error("catalog_load_failed", error=str(e))
        return 2
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("build_file_unreadable", path=str(args.build_file), error=str(e))
        return 1


def run() -> None:
    """Synchronous console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
