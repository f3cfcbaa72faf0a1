"""
Catalog loader module for Realms Forge.

Handles loading parts, properties and progression tables from YAML files
and building an id-indexed CatalogSnapshot from them.
"""

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from .models import Archetype, Part, PartType, ProgressionRow, Property, PropertyType
from .snapshot import CatalogSnapshot

logger = structlog.get_logger(__name__)

PARTS_FILE = "parts.yaml"
PROPERTIES_FILE = "properties.yaml"
PROGRESSION_FILE = "progression.yaml"

# Column order of a compact progression row in YAML
PROGRESSION_COLUMNS = (
    "level",
    "power_proficiency",
    "martial_proficiency",
    "armament_proficiency_cap",
    "feat_points",
    "bonus_feats",
)


class CatalogLoadError(Exception):
    """Raised when there's an error loading catalog data."""

    pass


class CatalogValidationError(Exception):
    """Raised when catalog validation fails."""

    pass


def load_yaml_file(file_path: Path, key: str) -> Any:
    """
    Load a YAML file and return the value stored under its top-level key.

    Args:
        file_path: Path to the YAML file
        key: Required top-level key (e.g. "parts")

    Returns:
        The value under ``key``

    Raises:
        CatalogLoadError: If the file cannot be loaded or parsed
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogLoadError(f"YAML parsing error in {file_path}: {e}")
    except FileNotFoundError:
        raise CatalogLoadError(f"File not found: {file_path}")
    except OSError as e:
        raise CatalogLoadError(f"Error loading {file_path}: {e}")

    if not data:
        raise CatalogLoadError(f"Empty YAML file: {file_path}")

    if key not in data:
        raise CatalogLoadError(f"Missing '{key}' key in {file_path}")

    return data[key]


def _require_fields(record: dict[str, Any], fields: list[str], kind: str, file_path: Path) -> None:
    for field in fields:
        if field not in record:
            record_id = record.get("id", "unknown")
            raise CatalogValidationError(
                f"{kind} '{record_id}' in {file_path} missing required field: {field}"
            )


def _require_numbers(record: dict[str, Any], fields: list[str], kind: str, file_path: Path) -> None:
    for field in fields:
        value = record.get(field, 0)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise CatalogValidationError(
                f"{kind} '{record['id']}' in {file_path} has invalid {field} (must be a number)"
            )


def validate_part_data(part_data: dict[str, Any], file_path: Path) -> None:
    """
    Validate that a part dictionary has all required fields.

    Raises:
        CatalogValidationError: If required fields are missing or invalid
    """
    _require_fields(part_data, ["id", "name"], "Part", file_path)

    if not isinstance(part_data["id"], int):
        raise CatalogValidationError(f"Part '{part_data['id']}' in {file_path} has non-integer id")

    part_type = str(part_data.get("type", "power")).lower()
    if part_type not in {t.value for t in PartType}:
        raise CatalogValidationError(
            f"Part '{part_data['id']}' in {file_path} has invalid type '{part_type}' "
            f"(must be one of: {', '.join(t.value for t in PartType)})"
        )

    _require_numbers(part_data, ["base_en", "base_tp"], "Part", file_path)

    options = part_data.get("options", [])
    if not isinstance(options, list) or len(options) > 3:
        raise CatalogValidationError(
            f"Part '{part_data['id']}' in {file_path} has invalid options (must be a list of at most 3)"
        )

    for bool_field in ["mechanic", "percentage", "duration"]:
        if bool_field in part_data and not isinstance(part_data[bool_field], bool):
            raise CatalogValidationError(
                f"Part '{part_data['id']}' in {file_path} has invalid {bool_field} (must be boolean)"
            )


def validate_property_data(property_data: dict[str, Any], file_path: Path) -> None:
    """
    Validate that a property dictionary has all required fields.

    Raises:
        CatalogValidationError: If required fields are missing or invalid
    """
    _require_fields(property_data, ["id", "name"], "Property", file_path)

    prop_type = property_data.get("type", PropertyType.GENERAL.value)
    if prop_type not in {t.value for t in PropertyType}:
        raise CatalogValidationError(
            f"Property '{property_data['id']}' in {file_path} has invalid type '{prop_type}' "
            f"(must be one of: {', '.join(t.value for t in PropertyType)})"
        )

    _require_numbers(
        property_data,
        ["base_ip", "base_tp", "base_c", "op_1_ip", "op_1_tp", "op_1_c"],
        "Property",
        file_path,
    )


def create_part_from_data(part_data: dict[str, Any]) -> Part:
    """
    Create a Part instance from dictionary data.

    Raises:
        CatalogValidationError: If Pydantic validation fails
    """
    try:
        data = dict(part_data)
        data["type"] = str(data.get("type", "power")).lower()
        data["options"] = tuple(data.get("options") or ())
        return Part(**data)
    except ValidationError as e:
        raise CatalogValidationError(
            f"Failed to create part '{part_data.get('id', 'unknown')}': {e}"
        )


def create_property_from_data(property_data: dict[str, Any]) -> Property:
    """
    Create a Property instance from dictionary data.

    Raises:
        CatalogValidationError: If Pydantic validation fails
    """
    try:
        return Property(**property_data)
    except ValidationError as e:
        raise CatalogValidationError(
            f"Failed to create property '{property_data.get('id', 'unknown')}': {e}"
        )


def load_parts(file_path: Path) -> list[Part]:
    """Load and validate every part in a parts YAML file."""
    records = load_yaml_file(file_path, "parts")
    if not isinstance(records, list):
        raise CatalogLoadError(f"'parts' must be a list in {file_path}")

    parts: list[Part] = []
    seen_ids: set[int] = set()
    for part_data in records:
        validate_part_data(part_data, file_path)
        part = create_part_from_data(part_data)
        if part.id in seen_ids:
            raise CatalogValidationError(f"Duplicate part ID '{part.id}' found in {file_path}")
        seen_ids.add(part.id)
        parts.append(part)

    return parts


def load_properties(file_path: Path) -> list[Property]:
    """Load and validate every property in a properties YAML file."""
    records = load_yaml_file(file_path, "properties")
    if not isinstance(records, list):
        raise CatalogLoadError(f"'properties' must be a list in {file_path}")

    properties: list[Property] = []
    seen_ids: set[int] = set()
    for property_data in records:
        validate_property_data(property_data, file_path)
        prop = create_property_from_data(property_data)
        if prop.id in seen_ids:
            raise CatalogValidationError(f"Duplicate property ID '{prop.id}' found in {file_path}")
        seen_ids.add(prop.id)
        properties.append(prop)

    return properties


def load_progression(file_path: Path) -> list[ProgressionRow]:
    """
    Load progression rows.

    The file maps each archetype to a list of compact rows, one per level,
    in PROGRESSION_COLUMNS order.
    """
    table = load_yaml_file(file_path, "progression")
    if not isinstance(table, dict):
        raise CatalogLoadError(f"'progression' must be a mapping in {file_path}")

    rows: list[ProgressionRow] = []
    for archetype_name, archetype_rows in table.items():
        try:
            archetype = Archetype(archetype_name)
        except ValueError:
            raise CatalogValidationError(
                f"Unknown archetype '{archetype_name}' in {file_path} "
                f"(must be one of: {', '.join(a.value for a in Archetype)})"
            )

        seen_levels: set[int] = set()
        for raw_row in archetype_rows:
            if not isinstance(raw_row, list) or len(raw_row) != len(PROGRESSION_COLUMNS):
                raise CatalogValidationError(
                    f"Progression row {raw_row!r} for '{archetype_name}' in {file_path} "
                    f"must have {len(PROGRESSION_COLUMNS)} columns"
                )
            try:
                row = ProgressionRow(
                    archetype=archetype, **dict(zip(PROGRESSION_COLUMNS, raw_row))
                )
            except ValidationError as e:
                raise CatalogValidationError(
                    f"Invalid progression row {raw_row!r} for '{archetype_name}': {e}"
                )
            if row.level in seen_levels:
                raise CatalogValidationError(
                    f"Duplicate level {row.level} for '{archetype_name}' in {file_path}"
                )
            seen_levels.add(row.level)
            rows.append(row)

    return rows


def load_catalog(catalog_dir: Path | None = None) -> CatalogSnapshot:
    """
    Load the full catalog and index it into a snapshot.

    This is the main entry point for loading catalog data.

    Args:
        catalog_dir: Directory with the catalog YAML files. If None, uses the
            configured catalog directory.

    Returns:
        CatalogSnapshot over the loaded records

    Raises:
        CatalogLoadError: If loading fails
        CatalogValidationError: If validation fails
    """
    if catalog_dir is None:
        from realms_forge.config import get_settings

        catalog_dir = get_settings().catalog_dir

    if not catalog_dir.is_dir():
        raise CatalogLoadError(f"Not a directory: {catalog_dir}")

    parts = load_parts(catalog_dir / PARTS_FILE)

    properties: list[Property] = []
    properties_file = catalog_dir / PROPERTIES_FILE
    if properties_file.exists():
        properties = load_properties(properties_file)
    else:
        logger.warning("catalog_properties_missing", directory=str(catalog_dir))

    progression: list[ProgressionRow] = []
    progression_file = catalog_dir / PROGRESSION_FILE
    if progression_file.exists():
        progression = load_progression(progression_file)
    else:
        logger.warning("catalog_progression_missing", directory=str(catalog_dir))

    logger.info(
        "catalog_loaded",
        directory=str(catalog_dir),
        parts=len(parts),
        properties=len(properties),
        progression_rows=len(progression),
    )

    return CatalogSnapshot(parts=parts, properties=properties, progression=progression)
