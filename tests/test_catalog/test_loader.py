"""Tests for the YAML catalog loader."""

from pathlib import Path

import pytest

from realms_forge.catalog import (
    CatalogLoadError,
    CatalogValidationError,
    PartType,
    PropertyType,
    load_catalog,
)
from realms_forge.catalog.loader import load_parts, load_progression, load_properties, load_yaml_file


def write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadYamlFile:
    """Tests for reading a single YAML file."""

    def test_missing_file(self, tmp_path):
        """A missing file is a load error, not a FileNotFoundError."""
        with pytest.raises(CatalogLoadError, match="File not found"):
            load_yaml_file(tmp_path / "nope.yaml", "parts")

    def test_invalid_yaml(self, tmp_path):
        """Broken YAML is reported with the file name."""
        path = write(tmp_path / "parts.yaml", "parts: [unclosed\n")
        with pytest.raises(CatalogLoadError, match="YAML parsing error"):
            load_yaml_file(path, "parts")

    def test_empty_file(self, tmp_path):
        path = write(tmp_path / "parts.yaml", "")
        with pytest.raises(CatalogLoadError, match="Empty YAML file"):
            load_yaml_file(path, "parts")

    def test_missing_key(self, tmp_path):
        """The top-level key must be present."""
        path = write(tmp_path / "parts.yaml", "things: []\n")
        with pytest.raises(CatalogLoadError, match="Missing 'parts' key"):
            load_yaml_file(path, "parts")


class TestLoadParts:
    """Tests for part validation and construction."""

    def test_load_minimal_part(self, tmp_path):
        """Defaults fill in everything but id and name."""
        path = write(tmp_path / "parts.yaml", "parts:\n  - id: 1\n    name: Spark\n")
        (part,) = load_parts(path)
        assert part.id == 1
        assert part.type == PartType.POWER
        assert part.base_en == 0.0
        assert part.options == ()
        assert not part.mechanic

    def test_type_is_case_insensitive(self, tmp_path):
        path = write(tmp_path / "parts.yaml", "parts:\n  - {id: 1, name: Jab, type: Technique}\n")
        (part,) = load_parts(path)
        assert part.type == PartType.TECHNIQUE

    def test_missing_name(self, tmp_path):
        """Parts without a name are rejected."""
        path = write(tmp_path / "parts.yaml", "parts:\n  - id: 1\n")
        with pytest.raises(CatalogValidationError, match="missing required field: name"):
            load_parts(path)

    def test_invalid_type(self, tmp_path):
        path = write(tmp_path / "parts.yaml", "parts:\n  - {id: 1, name: X, type: spell}\n")
        with pytest.raises(CatalogValidationError, match="invalid type 'spell'"):
            load_parts(path)

    def test_non_numeric_energy(self, tmp_path):
        """Costs must be numbers."""
        path = write(tmp_path / "parts.yaml", "parts:\n  - {id: 1, name: X, base_en: lots}\n")
        with pytest.raises(CatalogValidationError, match="invalid base_en"):
            load_parts(path)

    def test_too_many_options(self, tmp_path):
        """A part carries at most three options."""
        path = write(
            tmp_path / "parts.yaml",
            "parts:\n  - id: 1\n    name: X\n    options: [{en: 1}, {en: 1}, {en: 1}, {en: 1}]\n",
        )
        with pytest.raises(CatalogValidationError, match="invalid options"):
            load_parts(path)

    def test_flag_must_be_boolean(self, tmp_path):
        path = write(tmp_path / "parts.yaml", "parts:\n  - {id: 1, name: X, mechanic: 'yes'}\n")
        with pytest.raises(CatalogValidationError, match="invalid mechanic"):
            load_parts(path)

    def test_duplicate_ids(self, tmp_path):
        """Two parts may not share an id."""
        path = write(
            tmp_path / "parts.yaml",
            "parts:\n  - {id: 1, name: A}\n  - {id: 1, name: B}\n",
        )
        with pytest.raises(CatalogValidationError, match="Duplicate part ID '1'"):
            load_parts(path)


class TestLoadProperties:
    """Tests for armament property loading."""

    def test_load_property(self, tmp_path):
        path = write(
            tmp_path / "properties.yaml",
            "properties:\n  - {id: 3, name: Range, type: Weapon, base_ip: 1, op_1_c: 1}\n",
        )
        (prop,) = load_properties(path)
        assert prop.type == PropertyType.WEAPON
        assert prop.base_ip == 1
        assert prop.has_option

    def test_invalid_property_type(self, tmp_path):
        path = write(tmp_path / "properties.yaml", "properties:\n  - {id: 3, name: X, type: Ring}\n")
        with pytest.raises(CatalogValidationError, match="invalid type 'Ring'"):
            load_properties(path)

    def test_duplicate_property_ids(self, tmp_path):
        path = write(
            tmp_path / "properties.yaml",
            "properties:\n  - {id: 3, name: A}\n  - {id: 3, name: B}\n",
        )
        with pytest.raises(CatalogValidationError, match="Duplicate property ID"):
            load_properties(path)


class TestLoadProgression:
    """Tests for the compact progression table."""

    def test_load_rows(self, tmp_path):
        """Each row maps onto the progression columns in order."""
        path = write(
            tmp_path / "progression.yaml",
            "progression:\n  martial:\n    - [1, 0, 2, 8, 1, 1]\n    - [2, 0, 2, 8, 2, 0]\n",
        )
        rows = load_progression(path)
        assert len(rows) == 2
        assert rows[0].martial_proficiency == 2
        assert rows[0].armament_proficiency_cap == 8
        assert rows[0].bonus_feats == 1

    def test_unknown_archetype(self, tmp_path):
        path = write(tmp_path / "progression.yaml", "progression:\n  bard:\n    - [1, 0, 0, 0, 0, 0]\n")
        with pytest.raises(CatalogValidationError, match="Unknown archetype 'bard'"):
            load_progression(path)

    def test_short_row(self, tmp_path):
        """Rows must have every column."""
        path = write(tmp_path / "progression.yaml", "progression:\n  power:\n    - [1, 2]\n")
        with pytest.raises(CatalogValidationError, match="must have 6 columns"):
            load_progression(path)

    def test_duplicate_level(self, tmp_path):
        path = write(
            tmp_path / "progression.yaml",
            "progression:\n  power:\n    - [1, 2, 0, 3, 1, 0]\n    - [1, 2, 0, 3, 1, 0]\n",
        )
        with pytest.raises(CatalogValidationError, match="Duplicate level 1"):
            load_progression(path)


class TestLoadCatalog:
    """Tests for loading a whole catalog directory."""

    def test_bundled_catalog_loads(self, catalog):
        """The bundled sample catalog is valid."""
        assert catalog.get_part_by_name("Bolster") is not None
        assert catalog.get_property_by_id(1).name == "Weapon Proficiency"
        assert catalog.max_level == 20

    def test_optional_files(self, tmp_path):
        """Only parts.yaml is required."""
        write(tmp_path / "parts.yaml", "parts:\n  - {id: 1, name: A}\n")
        snapshot = load_catalog(tmp_path)
        assert len(snapshot.list_parts()) == 1
        assert snapshot.list_properties() == []
        assert snapshot.max_level == 0

    def test_not_a_directory(self, tmp_path):
        with pytest.raises(CatalogLoadError, match="Not a directory"):
            load_catalog(tmp_path / "missing")

    def test_uses_configured_directory(self, tmp_path, monkeypatch):
        """Without an argument the settings decide where the catalog lives."""
        write(tmp_path / "parts.yaml", "parts:\n  - {id: 9, name: Configured}\n")
        monkeypatch.setenv("REALMS_CATALOG_DIR", str(tmp_path))
        snapshot = load_catalog()
        assert snapshot.get_part_by_id(9).name == "Configured"
