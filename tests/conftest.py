"""Shared fixtures for all tests."""

import pytest
import structlog

from realms_forge.build import BuildConfiguration, BuildType
from realms_forge.catalog import (
    CatalogSnapshot,
    Part,
    PartOption,
    load_catalog,
    load_mechanic_ids,
)
from realms_forge.config import DATA_DIR, get_settings


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Keep REALMS_* environment and logging setup from leaking between tests."""
    for name in ("REALMS_CATALOG_DIR", "REALMS_MECHANIC_IDS_PATH", "REALMS_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()


@pytest.fixture(scope="session")
def catalog() -> CatalogSnapshot:
    """The bundled sample catalog."""
    return load_catalog(DATA_DIR / "catalog")


@pytest.fixture(scope="session")
def mechanic_ids():
    """The bundled mechanic id table."""
    return load_mechanic_ids(DATA_DIR / "mechanic_ids.yaml")


@pytest.fixture
def power() -> BuildConfiguration:
    """An empty power build."""
    return BuildConfiguration(name="Test Power", build_type=BuildType.POWER)


@pytest.fixture
def technique() -> BuildConfiguration:
    return BuildConfiguration(name="Test Technique", build_type=BuildType.TECHNIQUE)


@pytest.fixture
def armament() -> BuildConfiguration:
    return BuildConfiguration(name="Test Armament", build_type=BuildType.ARMAMENT)


def make_part(part_id: int, name: str, base_en: float = 0.0, base_tp: float = 0.0, **fields) -> Part:
    """Build a catalog part in memory.

    ``options`` may be given as (en, tp) pairs.
    """
    options = fields.pop("options", ())
    fields["options"] = tuple(
        option if isinstance(option, PartOption) else PartOption(en=option[0], tp=option[1])
        for option in options
    )
    return Part(id=part_id, name=name, base_en=base_en, base_tp=base_tp, **fields)


@pytest.fixture
def part_factory():
    """Factory for in-memory catalog parts."""
    return make_part
