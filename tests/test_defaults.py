import json
import math

import pytest

from tco_core.defaults import (
    build_market_tables,
    get_country_config,
    load_market_defaults,
    load_market_tables,
)
from tco_core.models import Country, Location, VehicleCategory


@pytest.fixture(scope="module")
def defaults():
    return load_market_defaults()


def test_load_defaults_structure(defaults):
    assert set(defaults["countries"]) == {c.value for c in Country}
    for country in defaults["countries"].values():
        for key in (
            "name", "vat_rate", "registration_tax", "average_fuel_price",
            "average_electricity_price", "average_insurance_multiplier",
            "winter_tire_requirement", "electric_vehicle_incentive",
        ):
            assert key in country

    categories = {c.value for c in VehicleCategory}
    for table in ("maintenance", "insurance", "depreciation"):
        assert set(defaults[table]) == categories
    assert set(defaults["location_multipliers"]) == {loc.value for loc in Location}
    assert defaults["winter_equipment"]["tires"] == 6000


def test_load_defaults_returns_copy():
    data = load_market_defaults()
    data["countries"]["sweden"]["vat_rate"] = 0.99
    assert load_market_defaults()["countries"]["sweden"]["vat_rate"] == 0.25


def test_get_country_config_by_enum_and_name():
    sweden = get_country_config(Country.SWEDEN, defaults=load_market_defaults())
    assert sweden.name == "Sweden"
    assert math.isclose(sweden.vat_rate, 0.25)
    assert math.isclose(sweden.registration_tax, 0.076)
    assert sweden.winter_tire_requirement is True

    denmark = get_country_config("DENMARK")
    assert denmark.winter_tire_requirement is False
    assert math.isclose(denmark.registration_tax, 0.85)

    finland = get_country_config("finland")
    assert math.isclose(finland.vat_rate, 0.24)
    assert math.isclose(finland.electric_vehicle_incentive, 0.2)


def test_get_country_config_unknown_country():
    with pytest.raises(KeyError, match="iceland"):
        get_country_config("iceland")


def test_market_tables_cover_every_member():
    tables = load_market_tables()
    for category in VehicleCategory:
        assert category in tables.maintenance
        assert category in tables.insurance
        assert len(tables.depreciation[category]) == 5
    for location in Location:
        assert location in tables.location_multipliers

    ages = [age for age, _ in tables.age_insurance_multipliers]
    assert ages == sorted(ages)
    assert ages[0] == 18 and ages[-1] == 70
    assert tables.winter_tire_cost == 6000.0
    assert tables.maintenance[VehicleCategory.SUV].per_km == 0.22
    assert tables.location_multipliers[Location.RURAL].maintenance == 1.15


def test_market_tables_are_read_only():
    tables = load_market_tables()
    with pytest.raises(TypeError):
        tables.insurance[VehicleCategory.SUV] = 0.0


def test_missing_category_rejected_at_load():
    broken = load_market_defaults()
    del broken["maintenance"]["luxury"]
    with pytest.raises(KeyError, match="luxury"):
        build_market_tables(broken)


def test_empty_tables_rejected_at_load():
    broken = load_market_defaults()
    broken["depreciation"]["compact"] = []
    with pytest.raises(ValueError):
        build_market_tables(broken)

    broken = load_market_defaults()
    broken["age_insurance_multipliers"] = {}
    with pytest.raises(ValueError):
        build_market_tables(broken)


def test_defaults_file_path_override(tmp_path):
    data = load_market_defaults()
    data["countries"]["norway"]["average_fuel_price"] = 25.0
    path = tmp_path / "defaults.json"
    path.write_text(json.dumps(data), encoding="utf-8")

    norway = get_country_config(Country.NORWAY, load_market_defaults(path))
    assert norway.average_fuel_price == 25.0


def test_missing_defaults_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_market_defaults(tmp_path / "nope.json")
