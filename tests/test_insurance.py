import pytest

from tco_core.defaults import default_market_tables, get_country_config
from tco_core.insurance import age_multiplier, annual_insurance_cost, experience_discount
from tco_core.maintenance import annual_maintenance_cost, vehicle_age_at_year
from tco_core.models import Country, FuelType, Location, UserProfile, VehicleCategory, VehicleData


@pytest.fixture(scope="module")
def tables():
    return default_market_tables()


def _vehicle(fuel=FuelType.PETROL, year=2023):
    return VehicleData(
        make="Volvo", model="XC60", year=year, purchase_price=500_000.0,
        fuel_type=fuel, fuel_consumption=8.0,
        estimated_annual_mileage=15_000.0, vehicle_category=VehicleCategory.SUV,
    )


def _user(age=30, experience=10, location=Location.SUBURBAN):
    return UserProfile(country=Country.SWEDEN, age=age, driving_experience=experience, location=location)


# ---------- multiplicateur d'âge ----------

def test_age_multiplier_clamps_below_and_above(tables):
    table = tables.age_insurance_multipliers
    assert age_multiplier(16, table) == 2.5
    assert age_multiplier(18, table) == 2.5
    assert age_multiplier(70, table) == 1.1
    assert age_multiplier(95, table) == 1.1


def test_age_multiplier_exact_keys(tables):
    table = tables.age_insurance_multipliers
    for age, mult in table:
        assert age_multiplier(age, table) == mult


def test_age_multiplier_interpolates(tables):
    table = tables.age_insurance_multipliers
    # 25 -> 1.2, 30 -> 1.0
    assert abs(age_multiplier(27, table) - 1.12) < 1e-12
    # 30 -> 1.0, 40 -> 0.9
    assert abs(age_multiplier(35, table) - 0.95) < 1e-12
    assert abs(age_multiplier(31, table) - 0.99) < 1e-12


def test_age_multiplier_single_entry_table():
    assert age_multiplier(20, [(30, 1.0)]) == 1.0
    assert age_multiplier(40, [(30, 1.0)]) == 1.0


def test_experience_discount_capped():
    assert experience_discount(0) == 0.0
    assert abs(experience_discount(5) - 0.1) < 1e-12
    assert experience_discount(10) == 0.2
    assert experience_discount(30) == 0.2


# ---------- assurance ----------

def test_insurance_driver_ages_each_year(tables):
    sweden = get_country_config(Country.SWEDEN)
    # 16'000 * 1.0 * 1.0 * 1.0 * (1 - 0.2)
    y1 = annual_insurance_cost(1, _vehicle(), _user(), sweden, tables)
    # âge 31 => 0.99
    y2 = annual_insurance_cost(2, _vehicle(), _user(), sweden, tables)
    assert abs(y1 - 12_800.0) < 1e-6
    assert abs(y2 - 12_672.0) < 1e-6


def test_insurance_country_and_location_multipliers(tables):
    norway = get_country_config(Country.NORWAY)
    urban = annual_insurance_cost(1, _vehicle(), _user(experience=0, location=Location.URBAN), norway, tables)
    assert abs(urban - 16_000.0 * 1.15 * 1.2) < 1e-6


# ---------- maintenance ----------

def test_maintenance_grows_with_vehicle_age(tables):
    # (15'000 + 0.22 * 15'000) = 18'300 ; +5 % par an d'âge
    y1 = annual_maintenance_cost(1, _vehicle(), _user(), tables, reference_year=2023)
    y2 = annual_maintenance_cost(2, _vehicle(), _user(), tables, reference_year=2023)
    assert abs(y1 - 18_300.0) < 1e-6
    assert abs(y2 - 19_215.0) < 1e-6


def test_maintenance_electric_and_rural(tables):
    v = annual_maintenance_cost(
        1, _vehicle(fuel=FuelType.ELECTRIC, year=2021), _user(location=Location.RURAL), tables, reference_year=2023
    )
    # âge 2 => 1.10 ; rural 1.15 ; VE 0.6
    assert abs(v - 18_300.0 * 1.15 * 1.10 * 0.6) < 1e-6


def test_vehicle_age_at_year():
    assert vehicle_age_at_year(_vehicle(year=2020), 1, 2024) == 4
    assert vehicle_age_at_year(_vehicle(year=2020), 3, 2024) == 6


def test_age_multiplier_neutral_for_nan_age(tables):
    assert age_multiplier(float("nan"), tables.age_insurance_multipliers) == 1.0
