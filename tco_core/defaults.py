"""Utilities to load and access the Nordic market tables (countries, categories, multipliers)."""
from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from .models import Country, CountryConfig, Location, VehicleCategory, ensure_enum

logger = logging.getLogger(__name__)

_PACKAGE_ROOT = Path(__file__).resolve().parent
_DEFAULTS_PATH = _PACKAGE_ROOT / "data" / "nordic_defaults.json"


@dataclass(frozen=True)
class MaintenanceBase:
    annual: float
    per_km: float


@dataclass(frozen=True)
class LocationMultipliers:
    insurance: float
    maintenance: float


@dataclass(frozen=True)
class MarketTables:
    """Read-only lookup tables used by the cost components.

    Every :class:`VehicleCategory` and :class:`Location` member is guaranteed
    to have an entry, and the age table and depreciation sequences are never
    empty (checked in :func:`build_market_tables`).
    """

    maintenance: Mapping[VehicleCategory, MaintenanceBase]
    insurance: Mapping[VehicleCategory, float]
    depreciation: Mapping[VehicleCategory, Tuple[float, ...]]
    # (âge, multiplicateur), trié par âge croissant
    age_insurance_multipliers: Tuple[Tuple[int, float], ...]
    location_multipliers: Mapping[Location, LocationMultipliers]
    winter_tire_cost: float


@lru_cache(maxsize=None)
def _load_defaults_cached(path_str: str) -> Dict[str, Any]:
    path = Path(path_str)
    if not path.exists():
        raise FileNotFoundError(f"Defaults file not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    logger.debug("Loaded market defaults from %s", path)
    return data


def load_market_defaults(path: str | Path | None = None) -> Dict[str, Any]:
    """Return the raw market defaults mapping.

    Parameters
    ----------
    path:
        Optional path to the JSON file. When omitted, the packaged
        ``tco_core/data/nordic_defaults.json`` is used.

    Returns
    -------
    dict
        A *deep copy* of the defaults structure so callers can manipulate the
        returned mapping without mutating the cached data.
    """

    resolved_path = Path(path) if path is not None else _DEFAULTS_PATH
    data = _load_defaults_cached(str(resolved_path))
    return copy.deepcopy(data)


def _table_for(defaults: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    try:
        return defaults[name]
    except KeyError as exc:
        raise KeyError(f"Defaults mapping does not contain the '{name}' table") from exc


def _entry_for(table: Mapping[str, Any], member: Any, table_name: str) -> Any:
    try:
        return table[member.value]
    except KeyError as exc:
        available = ", ".join(table)
        raise KeyError(
            f"No '{table_name}' entry for '{member.value}' (available: {available})"
        ) from exc


def get_country_config(
    country: Country | str,
    defaults: Mapping[str, Any] | None = None,
) -> CountryConfig:
    """Return the :class:`CountryConfig` for a country.

    Parameters
    ----------
    country:
        Either a :class:`tco_core.models.Country` member or its name (case insensitive).
    defaults:
        Optional mapping already loaded via :func:`load_market_defaults`.
    """

    defaults = defaults or load_market_defaults()
    countries = _table_for(defaults, "countries")
    try:
        key = ensure_enum(Country, country)
    except TypeError as exc:
        raise KeyError(
            f"Unknown country '{country}' (available: {', '.join(countries)})"
        ) from exc
    raw = _entry_for(countries, key, "countries")

    return CountryConfig(
        name=str(raw["name"]),
        vat_rate=float(raw["vat_rate"]),
        registration_tax=float(raw["registration_tax"]),
        average_fuel_price=float(raw["average_fuel_price"]),
        average_electricity_price=float(raw["average_electricity_price"]),
        average_insurance_multiplier=float(raw["average_insurance_multiplier"]),
        winter_tire_requirement=bool(raw["winter_tire_requirement"]),
        electric_vehicle_incentive=float(raw["electric_vehicle_incentive"]),
    )


def build_market_tables(defaults: Mapping[str, Any]) -> MarketTables:
    """Build typed, immutable :class:`MarketTables` from a raw defaults mapping."""

    maintenance_raw = _table_for(defaults, "maintenance")
    insurance_raw = _table_for(defaults, "insurance")
    depreciation_raw = _table_for(defaults, "depreciation")
    location_raw = _table_for(defaults, "location_multipliers")
    age_raw = _table_for(defaults, "age_insurance_multipliers")
    winter_raw = _table_for(defaults, "winter_equipment")

    maintenance: Dict[VehicleCategory, MaintenanceBase] = {}
    insurance: Dict[VehicleCategory, float] = {}
    depreciation: Dict[VehicleCategory, Tuple[float, ...]] = {}
    for category in VehicleCategory:
        m = _entry_for(maintenance_raw, category, "maintenance")
        maintenance[category] = MaintenanceBase(annual=float(m["annual"]), per_km=float(m["per_km"]))
        insurance[category] = float(_entry_for(insurance_raw, category, "insurance")["annual"])
        rates = tuple(float(r) for r in _entry_for(depreciation_raw, category, "depreciation"))
        if not rates:
            raise ValueError(f"Empty depreciation schedule for '{category.value}'")
        depreciation[category] = rates

    locations: Dict[Location, LocationMultipliers] = {}
    for location in Location:
        loc = _entry_for(location_raw, location, "location_multipliers")
        locations[location] = LocationMultipliers(
            insurance=float(loc["insurance"]),
            maintenance=float(loc["maintenance"]),
        )

    age_table = tuple(sorted((int(age), float(mult)) for age, mult in age_raw.items()))
    if not age_table:
        raise ValueError("Empty age insurance multiplier table")

    return MarketTables(
        maintenance=MappingProxyType(maintenance),
        insurance=MappingProxyType(insurance),
        depreciation=MappingProxyType(depreciation),
        age_insurance_multipliers=age_table,
        location_multipliers=MappingProxyType(locations),
        winter_tire_cost=float(winter_raw["tires"]),
    )


def load_market_tables(path: str | Path | None = None) -> MarketTables:
    """Load the defaults file and return its :class:`MarketTables`."""

    return build_market_tables(load_market_defaults(path))


@lru_cache(maxsize=1)
def default_market_tables() -> MarketTables:
    """Tables from the packaged defaults file, built once per process."""

    return load_market_tables()
