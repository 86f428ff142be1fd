from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional, Tuple, Type, TypeVar

import pandas as pd

E = TypeVar("E", bound=Enum)


class FuelType(Enum):
    PETROL = "petrol"
    DIESEL = "diesel"
    ELECTRIC = "electric"
    HYBRID = "hybrid"


class VehicleCategory(Enum):
    COMPACT = "compact"
    SEDAN = "sedan"
    SUV = "suv"
    LUXURY = "luxury"


class Location(Enum):
    URBAN = "urban"
    SUBURBAN = "suburban"
    RURAL = "rural"


class Country(Enum):
    SWEDEN = "sweden"
    NORWAY = "norway"
    DENMARK = "denmark"
    FINLAND = "finland"


class OwnershipType(Enum):
    PURCHASE = "purchase"
    FINANCE = "finance"
    LEASE = "lease"


def ensure_enum(enum_cls: Type[E], value: Any) -> E:
    """Coerce ``value`` into ``enum_cls`` if it arrives as a value/name string."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        lookup = value.strip()
        for member in enum_cls:
            if lookup.lower() in (member.value.lower(), member.name.lower()):
                return member
    raise TypeError(
        f"Invalid {enum_cls.__name__} value: {value!r} "
        f"(expected one of: {', '.join(m.value for m in enum_cls)})"
    )


def current_year() -> int:
    return date.today().year


@dataclass(frozen=True)
class VehicleData:
    make: str
    model: str
    year: int                          # année modèle
    purchase_price: float              # monnaie locale
    fuel_type: FuelType
    fuel_consumption: float            # L/100km, ou kWh/100km si électrique
    estimated_annual_mileage: float    # km/an
    vehicle_category: VehicleCategory


@dataclass(frozen=True)
class PurchaseData:
    down_payment: float
    trade_in_value: float
    financing_required: bool
    loan_term_years: Optional[float] = None
    interest_rate: Optional[float] = None     # % annuel, ex. 4.5


@dataclass(frozen=True)
class LeaseData:
    monthly_payment: float
    down_payment: float
    lease_term: int                    # mois
    annual_mileage_limit: float        # km/an
    excess_mileage_fee: float          # par km au-delà de la limite
    residual_value: float = 0.0        # réservé, non utilisé dans le calcul


@dataclass(frozen=True)
class UserProfile:
    country: Country
    age: int
    driving_experience: int            # années de permis
    location: Location
    has_garage: bool = False           # réservé, non utilisé dans le calcul


@dataclass(frozen=True)
class CalculationPeriod:
    years: int                         # horizon (1..5 côté UI)


@dataclass(frozen=True)
class CountryConfig:
    name: str
    vat_rate: float
    registration_tax: float
    average_fuel_price: float          # par litre
    average_electricity_price: float   # par kWh
    average_insurance_multiplier: float
    winter_tire_requirement: bool
    electric_vehicle_incentive: float  # fraction de TVA remise sur un VE


@dataclass(frozen=True)
class FormData:
    vehicle: VehicleData
    purchase: PurchaseData
    lease: LeaseData
    user: UserProfile
    period: CalculationPeriod


@dataclass(frozen=True)
class CalculationInput:
    form_data: FormData
    ownership_type: OwnershipType
    country_config: CountryConfig
    # année calendaire servant à vieillir le véhicule (maintenance)
    reference_year: int = field(default_factory=current_year)


@dataclass(frozen=True)
class YearlyBreakdown:
    year: int
    initial_costs: float
    monthly_payments: float
    operating_costs: float
    maintenance_costs: float
    insurance_costs: float
    depreciation_costs: float
    total_year_cost: float
    cumulative_cost: float


@dataclass(frozen=True)
class CostSummary:
    initial_costs: float
    total_monthly_payments: float
    total_operating_costs: float
    total_maintenance_costs: float
    total_insurance_costs: float
    total_depreciation_costs: float
    end_of_term_value: float
    net_total_cost: float


ANNUAL_TABLE_COLUMNS = {
    "year": "Year",
    "initial_costs": "Initial costs",
    "monthly_payments": "Payments",
    "operating_costs": "Operating",
    "maintenance_costs": "Maintenance",
    "insurance_costs": "Insurance",
    "depreciation_costs": "Depreciation",
    "total_year_cost": "Total year cost",
    "cumulative_cost": "Cumulative cost",
}


@dataclass(frozen=True)
class TCOResult:
    ownership_type: OwnershipType
    total_cost: float
    yearly_breakdown: Tuple[YearlyBreakdown, ...]
    summary: CostSummary

    @property
    def annual_table(self) -> pd.DataFrame:
        """Yearly breakdown as a DataFrame, one row per year (display/export)."""
        rows = [
            {label: getattr(entry, attr) for attr, label in ANNUAL_TABLE_COLUMNS.items()}
            for entry in self.yearly_breakdown
        ]
        df = pd.DataFrame(rows, columns=list(ANNUAL_TABLE_COLUMNS.values()))
        df.attrs["ownership_type"] = self.ownership_type.value
        df.attrs["end_of_term_value"] = self.summary.end_of_term_value
        return df
