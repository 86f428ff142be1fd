from __future__ import annotations
from .defaults import MarketTables
from .models import FuelType, UserProfile, VehicleData

AGE_INCREASE_PER_YEAR = 0.05   # +5 % par année d'âge du véhicule
ELECTRIC_FACTOR = 0.6          # VE : -40 %


def vehicle_age_at_year(vehicle: VehicleData, year: int, reference_year: int) -> int:
    return reference_year - vehicle.year + year - 1


def annual_maintenance_cost(
    year: int,
    vehicle: VehicleData,
    user: UserProfile,
    tables: MarketTables,
    reference_year: int,
) -> float:
    """
    Maintenance de l'année `year` (1-based) :
      - base catégorie = forfait annuel + coût/km * km annuels
      - multiplicateur de localisation
      - hausse avec l'âge du véhicule : 1 + âge * 5 %
      - VE : -40 %
    """
    base = tables.maintenance[vehicle.vehicle_category]
    annual = base.annual + base.per_km * vehicle.estimated_annual_mileage
    annual *= tables.location_multipliers[user.location].maintenance
    annual *= 1.0 + vehicle_age_at_year(vehicle, year, reference_year) * AGE_INCREASE_PER_YEAR
    if vehicle.fuel_type == FuelType.ELECTRIC:
        annual *= ELECTRIC_FACTOR
    return annual
