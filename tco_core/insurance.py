from __future__ import annotations
from typing import Sequence, Tuple

from .defaults import MarketTables
from .models import CountryConfig, UserProfile, VehicleData

EXPERIENCE_DISCOUNT_PER_YEAR = 0.02
MAX_EXPERIENCE_DISCOUNT = 0.2


def age_multiplier(age: float, table: Sequence[Tuple[int, float]]) -> float:
    """Driver-age insurance multiplier via piecewise linear interpolation.

    Clamped to the first/last entry outside the table's age range; ``table``
    must be non-empty and sorted by age.
    """
    if age <= table[0][0]:
        return table[0][1]
    if age >= table[-1][0]:
        return table[-1][1]
    for i in range(len(table) - 1):
        a0, m0 = table[i]
        a1, m1 = table[i + 1]
        if a0 <= age <= a1:
            t = (age - a0) / (a1 - a0)
            return m0 + t * (m1 - m0)
    # âge non comparable (NaN)
    return 1.0


def experience_discount(driving_experience: float) -> float:
    return min(driving_experience * EXPERIENCE_DISCOUNT_PER_YEAR, MAX_EXPERIENCE_DISCOUNT)


def annual_insurance_cost(
    year: int,
    vehicle: VehicleData,
    user: UserProfile,
    country: CountryConfig,
    tables: MarketTables,
) -> float:
    """
    Assurance de l'année `year` (1-based) :
      base catégorie * multiplicateur pays * multiplicateur âge conducteur
      * multiplicateur localisation * (1 - remise expérience, max 20 %)
    Le conducteur vieillit d'un an par année de détention.
    """
    cost = tables.insurance[vehicle.vehicle_category]
    cost *= country.average_insurance_multiplier
    cost *= age_multiplier(user.age + year - 1, tables.age_insurance_multipliers)
    cost *= tables.location_multipliers[user.location].insurance
    cost *= 1.0 - experience_discount(user.driving_experience)
    return cost
