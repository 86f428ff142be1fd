# tco_core/cashflows.py
from __future__ import annotations
from typing import List, Sequence

from .defaults import MarketTables
from .models import (
    CountryConfig,
    FormData,
    FuelType,
    LeaseData,
    OwnershipType,
    PurchaseData,
    VehicleData,
)
from .tires import winter_equipment_cost


# ---------- COÛTS INITIAUX (année 1) ----------

def effective_vat_rate(vehicle: VehicleData, country: CountryConfig) -> float:
    """TVA ; un VE bénéficie de la remise `electric_vehicle_incentive`."""
    if vehicle.fuel_type == FuelType.ELECTRIC:
        return country.vat_rate * (1.0 - country.electric_vehicle_incentive)
    return country.vat_rate


def initial_costs(
    ownership: OwnershipType,
    form: FormData,
    country: CountryConfig,
    tables: MarketTables,
) -> float:
    """
    Achat / crédit : apport + taxe d'immatriculation + TVA (réduite pour un VE).
    Leasing : apport + un loyer mensuel (premier mois payé d'avance).
    + pneus hiver si obligatoires, quel que soit le mode.
    """
    vehicle = form.vehicle
    if ownership in (OwnershipType.PURCHASE, OwnershipType.FINANCE):
        cost = form.purchase.down_payment
        cost += vehicle.purchase_price * country.registration_tax
        cost += vehicle.purchase_price * effective_vat_rate(vehicle, country)
    elif ownership == OwnershipType.LEASE:
        cost = form.lease.down_payment + form.lease.monthly_payment
    else:
        raise TypeError(f"Invalid ownership type: {ownership!r}")

    return cost + winter_equipment_cost(country, tables)


# ---------- MENSUALITÉS (annualisées) ----------

def amortized_monthly_payment(principal: float, annual_rate_pct: float, months: float) -> float:
    """Mensualité constante d'un prêt amortissable : P*r*(1+r)^n / ((1+r)^n - 1), r = taux/12/100."""
    if principal <= 0 or months <= 0:
        return 0.0
    r = annual_rate_pct / 12.0 / 100.0
    if r == 0:
        return principal / months
    growth = (1.0 + r) ** months
    return principal * r * growth / (growth - 1.0)


def annual_financing_payment(year: int, vehicle: VehicleData, purchase: PurchaseData) -> float:
    """Crédit : 12 mensualités pendant la durée du prêt, 0 ensuite ou si pas de crédit."""
    # durée ou taux absents (ou nuls) => pas de mensualité
    if not purchase.financing_required or not purchase.loan_term_years or not purchase.interest_rate:
        return 0.0
    if year > purchase.loan_term_years:
        return 0.0

    principal = vehicle.purchase_price - purchase.down_payment
    monthly = amortized_monthly_payment(principal, purchase.interest_rate, purchase.loan_term_years * 12)
    return monthly * 12.0


def excess_mileage_cost(vehicle: VehicleData, lease: LeaseData) -> float:
    excess_km = vehicle.estimated_annual_mileage - lease.annual_mileage_limit
    if excess_km <= 0:
        return 0.0
    return excess_km * lease.excess_mileage_fee


def annual_lease_payment(year: int, vehicle: VehicleData, lease: LeaseData) -> float:
    """Leasing : 12 loyers + pénalité km excédentaires, 0 au-delà de la durée du contrat."""
    if year > lease.lease_term / 12.0:
        return 0.0
    return lease.monthly_payment * 12.0 + excess_mileage_cost(vehicle, lease)


def annual_payments(year: int, ownership: OwnershipType, form: FormData) -> float:
    if ownership == OwnershipType.PURCHASE:
        return 0.0
    if ownership == OwnershipType.FINANCE:
        return annual_financing_payment(year, form.vehicle, form.purchase)
    if ownership == OwnershipType.LEASE:
        return annual_lease_payment(year, form.vehicle, form.lease)
    raise TypeError(f"Invalid ownership type: {ownership!r}")


# ---------- ÉNERGIE ----------

def annual_operating_cost(vehicle: VehicleData, country: CountryConfig) -> float:
    """
    VE : (kWh/100km) * km * prix/kWh
    autres : (L/100km) * km * prix/L
    """
    consumption = (vehicle.fuel_consumption / 100.0) * vehicle.estimated_annual_mileage
    if vehicle.fuel_type == FuelType.ELECTRIC:
        return consumption * country.average_electricity_price
    return consumption * country.average_fuel_price


# ---------- DÉPRÉCIATION ----------

def depreciation_rate(rates: Sequence[float], year: int) -> float:
    """Taux de l'année `year` (1-based) ; le dernier taux se répète au-delà du barème."""
    idx = year - 1
    if 0 <= idx < len(rates):
        return rates[idx]
    return rates[-1]


def depreciation_series(vehicle: VehicleData, tables: MarketTables, years: int) -> List[float]:
    """
    Dépréciation annuelle : valeur de début d'année * taux de l'année.
    La valeur est reportée d'une année sur l'autre (un seul passage).
    """
    if years <= 0:
        return []
    rates = tables.depreciation[vehicle.vehicle_category]
    value = vehicle.purchase_price
    out: List[float] = []
    for t in range(1, years + 1):
        rate = depreciation_rate(rates, t)
        out.append(value * rate)
        value *= 1.0 - rate
    return out
