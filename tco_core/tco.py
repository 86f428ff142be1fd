from __future__ import annotations
import logging
from typing import Dict, List, Optional, Sequence

from .cashflows import (
    annual_operating_cost,
    annual_payments,
    depreciation_series,
    initial_costs,
)
from .defaults import MarketTables, default_market_tables
from .insurance import annual_insurance_cost
from .maintenance import annual_maintenance_cost
from .models import (
    CalculationInput,
    CostSummary,
    CountryConfig,
    FormData,
    OwnershipType,
    TCOResult,
    YearlyBreakdown,
    current_year,
    ensure_enum,
)

logger = logging.getLogger(__name__)

OWNERSHIP_TYPES = (OwnershipType.PURCHASE, OwnershipType.FINANCE, OwnershipType.LEASE)


def summarize(
    breakdown: Sequence[YearlyBreakdown],
    ownership_type: OwnershipType,
    purchase_price: float,
) -> CostSummary:
    """Aggregate a yearly breakdown into a :class:`CostSummary`.

    Initial costs are taken from year 1 only; the end-of-term value is the
    purchase price minus accumulated depreciation for owned vehicles and 0
    for a lease.
    """
    initial = breakdown[0].initial_costs if breakdown else 0.0
    payments = sum(y.monthly_payments for y in breakdown)
    operating = sum(y.operating_costs for y in breakdown)
    maintenance = sum(y.maintenance_costs for y in breakdown)
    insurance = sum(y.insurance_costs for y in breakdown)
    depreciation = sum(y.depreciation_costs for y in breakdown)

    if ownership_type == OwnershipType.LEASE:
        end_value = 0.0
    else:
        end_value = purchase_price - depreciation

    net = initial + payments + operating + maintenance + insurance + depreciation - end_value

    return CostSummary(
        initial_costs=initial,
        total_monthly_payments=payments,
        total_operating_costs=operating,
        total_maintenance_costs=maintenance,
        total_insurance_costs=insurance,
        total_depreciation_costs=depreciation,
        end_of_term_value=end_value,
        net_total_cost=net,
    )


def calculate_tco(calc_input: CalculationInput, tables: Optional[MarketTables] = None) -> TCOResult:
    tables = tables or default_market_tables()
    ownership = ensure_enum(OwnershipType, calc_input.ownership_type)
    form = calc_input.form_data
    country = calc_input.country_config
    vehicle, user = form.vehicle, form.user
    years = form.period.years

    # Postes indépendants de l'année
    operating = annual_operating_cost(vehicle, country)
    if ownership == OwnershipType.LEASE:
        depreciation = [0.0] * max(years, 0)
    else:
        depreciation = depreciation_series(vehicle, tables, years)

    rows: List[YearlyBreakdown] = []
    cumulative = 0.0

    for t in range(1, years + 1):
        initial = initial_costs(ownership, form, country, tables) if t == 1 else 0.0
        payments = annual_payments(t, ownership, form)
        maintenance = annual_maintenance_cost(t, vehicle, user, tables, calc_input.reference_year)
        insurance = annual_insurance_cost(t, vehicle, user, country, tables)
        dep = depreciation[t - 1]

        total = initial + payments + operating + maintenance + insurance + dep
        cumulative += total

        rows.append(YearlyBreakdown(
            year=t,
            initial_costs=initial,
            monthly_payments=payments,
            operating_costs=operating,
            maintenance_costs=maintenance,
            insurance_costs=insurance,
            depreciation_costs=dep,
            total_year_cost=total,
            cumulative_cost=cumulative,
        ))

    summary = summarize(rows, ownership, vehicle.purchase_price)
    logger.debug("TCO %s over %d years: net total %.2f", ownership.value, years, summary.net_total_cost)

    return TCOResult(
        ownership_type=ownership,
        total_cost=summary.net_total_cost,
        yearly_breakdown=tuple(rows),
        summary=summary,
    )


def calculate_all_ownership_types(
    form_data: FormData,
    country_config: CountryConfig,
    reference_year: Optional[int] = None,
    tables: Optional[MarketTables] = None,
) -> Dict[OwnershipType, TCOResult]:
    """Run :func:`calculate_tco` once per ownership model, sharing the same inputs."""
    year = reference_year if reference_year is not None else current_year()
    tables = tables or default_market_tables()
    return {
        ownership: calculate_tco(
            CalculationInput(
                form_data=form_data,
                ownership_type=ownership,
                country_config=country_config,
                reference_year=year,
            ),
            tables,
        )
        for ownership in OWNERSHIP_TYPES
    }
