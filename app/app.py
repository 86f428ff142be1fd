from __future__ import annotations
# --- chemin local : `streamlit run app/app.py` sans installation du dossier app ---
import sys, os
sys.path.append(os.path.dirname(__file__))
# ---------------------------------------------------------------------------------

import streamlit as st
import pandas as pd

from tco_core.defaults import get_country_config, load_market_defaults
from tco_core.models import (
    CalculationPeriod,
    Country,
    FormData,
    FuelType,
    LeaseData,
    Location,
    PurchaseData,
    TCOResult,
    UserProfile,
    VehicleCategory,
    VehicleData,
    ensure_enum,
)
from tco_core.tco import calculate_all_ownership_types, summarize

from charts import (
    make_category_df,
    fig_bar_by_category,
    make_cum_df,
    fig_line_cumulative,
)


# ======================== Helpers / Form ========================

# Annonce d'exemple affichée par l'application
SAMPLE_VEHICLE = VehicleData(
    make="Volvo",
    model="XC60 T6 AWD Inscription",
    year=2023,
    purchase_price=649_000.0,
    fuel_type=FuelType.PETROL,
    fuel_consumption=8.2,
    estimated_annual_mileage=15_000.0,
    vehicle_category=VehicleCategory.SUV,
)

DEFAULT_LOAN_RATE = 4.5          # % annuel
LEASE_MONTHLY_SHARE = 0.008      # loyer = 0.8 % du prix par mois
DEFAULT_LEASE_TERM = 36          # mois
DEFAULT_EXCESS_FEE = 2.5         # par km


def make_form_data(
    years: int = 3,
    annual_mileage: float = 15_000.0,
    down_payment: float = 100_000.0,
    trade_in_value: float = 0.0,
    country: Country | str = Country.SWEDEN,
    age: int = 30,
    driving_experience: int = 10,
    location: Location | str = Location.SUBURBAN,
    has_garage: bool = False,
    loan_term_years: float | None = None,
    interest_rate: float | None = DEFAULT_LOAN_RATE,
    lease_monthly_payment: float | None = None,
    lease_term: int = DEFAULT_LEASE_TERM,
    lease_mileage_limit: float = 15_000.0,
    excess_mileage_fee: float = DEFAULT_EXCESS_FEE,
    vehicle: VehicleData = SAMPLE_VEHICLE,
) -> FormData:
    """Build :class:`FormData` for ``vehicle`` from the values entered in the form."""

    vehicle = VehicleData(
        make=vehicle.make,
        model=vehicle.model,
        year=vehicle.year,
        purchase_price=vehicle.purchase_price,
        fuel_type=vehicle.fuel_type,
        fuel_consumption=vehicle.fuel_consumption,
        estimated_annual_mileage=float(annual_mileage),
        vehicle_category=vehicle.vehicle_category,
    )
    if lease_monthly_payment is None:
        lease_monthly_payment = vehicle.purchase_price * LEASE_MONTHLY_SHARE

    return FormData(
        vehicle=vehicle,
        purchase=PurchaseData(
            down_payment=float(down_payment),
            trade_in_value=float(trade_in_value),
            financing_required=True,
            loan_term_years=loan_term_years if loan_term_years is not None else years,
            interest_rate=interest_rate,
        ),
        lease=LeaseData(
            monthly_payment=float(lease_monthly_payment),
            down_payment=float(down_payment),
            lease_term=int(lease_term),
            annual_mileage_limit=float(lease_mileage_limit),
            excess_mileage_fee=float(excess_mileage_fee),
        ),
        user=UserProfile(
            country=ensure_enum(Country, country),
            age=int(age),
            driving_experience=int(driving_experience),
            location=ensure_enum(Location, location),
            has_garage=bool(has_garage),
        ),
        period=CalculationPeriod(years=int(years)),
    )


def cost_per_km(res: TCOResult, form: FormData) -> float:
    total_km = form.vehicle.estimated_annual_mileage * form.period.years
    return res.total_cost / total_km if total_km > 0 else float("nan")


def check_summary(res: TCOResult, form: FormData, tol: float = 0.01):
    """
    Recalcule le récapitulatif depuis la table annuelle et le compare à celui du moteur.
    Retourne (ok, net_moteur, net_recalculé).
    """
    recomputed = summarize(res.yearly_breakdown, res.ownership_type, form.vehicle.purchase_price)
    ok = abs(recomputed.net_total_cost - res.summary.net_total_cost) <= float(tol)
    return ok, res.summary.net_total_cost, recomputed.net_total_cost


def _to_csv(df: pd.DataFrame) -> bytes:
    return df.to_csv(index=False).encode("utf-8")


# ============================ UI ============================

def main() -> None:
    st.set_page_config(page_title="Nordic car TCO", page_icon="🚗", layout="wide")
    v = SAMPLE_VEHICLE
    st.title(f"{v.make} {v.model} ({v.year})")
    st.caption(
        f"{v.purchase_price:,.0f} • {v.fuel_type.value} • {v.fuel_consumption} L/100 km • {v.vehicle_category.value}"
    )

    defaults = load_market_defaults()
    countries = [c.value for c in Country]

    st.sidebar.markdown("### Ownership")
    country = st.sidebar.selectbox("Country", countries, format_func=lambda c: defaults["countries"][c]["name"])
    years = st.sidebar.slider("Years to own", 1, 5, 3)
    annual_mileage = st.sidebar.number_input("Annual mileage (km/year)", 0, 100_000, 15_000, step=1_000)
    down_payment = st.sidebar.number_input("Down payment", 0.0, float(v.purchase_price), 100_000.0, step=5_000.0)
    trade_in_value = st.sidebar.number_input("Trade-in value", 0.0, float(v.purchase_price), 0.0, step=5_000.0)

    st.sidebar.markdown("### Driver")
    age = st.sidebar.number_input("Age", 18, 100, 30)
    driving_experience = st.sidebar.number_input("Driving experience (years)", 0, 80, 10)
    location = st.sidebar.selectbox("Location", [loc.value for loc in Location], index=1)
    has_garage = st.sidebar.checkbox("Garage", False)

    with st.sidebar.expander("Loan"):
        loan_term_years = st.number_input("Loan term (years)", 1, 10, int(years))
        interest_rate = st.number_input("Interest rate (%/year)", 0.0, 20.0, DEFAULT_LOAN_RATE, step=0.1)

    with st.sidebar.expander("Lease"):
        lease_monthly = st.number_input(
            "Monthly payment", 0.0, 100_000.0, float(round(v.purchase_price * LEASE_MONTHLY_SHARE)), step=100.0
        )
        lease_term = st.number_input("Lease term (months)", 6, 72, DEFAULT_LEASE_TERM, step=6)
        lease_limit = st.number_input("Mileage limit (km/year)", 0, 100_000, 15_000, step=1_000)
        excess_fee = st.number_input("Excess mileage fee (per km)", 0.0, 20.0, DEFAULT_EXCESS_FEE, step=0.5)

    form = make_form_data(
        years=years,
        annual_mileage=annual_mileage,
        down_payment=down_payment,
        trade_in_value=trade_in_value,
        country=country,
        age=age,
        driving_experience=driving_experience,
        location=location,
        has_garage=has_garage,
        loan_term_years=loan_term_years,
        interest_rate=interest_rate,
        lease_monthly_payment=lease_monthly,
        lease_term=lease_term,
        lease_mileage_limit=lease_limit,
        excess_mileage_fee=excess_fee,
    )
    country_config = get_country_config(country, defaults)

    # ============================ Calcul ============================

    results = calculate_all_ownership_types(form, country_config)

    # ======================== Récapitulatif ========================

    st.markdown("## Results")
    recap = []
    for ownership, r in results.items():
        recap.append({
            "Ownership": ownership.value,
            "Net total cost": f"{r.total_cost:,.0f}",
            "Monthly average": f"{r.total_cost / (years * 12):,.0f}",
            "Cost per km": f"{cost_per_km(r, form):.2f}",
            "End-of-term value": f"{r.summary.end_of_term_value:,.0f}",
        })
    st.dataframe(pd.DataFrame(recap), width="stretch")

    # ======================= Visualisations ========================

    df_cat = make_category_df(results)
    st.plotly_chart(fig_bar_by_category(df_cat), width="stretch")
    st.plotly_chart(fig_line_cumulative(make_cum_df(results)), width="stretch")

    for ownership, r in results.items():
        ok, net, recomputed = check_summary(r, form)
        msg = f"{ownership.value}: engine={net:,.0f} vs recomputed={recomputed:,.0f}"
        (st.success if ok else st.error)(("OK: " if ok else "Mismatch: ") + msg)

    # ============================ Export ============================

    st.subheader("Annual tables")
    tabs = st.tabs([o.value.title() for o in results])
    for tab, (ownership, r) in zip(tabs, results.items()):
        with tab:
            table = r.annual_table
            st.dataframe(table, width="stretch")
            st.download_button(
                f"⬇️ {ownership.value} (CSV)",
                data=_to_csv(table),
                file_name=f"{ownership.value}_annual.csv",
                mime="text/csv",
            )
    st.download_button("⬇️ Categories (CSV)", data=_to_csv(df_cat), file_name="categories.csv", mime="text/csv")


if __name__ == "__main__":
    main()
