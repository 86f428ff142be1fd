from __future__ import annotations
from typing import Dict
import pandas as pd
import plotly.express as px

from tco_core.models import OwnershipType, TCOResult


CATEGORY_LABELS = {
    "initial_costs": "Initial costs",
    "total_monthly_payments": "Payments",
    "total_operating_costs": "Operating",
    "total_maintenance_costs": "Maintenance",
    "total_insurance_costs": "Insurance",
    "total_depreciation_costs": "Depreciation",
}


def make_category_df(results: Dict[OwnershipType, TCOResult]) -> pd.DataFrame:
    """
    Long table, one row per (ownership model, cost category), plus a negative
    "End-of-term value" row so that the stacked total per model equals the
    net total cost.
    """
    rows = []
    for ownership, res in results.items():
        for attr, label in CATEGORY_LABELS.items():
            rows.append({"Ownership": ownership.value, "Category": label, "Amount": getattr(res.summary, attr)})
        rows.append({
            "Ownership": ownership.value,
            "Category": "End-of-term value",
            "Amount": -res.summary.end_of_term_value,
        })
    return pd.DataFrame(rows)


def fig_bar_by_category(df_cat: pd.DataFrame):
    fig = px.bar(
        df_cat,
        x="Ownership",
        y="Amount",
        color="Category",
        barmode="relative",
        text_auto=".0f",
        title="Total cost of ownership by category",
    )
    fig.update_layout(
        plot_bgcolor="white",
        xaxis=dict(showgrid=False),
        yaxis=dict(showgrid=False, title="Amount"),
        title=dict(x=0, xanchor="left", font=dict(size=20)),
        bargap=0.3,
        legend=dict(orientation="h", x=0, y=1.1),
    )
    totals = df_cat.groupby("Ownership", as_index=False)["Amount"].sum()
    for _, row in totals.iterrows():
        fig.add_annotation(
            x=row["Ownership"],
            y=row["Amount"],
            text=f"{row['Amount']:,.0f}",
            showarrow=False,
            font=dict(size=14, color="black"),
            yshift=10,
        )
    return fig


def make_cum_df(results: Dict[OwnershipType, TCOResult]) -> pd.DataFrame:
    """Assemble the cumulative-cost curve table for all ownership models."""
    parts = []
    for ownership, res in results.items():
        d = res.annual_table[["Year", "Cumulative cost"]].copy()
        d["Ownership"] = ownership.value
        parts.append(d)
    return pd.concat(parts, ignore_index=True)


def fig_line_cumulative(cum_df: pd.DataFrame):
    fig = px.line(
        cum_df,
        x="Year",
        y="Cumulative cost",
        color="Ownership",
        title="Cumulative cost (before end-of-term value)",
        markers=True,
    )
    fig.update_layout(
        legend=dict(orientation="h", y=-0.2, x=0.5, xanchor="center"),
        title=dict(x=0, xanchor="left", font=dict(size=15)),
        plot_bgcolor="white",
        yaxis=dict(gridcolor="lightgrey", title="Cumulative cost", rangemode="tozero"),
        xaxis=dict(gridcolor="lightgrey", dtick=1),
    )
    return fig
