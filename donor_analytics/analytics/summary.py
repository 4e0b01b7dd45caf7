"""
Summary analytics — per-year totals, tier mix, donor retention, flag counts, lookups.
"""
from __future__ import annotations

from typing import Optional

import pandas as pd

from donor_analytics.config import CHRONOLOGICAL_YEARS, FLAG_FIELDS, MID_RANGE_THRESHOLD
from donor_analytics.data.store import DonorStore
from donor_analytics.analytics.common import pct_change, safe_divide
from donor_analytics.analytics.tiers import TierSpec, as_tier_table


def tier_distribution(store: DonorStore, year: str, table: TierSpec = None) -> dict[str, int]:
    """Donors per tier for one year, highest tier first, then the no-gift count."""
    tiers = as_tier_table(table)
    counts = {label: 0 for label in tiers.labels + [tiers.no_gift_label]}
    for record in store:
        counts[tiers.tier_of(record.amount(year))] += 1
    return counts


def yearly_summary(
    store: DonorStore,
    years: list[str] | None = None,
    table: TierSpec = None,
) -> list[dict]:
    """Giving totals, tier counts and donors gained/lost for each year, oldest first.

    A donor is active in a year when that year's amount is not null. Gained
    and lost compare active sets with the previous year; the first year has 0.
    """
    years = years or CHRONOLOGICAL_YEARS
    tiers = as_tier_table(table)
    df = store.to_frame()

    results = []
    prev_active: Optional[set] = None
    for year in years:
        active_mask = df[year].notna()
        active = set(df.loc[active_mask, "van_id"])
        amounts = df.loc[active_mask, year]

        tier_counts = {label: 0 for label in tiers.labels}
        for label, count in amounts.map(tiers.tier_of).value_counts().items():
            tier_counts[label] = int(count)

        entry = {
            "year": year,
            "donors": len(active),
            "total_giving": float(amounts.sum()),
            "average_gift": safe_divide(float(amounts.sum()), len(amounts)),
            "tiers": tier_counts,
            "donors_gained": 0,
            "donors_lost": 0,
        }
        if prev_active is not None:
            entry["donors_gained"] = len(active - prev_active)
            entry["donors_lost"] = len(prev_active - active)
        results.append(entry)
        prev_active = active

    return results


def year_over_year(store: DonorStore, year: str, previous: str) -> dict:
    """Total giving in two years and the percentage change (None when previous is 0)."""
    df = store.to_frame()
    current_total = float(df[year].sum())
    previous_total = float(df[previous].sum())
    change = pct_change(current_total, previous_total)
    return {
        "year": year,
        "previous_year": previous,
        "total": current_total,
        "previous_total": previous_total,
        "change_pct": round(change, 1) if change is not None else None,
    }


def flag_counts(store: DonorStore) -> dict[str, int]:
    df = store.to_frame()
    return {flag: int(df[flag].sum()) for flag in FLAG_FIELDS}


# ---------------------------------------------------------------------------
# Donor lookups
# ---------------------------------------------------------------------------

def donors_by_tier(store: DonorStore, year: str, tier: str, table: TierSpec = None) -> list[str]:
    tiers = as_tier_table(table)
    return [r.identifier for r in store if tiers.tier_of(r.amount(year)) == tier]


def donors_by_amount(store: DonorStore, year: str, min_amount: float) -> list[str]:
    """Donors who gave at least min_amount in year (no gift counts as 0)."""
    return [r.identifier for r in store if (r.amount(year) or 0) >= min_amount]


def mid_range_over(
    store: DonorStore,
    year: str = CHRONOLOGICAL_YEARS[-1],
    threshold: float = MID_RANGE_THRESHOLD,
) -> list[str]:
    """Mid-range flagged donors whose gift in year is strictly above threshold."""
    return [
        r.identifier for r in store
        if r.flags.get("is_mid_range") and (r.amount(year) or 0) > threshold
    ]


def top_donors(
    store: DonorStore,
    year: str,
    n: int = 10,
    identifiers: set[str] | None = None,
) -> list[dict]:
    """Top n donors by gift in year, optionally limited to a set of identifiers."""
    df = store.to_frame()
    if identifiers is not None:
        df = df[df["van_id"].isin(identifiers)]
    top = df.dropna(subset=[year]).nlargest(n, year)
    return [
        {"rank": rank, "van_id": row["van_id"], "amount": float(row[year])}
        for rank, (_, row) in enumerate(top.iterrows(), 1)
    ]


def donor_table(store: DonorStore) -> pd.DataFrame:
    """Donor frame sorted by identifier, for tabular reports."""
    return store.to_frame().sort_values("van_id").reset_index(drop=True)
