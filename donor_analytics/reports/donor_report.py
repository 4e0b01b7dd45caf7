"""
Donor Giving Report — reconciled donor base, yearly trend, tiers, trajectories.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd

from donor_analytics.config import (
    CHRONOLOGICAL_YEARS, FISCAL_YEARS, FLAG_FIELDS, RANK_TIERS, TRANSITION_YEARS,
)
from donor_analytics.data.schemas import ReconcileReport
from donor_analytics.data.store import DonorStore
from donor_analytics.analytics.common import sanitize_for_json
from donor_analytics.analytics.summary import (
    donor_table, flag_counts, mid_range_over, tier_distribution, top_donors,
    year_over_year, yearly_summary,
)
from donor_analytics.analytics.tiers import TierSpec, as_tier_table
from donor_analytics.analytics.trends import (
    classify_history, classify_patterns, tier_transitions, trend_counts, year_pair_counts,
)
from donor_analytics.excel.writer import ExcelWriter


TREND_LEGEND = [
    ("increasing", "Last recorded gift at least 10% above the first"),
    ("decreasing", "Last recorded gift at least 10% below the first"),
    ("consistent", "First and last recorded gifts within 10% of each other"),
    ("fluctuating", "Gifts moved both up and down across the years"),
    ("insufficientData", "Fewer than two recorded gifts"),
]

YEAR_COLS = [(year, "currency", year) for year in FISCAL_YEARS]

DONOR_COLS = [
    ("van_id", "text", "VAN ID"),
    ("trend", "text", "Trend"),
    ("pattern", "text", "Giving Pattern"),
    ("tier", "text", "Current Tier"),
    *YEAR_COLS,
    ("is_mid_range", "text", "Mid-Range"),
    ("is_major_donor_prospect", "text", "Major Prospect"),
]


def _transition_rows(transitions: dict[tuple[str, str], int]) -> list[dict]:
    rows = [{"from": f, "to": t, "count": c} for (f, t), c in transitions.items()]
    return sorted(rows, key=lambda r: r["count"], reverse=True)


def generate_json(
    store: DonorStore,
    reconcile_report: ReconcileReport | None = None,
    detect_fluctuation: bool = True,
    table: TierSpec = None,
) -> dict:
    tiers = as_tier_table(table)
    latest, previous = CHRONOLOGICAL_YEARS[-1], CHRONOLOGICAL_YEARS[-2]
    from_year, to_year = TRANSITION_YEARS

    history = classify_history(store, detect_fluctuation=detect_fluctuation)
    patterns = classify_patterns(store)

    donors = donor_table(store)
    donors["trend"] = donors["van_id"].map(lambda i: history[i].value)
    donors["pattern"] = donors["van_id"].map(lambda i: patterns[i].value)
    donors["tier"] = donors[latest].map(lambda a: tiers.tier_of(None if pd.isna(a) else a))

    increasing = {i for i, t in history.items() if t.value == "increasing"}
    decreasing = {i for i, t in history.items() if t.value == "decreasing"}
    flags = flag_counts(store)

    sources = []
    if reconcile_report is not None:
        sources = [
            {
                "source": s.name,
                "rows_read": s.rows_read,
                "rows_applied": s.rows_applied,
                "rows_skipped": s.rows_skipped,
                "status": "ok" if s.succeeded else f"skipped: {s.error}",
            }
            for s in reconcile_report.sources
        ]

    return sanitize_for_json({
        "summary": {
            "total_donors": len(store),
            "latest_year": latest,
            "latest_total": year_over_year(store, latest, previous)["total"],
            "year_over_year": year_over_year(store, latest, previous),
            "mid_range_donors": flags.get("is_mid_range", 0),
            "major_donor_prospects": flags.get("is_major_donor_prospect", 0),
            "partial_coverage": bool(reconcile_report and reconcile_report.partial),
        },
        "sources": sources,
        "yearly": yearly_summary(store, table=tiers),
        "tier_distribution": tier_distribution(store, latest, tiers),
        "trend_counts": trend_counts(history),
        "pattern_counts": trend_counts(patterns),
        "year_pair_counts": year_pair_counts(store, previous, latest),
        "tier_transitions": _transition_rows(tier_transitions(store, from_year, to_year, tiers)),
        "rank_transitions": {
            "increasing": _transition_rows(tier_transitions(
                store, from_year, to_year, RANK_TIERS, skip_missing=True, only=increasing)),
            "decreasing": _transition_rows(tier_transitions(
                store, from_year, to_year, RANK_TIERS, skip_missing=True, only=decreasing)),
        },
        "mid_range_over_threshold": mid_range_over(store, latest),
        "top_donors": top_donors(store, latest, 25),
        "donors": donors.to_dict("records"),
    })


def generate_excel(
    store: DonorStore,
    output_path: str | Path,
    reconcile_report: ReconcileReport | None = None,
    detect_fluctuation: bool = True,
    table: TierSpec = None,
) -> Path:
    data = generate_json(store, reconcile_report, detect_fluctuation, table)
    ew = ExcelWriter()
    s = data["summary"]
    yoy = s["year_over_year"]

    # Summary
    ws = ew.add_sheet("Summary")
    ew.write_title(ws, "DONOR GIVING REPORT",
                   f"{s['total_donors']:,} donors  |  {CHRONOLOGICAL_YEARS[0]}-{s['latest_year']}"
                   f"  |  Generated {pd.Timestamp.now():%B %d, %Y}")
    if s["partial_coverage"]:
        ew.write_warning(ws, 3, "PARTIAL COVERAGE: one or more sources were skipped")

    row = ew.write_section(ws, 5, "DONOR BASE")
    row = ew.write_kpi_row(ws, row, [
        (s["total_donors"], "DONORS", "number"),
        (s["latest_total"], f"{s['latest_year']} GIVING", "currency"),
        (s["mid_range_donors"], "MID-RANGE", "number"),
        (s["major_donor_prospects"], "MAJOR PROSPECTS", "number"),
    ])
    ew.write_delta_kpi(ws, row, 1, yoy["change_pct"], f"CHANGE VS {yoy['previous_year']}")
    row += 3

    if data["sources"]:
        row = ew.write_section(ws, row, "SOURCE COVERAGE")
        row = ew.write_table(ws, row, [
            ("source", "text", "Source"),
            ("rows_read", "number", "Rows"),
            ("rows_applied", "number", "Applied"),
            ("rows_skipped", "number", "No VAN ID"),
            ("status", "text", "Status"),
        ], data["sources"], freeze=False)

    # Yearly trend
    ws2 = ew.add_sheet("Yearly Trend")
    yearly_rows = [
        {**{k: v for k, v in y.items() if k != "tiers"}, **y["tiers"]} for y in data["yearly"]
    ]
    tier_cols = [(label, "number", label) for label in as_tier_table(table).labels]
    ew.write_table(ws2, 1, [
        ("year", "text", "Fiscal Year"),
        ("donors", "number", "Donors"),
        ("total_giving", "currency", "Total Giving"),
        ("average_gift", "currency", "Average Gift"),
        *tier_cols,
        ("donors_gained", "number", "Gained"),
        ("donors_lost", "number", "Lost"),
    ], yearly_rows)

    # Tiers
    ws3 = ew.add_sheet("Tiers")
    row = ew.write_section(ws3, 1, f"Tier Distribution {s['latest_year']}")
    row = ew.write_table(ws3, row, [
        ("tier", "text", "Tier"),
        ("donors", "number", "Donors"),
    ], [{"tier": k, "donors": v} for k, v in data["tier_distribution"].items()],
        show_total=True, freeze=False)
    row = ew.write_section(ws3, row + 1, f"Tier Movement {TRANSITION_YEARS[0]} to {TRANSITION_YEARS[1]}")
    ew.write_table(ws3, row, [
        ("from", "text", "From"),
        ("to", "text", "To"),
        ("count", "number", "Donors"),
    ], data["tier_transitions"], freeze=False)

    # Trends
    ws4 = ew.add_sheet("Trends")
    row = ew.write_section(ws4, 1, "WHOLE-HISTORY TREND")
    row = ew.write_table(ws4, row, [
        ("trend", "text", "Trend"),
        ("donors", "number", "Donors"),
    ], [{"trend": k, "donors": v} for k, v in data["trend_counts"].items()],
        trend_key="trend", freeze=False)
    row = ew.write_section(ws4, row + 1, f"{CHRONOLOGICAL_YEARS[-2]} to {s['latest_year']}")
    row = ew.write_table(ws4, row, [
        ("movement", "text", "Movement"),
        ("donors", "number", "Donors"),
    ], [{"movement": k, "donors": v} for k, v in data["year_pair_counts"].items()],
        trend_key="movement", freeze=False)
    ew.write_legend(ws4, row + 1, TREND_LEGEND)

    # Donors
    ws5 = ew.add_sheet("Donors")
    ew.write_table(ws5, 1, DONOR_COLS, data["donors"], trend_key="trend")

    return ew.save(output_path)
