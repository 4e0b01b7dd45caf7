#!/usr/bin/env python3
"""
Donor Analytics CLI — reconcile fiscal-year extracts and produce giving reports.

USAGE:
  python -m donor_analytics.cli reconcile                       # Configured sources from the inbox
  python -m donor_analytics.cli reconcile FY22.xlsx FY23.csv    # Explicit files, merged in order
  python -m donor_analytics.cli trends --fluctuation            # Trend counts + tier movement
  python -m donor_analytics.cli report                          # Excel report to the reports folder
  python -m donor_analytics.cli report --output giving.xlsx
  python -m donor_analytics.cli export --output giving.json     # JSON report
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from donor_analytics.config import INBOX_FOLDER, REPORTS_FOLDER, RANK_TIERS, TRANSITION_YEARS
from donor_analytics.data.loader import discover_sources, load_sources
from donor_analytics.data.reconcile import reconcile_with_report
from donor_analytics.data.schemas import NoDataReconciledError


def _banner(title: str) -> None:
    print("\n" + "=" * 70)
    print(f"  DONOR ANALYTICS — {title}")
    print("=" * 70)


def _load(args):
    """Resolve source paths, load and reconcile them. Returns (store, report)."""
    if args.files:
        paths = [Path(f) for f in args.files]
    else:
        paths = discover_sources(Path(args.inbox), [] if args.all else None)

    print(f"  Sources ({len(paths)}):")
    for p in paths:
        print(f"    - {p.name}")

    store, report = reconcile_with_report(load_sources(paths))

    print()
    for s in report.sources:
        if s.succeeded:
            print(f"   {s.name}: {s.rows_read:,} rows, {s.rows_applied:,} applied, {s.rows_skipped:,} without VAN ID")
        else:
            print(f"   {s.name}: SKIPPED — {s.error}")
    if report.partial:
        print(f"\n  WARNING: {len(report.failed)} of {len(report.sources)} sources skipped (partial coverage)")
    print(f"\n  {len(store):,} donors reconciled")
    return store, report


def cmd_reconcile(args):
    """Reconcile sources and print coverage + yearly totals."""
    from donor_analytics.analytics.summary import yearly_summary, flag_counts

    _banner("RECONCILE")
    store, _ = _load(args)

    print(f"\n  {'Year':<8}{'Donors':>10}{'Total':>16}{'Gained':>10}{'Lost':>8}")
    for y in yearly_summary(store):
        print(f"  {y['year']:<8}{y['donors']:>10,}{y['total_giving']:>16,.2f}"
              f"{y['donors_gained']:>10,}{y['donors_lost']:>8,}")
    flags = flag_counts(store)
    print(f"\n  Mid-range: {flags['is_mid_range']:,}  |  Major prospects: {flags['is_major_donor_prospect']:,}")
    print("=" * 70 + "\n")


def cmd_trends(args):
    """Print whole-history trend counts and tier movement."""
    from donor_analytics.analytics.trends import classify_history, tier_transitions, trend_counts

    _banner("TRENDS")
    store, _ = _load(args)

    history = classify_history(store, detect_fluctuation=args.fluctuation)
    print("\n  TREND")
    for tag, count in trend_counts(history).items():
        print(f"    {tag:<20}{count:>8,}")

    table = RANK_TIERS if args.rank_tiers else None
    transitions = tier_transitions(store, *TRANSITION_YEARS, table=table, skip_missing=args.rank_tiers)
    print(f"\n  TIER MOVEMENT {TRANSITION_YEARS[0]} → {TRANSITION_YEARS[1]}")
    if not transitions:
        print("    (none)")
    for (src, dst), count in sorted(transitions.items(), key=lambda kv: kv[1], reverse=True):
        print(f"    {src:>12} → {dst:<12}{count:>8,}")
    print("=" * 70 + "\n")


def cmd_report(args):
    """Write the Excel giving report."""
    from donor_analytics.reports.donor_report import generate_excel

    _banner("GIVING REPORT")
    print(f"  Started: {datetime.now():%Y-%m-%d %H:%M:%S}")
    store, report = _load(args)

    out = Path(args.output) if args.output else REPORTS_FOLDER / f"Donor_Giving_Report_{datetime.now():%Y%m%d_%H%M%S}.xlsx"
    generate_excel(store, out, report, detect_fluctuation=not args.no_fluctuation)
    print(f"\n  Report saved to: {out}")
    print("=" * 70 + "\n")


def cmd_export(args):
    """Write the giving report as JSON."""
    from donor_analytics.reports.donor_report import generate_json

    _banner("JSON EXPORT")
    store, report = _load(args)

    out = Path(args.output) if args.output else REPORTS_FOLDER / "donor_giving.json"
    out.parent.mkdir(parents=True, exist_ok=True)
    data = generate_json(store, report, detect_fluctuation=not args.no_fluctuation)
    with open(out, "w") as f:
        json.dump(data, f, separators=(",", ":"), default=str)
    print(f"\n  Export saved to: {out}")
    print("=" * 70 + "\n")


def _add_source_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("files", nargs="*", help="Source files, merged in the order given")
    p.add_argument("--inbox", default=str(INBOX_FOLDER), help="Folder holding the configured sources")
    p.add_argument("--all", action="store_true", help="Use every .xlsx/.csv in the inbox, sorted by name")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Donor Analytics — fiscal-year donor reconciliation and trend reporting",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    rec = subparsers.add_parser("reconcile", help="Reconcile sources and show coverage")
    _add_source_args(rec)
    rec.set_defaults(func=cmd_reconcile)

    trends = subparsers.add_parser("trends", help="Trend counts and tier movement")
    _add_source_args(trends)
    trends.add_argument("--fluctuation", action="store_true", help="Tag mixed up/down histories as fluctuating")
    trends.add_argument("--rank-tiers", action="store_true", help="Use Tier 1-4 ranking; skip donors missing a year")
    trends.set_defaults(func=cmd_trends)

    rep = subparsers.add_parser("report", help="Generate Excel report")
    _add_source_args(rep)
    rep.add_argument("--output", help="Output .xlsx path")
    rep.add_argument("--no-fluctuation", action="store_true", help="Endpoint-only trend classification")
    rep.set_defaults(func=cmd_report)

    exp = subparsers.add_parser("export", help="Export JSON report")
    _add_source_args(exp)
    exp.add_argument("--output", help="Output .json path")
    exp.add_argument("--no-fluctuation", action="store_true", help="Endpoint-only trend classification")
    exp.set_defaults(func=cmd_export)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        args.func(args)
    except NoDataReconciledError as exc:
        print(f"\n  ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
