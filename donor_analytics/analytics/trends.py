"""
Trend analytics — whole-history trend, year-pair movement, giving pattern, tier transitions.

Classifiers take one donor's amounts at a time (oldest → newest, None for
missing years); the store-level helpers below just map them over every donor.
"""
from __future__ import annotations

from collections import Counter
from typing import Optional, Sequence

from donor_analytics.config import (
    CHRONOLOGICAL_YEARS,
    CONSISTENT_THRESHOLD_PCT,
    PATTERN_BAND,
    TRANSITION_YEARS,
)
from donor_analytics.data.schemas import DonorRecord, HistoryTrend, YearPairTrend
from donor_analytics.data.store import DonorStore
from donor_analytics.analytics.common import is_non_decreasing, is_non_increasing, recorded
from donor_analytics.analytics.tiers import TierSpec, as_tier_table


# ---------------------------------------------------------------------------
# Per-donor classifiers
# ---------------------------------------------------------------------------

def history_trend(
    amounts: Sequence[Optional[float]],
    detect_fluctuation: bool = False,
    threshold_pct: float = CONSISTENT_THRESHOLD_PCT,
) -> HistoryTrend:
    """Classify a donor's whole history from first to last recorded gift."""
    values = recorded(amounts)
    if len(values) < 2:
        return HistoryTrend.INSUFFICIENT_DATA

    if detect_fluctuation and not (is_non_decreasing(values) or is_non_increasing(values)):
        return HistoryTrend.FLUCTUATING

    first, last = values[0], values[-1]
    if first == 0:
        return HistoryTrend.INCREASING if last > 0 else HistoryTrend.INSUFFICIENT_DATA

    pct = (last - first) / first * 100
    if abs(pct) < threshold_pct:
        return HistoryTrend.CONSISTENT
    if pct > 0:
        return HistoryTrend.INCREASING
    return HistoryTrend.DECREASING


def year_pair_trend(previous: Optional[float], current: Optional[float]) -> Optional[YearPairTrend]:
    """Classify movement between two adjacent years; None when nothing changed."""
    prev = previous or 0
    cur = current or 0
    if prev > 0 and cur == 0:
        return YearPairTrend.STOPPED
    if prev == 0 and cur > 0:
        return YearPairTrend.NEW
    if cur > prev and prev > 0:
        return YearPairTrend.INCREASING
    if cur < prev and cur > 0:
        return YearPairTrend.DECREASING
    return None


def giving_pattern(amounts: Sequence[Optional[float]], band: float = PATTERN_BAND) -> HistoryTrend:
    """Shape of every positive gift: steady around the mean, monotone, or mixed."""
    gifts = [a for a in recorded(amounts) if a > 0]
    if len(gifts) < 2:
        return HistoryTrend.INSUFFICIENT_DATA

    mean = sum(gifts) / len(gifts)
    if all(abs(g - mean) / mean <= band for g in gifts):
        return HistoryTrend.CONSISTENT
    if is_non_decreasing(gifts):
        return HistoryTrend.INCREASING
    if is_non_increasing(gifts):
        return HistoryTrend.DECREASING
    return HistoryTrend.FLUCTUATING


def classify_year_pairs(
    record: DonorRecord,
    years: Sequence[str] = CHRONOLOGICAL_YEARS,
) -> dict[tuple[str, str], YearPairTrend]:
    """Tag each adjacent (previous, current) year pair; untagged pairs are omitted."""
    tags = {}
    for previous, current in zip(years, years[1:]):
        tag = year_pair_trend(record.amount(previous), record.amount(current))
        if tag is not None:
            tags[(previous, current)] = tag
    return tags


# ---------------------------------------------------------------------------
# Store-level aggregation
# ---------------------------------------------------------------------------

def classify_history(
    store: DonorStore,
    years: Sequence[str] = CHRONOLOGICAL_YEARS,
    detect_fluctuation: bool = False,
    threshold_pct: float = CONSISTENT_THRESHOLD_PCT,
) -> dict[str, HistoryTrend]:
    return {
        record.identifier: history_trend(
            record.chronological_amounts(list(years)), detect_fluctuation, threshold_pct
        )
        for record in store
    }


def classify_patterns(
    store: DonorStore,
    years: Sequence[str] = CHRONOLOGICAL_YEARS,
    band: float = PATTERN_BAND,
) -> dict[str, HistoryTrend]:
    return {
        record.identifier: giving_pattern(record.chronological_amounts(list(years)), band)
        for record in store
    }


def trend_counts(tags: dict[str, HistoryTrend]) -> dict[str, int]:
    """Donors per trend tag, every tag present (zero when unseen)."""
    counts = Counter(tag.value for tag in tags.values())
    return {tag.value: counts.get(tag.value, 0) for tag in HistoryTrend}


def year_pair_counts(store: DonorStore, previous: str, current: str) -> dict[str, int]:
    """Donors per year-pair tag between two fiscal years; untagged donors are not counted."""
    counts = {tag.value: 0 for tag in YearPairTrend}
    for record in store:
        tag = year_pair_trend(record.amount(previous), record.amount(current))
        if tag is not None:
            counts[tag.value] += 1
    return counts


def tier_transitions(
    store: DonorStore,
    from_year: str = TRANSITION_YEARS[0],
    to_year: str = TRANSITION_YEARS[1],
    table: TierSpec = None,
    skip_missing: bool = False,
    only: Optional[set[str]] = None,
) -> dict[tuple[str, str], int]:
    """Count donors whose tier differs between two reference years.

    Keys are (from_tier, to_tier); transitions never observed are absent.
    With skip_missing, donors lacking a gift in either year are ignored
    instead of moving to or from the no-gift tier. `only` restricts the
    count to a subset of identifiers (e.g. every increasing donor).
    """
    tiers = as_tier_table(table)
    counts: dict[tuple[str, str], int] = {}
    for record in store:
        if only is not None and record.identifier not in only:
            continue
        before, after = record.amount(from_year), record.amount(to_year)
        if skip_missing and (before is None or after is None):
            continue
        from_tier, to_tier = tiers.tier_of(before), tiers.tier_of(after)
        if from_tier != to_tier:
            key = (from_tier, to_tier)
            counts[key] = counts.get(key, 0) + 1
    return counts
