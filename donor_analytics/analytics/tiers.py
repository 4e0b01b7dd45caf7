"""
Giving tiers — map a gift amount to a tier label from a configurable table.
"""
from __future__ import annotations

from typing import Iterable, Optional, Union

from donor_analytics.config import GIVING_TIERS, NO_GIFT_LABEL


class TierTable:
    """Ordered (label, inclusive lower bound) entries, highest bound first."""

    def __init__(
        self,
        entries: Iterable[tuple[str, float]],
        no_gift_label: str = NO_GIFT_LABEL,
    ) -> None:
        self.entries = [(str(label), float(bound)) for label, bound in entries]
        self.no_gift_label = no_gift_label
        if not self.entries:
            raise ValueError("Tier table needs at least one entry")
        bounds = [bound for _, bound in self.entries]
        if any(b >= a for a, b in zip(bounds, bounds[1:])):
            raise ValueError(f"Tier bounds must be strictly descending: {bounds}")

    def tier_of(self, amount: Optional[float]) -> str:
        """Return the first tier whose lower bound the amount meets.

        None maps to the no-gift label. Amounts below the lowest bound fall
        into the last tier, so every number gets exactly one label.
        """
        if amount is None:
            return self.no_gift_label
        for label, bound in self.entries:
            if amount >= bound:
                return label
        return self.entries[-1][0]

    @property
    def labels(self) -> list[str]:
        return [label for label, _ in self.entries]

    def __repr__(self) -> str:
        return f"TierTable({self.entries!r}, no_gift_label={self.no_gift_label!r})"


TierSpec = Union[TierTable, Iterable[tuple[str, float]], None]

DEFAULT_TIERS = TierTable(GIVING_TIERS)


def as_tier_table(table: TierSpec) -> TierTable:
    if table is None:
        return DEFAULT_TIERS
    if isinstance(table, TierTable):
        return table
    return TierTable(table)


def tier_of(amount: Optional[float], table: TierSpec = None) -> str:
    """Tier label for one amount (None → 'No Gift')."""
    return as_tier_table(table).tier_of(amount)


def tier_labels(table: TierSpec = None, include_no_gift: bool = False) -> list[str]:
    """Tier labels highest first, optionally followed by the no-gift label."""
    t = as_tier_table(table)
    return t.labels + [t.no_gift_label] if include_no_gift else t.labels
