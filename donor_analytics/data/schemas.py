"""
Donor record, source extract, and classification schemas.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional

from donor_analytics.config import FISCAL_YEARS, FLAG_FIELDS, CHRONOLOGICAL_YEARS


RawSourceRow = dict[str, Any]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ReconciliationError(Exception):
    """Base error for the reconciliation engine."""


class MissingColumnError(ReconciliationError):
    """A source lacks a required column (the donor identifier)."""

    def __init__(self, field_name: str, source: str | None = None) -> None:
        self.field_name = field_name
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"Missing required column '{field_name}'{where}")


class EmptySourceError(ReconciliationError):
    """A source has no rows."""


class NoDataReconciledError(ReconciliationError):
    """No donor could be reconciled from any source."""


class StoreFrozenError(ReconciliationError):
    """Write attempted on a store after reconciliation completed."""


# ---------------------------------------------------------------------------
# Trend vocabularies
# ---------------------------------------------------------------------------

class HistoryTrend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    CONSISTENT = "consistent"
    FLUCTUATING = "fluctuating"
    INSUFFICIENT_DATA = "insufficientData"


class YearPairTrend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STOPPED = "stopped"
    NEW = "new"


# ---------------------------------------------------------------------------
# Donor record
# ---------------------------------------------------------------------------

def _empty_years() -> dict[str, Optional[float]]:
    return {year: None for year in FISCAL_YEARS}


def _empty_flags() -> dict[str, bool]:
    return {flag: False for flag in FLAG_FIELDS}


@dataclass
class DonorRecord:
    """Canonical per-donor record: one amount per fiscal year plus sticky flags."""
    identifier: str
    fiscal_years: dict[str, Optional[float]] = field(default_factory=_empty_years)
    flags: dict[str, bool] = field(default_factory=_empty_flags)
    _locked: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.identifier:
            raise ValueError("DonorRecord identifier must be non-empty")
        for year, amount in self.fiscal_years.items():
            if year not in FISCAL_YEARS:
                raise ValueError(f"Unknown fiscal year: {year}")
            if amount is not None and amount < 0:
                raise ValueError(f"Negative amount for {self.identifier} {year}: {amount}")
        for year in FISCAL_YEARS:
            self.fiscal_years.setdefault(year, None)
        for flag in FLAG_FIELDS:
            self.flags.setdefault(flag, False)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_locked", False):
            raise StoreFrozenError(f"Donor record '{self.identifier}' is read-only")
        super().__setattr__(name, value)

    def lock(self) -> None:
        """Make the record read-only; amounts and flags become read-only mappings."""
        if self._locked:
            return
        self.fiscal_years = MappingProxyType(dict(self.fiscal_years))
        self.flags = MappingProxyType(dict(self.flags))
        self._locked = True

    def copy(self) -> "DonorRecord":
        """Writable copy, even of a locked record."""
        return DonorRecord(self.identifier, dict(self.fiscal_years), dict(self.flags))

    def amount(self, year: str) -> Optional[float]:
        return self.fiscal_years.get(year)

    def chronological_amounts(self, years: list[str] | None = None) -> list[Optional[float]]:
        """Amounts oldest → newest, None for years without a recorded gift."""
        return [self.fiscal_years.get(y) for y in (years or CHRONOLOGICAL_YEARS)]

    def to_dict(self) -> dict:
        return {
            "van_id": self.identifier,
            **{year: self.fiscal_years[year] for year in FISCAL_YEARS},
            **{flag: self.flags[flag] for flag in FLAG_FIELDS},
        }


# ---------------------------------------------------------------------------
# Sources and column resolution
# ---------------------------------------------------------------------------

@dataclass
class SourceExtract:
    """One named source extract: its rows keyed by raw header strings."""
    name: str
    rows: list[RawSourceRow] = field(default_factory=list)

    @property
    def headers(self) -> list[str]:
        """Union of row keys in first-seen order."""
        seen: dict[str, None] = {}
        for row in self.rows:
            for key in row:
                seen.setdefault(str(key), None)
        return list(seen)


@dataclass
class ColumnMap:
    """Resolved header for each canonical field; None means not present in the source."""
    identifier: str
    fiscal_years: dict[str, Optional[str]] = field(default_factory=dict)
    flags: dict[str, Optional[str]] = field(default_factory=dict)

    @property
    def resolved_count(self) -> int:
        return 1 + sum(h is not None for h in self.fiscal_years.values()) + sum(
            h is not None for h in self.flags.values()
        )


@dataclass
class SourceResult:
    """Per-source outcome of a reconciliation run."""
    name: str
    rows_read: int = 0
    rows_applied: int = 0
    rows_skipped: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class ReconcileReport:
    sources: list[SourceResult] = field(default_factory=list)

    @property
    def failed(self) -> list[SourceResult]:
        return [s for s in self.sources if not s.succeeded]

    @property
    def partial(self) -> bool:
        """True when at least one source was skipped."""
        return bool(self.failed)
