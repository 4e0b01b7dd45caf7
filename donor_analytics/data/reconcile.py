"""
Record reconciliation — fold per-source rows into one canonical record per donor.

Sources are applied strictly in the order given:
- a later source overwrites a fiscal-year amount only when it supplies a number
- flags are OR-combined, so once true they stay true
- each source is merged into a staged copy of the store and committed only if
  every row applies; a failing source is logged and skipped, the rest still run
"""
from __future__ import annotations

import logging
import math
import numbers
from typing import Iterable, Optional, Sequence, Union

import pandas as pd

from donor_analytics.config import COLUMN_ALIASES, TRUTHY_FLAG_VALUES
from donor_analytics.data.columns import resolve_columns
from donor_analytics.data.schemas import (
    ColumnMap,
    EmptySourceError,
    NoDataReconciledError,
    RawSourceRow,
    ReconcileReport,
    SourceExtract,
    SourceResult,
)
from donor_analytics.data.store import DonorStore

logger = logging.getLogger(__name__)

SourceInput = Union[SourceExtract, Sequence[RawSourceRow]]


# ---------------------------------------------------------------------------
# Cell parsing
# ---------------------------------------------------------------------------

def _is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def parse_identifier(value) -> str:
    """Coerce an identifier cell to a stripped string; '' when missing.

    Spreadsheet readers hand back numeric IDs as floats, so 1001.0 becomes '1001'.
    """
    if _is_missing(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_amount(value) -> Optional[float]:
    """Parse a gift amount; None for blanks, text, NaN, and negatives."""
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        amount = float(value)
    else:
        text = str(value).replace("$", "").replace(",", "").strip()
        if not text:
            return None
        try:
            amount = float(text)
        except ValueError:
            return None
    if math.isnan(amount) or math.isinf(amount) or amount < 0:
        return None
    return amount


def parse_flag(value) -> bool:
    if _is_missing(value):
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, numbers.Real):
        return bool(value != 0)
    return str(value).strip().lower() in TRUTHY_FLAG_VALUES


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------

def _as_extract(source: SourceInput, position: int) -> SourceExtract:
    if isinstance(source, SourceExtract):
        return source
    return SourceExtract(name=f"source {position}", rows=list(source))


def merge_row(store: DonorStore, row: RawSourceRow, columns: ColumnMap) -> bool:
    """Apply one row to the store. Returns False when the row has no identifier."""
    identifier = parse_identifier(row.get(columns.identifier))
    if not identifier:
        return False

    record = store.get_or_create(identifier)
    for year, header in columns.fiscal_years.items():
        if header is None:
            continue
        amount = parse_amount(row.get(header))
        if amount is not None:
            record.fiscal_years[year] = amount

    for flag, header in columns.flags.items():
        if header is None:
            continue
        record.flags[flag] = record.flags[flag] or parse_flag(row.get(header))
    return True


def merge_source(
    store: DonorStore,
    source: SourceExtract,
    registry: dict[str, list[str]] | None = None,
) -> SourceResult:
    """Resolve one source's columns and fold its rows into the store.

    Raises EmptySourceError / MissingColumnError before touching the store.
    """
    if not source.rows:
        raise EmptySourceError(f"{source.name} has no rows")
    columns = resolve_columns(source.headers, registry, source=source.name)

    result = SourceResult(name=source.name, rows_read=len(source.rows))
    for row in source.rows:
        if merge_row(store, row, columns):
            result.rows_applied += 1
        else:
            result.rows_skipped += 1
            logger.debug("%s: row without identifier skipped", source.name)
    return result


def reconcile_with_report(
    sources: Iterable[SourceInput],
    registry: dict[str, list[str]] | None = None,
) -> tuple[DonorStore, ReconcileReport]:
    """Reconcile sources in order, returning the frozen store and per-source outcomes."""
    registry = COLUMN_ALIASES if registry is None else registry
    store = DonorStore()
    report = ReconcileReport()

    for position, raw in enumerate(sources, 1):
        source = _as_extract(raw, position)
        staged = store.copy()
        try:
            result = merge_source(staged, source, registry)
        except Exception as exc:
            logger.warning("Skipping %s: %s", source.name, exc)
            report.sources.append(
                SourceResult(name=source.name, rows_read=len(source.rows), error=str(exc))
            )
            continue
        logger.info(
            "%s: %d rows, %d applied, %d without identifier",
            source.name, result.rows_read, result.rows_applied, result.rows_skipped,
        )
        store = staged
        report.sources.append(result)

    if len(store) == 0:
        raise NoDataReconciledError(
            f"No donor records could be reconciled from {len(report.sources)} source(s)"
        )
    return store.freeze(), report


def reconcile(
    sources: Iterable[SourceInput],
    registry: dict[str, list[str]] | None = None,
) -> DonorStore:
    """Reconcile sources in order into a frozen DonorStore."""
    store, _ = reconcile_with_report(sources, registry)
    return store
