"""
Column resolution — map loosely-named source headers to canonical fields.
"""
from __future__ import annotations

from typing import Iterable, Optional

from donor_analytics.config import COLUMN_ALIASES, IDENTIFIER_FIELD, FISCAL_YEARS, FLAG_FIELDS
from donor_analytics.data.schemas import ColumnMap, MissingColumnError


def _normalize_header(name) -> str:
    return str(name).strip().lower()


def find_matching_column(available: Iterable[str], aliases: Iterable[str]) -> Optional[str]:
    """Return the original header matching the first alias found, or None.

    Aliases are tried in order; comparison is exact after trimming and lowercasing.
    """
    lookup: dict[str, str] = {}
    for header in available:
        # first header wins when two normalise to the same key
        lookup.setdefault(_normalize_header(header), header)
    for alias in aliases:
        match = lookup.get(_normalize_header(alias))
        if match is not None:
            return match
    return None


def resolve_columns(
    headers: Iterable[str],
    registry: dict[str, list[str]] | None = None,
    source: str | None = None,
) -> ColumnMap:
    """Resolve every canonical field for one source.

    Raises MissingColumnError when the identifier column cannot be found.
    Fiscal years and flags without a match resolve to None.
    """
    registry = COLUMN_ALIASES if registry is None else registry
    headers = list(headers)

    identifier = find_matching_column(headers, registry.get(IDENTIFIER_FIELD, []))
    if identifier is None:
        raise MissingColumnError(IDENTIFIER_FIELD, source)

    return ColumnMap(
        identifier=identifier,
        fiscal_years={
            year: find_matching_column(headers, registry.get(year, [])) for year in FISCAL_YEARS
        },
        flags={
            flag: find_matching_column(headers, registry.get(flag, [])) for flag in FLAG_FIELDS
        },
    )
