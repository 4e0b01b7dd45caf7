"""
DonorStore — keyed in-memory store of reconciled donor records.

Filled once by the reconciler, frozen, then read by every classifier and report.
Freezing also locks each record, so classifiers can only read.
"""
from __future__ import annotations

from typing import Iterator, Optional

import pandas as pd

from donor_analytics.config import FISCAL_YEARS, FLAG_FIELDS
from donor_analytics.data.schemas import DonorRecord, StoreFrozenError


class DonorStore:
    """Donor records keyed by identifier, in first-seen order."""

    def __init__(self) -> None:
        self._records: dict[str, DonorRecord] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Keyed access
    # ------------------------------------------------------------------

    def get(self, identifier: str) -> Optional[DonorRecord]:
        return self._records.get(identifier)

    def get_or_create(self, identifier: str) -> DonorRecord:
        """Return the record for identifier, creating an empty one on first sighting."""
        record = self._records.get(identifier)
        if record is None:
            record = DonorRecord(identifier)
            self.upsert(record)
        return record

    def upsert(self, record: DonorRecord) -> DonorRecord:
        if self._frozen:
            raise StoreFrozenError(f"Store is frozen; cannot upsert '{record.identifier}'")
        self._records[record.identifier] = record
        return record

    def freeze(self) -> "DonorStore":
        """Reject further upserts and make every record read-only."""
        for record in self._records.values():
            record.lock()
        self._frozen = True
        return self

    def copy(self) -> "DonorStore":
        """Unfrozen copy with independent records, for staging a merge."""
        staged = DonorStore()
        for record in self._records.values():
            staged.upsert(record.copy())
        return staged

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Collection protocol
    # ------------------------------------------------------------------

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[DonorRecord]:
        return iter(self._records.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DonorStore):
            return NotImplemented
        return list(self._records.items()) == list(other._records.items())

    def identifiers(self) -> list[str]:
        return list(self._records)

    # ------------------------------------------------------------------
    # Tabular view
    # ------------------------------------------------------------------

    def to_frame(self) -> pd.DataFrame:
        """One row per donor: van_id, one float column per fiscal year (NaN = no gift), flags."""
        columns = ["van_id", *FISCAL_YEARS, *FLAG_FIELDS]
        if not self._records:
            return pd.DataFrame(columns=columns)
        df = pd.DataFrame([r.to_dict() for r in self._records.values()], columns=columns)
        for year in FISCAL_YEARS:
            df[year] = pd.to_numeric(df[year], errors="coerce").astype("float64")
        for flag in FLAG_FIELDS:
            df[flag] = df[flag].astype(bool)
        return df
