"""Source loading, column resolution, reconciliation, and the donor store."""
from .loader import discover_sources, load_sources
from .store import DonorStore
from .schemas import DonorRecord, SourceExtract, HistoryTrend, YearPairTrend
from .columns import resolve_columns, find_matching_column
from .reconcile import reconcile, reconcile_with_report
