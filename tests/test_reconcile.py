from __future__ import annotations

import logging

import numpy as np
import pytest

from donor_analytics.data.reconcile import (
    parse_amount,
    parse_flag,
    parse_identifier,
    reconcile,
    reconcile_with_report,
)
from donor_analytics.data.schemas import (
    NoDataReconciledError,
    SourceExtract,
    StoreFrozenError,
    DonorRecord,
)


def test_parse_amount() -> None:
    assert parse_amount(100) == 100.0
    assert parse_amount(0) == 0.0
    assert parse_amount("$1,234.50") == 1234.5
    assert parse_amount(np.float64(12.5)) == 12.5
    assert parse_amount(None) is None
    assert parse_amount("") is None
    assert parse_amount("  ") is None
    assert parse_amount(float("nan")) is None
    assert parse_amount("n/a") is None
    assert parse_amount(-5) is None
    assert parse_amount(True) is None


def test_parse_flag() -> None:
    assert parse_flag(True) is True
    assert parse_flag(1) is True
    assert parse_flag("Yes") is True
    assert parse_flag(" x ") is True
    assert parse_flag(0) is False
    assert parse_flag("") is False
    assert parse_flag("no") is False
    assert parse_flag(None) is False
    assert parse_flag(float("nan")) is False


def test_parse_identifier() -> None:
    assert parse_identifier(" V1 ") == "V1"
    assert parse_identifier(1001.0) == "1001"
    assert parse_identifier(1001) == "1001"
    assert parse_identifier(None) == ""
    assert parse_identifier(float("nan")) == ""


def test_later_null_does_not_override_earlier_amount() -> None:
    a = SourceExtract("A", [{"VANID": "V1", "FY25": 100, "MidRange": False}])
    b = SourceExtract("B", [{"VANID": "V1", "FY25": None, "MidRange": True}])
    store = reconcile([a, b])
    record = store.get("V1")
    assert record.fiscal_years["FY25"] == 100
    assert record.flags["is_mid_range"] is True


def test_latest_non_null_wins() -> None:
    a = SourceExtract("A", [{"VANID": "V1", "FY24": 100}])
    b = SourceExtract("B", [{"VANID": "V1", "FY24": 250}])
    assert reconcile([a, b]).get("V1").amount("FY24") == 250
    assert reconcile([b, a]).get("V1").amount("FY24") == 100


def test_explicit_zero_is_recorded_and_distinct_from_null() -> None:
    a = SourceExtract("A", [{"VANID": "V1", "FY24": 500}])
    b = SourceExtract("B", [{"VANID": "V1", "FY24": 0, "FY25": ""}])
    record = reconcile([a, b]).get("V1")
    assert record.amount("FY24") == 0.0
    assert record.amount("FY25") is None


def test_unmapped_column_leaves_amount_untouched() -> None:
    a = SourceExtract("A", [{"VANID": "V1", "FY22": 300}])
    b = SourceExtract("B", [{"VANID": "V1", "FY23": 400}])
    record = reconcile([a, b]).get("V1")
    assert record.amount("FY22") == 300
    assert record.amount("FY23") == 400


def test_flags_are_sticky_across_sources() -> None:
    sources = [
        SourceExtract("A", [{"VANID": "V1", "Major Donor Prospect": "yes"}]),
        SourceExtract("B", [{"VANID": "V1", "Major Donor Prospect": "no"}]),
        SourceExtract("C", [{"VANID": "V1", "Major Donor Prospect": 0}]),
    ]
    assert reconcile(sources).get("V1").flags["is_major_donor_prospect"] is True


def test_missing_flag_column_defaults_false() -> None:
    store = reconcile([SourceExtract("A", [{"VANID": "V1", "FY25": 10}])])
    assert store.get("V1").flags == {"is_mid_range": False, "is_major_donor_prospect": False}


def test_empty_identifier_rows_are_skipped(fy_sources) -> None:
    store, report = reconcile_with_report(fy_sources)
    assert store.identifiers() == ["V1", "V2", "V3"]
    assert report.sources[0].rows_read == 3
    assert report.sources[0].rows_applied == 2
    assert report.sources[0].rows_skipped == 1


def test_reconciled_fixture_values(fy_sources) -> None:
    store = reconcile(fy_sources)

    v1 = store.get("V1")
    assert v1.chronological_amounts() == [1000, 1100, 1150, None, 1200, 1300]
    assert v1.flags == {"is_mid_range": True, "is_major_donor_prospect": False}

    v2 = store.get("V2")
    assert v2.chronological_amounts() == [5000, 5000, None, None, 6000, 0]
    assert v2.flags["is_major_donor_prospect"] is True

    v3 = store.get("V3")
    assert v3.amount("FY22") == 250
    assert v3.amount("FY24") is None
    assert v3.amount("FY25") == 800


def test_source_missing_identifier_is_skipped_and_logged(caplog) -> None:
    good = SourceExtract("good.xlsx", [{"VANID": "V1", "FY25": 10}])
    bad = SourceExtract("bad.xlsx", [{"Donor": "V2", "FY25": 20}])
    later = SourceExtract("later.xlsx", [{"VANID": "V3", "FY25": 30}])

    with caplog.at_level(logging.WARNING, logger="donor_analytics.data.reconcile"):
        store, report = reconcile_with_report([good, bad, later])

    assert store.identifiers() == ["V1", "V3"]
    assert report.partial is True
    assert [s.name for s in report.failed] == ["bad.xlsx"]
    assert "van_id" in report.failed[0].error
    assert any("bad.xlsx" in rec.getMessage() for rec in caplog.records)


def test_empty_source_is_skipped() -> None:
    store, report = reconcile_with_report([
        SourceExtract("empty.xlsx"),
        SourceExtract("ok.xlsx", [{"VANID": "V1"}]),
    ])
    assert len(store) == 1
    assert report.failed[0].name == "empty.xlsx"


def test_no_data_raises() -> None:
    with pytest.raises(NoDataReconciledError):
        reconcile([SourceExtract("bad", [{"Name": "x"}]), SourceExtract("blank", [{"VANID": ""}])])

    with pytest.raises(NoDataReconciledError):
        reconcile([])


def test_plain_row_lists_are_accepted() -> None:
    store, report = reconcile_with_report([[{"VANID": "V1", "FY20": 5}], [{"VANID": "V1", "FY21": 6}]])
    assert store.get("V1").chronological_amounts()[:2] == [5, 6]
    assert [s.name for s in report.sources] == ["source 1", "source 2"]


def test_reconciliation_is_deterministic(fy_sources) -> None:
    first = reconcile(fy_sources)
    second = reconcile(fy_sources)
    assert first == second
    assert [r.to_dict() for r in first] == [r.to_dict() for r in second]


def test_result_store_is_frozen(fy_sources) -> None:
    store = reconcile(fy_sources)
    assert store.is_frozen
    with pytest.raises(StoreFrozenError):
        store.upsert(DonorRecord("V9"))


class _UnreadableCell:
    def __str__(self) -> str:
        raise RuntimeError("cell could not be read")


def test_failing_source_leaves_no_partial_rows(caplog) -> None:
    good = SourceExtract("good.xlsx", [{"VANID": "V1", "FY25": 10}])
    broken = SourceExtract("broken.xlsx", [
        {"VANID": "V1", "FY25": 99, "MidRange": 1},
        {"VANID": "V9", "FY25": 50},
        {"VANID": _UnreadableCell(), "FY25": 5},
    ])
    later = SourceExtract("later.xlsx", [{"VANID": "V3", "FY25": 30}])

    with caplog.at_level(logging.WARNING, logger="donor_analytics.data.reconcile"):
        store, report = reconcile_with_report([good, broken, later])

    assert store.identifiers() == ["V1", "V3"]
    assert store.get("V1").amount("FY25") == 10.0
    assert store.get("V1").flags["is_mid_range"] is False
    assert [s.name for s in report.failed] == ["broken.xlsx"]
    assert "cell could not be read" in report.failed[0].error
    assert report.sources[2].succeeded
    assert any("broken.xlsx" in rec.getMessage() for rec in caplog.records)


def test_complex_cell_is_not_an_amount() -> None:
    assert parse_amount(complex(1, 0)) is None
    store = reconcile([
        [{"VANID": "V1", "FY25": 10}, {"VANID": "V2", "FY25": complex(1, 0)}],
        [{"VANID": "V3", "FY25": 30}],
    ])
    assert store.identifiers() == ["V1", "V2", "V3"]
    assert store.get("V2").amount("FY25") is None
