from __future__ import annotations

import pandas as pd
import pytest

from donor_analytics.config import FISCAL_YEARS
from donor_analytics.data.schemas import DonorRecord, SourceExtract, StoreFrozenError
from donor_analytics.data.store import DonorStore


def test_record_defaults_cover_every_year_and_flag() -> None:
    record = DonorRecord("V1")
    assert list(record.fiscal_years) == FISCAL_YEARS
    assert all(v is None for v in record.fiscal_years.values())
    assert record.flags == {"is_mid_range": False, "is_major_donor_prospect": False}


def test_record_rejects_empty_identifier_and_negative_amounts() -> None:
    with pytest.raises(ValueError):
        DonorRecord("")
    with pytest.raises(ValueError):
        DonorRecord("V1", fiscal_years={"FY25": -1.0})
    with pytest.raises(ValueError):
        DonorRecord("V1", fiscal_years={"FY19": 10.0})


def test_chronological_amounts_oldest_first() -> None:
    record = DonorRecord("V1", fiscal_years={"FY25": 3.0, "FY20": 1.0})
    assert record.chronological_amounts() == [1.0, None, None, None, None, 3.0]
    assert record.chronological_amounts(["FY24", "FY25"]) == [None, 3.0]


def test_get_or_create_and_upsert() -> None:
    store = DonorStore()
    first = store.get_or_create("V1")
    assert store.get_or_create("V1") is first
    assert "V1" in store
    assert store.get("missing") is None

    replacement = DonorRecord("V1", fiscal_years={"FY25": 10.0})
    store.upsert(replacement)
    assert store.get("V1") is replacement
    assert len(store) == 1


def test_identifiers_are_case_sensitive() -> None:
    store = DonorStore()
    store.get_or_create("v1")
    store.get_or_create("V1")
    assert store.identifiers() == ["v1", "V1"]


def test_frozen_store_rejects_writes() -> None:
    store = DonorStore()
    store.get_or_create("V1")
    store.freeze()
    with pytest.raises(StoreFrozenError):
        store.get_or_create("V2")
    assert store.get_or_create("V1").identifier == "V1"


def test_to_frame_keeps_null_distinct_from_zero() -> None:
    store = DonorStore()
    store.upsert(DonorRecord("V1", fiscal_years={"FY25": 0.0}, flags={"is_mid_range": True}))
    store.upsert(DonorRecord("V2"))

    df = store.to_frame()
    assert list(df["van_id"]) == ["V1", "V2"]
    assert df.loc[0, "FY25"] == 0.0
    assert pd.isna(df.loc[1, "FY25"])
    assert df["is_mid_range"].tolist() == [True, False]


def test_to_frame_empty_store_has_columns() -> None:
    df = DonorStore().to_frame()
    assert df.empty
    assert "FY25" in df.columns and "van_id" in df.columns


def test_source_extract_headers_union_in_order() -> None:
    extract = SourceExtract("x", [{"VANID": 1, "FY25": 2}, {"VANID": 3, "FY24": 4}])
    assert extract.headers == ["VANID", "FY25", "FY24"]


def test_frozen_records_are_read_only() -> None:
    store = DonorStore()
    store.upsert(DonorRecord("V1", fiscal_years={"FY25": 10.0}, flags={"is_mid_range": True}))
    assert store.freeze() is store

    record = store.get("V1")
    with pytest.raises(TypeError):
        record.flags["is_mid_range"] = False
    with pytest.raises(TypeError):
        record.fiscal_years["FY25"] = 0.0
    with pytest.raises(StoreFrozenError):
        record.flags = {"is_mid_range": False}
    assert record.flags["is_mid_range"] is True
    assert store.freeze().get("V1").amount("FY25") == 10.0


def test_copy_is_writable_and_independent() -> None:
    store = DonorStore()
    store.upsert(DonorRecord("V1", fiscal_years={"FY25": 10.0}))
    store.freeze()

    staged = store.copy()
    assert not staged.is_frozen
    assert staged == store
    staged.get("V1").fiscal_years["FY25"] = 20.0
    staged.get_or_create("V2")

    assert store.get("V1").amount("FY25") == 10.0
    assert "V2" not in store
