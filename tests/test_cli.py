from __future__ import annotations

import json

import pytest

from donor_analytics.cli import build_parser, main


@pytest.fixture
def csv_sources(tmp_path):
    first = tmp_path / "FY24.csv"
    first.write_text("VANID,FY24,MidRange\nV1,1200,1\nV2,6000,0\n")
    second = tmp_path / "FY25.csv"
    second.write_text("VANID,FY25\nV1,1300\nV2,0\nV3,800\n")
    return [str(first), str(second)]


def test_reconcile_prints_coverage(csv_sources, capsys) -> None:
    assert main(["reconcile", *csv_sources]) == 0

    out = capsys.readouterr().out
    assert "FY24.csv: 2 rows, 2 applied" in out
    assert "3 donors reconciled" in out
    assert "Mid-range: 1" in out


def test_trends_command(csv_sources, capsys) -> None:
    assert main(["trends", "--fluctuation", *csv_sources]) == 0

    out = capsys.readouterr().out
    assert "insufficientData" in out
    assert "TIER MOVEMENT FY24 → FY25" in out


def test_export_writes_json(csv_sources, tmp_path, capsys) -> None:
    out_path = tmp_path / "giving.json"
    assert main(["export", "--output", str(out_path), *csv_sources]) == 0

    data = json.loads(out_path.read_text())
    assert data["summary"]["total_donors"] == 3
    assert data["summary"]["latest_total"] == 2100.0


def test_report_writes_workbook(csv_sources, tmp_path, capsys) -> None:
    out_path = tmp_path / "giving.xlsx"
    assert main(["report", "--output", str(out_path), *csv_sources]) == 0
    assert out_path.exists()


def test_nothing_reconciled_returns_error(tmp_path, capsys) -> None:
    bad = tmp_path / "names.csv"
    bad.write_text("Name,Amount\nAda,10\n")

    assert main(["reconcile", str(bad)]) == 1
    err = capsys.readouterr().err
    assert "No donor records could be reconciled" in err


def test_no_command_prints_help(capsys) -> None:
    assert main([]) == 0
    assert "reconcile" in capsys.readouterr().out


def test_parser_source_options() -> None:
    args = build_parser().parse_args(["trends", "--all", "--rank-tiers"])
    assert args.all and args.rank_tiers
    assert args.files == []
