# tests/pipeline/test_registry_ingest.py
#
# parse + validate of the registry CSV exports. Only tmp_path, no database.
from __future__ import annotations

from pathlib import Path

import pytest

from registry_pipeline.sources.base import SourcePipeline
from registry_pipeline.sources.registry.parse import parse_companies, parse_shareholders
from registry_pipeline.sources.registry.source import CompaniesSource, ShareholdersSource
from registry_pipeline.sources.registry.validate import validate_companies, validate_shareholders


def test_parse_companies_keeps_capital_as_text(input_dir: Path) -> None:
    df = parse_companies(input_dir / "companies.csv")

    root = df.row(0, named=True)
    assert root["paid_up_capital"] == "2000000000.00"
    assert root["is_active"] is True
    assert df.filter(df["id"] == "old")["is_active"].to_list() == [False]
    # blank status counts as active
    assert df.filter(df["id"] == "folder2")["is_active"].to_list() == [True]


def test_validate_companies_drops_invalid_rows(input_dir: Path) -> None:
    df = validate_companies(parse_companies(input_dir / "companies.csv"))

    assert df["id"].to_list() == ["root", "folder1", "folder2", "old"]
    assert df.filter(df["id"] == "root")["name"].to_list() == ["Root Holding"]
    assert df.filter(df["id"] == "folder2")["authorized_capital"].to_list() == ["0"]


def test_parse_shareholders_kinds_and_flags(input_dir: Path) -> None:
    df = parse_shareholders(input_dir / "shareholders.csv")

    by_id = {row["id"]: row for row in df.iter_rows(named=True)}
    assert by_id["s1"]["kind"] == "corporate"
    assert by_id["s3"]["kind"] == "individual"
    assert by_id["s3"]["type_label"] == "founder"
    assert by_id["s3"]["paid_up_capital"] == "100"
    assert by_id["s2"]["is_main_parent_override"] is False


def test_validate_shareholders_assigns_positions(input_dir: Path) -> None:
    df = validate_shareholders(parse_shareholders(input_dir / "shareholders.csv"))

    assert "s5" not in df["id"].to_list()
    positions = {row["id"]: row["position"] for row in df.iter_rows(named=True)}
    assert positions == {"s1": 0, "s2": 0, "s3": 1, "s4": 0}


def test_missing_column_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "companies.csv").write_text("id;name\nroot;Root\n", encoding="utf-8")
    with pytest.raises(ValueError, match="paid_up_capital"):
        parse_companies(tmp_path / "companies.csv")


def test_sources_implement_protocol() -> None:
    assert isinstance(CompaniesSource(), SourcePipeline)
    assert isinstance(ShareholdersSource(separator=","), SourcePipeline)
    assert ShareholdersSource().name == "shareholders"
