"""Tests for src.crosswalk.joiner."""

import logging
import sys
from pathlib import Path

import pandas as pd
import pytest

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from src.configs.crosswalk import OUTPUT_COLUMNS
from src.crosswalk.joiner import join_reference, prepare_reference
from src.crosswalk.report import CrosswalkReport, IssueKind


def _resolved() -> pd.DataFrame:
    return pd.DataFrame({
        "zip_code": ["01010", "96142", "99999"],
        "county_fips": ["25013", "06017", "02999"],
        "state_cap": ["MA", "CA", "AK"],
        "res_ratio": [0.972, 1.0, 0.3],
        "business_ratio": [1.0, 0.0, 0.3],
        "other_ratio": [1.0, 0.457, 0.3],
        "total_ratio": [0.973, 0.5, 1.0],
        "max_tot_ratio": [0.973, 0.5, 1.0],
    })


def _reference() -> pd.DataFrame:
    return pd.DataFrame({
        "state_fips": ["00", "25", "25", "06", "06"],
        "county_code": ["000", "000", "013", "017", "061"],
        "county_name": ["United States", "Massachusetts", "Hampden County", "El Dorado County", "Placer County"],
        "state_abbr": ["US", "MA", "MA", "CA", "CA"],
    })


# --- prepare_reference ---


def test_prepare_reference_builds_key_and_drops_aggregates():
    ref = prepare_reference(_reference())
    assert ref["county_fips"].tolist() == ["25013", "06017", "06061"]
    assert "000" not in set(ref["county_code"])


def test_prepare_reference_pads_codes():
    ref = prepare_reference(pd.DataFrame({
        "state_fips": ["6"],
        "county_code": ["17"],
        "county_name": ["El Dorado County"],
        "state_abbr": ["CA"],
    }))
    assert ref["county_fips"].tolist() == ["06017"]


def test_prepare_reference_duplicate_key_raises():
    ref = pd.concat([_reference(), _reference().iloc[[2]]])
    with pytest.raises(ValueError, match="duplicate county_fips"):
        prepare_reference(ref)


# --- join_reference ---


def test_output_columns_in_order():
    out = join_reference(_resolved(), _reference())
    assert list(out.columns) == OUTPUT_COLUMNS


def test_matched_rows_carry_reference_values():
    out = join_reference(_resolved(), _reference()).set_index("zipcode")
    assert out.loc["01010", "CountyName"] == "Hampden County"
    assert out.loc["01010", "StateAbbr"] == "MA"
    assert out.loc["01010", "StateFIPSCode"] == "25"
    assert out.loc["01010", "CountyFIPSCode"] == "013"
    assert out.loc["01010", "RES_RATIO"] == 0.972
    assert out.loc["01010", "max_tot_ratio"] == 0.973
    assert out.loc["96142", "CountyName"] == "El Dorado County"


def test_unmatched_county_kept_with_nulls_and_reported():
    report = CrosswalkReport()
    out = join_reference(_resolved(), _reference(), report)
    assert len(out) == 3
    row = out[out["zipcode"] == "99999"].iloc[0]
    assert row["CountyFIPS_5"] == "02999"
    for col in ["CountyName", "StateAbbr", "StateFIPSCode", "CountyFIPSCode"]:
        assert pd.isna(row[col])
    (issue,) = report.of_kind(IssueKind.UNMATCHED_COUNTY)
    assert issue.zip_code == "99999"
    assert issue.county_fips == "02999"


def test_aggregate_rows_never_match():
    resolved = _resolved()
    resolved.loc[0, "county_fips"] = "25000"
    report = CrosswalkReport()
    out = join_reference(resolved, _reference(), report)
    assert pd.isna(out.loc[out["zipcode"] == "01010", "CountyName"].iloc[0])
    assert "01010" in report.zip_codes(IssueKind.UNMATCHED_COUNTY)


def test_reference_with_prebuilt_key():
    ref = _reference()
    ref["county_fips"] = ref["state_fips"] + ref["county_code"]
    out = join_reference(_resolved(), ref)
    assert out["CountyName"].tolist()[:2] == ["Hampden County", "El Dorado County"]


def test_aggregate_drop_logged_only_when_present(caplog):
    with caplog.at_level(logging.INFO, logger="src.crosswalk.joiner"):
        prepare_reference(_reference())
    assert "Dropped 2 state/US aggregate rows" in caplog.text

    caplog.clear()
    already_filtered = _reference().iloc[2:]
    with caplog.at_level(logging.INFO, logger="src.crosswalk.joiner"):
        ref = prepare_reference(already_filtered)
    assert len(ref) == 3
    assert "aggregate" not in caplog.text
