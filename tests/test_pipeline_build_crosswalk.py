"""Tests for scripts/pipeline_build_crosswalk.py (argument handling and exit codes)."""

import importlib.util
import sys
from pathlib import Path

import pandas as pd
import pytest

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from src.configs.sources import SOURCES

SCRIPT = project_root / "scripts" / "pipeline_build_crosswalk.py"

ALLOCATIONS = pd.DataFrame(
    [
        ("01010", "25013", "MA", "MONSON", 0.972, 1.0, 1.0, 0.973),
        ("01010", "25027", "MA", "MONSON", 0.0276, 0.0, 0.0, 0.0265),
        ("00923", "72127", "PR", "SAN JUAN", 1.0, 1.0, 1.0, 1.0),
        ("09001", "11001", "AE", "APO", 1.0, 1.0, 1.0, 1.0),
        ("51603", "19071", "IA", "SHENANDOAH", 0.0, 0.5, 0.0, 0.5),
        ("51603", "19145", "IA", "SHENANDOAH", 0.0, 0.5, 0.0, 0.5),
    ],
    columns=[
        "ZIP", "COUNTY", "USPS_ZIP_PREF_STATE", "USPS_ZIP_PREF_CITY",
        "RES_RATIO", "BUS_RATIO", "OTH_RATIO", "TOT_RATIO",
    ],
)

COUNTY_NAMES = pd.DataFrame(
    [
        ("25", "000", "MA", "Massachusetts"),
        ("25", "013", "MA", "Hampden County"),
        ("19", "071", "IA", "Fremont County"),
        ("19", "145", "IA", "Page County"),
    ],
    columns=["StateFIPSCode", "CountyFIPSCode", "StateAbbr", "Name"],
)


def _load_script():
    spec = importlib.util.spec_from_file_location("pipeline_build_crosswalk", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _write_inputs(base: Path) -> None:
    for name, df in (("zip_to_county", ALLOCATIONS), ("county_names", COUNTY_NAMES)):
        path = base / SOURCES[name]["path"]
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_excel(path, index=False, engine="openpyxl")


def _run(monkeypatch, *args: str) -> int:
    monkeypatch.setattr(sys, "argv", ["pipeline_build_crosswalk.py", *args])
    return _load_script().main()


def _read_output(path: Path) -> pd.DataFrame:
    return pd.read_csv(path, dtype={"zipcode": str, "CountyFIPS_5": str})


@pytest.fixture
def base(tmp_path):
    _write_inputs(tmp_path)
    return tmp_path


# --- success paths ---


def test_default_run_writes_table_and_report(monkeypatch, base):
    code = _run(monkeypatch, "--base-path", str(base), "--output", "out/crosswalk.csv", "--report", "out/issues.csv", "--quiet")
    assert code == 0
    table = _read_output(base / "out" / "crosswalk.csv")
    assert table["zipcode"].tolist() == ["01010"]
    assert table["CountyFIPS_5"].tolist() == ["25013"]
    issues = pd.read_csv(base / "out" / "issues.csv", dtype=str)
    assert "51603" in set(issues["zip_code"])


def test_keep_military_drops_only_territories(monkeypatch, base):
    code = _run(monkeypatch, "--base-path", str(base), "--output", "crosswalk.csv", "--keep-military", "--quiet")
    assert code == 0
    zips = set(_read_output(base / "crosswalk.csv")["zipcode"])
    assert "09001" in zips
    assert "00923" not in zips


def test_overrides_file_breaks_tie(monkeypatch, base):
    (base / "overrides.csv").write_text("zip_code,county_fips\n51603,19145\n")
    code = _run(monkeypatch, "--base-path", str(base), "--output", "crosswalk.csv", "--overrides", "overrides.csv", "--quiet")
    assert code == 0
    table = _read_output(base / "crosswalk.csv").set_index("zipcode")
    assert table.loc["51603", "CountyFIPS_5"] == "19145"


# --- failure paths ---


def test_missing_inputs_exit_1(monkeypatch, tmp_path):
    assert _run(monkeypatch, "--base-path", str(tmp_path), "--quiet") == 1


def test_conflicting_overrides_exit_1(monkeypatch, base):
    (base / "overrides.csv").write_text("zip_code,county_fips\n51603,19145\n51603,19071\n")
    code = _run(monkeypatch, "--base-path", str(base), "--output", "crosswalk.csv", "--overrides", "overrides.csv")
    assert code == 1
    assert not (base / "crosswalk.csv").exists()


def test_unknown_policy_rejected_by_argparse(monkeypatch, base):
    with pytest.raises(SystemExit):
        _run(monkeypatch, "--base-path", str(base), "--unresolved", "first")
