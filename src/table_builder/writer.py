"""
Writer: persist the crosswalk table and its issue report.

Format follows the file suffix (.xlsx via openpyxl, .csv). String columns are kept
as strings so ZIP and FIPS codes keep their leading zeros.
"""

import logging
from pathlib import Path

import pandas as pd

from src.crosswalk.report import CrosswalkReport
from src.table_builder.errors import SourceWriteError

logger = logging.getLogger(__name__)

STRING_COLUMNS = ["zipcode", "CountyFIPS_5", "CountyName", "StateAbbr", "StateFIPSCode", "CountyFIPSCode"]


def _ensure_string_columns(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Ensure listed columns are pandas string dtype (nulls stay null)."""
    df = df.copy()
    for c in columns:
        if c in df.columns:
            df[c] = df[c].astype("string")
    return df


def write_table(df: pd.DataFrame, path: Path) -> Path:
    """Write df to path (.xlsx or .csv), creating parent directories.

    Raises:
        SourceWriteError: unsupported suffix or the file cannot be written.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".xlsx", ".csv"):
        raise SourceWriteError(f"Unsupported output format: {path.suffix or '(none)'} ({path})")

    out = _ensure_string_columns(df, STRING_COLUMNS)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if suffix == ".xlsx":
            out.to_excel(path, index=False, engine="openpyxl")
        else:
            out.to_csv(path, index=False)
    except (OSError, ValueError) as exc:
        raise SourceWriteError(f"Could not write {path}: {exc}") from exc
    logger.info(f"Saved {len(out)} rows to {path}")
    return path


def write_report(report: CrosswalkReport, path: Path) -> Path:
    """Write the issue report as CSV (one row per issue)."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        report.to_frame().to_csv(path, index=False)
    except OSError as exc:
        raise SourceWriteError(f"Could not write report {path}: {exc}") from exc
    logger.info(f"Saved {len(report)} issues to {path}")
    return path
