"""
Row checks on the raw ZIP ↔ county allocation table.

validate_allocations drops rows that cannot take part in resolution (missing fields,
bad codes, ratios outside [0, 1], repeated ZIP–county pairs) and reports each one.
check_ratio_sums only reports: a ZIP whose total ratios do not add up to ~1 is still
resolved.
"""

import logging
import re

import numpy as np
import pandas as pd

from src.configs.crosswalk import RATIO_COLUMNS, RATIO_SUM_TOLERANCE
from src.crosswalk.report import CrosswalkReport, Issue, IssueKind

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["zip_code", "county_fips", "state_cap"] + RATIO_COLUMNS
CODE_PATTERN = r"\d{5}"


def _is_blank(value) -> bool:
    return pd.isna(value) or (isinstance(value, str) and not value.strip())


def _problems(row: pd.Series, raw: pd.Series) -> list[str]:
    """Describe what is wrong with one row. `raw` holds the values before ratio coercion."""
    problems = []
    for col in REQUIRED_COLUMNS:
        if _is_blank(raw[col]):
            problems.append(f"missing {col}")
        elif col in RATIO_COLUMNS and pd.isna(row[col]):
            problems.append(f"{col} {raw[col]!r} is not numeric")
    for col in ("zip_code", "county_fips"):
        value = row[col]
        if not pd.isna(value) and not re.fullmatch(CODE_PATTERN, str(value)):
            problems.append(f"{col} {value!r} is not a 5-digit code")
    for col in RATIO_COLUMNS:
        value = row[col]
        if not pd.isna(value) and not 0.0 <= value <= 1.0:
            problems.append(f"{col} {value} outside [0, 1]")
    return problems


def validate_allocations(allocations: pd.DataFrame, report: CrosswalkReport | None = None) -> pd.DataFrame:
    """Return the well-formed allocation rows (order kept); report the rest.

    Raises:
        KeyError: a required column is absent altogether.
    """
    missing_cols = [c for c in REQUIRED_COLUMNS if c not in allocations.columns]
    if missing_cols:
        raise KeyError(f"Allocation table is missing columns: {missing_cols}")
    report = report if report is not None else CrosswalkReport()

    df = allocations.copy()
    for col in RATIO_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce")

    codes_ok = (
        df["zip_code"].astype("string").str.fullmatch(CODE_PATTERN).fillna(False)
        & df["county_fips"].astype("string").str.fullmatch(CODE_PATTERN).fillna(False)
    )
    state_ok = df["state_cap"].astype("string").str.strip().str.len().fillna(0) > 0
    ratios = df[RATIO_COLUMNS]
    ratios_ok = ((ratios >= 0.0) & (ratios <= 1.0)).all(axis=1)
    valid = (codes_ok & state_ok & ratios_ok).astype(bool)

    labels = df.index.tolist()
    for pos in np.flatnonzero(~valid.to_numpy()):
        idx, row = labels[pos], df.iloc[pos]
        problems = _problems(row, allocations.iloc[pos])
        report.add(
            Issue(
                kind=IssueKind.MALFORMED_RECORD,
                zip_code=None if pd.isna(row["zip_code"]) else str(row["zip_code"]),
                county_fips=None if pd.isna(row["county_fips"]) else str(row["county_fips"]),
                message="; ".join(problems) or "malformed record",
                details={"row": idx},
            )
        )

    out = df[valid]
    duplicated = out.duplicated(subset=["zip_code", "county_fips"], keep="first")
    for idx, row in out[duplicated].iterrows():
        report.add(
            Issue(
                kind=IssueKind.MALFORMED_RECORD,
                zip_code=row["zip_code"],
                county_fips=row["county_fips"],
                message="duplicate ZIP-county pair; first occurrence kept",
                details={"row": idx},
            )
        )
    out = out[~duplicated]

    rejected = len(df) - len(out)
    if rejected:
        logger.warning(f"Rejected {rejected} malformed allocation rows")
    logger.info(f"Validated allocations: {len(out)} of {len(df)} rows kept")
    return out


def check_ratio_sums(
    allocations: pd.DataFrame,
    report: CrosswalkReport | None = None,
    tolerance: float = RATIO_SUM_TOLERANCE,
) -> list[str]:
    """Report ZIP codes whose total_ratio sum is not within tolerance of 1. Returns them sorted."""
    report = report if report is not None else CrosswalkReport()
    if allocations.empty:
        return []
    sums = allocations.groupby("zip_code")["total_ratio"].sum()
    off = sums[~np.isclose(sums.to_numpy(dtype=float), 1.0, rtol=0.0, atol=tolerance)]
    for zip_code, total in off.sort_index().items():
        report.add(
            Issue(
                kind=IssueKind.RATIO_SUM_MISMATCH,
                zip_code=zip_code,
                message=f"total_ratio sums to {total:.4f}, expected 1 (±{tolerance})",
                details={"total_ratio_sum": float(total)},
            )
        )
    if len(off):
        logger.warning(f"{len(off)} ZIP codes have total_ratio sums off by more than {tolerance}")
    return sorted(off.index)
