"""
Reference join: attach Census county names and codes to the resolved ZIP rows.

Left join on the 5-digit county FIPS code. Every resolved ZIP survives; a county
code missing from the reference leaves the name/code columns null and is reported.
The result carries the output column names and order.
"""

import logging

import pandas as pd

from src.configs.crosswalk import OUTPUT_COLUMNS, OUTPUT_RENAME, STATE_AGGREGATE_CODE
from src.crosswalk.report import CrosswalkReport, Issue, IssueKind

logger = logging.getLogger(__name__)

REFERENCE_COLUMNS = ["county_fips", "county_name", "state_abbr", "state_fips", "county_code"]


def prepare_reference(reference: pd.DataFrame) -> pd.DataFrame:
    """Build county_fips if absent, drop state/US aggregate rows, and check the key is unique."""
    ref = reference.copy()
    ref["state_fips"] = ref["state_fips"].astype("string").str.strip().str.zfill(2)
    ref["county_code"] = ref["county_code"].astype("string").str.strip().str.zfill(3)
    if "county_fips" not in ref.columns:
        ref["county_fips"] = ref["state_fips"] + ref["county_code"]
    ref["county_fips"] = ref["county_fips"].astype("string").str.strip()

    aggregate = (ref["county_code"] == STATE_AGGREGATE_CODE).fillna(False).astype(bool)
    ref = ref[~aggregate]
    if aggregate.any():
        logger.info(f"Dropped {int(aggregate.sum())} state/US aggregate rows from the county reference")
    ref = ref.dropna(subset=["county_fips"])

    duplicated = ref["county_fips"].duplicated(keep=False)
    if duplicated.any():
        dupes = sorted(ref.loc[duplicated, "county_fips"].unique())
        raise ValueError(f"County reference has duplicate county_fips: {dupes[:10]}")
    logger.info(f"County reference: {len(ref)} counties")
    return ref[REFERENCE_COLUMNS].reset_index(drop=True)


def join_reference(
    resolved: pd.DataFrame,
    reference: pd.DataFrame,
    report: CrosswalkReport | None = None,
) -> pd.DataFrame:
    """Left-join resolved ZIP rows to the county reference and project to OUTPUT_COLUMNS."""
    report = report if report is not None else CrosswalkReport()
    ref = prepare_reference(reference)

    left = resolved.copy()
    left["county_fips"] = left["county_fips"].astype("string")
    merged = left.merge(ref, on="county_fips", how="left", validate="many_to_one", indicator=True)

    unmatched = merged[merged["_merge"] == "left_only"]
    for row in unmatched.itertuples(index=False):
        report.add(
            Issue(
                kind=IssueKind.UNMATCHED_COUNTY,
                zip_code=row.zip_code,
                county_fips=row.county_fips,
                message=f"county {row.county_fips} not found in the county reference",
            )
        )
    if len(unmatched):
        logger.warning(f"{len(unmatched)} ZIP codes point to counties missing from the reference")

    out = merged.drop(columns="_merge").rename(columns=OUTPUT_RENAME)
    out = out[OUTPUT_COLUMNS].reset_index(drop=True)
    logger.info(f"Joined reference: {len(out)} rows, {len(out) - len(unmatched)} matched")
    return out
