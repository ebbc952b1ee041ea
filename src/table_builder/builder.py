"""
Crosswalk builder: run validation, territory filter, resolver and reference join in order.

Two entry points:
- build_crosswalk: in-memory allocation + reference DataFrames -> CrosswalkResult
- build_crosswalk_from_sources: read both tables via SOURCES, then build
"""

import logging
from pathlib import Path

import pandas as pd

from src.configs.crosswalk import DEFAULT_UNRESOLVED_POLICY, EXCLUDED_STATES, RATIO_SUM_TOLERANCE
from src.crosswalk.joiner import join_reference
from src.crosswalk.report import CrosswalkReport, CrosswalkResult
from src.crosswalk.resolver import resolve_best_county
from src.crosswalk.territory import filter_territories
from src.crosswalk.validation import check_ratio_sums, validate_allocations
from src.table_builder.reader import read

logger = logging.getLogger(__name__)


def build_crosswalk(
    allocations: pd.DataFrame,
    reference: pd.DataFrame,
    overrides: dict[str, str] | None = None,
    unresolved: str = DEFAULT_UNRESOLVED_POLICY,
    excluded_states=EXCLUDED_STATES,
    ratio_tolerance: float = RATIO_SUM_TOLERANCE,
) -> CrosswalkResult:
    """Build the one-row-per-ZIP crosswalk.

    Args:
        allocations: ZIP ↔ county rows (zip_code, county_fips, state_cap, res_ratio,
            business_ratio, other_ratio, total_ratio).
        reference: County reference (state_fips, county_code, county_name, state_abbr,
            optionally county_fips).
        overrides: zip_code -> county_fips for ties with no ratio signal (None = defaults).
        unresolved: "exclude" or "include" for ties nothing resolves.
        excluded_states: USPS codes dropped before resolution.
        ratio_tolerance: Allowed deviation of a ZIP's total_ratio sum from 1.

    Returns:
        CrosswalkResult with the output table (OUTPUT_COLUMNS, sorted by zipcode) and
        the report of every data-quality issue met on the way.
    """
    report = CrosswalkReport()
    logger.info(f"Allocation table: {len(allocations)} rows")

    valid = validate_allocations(allocations, report)
    mainland = filter_territories(valid, excluded_states)
    check_ratio_sums(mainland, report, tolerance=ratio_tolerance)
    resolved = resolve_best_county(mainland, overrides=overrides, unresolved=unresolved, report=report)
    table = join_reference(resolved, reference, report)

    if report.has_issues:
        logger.warning(f"Crosswalk built with issues: {report.counts()}")
    logger.info(f"Crosswalk: {len(table)} rows, columns: {list(table.columns)}")
    return CrosswalkResult(table=table, report=report)


def build_crosswalk_from_sources(
    base_path: Path | None = None,
    sources: dict | None = None,
    **kwargs,
) -> CrosswalkResult:
    """Read zip_to_county and county_names from the source config, then build_crosswalk.

    Extra keyword arguments go to build_crosswalk. Read failures raise SourceReadError.
    """
    allocations = read("zip_to_county", base_path, sources)
    logger.info(f"Read zip_to_county: {len(allocations)} rows, {allocations['zip_code'].nunique()} ZIP codes")
    reference = read("county_names", base_path, sources)
    logger.info(f"Read county_names: {len(reference)} rows")
    return build_crosswalk(allocations, reference, **kwargs)
