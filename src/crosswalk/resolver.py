"""
Best-county resolution: collapse the ZIP ↔ county allocation rows to one county per ZIP.

Each ZIP keeps the county holding the largest share of its addresses (total_ratio).
Ties at the maximum (in practice two counties at 0.5 each) are broken, in order, by:

1. residential signal: the only tied county with any residential addresses wins;
2. override: a manual zip_code -> county_fips mapping naming one of the tied counties.

A tie neither rule settles is reported as unresolved and handled by the
`unresolved` policy ("exclude" drops the ZIP, "include" keeps the tied county with
the lowest FIPS code). Row order of the input never changes the result.
"""

import logging

import pandas as pd

from src.configs.crosswalk import (
    DEFAULT_OVERRIDES,
    DEFAULT_UNRESOLVED_POLICY,
    MAX_RATIO_COLUMN,
    UNRESOLVED_POLICIES,
)
from src.crosswalk.report import CrosswalkReport, Issue, IssueKind

logger = logging.getLogger(__name__)


def _candidates_detail(group: pd.DataFrame) -> list[dict]:
    return [
        {
            "county_fips": row.county_fips,
            "res_ratio": float(row.res_ratio),
            "total_ratio": float(row.total_ratio),
        }
        for row in group.sort_values("county_fips").itertuples(index=False)
    ]


def _break_tie(
    zip_code: str,
    group: pd.DataFrame,
    overrides: dict[str, str],
    unresolved: str,
    report: CrosswalkReport,
) -> pd.DataFrame | None:
    """Pick one row out of a ZIP's tied candidates, or report the ZIP and apply the policy."""
    residential = group[group["res_ratio"] > 0]
    if len(residential) == 1:
        logger.info(f"ZIP {zip_code}: tie broken by residential ratio -> {residential['county_fips'].iloc[0]}")
        return residential

    override = overrides.get(zip_code)
    if override is not None:
        chosen = group[group["county_fips"] == override]
        if len(chosen) == 1:
            logger.info(f"ZIP {zip_code}: tie broken by override -> {override}")
            return chosen
        reason = f"override county {override} is not one of the tied counties"
    else:
        reason = "no residential signal and no override"

    counties = sorted(group["county_fips"])
    if unresolved == "include":
        fallback = group.sort_values("county_fips").head(1)
        outcome = f"kept with default county {counties[0]} (lowest FIPS)"
    else:
        fallback = None
        outcome = "excluded from the crosswalk"
    report.add(
        Issue(
            kind=IssueKind.UNRESOLVED_TIE,
            zip_code=zip_code,
            county_fips=None if fallback is None else counties[0],
            message=f"tie between {', '.join(counties)} at total_ratio {group['total_ratio'].iloc[0]}: {reason}; {outcome}",
            details={"candidates": _candidates_detail(group), "policy": unresolved},
        )
    )
    logger.warning(f"ZIP {zip_code}: unresolved tie between {counties}; {outcome}")
    return fallback


def resolve_best_county(
    allocations: pd.DataFrame,
    overrides: dict[str, str] | None = None,
    unresolved: str = DEFAULT_UNRESOLVED_POLICY,
    report: CrosswalkReport | None = None,
) -> pd.DataFrame:
    """Reduce allocation rows to one row per zip_code.

    Args:
        allocations: Validated, mainland-only allocation rows (zip_code, county_fips,
            res_ratio, total_ratio, ...).
        overrides: zip_code -> county_fips for ties with no ratio signal.
            Defaults to DEFAULT_OVERRIDES; pass {} to disable.
        unresolved: Policy for ties left after both rules, "exclude" or "include".
        report: Collects unresolved ties.

    Returns:
        The chosen rows with a max_tot_ratio column, sorted by zip_code.
    """
    if unresolved not in UNRESOLVED_POLICIES:
        raise ValueError(f"Unknown unresolved policy '{unresolved}'. Use one of {UNRESOLVED_POLICIES}")
    overrides = DEFAULT_OVERRIDES if overrides is None else overrides
    report = report if report is not None else CrosswalkReport()

    df = allocations.copy()
    df["total_ratio"] = df["total_ratio"].astype(float)
    df[MAX_RATIO_COLUMN] = df.groupby("zip_code")["total_ratio"].transform("max")
    candidates = df[df["total_ratio"] == df[MAX_RATIO_COLUMN]]
    n_candidates = candidates.groupby("zip_code")["total_ratio"].transform("size")

    winners = [candidates[n_candidates == 1]]
    tied = candidates[n_candidates > 1]
    if not tied.empty:
        logger.info(f"{tied['zip_code'].nunique()} ZIP codes tied at their maximum total_ratio")
    for zip_code, group in tied.groupby("zip_code", sort=True):
        winner = _break_tie(zip_code, group, overrides, unresolved, report)
        if winner is not None:
            winners.append(winner)

    frames = [w for w in winners if not w.empty] or [candidates.iloc[0:0]]
    out = pd.concat(frames)
    out = out.sort_values("zip_code", kind="stable").reset_index(drop=True)
    logger.info(f"Resolved {len(out)} ZIP codes from {len(df)} allocation rows")
    return out
