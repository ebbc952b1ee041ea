"""Mainland-only scope: drop allocation rows whose ZIP belongs to a territory or APO/FPO code."""

import logging

import pandas as pd

from src.configs.crosswalk import EXCLUDED_STATES

logger = logging.getLogger(__name__)


def filter_territories(
    allocations: pd.DataFrame,
    excluded_states=EXCLUDED_STATES,
    state_column: str = "state_cap",
) -> pd.DataFrame:
    """Return the rows whose state is not excluded, in their original order and unchanged."""
    is_excluded = allocations[state_column].isin(list(excluded_states))
    out = allocations[~is_excluded].copy()
    dropped = int(is_excluded.sum())
    if dropped:
        states = sorted(allocations.loc[is_excluded, state_column].unique())
        logger.info(f"Dropped {dropped} rows outside the mainland: {states}")
    logger.info(f"After territory filter: {len(out)} rows, {out['zip_code'].nunique()} ZIP codes")
    return out
