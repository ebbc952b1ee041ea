"""Crosswalk core: territory filter, best-county resolver, reference joiner and report."""

from src.crosswalk.territory import filter_territories
from src.crosswalk.resolver import resolve_best_county
from src.crosswalk.joiner import join_reference, prepare_reference
from src.crosswalk.validation import validate_allocations, check_ratio_sums
from src.crosswalk.report import (
    CrosswalkReport,
    CrosswalkResult,
    Issue,
    IssueKind,
    summarize_crosswalk,
)

__all__ = [
    "filter_territories",
    "resolve_best_county",
    "join_reference",
    "prepare_reference",
    "validate_allocations",
    "check_ratio_sums",
    "CrosswalkReport",
    "CrosswalkResult",
    "Issue",
    "IssueKind",
    "summarize_crosswalk",
]
