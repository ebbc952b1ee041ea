"""
Diagnostic report for a crosswalk build.

Row-level data-quality problems never stop a build; they are collected here and
returned alongside the table.
"""

import json
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import pandas as pd


class IssueKind(str, Enum):
    MALFORMED_RECORD = "malformed_record"
    UNRESOLVED_TIE = "unresolved_tie"
    UNMATCHED_COUNTY = "unmatched_county_reference"
    RATIO_SUM_MISMATCH = "ratio_sum_mismatch"


@dataclass
class Issue:
    """One data-quality finding, tied to a ZIP code where there is one."""
    kind: IssueKind
    zip_code: Optional[str]
    message: str
    county_fips: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class CrosswalkReport:
    issues: list[Issue] = field(default_factory=list)

    def add(self, issue: Issue) -> None:
        self.issues.append(issue)

    def extend(self, issues) -> None:
        self.issues.extend(issues)

    def of_kind(self, kind: IssueKind) -> list[Issue]:
        return [i for i in self.issues if i.kind == kind]

    def zip_codes(self, kind: IssueKind) -> set[str]:
        return {i.zip_code for i in self.of_kind(kind) if i.zip_code is not None}

    def counts(self) -> dict[str, int]:
        """Number of issues per kind (kinds with no issues are left out)."""
        return dict(Counter(i.kind.value for i in self.issues))

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)

    def to_frame(self) -> pd.DataFrame:
        columns = ["kind", "zip_code", "county_fips", "message", "details"]
        rows = [
            {
                "kind": i.kind.value,
                "zip_code": i.zip_code,
                "county_fips": i.county_fips,
                "message": i.message,
                "details": json.dumps(i.details, sort_keys=True, default=str) if i.details else "",
            }
            for i in self.issues
        ]
        return pd.DataFrame(rows, columns=columns)

    def __len__(self) -> int:
        return len(self.issues)


@dataclass
class CrosswalkResult:
    table: pd.DataFrame
    report: CrosswalkReport


def summarize_crosswalk(table: pd.DataFrame) -> dict[str, int]:
    """Counts used to sanity-check a finished crosswalk (output column names)."""
    return {
        "rows": len(table),
        "zip_codes": int(table["zipcode"].nunique()),
        "counties": int(table["CountyFIPS_5"].nunique()),
        "states": int(table["StateAbbr"].nunique()),
        "zero_residential": int((table["RES_RATIO"] == 0).sum()),
        "missing_county_name": int(table["CountyName"].isna().sum()),
    }
