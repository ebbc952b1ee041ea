"""
Pipeline: Build the one-row-per-ZIP county crosswalk.

Reads the HUD-USPS ZIP ↔ county file and the Census county names (src/configs/sources.py),
keeps mainland ZIP codes, assigns each ZIP to the county with its largest address share,
and joins county names. Output columns: zipcode, CountyFIPS_5, CountyName, StateAbbr,
StateFIPSCode, CountyFIPSCode, RES_RATIO, max_tot_ratio.
"""

import argparse
import logging
import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from src.configs.crosswalk import (
    DEFAULT_OUTPUT_PATH,
    DEFAULT_REPORT_PATH,
    DEFAULT_UNRESOLVED_POLICY,
    EXCLUDED_STATES,
    TERRITORY_STATES,
    UNRESOLVED_POLICIES,
)
from src.crosswalk.report import summarize_crosswalk
from src.table_builder.builder import build_crosswalk_from_sources
from src.table_builder.errors import SourceReadError, SourceWriteError
from src.table_builder.reader import read_overrides
from src.table_builder.writer import write_report, write_table

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def _resolve_path(path_str: str, base_path: Path) -> Path:
    p = Path(path_str)
    return base_path / p if not p.is_absolute() else p


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Build the ZIP → county crosswalk (one county per mainland ZIP code)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=DEFAULT_OUTPUT_PATH,
        help=f"Output .xlsx or .csv path (default: {DEFAULT_OUTPUT_PATH})",
    )
    parser.add_argument(
        "--base-path",
        type=str,
        default=None,
        help="Project root for data paths (default: project root)",
    )
    parser.add_argument(
        "--overrides",
        type=str,
        default=None,
        help="CSV of zip_code,county_fips tie-break overrides (default: built-in overrides)",
    )
    parser.add_argument(
        "--unresolved",
        choices=UNRESOLVED_POLICIES,
        default=DEFAULT_UNRESOLVED_POLICY,
        help="Ties with no residential signal or override: exclude the ZIP or include its lowest-FIPS county",
    )
    parser.add_argument(
        "--keep-military",
        action="store_true",
        help="Keep AA/AE/AP armed-forces ZIP codes (only territories are dropped)",
    )
    parser.add_argument(
        "--report",
        type=str,
        default=DEFAULT_REPORT_PATH,
        help=f"Issue report CSV path (default: {DEFAULT_REPORT_PATH})",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress table head prints (only show INFO logs)",
    )
    args = parser.parse_args()

    base_path = Path(args.base_path) if args.base_path else project_root
    excluded = TERRITORY_STATES if args.keep_military else EXCLUDED_STATES

    print("Building ZIP → county crosswalk...")
    try:
        overrides = read_overrides(_resolve_path(args.overrides, base_path)) if args.overrides else None
        result = build_crosswalk_from_sources(
            base_path=base_path,
            overrides=overrides,
            unresolved=args.unresolved,
            excluded_states=excluded,
        )
        if not args.quiet:
            print(f"\n--- crosswalk (head) ---\n{result.table.head()}\n")
        for name, value in summarize_crosswalk(result.table).items():
            logger.info(f"  {name}: {value}")

        output_path = write_table(result.table, _resolve_path(args.output, base_path))
        print(f"Saved {len(result.table)} rows to {output_path}")
        if result.report.has_issues:
            report_path = write_report(result.report, _resolve_path(args.report, base_path))
            print(f"Saved {len(result.report)} issues to {report_path}: {result.report.counts()}")
    except (SourceReadError, SourceWriteError, ValueError) as exc:
        logger.error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
