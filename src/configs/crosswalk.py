"""
Crosswalk rules: scope, tie-break overrides, output schema.
"""

# Non-mainland jurisdictions (USPS codes)
TERRITORY_STATES = frozenset({"AS", "FM", "GU", "MH", "MP", "PR", "PW", "VI"})

# Armed-forces postal designations (Americas, Europe, Pacific); not places, but out of scope too
MILITARY_STATES = frozenset({"AA", "AE", "AP"})

EXCLUDED_STATES = TERRITORY_STATES | MILITARY_STATES

# ZIP codes split exactly between counties with no ratio signal, resolved by hand.
# zip_code -> county_fips; must name one of the tied counties.
DEFAULT_OVERRIDES = {
    "16871": "42033",  # Pottersdale, PA -> Clearfield County
}

# What to do with a tie that neither residential ratio nor an override resolves:
# - exclude: drop the ZIP from the table (it stays in the report)
# - include: keep the tied county with the lowest FIPS code (flagged in the report)
UNRESOLVED_POLICIES = ("exclude", "include")
DEFAULT_UNRESOLVED_POLICY = "exclude"

# Allowed |sum(total_ratio) - 1| per ZIP before it is reported
RATIO_SUM_TOLERANCE = 0.01

RATIO_COLUMNS = ["res_ratio", "business_ratio", "other_ratio", "total_ratio"]
MAX_RATIO_COLUMN = "max_tot_ratio"

STATE_AGGREGATE_CODE = "000"

# canonical column -> output column
OUTPUT_RENAME = {
    "zip_code": "zipcode",
    "county_fips": "CountyFIPS_5",
    "county_name": "CountyName",
    "state_abbr": "StateAbbr",
    "state_fips": "StateFIPSCode",
    "county_code": "CountyFIPSCode",
    "res_ratio": "RES_RATIO",
    "max_tot_ratio": "max_tot_ratio",
}
OUTPUT_COLUMNS = list(OUTPUT_RENAME.values())

DEFAULT_OUTPUT_PATH = "data/output/county_zip_crosswalk.xlsx"
DEFAULT_REPORT_PATH = "data/output/county_zip_crosswalk_issues.csv"
