"""
Source configuration for the ZIP → county crosswalk inputs.

Canonical keys (aligned across tables):
- zip_code: 5-digit ZIP code (string, leading zeros kept)
- county_fips: 5-digit FIPS code (state 2 + county 3)
- state_cap: 2-letter USPS state code of the ZIP
- state_abbr: 2-letter state code from the Census reference

Paths are relative to the project root passed in as base_path.
"""

SOURCES = {
    # ---- HUD-USPS ZIP ↔ county allocation (many rows per ZIP) ----
    "zip_to_county": {
        "path": "data/input/ZIP_COUNTY_032023.xlsx",
        "format": "xlsx",
        "vintage": 2023,  # First quarter 2023, 2020 Census geographies
        # Apply at read time so no later step can alter or lose values (e.g. leading zeros)
        "read_dtypes": {
            "ZIP": "string",
            "COUNTY": "string",
            "USPS_ZIP_PREF_CITY": "string",
            "USPS_ZIP_PREF_STATE": "string",
            "RES_RATIO": "float64",
            "BUS_RATIO": "float64",
            "OTH_RATIO": "float64",
            "TOT_RATIO": "float64",
        },
        "keys": {
            "zip_code": "ZIP",
            "county_fips": "COUNTY",
        },
        "value_columns": {
            "state_cap": "USPS_ZIP_PREF_STATE",
            "city": "USPS_ZIP_PREF_CITY",
            "res_ratio": "RES_RATIO",
            "business_ratio": "BUS_RATIO",
            "other_ratio": "OTH_RATIO",
            "total_ratio": "TOT_RATIO",
        },
        "required": [
            "zip_code",
            "county_fips",
            "state_cap",
            "res_ratio",
            "business_ratio",
            "other_ratio",
            "total_ratio",
        ],
        "dtypes": {
            "zip_code": "string",
            "county_fips": "string",
            "state_cap": "string",
            "city": "string",
            "res_ratio": "float64",
            "business_ratio": "float64",
            "other_ratio": "float64",
            "total_ratio": "float64",
        },
        "zfill": {"zip_code": 5, "county_fips": 5},
    },
    # ---- Census SAIPE state/county names (one row per county + state aggregates) ----
    "county_names": {
        "path": "data/input/state_county_census_2021.xlsx",
        "format": "xlsx",
        "vintage": 2021,
        "read_dtypes": {
            "StateFIPSCode": "string",
            "CountyFIPSCode": "string",
            "StateAbbr": "string",
            "Name": "string",
        },
        "keys": {
            "county_fips": "county_fips",
        },
        "combine_columns": {
            "county_fips": {
                "from": ["StateFIPSCode", "CountyFIPSCode"],
                "method": "concat_zfill",
                "zfill": [2, 3],
                "dtype": "string",
            }
        },
        # County code 000 marks the US and state totals, not counties
        "post_filters": {
            "county_fips_not_ending_with": "000",
        },
        "value_columns": {
            "state_fips": "StateFIPSCode",
            "county_code": "CountyFIPSCode",
            "county_name": "Name",
            "state_abbr": "StateAbbr",
        },
        "required": ["county_fips", "state_fips", "county_code", "county_name", "state_abbr"],
        "dtypes": {
            "county_fips": "string",
            "state_fips": "string",
            "county_code": "string",
            "county_name": "string",
            "state_abbr": "string",
        },
        "zfill": {"state_fips": 2, "county_code": 3},
    },
}
