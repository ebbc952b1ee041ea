"""
Generic reader: load a crosswalk source table from SOURCES into a DataFrame.

Single entry point for both inputs. Handles format (csv/xlsx), read-time dtypes,
combine_columns, rename/select, dtypes, zero padding and post_filters.
Every failure to get a usable table raises SourceReadError.
"""

import zipfile
from pathlib import Path

import pandas as pd

from src.configs.sources import SOURCES
from src.table_builder.errors import SourceReadError


def _resolve_path(path_str: str, base_path: Path | None) -> Path:
    p = Path(path_str)
    if not p.is_absolute() and base_path is not None:
        return base_path / p
    return p


def _parse_read_dtypes(read_dtypes: dict) -> dict:
    """Convert schema dtype names to types usable by read_csv/read_excel."""
    type_map = {"string": str, "str": str, "float64": float, "float": float, "int64": int, "int": int}
    out = {}
    for col, dtype in read_dtypes.items():
        if isinstance(dtype, type):
            out[col] = dtype
        else:
            out[col] = type_map.get(dtype, dtype)
    return out


def _read_file(path: Path, spec: dict) -> pd.DataFrame:
    fmt = spec.get("format", "csv").lower()
    read_kw: dict = {}
    if "read_dtypes" in spec:
        read_kw["dtype"] = _parse_read_dtypes(spec["read_dtypes"])
    if fmt == "xlsx":
        read_kw["engine"] = "openpyxl"
        if "sheet" in spec:
            read_kw["sheet_name"] = spec["sheet"]
        if "skiprows" in spec:
            read_kw["skiprows"] = spec["skiprows"]
        return pd.read_excel(path, **read_kw)
    if fmt == "csv":
        return pd.read_csv(path, **read_kw)
    raise ValueError(f"Unsupported format: {fmt}")


def _apply_combine_columns(df: pd.DataFrame, combine_config: dict) -> pd.DataFrame:
    df = df.copy()
    for out_col, spec in combine_config.items():
        from_cols = spec["from"]
        missing = [c for c in from_cols if c not in df.columns]
        if missing:
            raise SourceReadError(f"Cannot build '{out_col}': missing columns {missing}")
        method = spec.get("method", "concat")
        zfill_list = spec.get("zfill", [2, 3])
        if method == "concat_zfill":
            parts = [
                df[c].astype(str).str.strip().str.zfill(zfill_list[i] if i < len(zfill_list) else 0)
                for i, c in enumerate(from_cols)
            ]
        else:
            parts = [df[c].astype(str).str.strip() for c in from_cols]
        df[out_col] = parts[0]
        for part in parts[1:]:
            df[out_col] = df[out_col] + part
        if spec.get("dtype"):
            df[out_col] = df[out_col].astype(spec["dtype"])
    return df


def _apply_post_filters(df: pd.DataFrame, post_filters: dict) -> pd.DataFrame:
    for key, value in post_filters.items():
        if key.endswith("_not_ending_with"):
            col = key.replace("_not_ending_with", "")
            df = df[~df[col].astype(str).str.endswith(str(value))]
        else:
            raise ValueError(f"Unknown post_filter: {key}")
    return df


def _rename_and_select(df: pd.DataFrame, keys: dict, value_columns: dict) -> pd.DataFrame:
    rename = {}
    if keys:
        rename.update({v: k for k, v in keys.items()})
    if value_columns:
        rename.update({v: k for k, v in value_columns.items()})
    df = df.rename(columns=rename)
    keep = list((keys or {}).keys()) + list((value_columns or {}).keys())
    keep = [c for c in keep if c in df.columns]
    return df[keep].copy()


def _apply_dtypes(df: pd.DataFrame, dtypes: dict, zfill: dict | None = None) -> pd.DataFrame:
    """Coerce canonical columns: strings stripped (nulls kept), floats via to_numeric."""
    df = df.copy()
    for col, dtype in dtypes.items():
        if col not in df.columns:
            continue
        if dtype in ("string", "str"):
            df[col] = df[col].astype("string").str.strip()
            width = (zfill or {}).get(col)
            if width:
                df[col] = df[col].str.zfill(width)
        elif isinstance(dtype, str) and dtype.startswith("float"):
            df[col] = pd.to_numeric(df[col], errors="coerce")
        else:
            df[col] = df[col].astype(dtype)
    return df


def read(table_name: str, base_path: Path | None = None, sources: dict | None = None) -> pd.DataFrame:
    """Load a single table from SOURCES into a DataFrame.

    Args:
        table_name: Key in the source config ('zip_to_county' or 'county_names').
        base_path: Project root for resolving relative paths.
        sources: Alternative source config (defaults to SOURCES).

    Returns:
        DataFrame with canonical column names.

    Raises:
        KeyError: table_name is not configured.
        SourceReadError: file missing or unreadable, or required columns absent.
    """
    sources = SOURCES if sources is None else sources
    if table_name not in sources:
        raise KeyError(f"Unknown table '{table_name}'. Available: {list(sources)}")
    spec = sources[table_name]

    path = _resolve_path(spec["path"], base_path)
    if not path.exists():
        raise SourceReadError(f"Data not found: {path}")
    try:
        df = _read_file(path, spec)
    except (OSError, ValueError, zipfile.BadZipFile) as exc:
        raise SourceReadError(f"Could not read {table_name} from {path}: {exc}") from exc

    keys = spec.get("keys", {})
    value_columns = spec.get("value_columns", {})

    # Combine columns (e.g. FIPS)
    if "combine_columns" in spec:
        df = _apply_combine_columns(df, spec["combine_columns"])

    df = _rename_and_select(df, keys, value_columns)

    missing = [c for c in spec.get("required", []) if c not in df.columns]
    if missing:
        raise SourceReadError(f"{table_name} ({path.name}) is missing required columns: {missing}")

    if "dtypes" in spec:
        df = _apply_dtypes(df, spec["dtypes"], spec.get("zfill"))

    if "post_filters" in spec:
        df = _apply_post_filters(df, spec["post_filters"])

    return df.reset_index(drop=True)


def read_many(
    table_names: list[str], base_path: Path | None = None, sources: dict | None = None
) -> dict[str, pd.DataFrame]:
    """Load multiple tables. Returns dict mapping table name to DataFrame."""
    return {name: read(name, base_path, sources) for name in table_names}


def list_tables(sources: dict | None = None) -> list[str]:
    """Return all available table names from SOURCES."""
    return list(SOURCES if sources is None else sources)


def read_overrides(path: Path) -> dict[str, str]:
    """Load a manual tie-break table (CSV with zip_code, county_fips) into a dict."""
    path = Path(path)
    if not path.exists():
        raise SourceReadError(f"Overrides not found: {path}")
    try:
        df = pd.read_csv(path, dtype=str)
    except (OSError, ValueError) as exc:
        raise SourceReadError(f"Could not read overrides from {path}: {exc}") from exc

    missing = [c for c in ("zip_code", "county_fips") if c not in df.columns]
    if missing:
        raise SourceReadError(f"Overrides file {path.name} is missing columns: {missing}")

    df = df.dropna(subset=["zip_code", "county_fips"])
    df["zip_code"] = df["zip_code"].str.strip().str.zfill(5)
    df["county_fips"] = df["county_fips"].str.strip().str.zfill(5)
    df = df.drop_duplicates(subset=["zip_code", "county_fips"])
    conflicts = df[df["zip_code"].duplicated(keep=False)]
    if not conflicts.empty:
        raise ValueError(f"Conflicting overrides for ZIP codes: {sorted(conflicts['zip_code'].unique())}")
    return dict(zip(df["zip_code"], df["county_fips"]))
