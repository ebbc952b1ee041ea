"""Table builder: source reader, crosswalk builder and writer."""

from src.table_builder.reader import read, read_many, list_tables, read_overrides
from src.table_builder.builder import build_crosswalk, build_crosswalk_from_sources
from src.table_builder.writer import write_table, write_report
from src.table_builder.errors import SourceReadError, SourceWriteError

__all__ = [
    "read",
    "read_many",
    "list_tables",
    "read_overrides",
    "build_crosswalk",
    "build_crosswalk_from_sources",
    "write_table",
    "write_report",
    "SourceReadError",
    "SourceWriteError",
]
