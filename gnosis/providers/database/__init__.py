"""Database providers for Gnosis."""

from .duckdb_store import DATABASE_FILENAME, DuckDBIndexStore
from .mapping import ANALYZER_STEMMERS, FieldMapping, IndexMapping, build_index_mapping

__all__ = [
    "ANALYZER_STEMMERS",
    "DATABASE_FILENAME",
    "DuckDBIndexStore",
    "FieldMapping",
    "IndexMapping",
    "build_index_mapping",
]
