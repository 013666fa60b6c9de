"""DuckDB index store for Gnosis.

DuckDB plays the part of the index engine: one ``documents`` table keyed by
document id, an ``index_meta`` table recording the mapping the index was
created with, and DuckDB's ``fts`` extension for analyzed full-text search
over the text fields.

Thread safety: a DuckDB connection must not be used by two threads at once,
so every engine call runs on a single executor thread that owns the
connection. Callers on any thread (watchers, the initial walk) submit work
and wait for the result; operations are applied in submission order.
"""

import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, TypeVar

import duckdb
from loguru import logger

from gnosis.core.exceptions import (
    IndexLockedError,
    IndexOpenError,
    MappingError,
    StoreClosedError,
    StoreError,
)
from gnosis.core.models import Document

from .mapping import IndexMapping

DATABASE_FILENAME = "index.duckdb"
SCHEMA_VERSION = "1"

T = TypeVar("T")

# Index locations opened by this process. DuckDB shares one database
# instance between connections of the same process, so its file lock only
# guards against other processes.
_open_locations: set[str] = set()
_open_locations_lock = threading.Lock()


class DuckDBIndexStore:
    """Open index handle: upsert and delete documents by id."""

    def __init__(self, index_path: Path | str, mapping: IndexMapping, fulltext: bool = True):
        """Initialize the store without opening it.

        Use :meth:`open_or_create` to obtain an open store.

        Args:
            index_path: Directory holding the index
            mapping: Mapping used when the index has to be created
            fulltext: Whether to maintain the fts full-text index
        """
        self._index_path = Path(index_path)
        self._db_path = self._index_path / DATABASE_FILENAME
        self.mapping = mapping
        self._fulltext = fulltext
        self._fulltext_ready = False
        # Documents changed since the last full-text refresh
        self._dirty = True

        self._connection: duckdb.DuckDBPyConnection | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._location_key: str | None = None
        self._closed = False
        self._close_lock = threading.Lock()

        # Checkpoint tracking
        self._operations_since_checkpoint = 0
        self._checkpoint_threshold = 100

    @classmethod
    def open_or_create(
        cls, index_path: Path | str, mapping: IndexMapping, fulltext: bool = True
    ) -> "DuckDBIndexStore":
        """Open the index at *index_path*, creating it from *mapping* if absent.

        Raises:
            IndexLockedError: If this process already has the location open
            IndexOpenError: If an existing index cannot be opened or a new one
                cannot be created
            MappingError: If the stored mapping is unreadable
        """
        store = cls(index_path, mapping, fulltext=fulltext)
        store._open()
        return store

    @property
    def index_path(self) -> Path:
        return self._index_path

    @property
    def db_path(self) -> Path:
        """Database file inside the index directory."""
        return self._db_path

    @property
    def is_open(self) -> bool:
        return self._executor is not None and not self._closed

    def _open(self) -> None:
        key = str(self._index_path.resolve())
        with _open_locations_lock:
            if key in _open_locations:
                raise IndexLockedError(self._index_path)
            _open_locations.add(key)
        self._location_key = key

        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"gnosis-store-{self.mapping.document_type}"
        )
        try:
            self._executor.submit(self._connect).result()
        except BaseException:
            self._executor.shutdown(wait=True)
            self._executor = None
            self._release_location()
            raise

    def _release_location(self) -> None:
        if self._location_key is not None:
            with _open_locations_lock:
                _open_locations.discard(self._location_key)
            self._location_key = None

    def _require_connection(self) -> duckdb.DuckDBPyConnection:
        """The open connection. Only valid on the executor thread."""
        if self._connection is None:
            raise StoreClosedError(f"Index at {self._index_path} has no open connection")
        return self._connection

    def _connect(self) -> None:
        """Open or create the database. Runs on the executor thread."""
        if self._index_path.exists() and not self._index_path.is_dir():
            raise IndexOpenError(self._index_path, "index location is not a directory")

        exists = self._db_path.exists()
        if exists:
            logger.info(f"Opening existing index {self.mapping.document_type} at {self._index_path}")
        else:
            logger.info(f"Creating new index {self.mapping.document_type} at {self._index_path}")
            try:
                self._index_path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise IndexOpenError(self._index_path, str(e)) from e

        try:
            self._connection = duckdb.connect(str(self._db_path))
        except duckdb.Error as e:
            raise IndexOpenError(self._index_path, str(e)) from e

        try:
            if exists:
                self._load_stored_mapping()
            else:
                self._create_schema()
        except duckdb.Error as e:
            self._connection.close()
            self._connection = None
            raise IndexOpenError(self._index_path, str(e)) from e
        except (IndexOpenError, MappingError):
            self._connection.close()
            self._connection = None
            raise

        if self._fulltext:
            self._load_fulltext_extension()

    def _create_schema(self) -> None:
        """Create the document table from the mapping."""
        connection = self._require_connection()
        columns = ", ".join(
            f"{f.name} {f.column_type}{' PRIMARY KEY' if f.name == 'id' else ''}"
            for f in self.mapping.fields
        )
        connection.execute(f"CREATE TABLE IF NOT EXISTS documents ({columns})")
        connection.execute("""
            CREATE TABLE IF NOT EXISTS index_meta (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        connection.execute(
            "INSERT OR REPLACE INTO index_meta (key, value) VALUES ('mapping', ?)",
            [self.mapping.to_json()],
        )
        connection.execute(
            "INSERT OR REPLACE INTO index_meta (key, value) VALUES ('schema_version', ?)",
            [SCHEMA_VERSION],
        )
        logger.debug(f"Created schema for index {self.mapping.document_type}")

    def _load_stored_mapping(self) -> None:
        """Adopt the mapping an existing index was created with."""
        connection = self._require_connection()
        if not (self._table_exists("documents") and self._table_exists("index_meta")):
            raise IndexOpenError(self._index_path, "database is not a gnosis index")

        row = connection.execute(
            "SELECT value FROM index_meta WHERE key = 'mapping'"
        ).fetchone()
        if row is None:
            raise IndexOpenError(self._index_path, "index mapping is missing")

        stored = IndexMapping.from_json(row[0])
        if stored != self.mapping:
            logger.warning(
                f"Index at {self._index_path} was created with a different mapping "
                f"(analyzer '{stored.analyzer}', type '{stored.document_type}'); "
                "keeping the stored mapping"
            )
        self.mapping = stored

    def _table_exists(self, table_name: str) -> bool:
        connection = self._require_connection()
        row = connection.execute(
            "SELECT COUNT(*) FROM information_schema.tables WHERE table_name = ?",
            [table_name],
        ).fetchone()
        return bool(row and row[0] > 0)

    def _load_fulltext_extension(self) -> None:
        connection = self._require_connection()
        try:
            connection.execute("LOAD fts")
        except duckdb.Error:
            try:
                connection.execute("INSTALL fts")
                connection.execute("LOAD fts")
            except duckdb.Error as e:
                logger.warning(f"DuckDB fts extension unavailable, full-text index disabled: {e}")
                return
        self._fulltext_ready = True
        logger.debug("DuckDB fts extension loaded")

    def _submit(self, func: Callable[..., T], *args: Any) -> T:
        """Run *func* on the executor thread and wait for its result."""
        executor = self._executor
        if executor is None or self._closed:
            raise StoreClosedError(f"Index at {self._index_path} is closed")
        try:
            future = executor.submit(func, *args)
        except RuntimeError as e:
            # Executor shut down between the check and the submit
            raise StoreClosedError(f"Index at {self._index_path} is closed") from e
        return future.result()

    def upsert(self, doc_id: str, document: Document) -> None:
        """Insert or fully replace the document stored under *doc_id*.

        Raises:
            StoreError: If the engine rejects the write
            StoreClosedError: If the store has been closed
        """
        self._submit(self._upsert, document.with_id(doc_id).to_dict())

    def _upsert(self, row: dict[str, Any]) -> None:
        connection = self._require_connection()
        names = [name for name in self.mapping.field_names if name in row]
        placeholders = ", ".join("?" for _ in names)
        try:
            connection.execute(
                f"INSERT OR REPLACE INTO documents ({', '.join(names)}) VALUES ({placeholders})",
                [row[name] for name in names],
            )
        except duckdb.Error as e:
            raise StoreError(f"Failed to upsert document {row['id']}: {e}") from e
        self._dirty = True
        self._maybe_checkpoint()

    def delete(self, doc_id: str) -> bool:
        """Delete the document stored under *doc_id*.

        Returns:
            True if a document was removed, False if none was stored

        Raises:
            StoreError: If the engine rejects the delete
            StoreClosedError: If the store has been closed
        """
        return self._submit(self._delete, doc_id)

    def _delete(self, doc_id: str) -> bool:
        connection = self._require_connection()
        try:
            row = connection.execute(
                "SELECT COUNT(*) FROM documents WHERE id = ?", [doc_id]
            ).fetchone()
            if not row or row[0] == 0:
                return False
            connection.execute("DELETE FROM documents WHERE id = ?", [doc_id])
        except duckdb.Error as e:
            raise StoreError(f"Failed to delete document {doc_id}: {e}") from e
        self._dirty = True
        self._maybe_checkpoint()
        return True

    def get_document(self, doc_id: str) -> Document | None:
        """Return the stored document for *doc_id*, if any."""
        return self._submit(self._get_document, doc_id)

    def _get_document(self, doc_id: str) -> Document | None:
        connection = self._require_connection()
        names = self.mapping.field_names
        row = connection.execute(
            f"SELECT {', '.join(names)} FROM documents WHERE id = ?", [doc_id]
        ).fetchone()
        if row is None:
            return None
        return Document.from_dict(dict(zip(names, row)))

    def document_ids(self) -> set[str]:
        """Return the ids of every stored document."""
        return self._submit(self._document_ids)

    def _document_ids(self) -> set[str]:
        connection = self._require_connection()
        rows = connection.execute("SELECT id FROM documents").fetchall()
        return {row[0] for row in rows}

    def count(self) -> int:
        """Number of stored documents."""
        return len(self.document_ids())

    def refresh_search_index(self) -> bool:
        """Rebuild the full-text index if documents changed since the last refresh.

        Returns:
            True if the full-text index was rebuilt
        """
        return self._submit(self._refresh_search_index)

    def _refresh_search_index(self) -> bool:
        connection = self._require_connection()
        if not (self._fulltext and self._fulltext_ready and self._dirty):
            return False

        fields = ", ".join(f"'{name}'" for name in self.mapping.text_fields)
        try:
            connection.execute(
                f"PRAGMA create_fts_index('documents', 'id', {fields}, "
                f"stemmer='{self.mapping.stemmer}', overwrite=1)"
            )
        except duckdb.Error as e:
            logger.warning(f"Failed to rebuild full-text index, disabling it: {e}")
            self._fulltext_ready = False
            return False

        self._dirty = False
        logger.debug(f"Full-text index refreshed for {self.mapping.document_type}")
        return True

    def _maybe_checkpoint(self, force: bool = False) -> None:
        """Checkpoint the WAL every few hundred writes."""
        connection = self._require_connection()
        self._operations_since_checkpoint += 1
        if not force and self._operations_since_checkpoint < self._checkpoint_threshold:
            return
        try:
            connection.execute("CHECKPOINT")
            self._operations_since_checkpoint = 0
        except duckdb.Error as e:
            logger.warning(f"Checkpoint failed: {e}")

    def close(self) -> None:
        """Checkpoint and close the index. Safe to call more than once."""
        with self._close_lock:
            if self._closed or self._executor is None:
                self._closed = True
                return
            self._closed = True
            executor = self._executor

        try:
            executor.submit(self._disconnect).result()
        finally:
            executor.shutdown(wait=True)
            self._executor = None
            self._release_location()

    def _disconnect(self) -> None:
        if self._connection is None:
            return
        try:
            self._connection.execute("CHECKPOINT")
        except duckdb.Error as e:
            logger.error(f"Checkpoint failed during close: {e}")
        finally:
            self._connection.close()
            self._connection = None
            logger.info(f"Index {self.mapping.document_type} closed")
