"""Indexing coordinator: the update and delete protocol shared by the
initial directory walk and the change watchers.

Per-file failures never escape this class. A page that cannot be loaded, a
restricted page or a rejected store write is logged and counted, and the
caller moves on to the next file.
"""

import threading
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from gnosis.core.exceptions import PageLoadError, RestrictedPageError, StoreError
from gnosis.core.paths import relative_id
from gnosis.providers.database import DuckDBIndexStore

from .document_builder import DocumentBuilder


@dataclass
class CoordinatorStats:
    """Running totals of what the coordinator has done."""

    updated: int = 0
    deleted: int = 0
    skipped: int = 0
    failed: int = 0


class IndexingCoordinator:
    """Applies file updates and deletions to one index store.

    Safe to share between the walker and every watcher of a session; the
    store serializes engine calls and the counters are guarded by a lock.
    """

    def __init__(self, store: DuckDBIndexStore, builder: DocumentBuilder, extension: str):
        """Initialize indexing coordinator.

        Args:
            store: Open index store documents are written to
            builder: Builds documents from content files
            extension: Suffix a file name must end with to be indexed
        """
        self.store = store
        self.builder = builder
        self.extension = extension
        self._stats = CoordinatorStats()
        self._stats_lock = threading.Lock()
        self._written_ids: set[str] = set()

    @property
    def stats(self) -> CoordinatorStats:
        """Snapshot of the counters."""
        with self._stats_lock:
            return CoordinatorStats(**vars(self._stats))

    @property
    def written_ids(self) -> set[str]:
        """Ids of every document this coordinator has stored."""
        with self._stats_lock:
            return set(self._written_ids)

    def _count(self, name: str) -> None:
        with self._stats_lock:
            setattr(self._stats, name, getattr(self._stats, name) + 1)

    def matches_extension(self, path: Path | str) -> bool:
        return str(path).endswith(self.extension)

    def process_update(self, path: Path | str, root: Path | str) -> bool:
        """Rebuild the document for *path* and store it under its id.

        Returns:
            True if a document was written
        """
        doc_id = relative_id(path, root)

        try:
            document = self.builder.build(path)
        except RestrictedPageError as e:
            logger.info(f"Skipping restricted page {doc_id}: {e.title}")
            self._count("skipped")
            # A page that became restricted must leave the index
            try:
                if self.store.delete(doc_id):
                    logger.info(f"Removed restricted page {doc_id} from index")
            except StoreError as store_error:
                logger.error(f"Failed to delete restricted page {doc_id}: {store_error}")
                self._count("failed")
            return False
        except PageLoadError as e:
            logger.warning(f"Failed to build document {doc_id}: {e.reason}")
            self._count("failed")
            return False

        try:
            self.store.upsert(doc_id, document)
        except StoreError as e:
            logger.error(f"Failed to index {doc_id}: {e}")
            self._count("failed")
            return False

        logger.debug(f"Indexed {doc_id}")
        with self._stats_lock:
            self._stats.updated += 1
            self._written_ids.add(doc_id)
        return True

    def process_delete(self, path: Path | str, root: Path | str) -> bool:
        """Delete the document for *path*.

        Returns:
            True if a stored document was removed
        """
        doc_id = relative_id(path, root)

        try:
            removed = self.store.delete(doc_id)
        except StoreError as e:
            logger.error(f"Failed to delete {doc_id}: {e}")
            self._count("failed")
            return False

        if removed:
            logger.debug(f"Deleted {doc_id}")
            self._count("deleted")
        else:
            logger.debug(f"Delete of {doc_id} ignored, not in index")
        return removed
