"""Index session: one open index plus the watchers that keep it current.

Opening a session brings the on-disk index in line with the watched
directories and then keeps it there:

1. Build the mapping and open (or create) the store.
2. For each watched root in configuration order, start its watcher and
   then walk the root. The watcher starts first so changes made during the
   walk are queued and applied afterwards; rebuilding a file twice is
   harmless because upserts replace whole documents.
3. Delete documents that were stored before opening and that nothing has
   written since: their files disappeared while no session was running.
   Documents a watcher stores during a slow walk are never orphans.
4. Refresh the full-text index.

Any fatal error during opening releases everything already acquired before
it propagates.
"""

import threading

from loguru import logger

from gnosis.core.config import Config, IndexSection
from gnosis.core.exceptions import GnosisError, WatchError
from gnosis.providers.database import DuckDBIndexStore, build_index_mapping

from .change_watcher import ChangeWatcher
from .directory_walker import WalkResult, walk_directory
from .document_builder import DocumentBuilder
from .indexing_coordinator import IndexingCoordinator


class IndexSession:
    """An open index and its running watchers."""

    def __init__(self, section: IndexSection, store: DuckDBIndexStore):
        self.section = section
        self.store = store
        self.coordinator = IndexingCoordinator(
            store, DocumentBuilder(section.restricted), section.watch_extension
        )
        self.watchers: list[ChangeWatcher] = []
        self.walk_results: list[WalkResult] = []
        self.orphans_removed = 0
        self._failed: list[ChangeWatcher] = []
        self._failed_lock = threading.Lock()
        self._closed = False

    @property
    def name(self) -> str:
        return self.section.index_name

    @classmethod
    def open(cls, section: IndexSection, watch: bool = True) -> "IndexSession":
        """Open the index described by *section* and bring it up to date.

        Args:
            section: Index configuration
            watch: Start a watcher for every root (False for one-shot indexing)

        Raises:
            GnosisError: A fatal error (mapping, store, walk or watch); nothing
                acquired by this call stays open
        """
        mapping = build_index_mapping(section)
        store = DuckDBIndexStore.open_or_create(
            section.get_index_path(), mapping, fulltext=section.fulltext
        )
        session = cls(section, store)

        try:
            stored_before = store.document_ids() if section.cleanup_orphans else set()

            for root in section.roots:
                if watch:
                    watcher = ChangeWatcher(
                        root,
                        section,
                        session.coordinator,
                        store,
                        on_error=session._on_watch_error,
                    )
                    watcher.start()
                    session.watchers.append(watcher)
                session.walk_results.append(walk_directory(root, root, session.coordinator))

            if section.cleanup_orphans:
                session.orphans_removed = session._cleanup_orphaned_documents(stored_before)

            store.refresh_search_index()
        except GnosisError:
            session._release(drain=False)
            raise

        logger.info(
            f"Index {session.name} ready: {session.document_count} documents "
            f"from {len(section.roots)} directories"
        )
        return session

    @property
    def document_count(self) -> int:
        return sum(result.indexed for result in self.walk_results)

    @property
    def failed_watchers(self) -> list[ChangeWatcher]:
        """Watchers that stopped because of a runtime watch failure."""
        with self._failed_lock:
            return list(self._failed)

    @property
    def healthy(self) -> bool:
        return not self._closed and not self.failed_watchers

    @property
    def closed(self) -> bool:
        return self._closed

    def _on_watch_error(self, watcher: ChangeWatcher, error: WatchError) -> None:
        logger.error(f"Index {self.name} lost its watch on {watcher.root}: {error.reason}")
        with self._failed_lock:
            self._failed.append(watcher)

    def _cleanup_orphaned_documents(self, stored_before: set[str]) -> int:
        """Delete documents stored before opening that were never rewritten.

        Args:
            stored_before: Document ids in the store before any walk or watcher ran

        Returns:
            Number of documents removed
        """
        orphaned = sorted(stored_before - self.coordinator.written_ids)
        removed = 0
        for doc_id in orphaned:
            # A watcher may have stored it since the list was taken
            if doc_id in self.coordinator.written_ids:
                continue
            if self.store.delete(doc_id):
                removed += 1

        if removed:
            logger.info(f"Removed {removed} orphaned documents from index {self.name}")
        return removed

    def close(self, drain: bool | None = None) -> None:
        """Stop every watcher, then close the store. Safe to call more than once.

        Args:
            drain: Apply still-queued events before stopping. Defaults to the
                section's ``flush_on_close``.
        """
        if self._closed:
            return
        self._release(drain)
        logger.info(f"Index {self.name} closed")

    def _release(self, drain: bool | None) -> None:
        self._closed = True
        try:
            for watcher in self.watchers:
                watcher.close(drain=drain)
        finally:
            self.store.close()


def open_index(section: IndexSection, watch: bool = True) -> IndexSession:
    """Open one index; see :meth:`IndexSession.open`."""
    return IndexSession.open(section, watch=watch)


def close_index(session: IndexSession) -> None:
    """Close one index; see :meth:`IndexSession.close`."""
    session.close()


def open_indexes(
    config: Config, watch: bool = True
) -> tuple[list[IndexSession], dict[str, GnosisError]]:
    """Open every configured index independently.

    A failure in one index is logged and collected; the others still open.

    Returns:
        Open sessions, and the error for each index that failed keyed by name
    """
    sessions: list[IndexSession] = []
    errors: dict[str, GnosisError] = {}

    for section in config.indexes:
        try:
            sessions.append(IndexSession.open(section, watch=watch))
        except GnosisError as e:
            logger.error(f"Failed to open index {section.index_name}: {e}")
            errors[section.index_name] = e

    return sessions, errors
