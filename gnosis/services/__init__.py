"""Service layer for Gnosis - building, walking, watching and sessions."""

from .change_watcher import ChangeWatcher, Operation, RawEvent, WatcherState, coalesce_events
from .directory_walker import WalkResult, walk_directory
from .document_builder import DocumentBuilder
from .index_session import IndexSession, close_index, open_index, open_indexes
from .indexing_coordinator import CoordinatorStats, IndexingCoordinator

__all__ = [
    "ChangeWatcher",
    "CoordinatorStats",
    "DocumentBuilder",
    "IndexSession",
    "IndexingCoordinator",
    "Operation",
    "RawEvent",
    "WalkResult",
    "WatcherState",
    "close_index",
    "coalesce_events",
    "open_index",
    "open_indexes",
    "walk_directory",
]
