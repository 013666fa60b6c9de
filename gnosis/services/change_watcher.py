"""Change watcher: keeps one watched root in sync with its index.

A watchdog observer delivers raw filesystem events from its own thread. The
handler only classifies them and hands them to the watcher's worker thread
through a queue. The worker collects events verbatim until the root has
been quiet for the idle window (10 seconds by default; every new event
restarts it), then resolves the batch to one operation per path:

- the path's last REMOVE or RENAME deletes its document
- otherwise its CREATE and WRITE events rebuild the document once
- OTHER is ignored

Only paths ending in the configured extension are applied. Paths are
applied in the order of their final event, so a burst of writes to one file
costs a single rebuild.
"""

import os
import queue
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from gnosis.core.config import IndexSection
from gnosis.core.exceptions import GnosisError, WatchError
from gnosis.providers.database import DuckDBIndexStore

from .indexing_coordinator import IndexingCoordinator

# Upper bound on how long the worker goes without checking observer health
HEALTH_CHECK_INTERVAL = 1.0


class Operation(Enum):
    CREATE = "create"
    WRITE = "write"
    REMOVE = "remove"
    RENAME = "rename"
    OTHER = "other"


class WatcherState(Enum):
    IDLE = "idle"
    FLUSHING = "flushing"
    CLOSED = "closed"


@dataclass(frozen=True)
class RawEvent:
    """One filesystem notification as received."""

    operation: Operation
    path: str


_OPERATIONS = {
    "created": Operation.CREATE,
    "modified": Operation.WRITE,
    "deleted": Operation.REMOVE,
}

_STOP = object()


def coalesce_events(
    events: list[RawEvent], matches: Callable[[str], bool]
) -> list[RawEvent]:
    """Reduce *events* to one final operation per path.

    A path whose last relevant event is a REMOVE or RENAME resolves to a
    single REMOVE; any other path with a CREATE or WRITE resolves to a
    single WRITE. Paths keep the order of their last relevant event.
    Non-matching paths and OTHER events are dropped.
    """
    final: dict[str, Operation] = {}
    for event in events:
        if event.operation is Operation.OTHER or not matches(event.path):
            continue
        if event.operation in (Operation.REMOVE, Operation.RENAME):
            operation = Operation.REMOVE
        else:
            operation = Operation.WRITE
        # Re-insert so the path moves to its latest position
        final.pop(event.path, None)
        final[event.path] = operation
    return [RawEvent(operation, path) for path, operation in final.items()]


class QueueingEventHandler(FileSystemEventHandler):
    """Translates watchdog events into raw events on a channel."""

    def __init__(self, channel: "queue.Queue[Any]"):
        self.channel = channel

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return

        src_path = os.fsdecode(event.src_path)

        # A move is the source going away and the destination appearing
        if event.event_type == "moved":
            self.channel.put(RawEvent(Operation.RENAME, src_path))
            self.channel.put(RawEvent(Operation.CREATE, os.fsdecode(event.dest_path)))
            return

        operation = _OPERATIONS.get(event.event_type, Operation.OTHER)
        self.channel.put(RawEvent(operation, src_path))


class ChangeWatcher:
    """Watches one root recursively and applies debounced batches of changes."""

    def __init__(
        self,
        root: Path | str,
        section: IndexSection,
        coordinator: IndexingCoordinator,
        store: DuckDBIndexStore,
        on_error: Callable[["ChangeWatcher", WatchError], None] | None = None,
    ):
        """Initialize the watcher without starting it.

        Args:
            root: Watched root directory
            section: Index configuration (idle window, latency cap, drain default)
            coordinator: Applies updates and deletions
            store: Store whose full-text index is refreshed after each flush
            on_error: Called from the worker thread if watching fails at runtime
        """
        self.root = Path(root)
        self.coordinator = coordinator
        self.store = store
        self.on_error = on_error

        self.debounce_seconds = section.debounce_seconds
        self.max_latency_seconds = section.max_latency_seconds
        self.flush_on_close = section.flush_on_close

        self.error: WatchError | None = None
        self.flush_count = 0

        self._channel: queue.Queue[Any] = queue.Queue()
        self._observer: Any | None = None
        self._worker: threading.Thread | None = None
        self._state = WatcherState.IDLE
        self._state_lock = threading.Lock()
        self._closing = False
        self._drain = self.flush_on_close

    @property
    def state(self) -> WatcherState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> None:
        """Start the observer and the worker thread.

        Raises:
            WatchError: If the root cannot be watched
        """
        if self._observer is not None:
            raise WatchError(self.root, "watcher already started")
        if not self.root.is_dir():
            raise WatchError(self.root, "not a directory")

        observer = Observer()
        try:
            observer.schedule(QueueingEventHandler(self._channel), str(self.root), recursive=True)
            observer.start()
        except (OSError, RuntimeError) as e:
            raise WatchError(self.root, str(e)) from e

        self._observer = observer
        self._worker = threading.Thread(
            target=self._run, name=f"gnosis-watch-{self.root.name}", daemon=True
        )
        self._worker.start()
        logger.debug(f"Started watching {self.root}")

    def close(self, drain: bool | None = None) -> None:
        """Stop watching. Safe to call more than once.

        The observer is stopped first so no new events arrive. A flush that
        is already running always completes.

        Args:
            drain: Apply events still queued before stopping. Defaults to the
                section's ``flush_on_close``.
        """
        with self._state_lock:
            if self._closing:
                return
            self._closing = True
        self._drain = self.flush_on_close if drain is None else drain

        if self._observer is not None:
            try:
                self._observer.stop()
                self._observer.join()
            except RuntimeError as e:
                logger.warning(f"Error stopping observer for {self.root}: {e}")

        worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            self._channel.put(_STOP)
            worker.join()

        self._state = WatcherState.CLOSED
        logger.debug(f"Stopped watching {self.root}")

    def _observer_alive(self) -> bool:
        observer = self._observer
        if observer is None or not observer.is_alive():
            return False
        return all(emitter.is_alive() for emitter in observer.emitters)

    def _run(self) -> None:
        """Worker loop: queue events, flush after the idle window."""
        pending: list[RawEvent] = []
        last_event = 0.0
        oldest_event = 0.0

        while True:
            now = time.monotonic()
            if pending:
                timeout = last_event + self.debounce_seconds - now
                if self.max_latency_seconds is not None:
                    timeout = min(timeout, oldest_event + self.max_latency_seconds - now)
                timeout = max(0.0, min(timeout, HEALTH_CHECK_INTERVAL))
            else:
                timeout = min(self.debounce_seconds, HEALTH_CHECK_INTERVAL)

            try:
                item = self._channel.get(timeout=timeout)
            except queue.Empty:
                now = time.monotonic()
                if pending and self._flush_due(now, last_event, oldest_event):
                    batch, pending = pending, []
                    if not self._flush(batch):
                        return
                if not self._closing and not self._observer_alive():
                    self._fail(WatchError(self.root, "filesystem observer stopped"))
                    return
                continue

            if item is _STOP:
                if pending and self._drain:
                    self._flush(pending)
                elif pending:
                    logger.debug(f"Dropping {len(pending)} queued events for {self.root}")
                return

            now = time.monotonic()
            if not pending:
                oldest_event = now
            pending.append(item)
            last_event = now

            # Under a continuous stream the queue never times out
            if (
                self.max_latency_seconds is not None
                and now - oldest_event >= self.max_latency_seconds
            ):
                batch, pending = pending, []
                if not self._flush(batch):
                    return

    def _flush_due(self, now: float, last_event: float, oldest_event: float) -> bool:
        if now - last_event >= self.debounce_seconds:
            return True
        return (
            self.max_latency_seconds is not None
            and now - oldest_event >= self.max_latency_seconds
        )

    def _flush(self, batch: list[RawEvent]) -> bool:
        """Apply *batch* coalesced per path. Returns False if the watcher failed."""
        self._state = WatcherState.FLUSHING
        operations = coalesce_events(batch, self.coordinator.matches_extension)
        try:
            for event in operations:
                if event.operation is Operation.REMOVE:
                    self.coordinator.process_delete(event.path, self.root)
                else:
                    self.coordinator.process_update(event.path, self.root)
            if operations:
                self.store.refresh_search_index()
        except GnosisError as e:
            self._fail(WatchError(self.root, f"flush failed: {e}"))
            return False
        finally:
            if self._state is WatcherState.FLUSHING:
                self._state = WatcherState.IDLE

        self.flush_count += 1
        logger.debug(
            f"Flushed {len(batch)} events ({len(operations)} applied) for {self.root}"
        )
        return True

    def _fail(self, error: WatchError) -> None:
        self.error = error
        logger.error(str(error))
        if self.on_error is not None:
            self.on_error(self, error)
