"""
Test utilities for file watching and index assertions.
"""

import time
import uuid
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from gnosis.core.models import Document


def write_page(
    path: Path,
    title: str = "Page",
    body: str = "Some text.",
    topics: list[str] | None = None,
) -> Path:
    """Write a markdown page, with front matter when *topics* is given."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = []
    if topics is not None:
        lines += ["---", f"title: {title}", f"topics: [{', '.join(topics)}]", "---"]
    lines += [f"# {title}", "", body, ""]
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def generate_unique_content(prefix: str = "test") -> str:
    """Body text containing a marker no other test produces."""
    return f"{prefix} marker {uuid.uuid4().hex}"


def make_document(doc_id: str = "", body: str = "body", title: str = "Title") -> Document:
    return Document(
        id=doc_id,
        path=f"/wiki/{doc_id or 'page.md'}",
        title=title,
        body=body,
        topics="",
        keywords="",
        modified=datetime(2024, 1, 1, 12, 0, 0),
    )


def wait_for(condition: Callable[[], bool], timeout: float = 10.0, interval: float = 0.05) -> bool:
    """Poll *condition* until it is true or *timeout* passes."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(interval)
    return condition()


def wait_for_document(store, doc_id: str, timeout: float = 10.0) -> Document | None:
    """Wait until *doc_id* is stored and return it."""
    if wait_for(lambda: store.get_document(doc_id) is not None, timeout):
        return store.get_document(doc_id)
    return None


def wait_for_removal(store, doc_id: str, timeout: float = 10.0) -> bool:
    """Wait until *doc_id* is no longer stored."""
    return wait_for(lambda: store.get_document(doc_id) is None, timeout)


class RecordingCoordinator:
    """Stand-in coordinator that records what a watcher asks it to do."""

    def __init__(self, extension: str = ".md"):
        self.extension = extension
        self.calls: list[tuple[str, str]] = []

    def matches_extension(self, path) -> bool:
        return str(path).endswith(self.extension)

    def process_update(self, path, root) -> bool:
        self.calls.append(("update", str(path)))
        return True

    def process_delete(self, path, root) -> bool:
        self.calls.append(("delete", str(path)))
        return True


class RecordingStore:
    """Stand-in store that counts full-text refreshes."""

    def __init__(self):
        self.refreshes = 0

    def refresh_search_index(self) -> bool:
        self.refreshes += 1
        return True
