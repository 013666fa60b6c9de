"""Domain models for Gnosis: loaded pages and index documents."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class Page:
    """A content file as read from disk, before rendering.

    Attributes:
        path: Absolute path the page was loaded from
        title: Page title from front matter, first heading or file name
        body: Raw markdown body with front matter removed
        modified: Filesystem modification time (naive UTC)
        topics: Topic tags, in file order without duplicates
        keywords: Keywords, in file order without duplicates
    """

    path: Path
    title: str
    body: str
    modified: datetime
    topics: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Document:
    """Indexable record for one page.

    Documents are never mutated in place. Each rebuild produces a new record
    that replaces the stored one for its identifier as a whole.
    """

    id: str
    path: str
    title: str
    body: str
    topics: str
    keywords: str
    modified: datetime

    def with_id(self, doc_id: str) -> "Document":
        """Return a copy of this document carrying *doc_id*."""
        return replace(self, id=doc_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a column -> value mapping for storage."""
        return {
            "id": self.id,
            "path": self.path,
            "title": self.title,
            "body": self.body,
            "topics": self.topics,
            "keywords": self.keywords,
            "modified": self.modified,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Document":
        """Create a document from a stored row mapping."""
        return cls(
            id=data["id"],
            path=data.get("path") or "",
            title=data.get("title") or "",
            body=data.get("body") or "",
            topics=data.get("topics") or "",
            keywords=data.get("keywords") or "",
            modified=data["modified"],
        )
