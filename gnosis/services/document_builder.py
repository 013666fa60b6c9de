"""Document builder: turns one content file into an indexable document."""

from collections.abc import Iterable
from pathlib import Path

from gnosis.core.exceptions import RestrictedPageError
from gnosis.core.models import Document
from gnosis.pages import load_page, matched_tag, render_plain_text


class DocumentBuilder:
    """Builds documents from pages, refusing pages with restricted tags."""

    def __init__(self, restricted: Iterable[str] = ()):
        self.restricted = frozenset(restricted)

    def build(self, file_path: Path | str) -> Document:
        """Build the document for *file_path*.

        The returned document has an empty id; the caller attaches one with
        :meth:`Document.with_id`.

        Raises:
            PageLoadError: If the page cannot be loaded
            RestrictedPageError: If the page carries a restricted tag
        """
        page = load_page(file_path)

        if matched_tag(page.topics, self.restricted):
            raise RestrictedPageError(page.path, page.title, page.topics)

        return Document(
            id="",
            path=str(page.path),
            title=page.title,
            body=render_plain_text(page.body),
            topics=" ".join(page.topics),
            keywords=" ".join(page.keywords),
            modified=page.modified,
        )
