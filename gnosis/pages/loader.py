"""Page loader: reads a content file and its YAML front matter.

A page may start with a front matter block::

    ---
    title: Setting up the server
    topics: [public, ops]
    keywords: nginx, tls
    ---
    # Setting up the server
    ...

``tags`` is accepted as a synonym for ``topics``. List values may be YAML
lists or comma/whitespace separated strings.
"""

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from gnosis.core.exceptions import PageLoadError
from gnosis.core.models import Page

_FRONT_MATTER_OPEN = "---"
_FRONT_MATTER_CLOSE = ("---", "...")

_H1_RE = re.compile(r"^#\s+(.+?)\s*#*\s*$", re.MULTILINE)
_LIST_SPLIT_RE = re.compile(r"[,\s]+")


def load_page(path: Path | str) -> Page:
    """Load the page at *path*.

    Raises:
        PageLoadError: If the file cannot be read, is not UTF-8 or has
            malformed front matter
    """
    file_path = Path(path)

    try:
        raw = file_path.read_bytes()
        stat = file_path.stat()
    except OSError as e:
        raise PageLoadError(file_path, str(e)) from e

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise PageLoadError(file_path, f"not valid UTF-8: {e}") from e

    metadata, body = split_front_matter(text, file_path)

    title = _as_text(metadata.get("title"))
    if not title:
        heading = _H1_RE.search(body)
        title = heading.group(1) if heading else file_path.stem

    topics = _as_list(metadata.get("topics", metadata.get("tags")))
    keywords = _as_list(metadata.get("keywords"))

    modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).replace(tzinfo=None)

    return Page(
        path=file_path,
        title=title,
        body=body,
        modified=modified,
        topics=topics,
        keywords=keywords,
    )


def split_front_matter(text: str, path: Path | str = "<string>") -> tuple[dict[str, Any], str]:
    """Split *text* into its front matter mapping and the remaining body.

    Text without a front matter block yields an empty mapping and the text
    unchanged.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != _FRONT_MATTER_OPEN:
        return {}, text

    for index in range(1, len(lines)):
        if lines[index].rstrip() in _FRONT_MATTER_CLOSE:
            block = "".join(lines[1:index])
            body = "".join(lines[index + 1:])
            break
    else:
        raise PageLoadError(path, "front matter block is not closed")

    try:
        metadata = yaml.safe_load(block)
    except yaml.YAMLError as e:
        raise PageLoadError(path, f"malformed front matter: {e}") from e

    if metadata is None:
        return {}, body
    if not isinstance(metadata, dict):
        raise PageLoadError(path, "front matter must be a mapping")

    return metadata, body


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_list(value: Any) -> list[str]:
    """Normalize a YAML list or separated string to unique stripped strings."""
    if value is None:
        return []
    if isinstance(value, str):
        items = _LIST_SPLIT_RE.split(value)
    elif isinstance(value, (list, tuple, set)):
        items = [str(item) for item in value if item is not None]
    else:
        items = [str(value)]

    result: list[str] = []
    for item in items:
        item = item.strip()
        if item and item not in result:
            result.append(item)
    return result
