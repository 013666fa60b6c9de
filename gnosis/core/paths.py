"""Mapping from filesystem paths to document identifiers."""

import os
import posixpath
from pathlib import Path

# Identifier of the watch root itself.
ROOT_ID = "."


def relative_id(file_path: Path | str, root: Path | str) -> str:
    """Return the document identifier of *file_path* under watch root *root*.

    The root is stripped as a plain prefix, a single leading separator is
    removed and the remainder is cleaned lexically (``.``/``..`` segments,
    repeated and trailing separators). Identifiers always use ``/`` and never
    start or end with it; an empty remainder becomes :data:`ROOT_ID`.

    Examples:
        >>> relative_id("/var/www/notes/setup.md", "/var/www")
        'notes/setup.md'
        >>> relative_id("/var/www/", "/var/www")
        '.'
    """
    path_str = str(file_path)
    root_str = str(root)

    if root_str and path_str.startswith(root_str):
        path_str = path_str[len(root_str):]

    if os.sep != "/":
        path_str = path_str.replace(os.sep, "/")

    if path_str.startswith("/"):
        path_str = path_str[1:]

    cleaned = posixpath.normpath(path_str) if path_str else ROOT_ID
    # A doubled leading separator survives the single strip above.
    cleaned = cleaned.lstrip("/")
    return cleaned or ROOT_ID
