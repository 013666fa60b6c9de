"""Unit tests for document identifier normalization."""

import pytest

from gnosis.core.paths import ROOT_ID, relative_id


@pytest.mark.parametrize(
    "file_path, root, expected",
    [
        ("/var/www/notes/setup.md", "/var/www", "notes/setup.md"),
        ("/var/www/setup.md", "/var/www", "setup.md"),
        ("/var/www/notes//deep/./x.md", "/var/www", "notes/deep/x.md"),
        ("/var/www/notes/../x.md", "/var/www", "x.md"),
        ("/var/www/notes/", "/var/www", "notes"),
        ("/var/www", "/var/www", ROOT_ID),
        ("/var/www/", "/var/www", ROOT_ID),
        ("/var/www//x.md", "/var/www", "x.md"),
        ("notes/x.md", "", "notes/x.md"),
    ],
)
def test_relative_id(file_path, root, expected):
    assert relative_id(file_path, root) == expected


def test_root_is_stripped_as_plain_prefix():
    """A sibling sharing the root's name prefix keeps the remainder."""
    assert relative_id("/var/wwwdata/x.md", "/var/www") == "data/x.md"


def test_path_outside_root_is_cleaned_not_rejected():
    assert relative_id("/srv/other/x.md", "/var/www") == "srv/other/x.md"


@pytest.mark.parametrize(
    "file_path, root",
    [
        ("/var/www/notes/setup.md", "/var/www"),
        ("/var/www/a//b/../c.md", "/var/www"),
        ("/var/www", "/var/www"),
        ("/var/www///x.md", "/var/www"),
    ],
)
def test_relative_id_is_idempotent(file_path, root):
    once = relative_id(file_path, root)
    assert relative_id(once, "") == once


def test_identifier_never_starts_or_ends_with_separator():
    for path in ["/r//a/", "/r/a/b//", "/r/./a", "/r"]:
        doc_id = relative_id(path, "/r")
        assert not doc_id.startswith("/")
        assert not doc_id.endswith("/")
