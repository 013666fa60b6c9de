"""Unit tests for building documents from pages."""

import pytest

from gnosis.core.exceptions import PageLoadError, RestrictedPageError
from gnosis.services import DocumentBuilder
from tests.utils.file_watching_helpers import write_page


def test_build_document(tmp_path):
    page_file = tmp_path / "notes" / "setup.md"
    page_file.parent.mkdir()
    page_file.write_text(
        "---\ntitle: Setup\ntopics: [ops, public]\nkeywords: [nginx, tls]\n---\n"
        "Install **nginx** first.\n",
        encoding="utf-8",
    )

    document = DocumentBuilder().build(page_file)

    assert document.id == ""
    assert document.path == str(page_file)
    assert document.title == "Setup"
    assert document.body == "Install nginx first."
    assert document.topics == "ops public"
    assert document.keywords == "nginx tls"
    assert document.modified.tzinfo is None


def test_with_id_returns_new_document(tmp_path):
    document = DocumentBuilder().build(write_page(tmp_path / "a.md"))

    stored = document.with_id("a.md")

    assert stored.id == "a.md"
    assert document.id == ""
    assert stored.body == document.body


def test_restricted_page_is_refused(tmp_path):
    page_file = write_page(tmp_path / "secret.md", title="Secret", topics=["Private"])

    with pytest.raises(RestrictedPageError) as exc_info:
        DocumentBuilder({"private"}).build(page_file)

    assert "Hit a restricted page - Secret" in str(exc_info.value)


def test_unrestricted_builder_accepts_any_topic(tmp_path):
    page_file = write_page(tmp_path / "secret.md", topics=["private"])
    assert DocumentBuilder().build(page_file).topics == "private"


def test_load_failure_propagates(tmp_path):
    with pytest.raises(PageLoadError):
        DocumentBuilder().build(tmp_path / "missing.md")
