"""Unit tests for restricted tag matching."""

from gnosis.pages import matched_tag


def test_match_is_case_insensitive():
    assert matched_tag(["Public", "Private"], {"private"})
    assert matched_tag([" SECRET "], {"secret"})


def test_no_match():
    assert not matched_tag(["public"], {"private"})
    assert not matched_tag([], {"private"})


def test_empty_restricted_set_never_matches():
    assert not matched_tag(["private"], set())
    assert not matched_tag(["private"], {"  "})
