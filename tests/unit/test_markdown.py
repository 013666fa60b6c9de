"""Unit tests for markdown to plain text rendering."""

from gnosis.pages import render_plain_text


def test_inline_markup_is_unwrapped():
    text = render_plain_text(
        "Some **bold**, *italic*, ~~gone~~ and `code` with a [link](http://x.io) "
        "and ![alt text](img.png)."
    )
    assert text == "Some bold, italic, gone and code with a link and alt text."


def test_block_markup_is_removed():
    markdown = (
        "# Title\n"
        "\n"
        "> quoted line\n"
        "\n"
        "- first item\n"
        "- [x] done item\n"
        "1. numbered\n"
        "\n"
        "---\n"
        "\n"
        "```python\n"
        "print('kept')\n"
        "```\n"
    )

    lines = render_plain_text(markdown).split("\n")

    assert "Title" in lines
    assert "quoted line" in lines
    assert "first item" in lines
    assert "done item" in lines
    assert "numbered" in lines
    assert "print('kept')" in lines
    assert not any(line.startswith(("#", ">", "-", "```")) for line in lines)


def test_tables_become_cell_text():
    markdown = "| Name | Role |\n|------|:----:|\n| Ada | admin |\n"
    assert render_plain_text(markdown) == "Name Role\nAda admin"


def test_html_and_link_definitions_are_dropped():
    markdown = "<div>inside</div>\n<!-- hidden -->\n[ref]: http://example.com\nSee [docs][ref].\n"
    assert render_plain_text(markdown) == "inside\n\nSee docs."


def test_blank_lines_collapse_and_bytes_accepted():
    assert render_plain_text(b"a\n\n\n\n\nb\n") == "a\n\nb"


def test_rendering_is_deterministic():
    markdown = "# T\n\n*x* and **y**\n"
    assert render_plain_text(markdown) == render_plain_text(markdown)
