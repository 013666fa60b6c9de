"""Markdown to plain text rendering for indexing.

The output is meant for full-text analysis, not display: markup is removed
while every word a reader would see (link text, image alt text, code) is
kept.
"""

import re

# Fenced code block markers (the code itself is kept).
_FENCE_RE = re.compile(r"^[ \t]*(```|~~~).*$", re.MULTILINE)
# Images: ![alt](url) -> alt
_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
# Inline links: [text](url) -> text
_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]*\)")
# Reference links: [text][ref] -> text
_REF_LINK_RE = re.compile(r"\[([^\]]+)\]\[[^\]]*\]")
# Link reference definitions: [ref]: url
_LINK_DEF_RE = re.compile(r"^[ \t]{0,3}\[[^\]]+\]:[ \t]+\S+.*$", re.MULTILINE)
# Autolinks: <http://example.com> -> http://example.com
_AUTOLINK_RE = re.compile(r"<((?:https?|ftp|mailto):[^>\s]+)>")
_HTML_TAG_RE = re.compile(r"</?[A-Za-z][^>]*>")
_HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_HEADING_RE = re.compile(r"^[ \t]{0,3}#{1,6}[ \t]*(.*?)[ \t]*#*[ \t]*$", re.MULTILINE)
# Setext heading underlines and horizontal rules
_RULE_RE = re.compile(r"^[ \t]{0,3}([-*_=])([ \t]*\1){2,}[ \t]*$", re.MULTILINE)
_BLOCKQUOTE_RE = re.compile(r"^[ \t]{0,3}>[ \t]?", re.MULTILINE)
_LIST_BULLET_RE = re.compile(r"^([ \t]*)(?:[-*+]|\d+[.)])[ \t]+(?:\[[ xX]\][ \t]+)?", re.MULTILINE)
_TABLE_DIVIDER_RE = re.compile(r"^[ \t]*\|?[ \t]*:?-+:?[ \t]*(\|[ \t]*:?-+:?[ \t]*)*\|?[ \t]*$\n?", re.MULTILINE)
_INLINE_CODE_RE = re.compile(r"(`+)(.+?)\1")
_BOLD_RE = re.compile(r"(\*\*|__)(?=\S)(.+?)(?<=\S)\1")
_ITALIC_RE = re.compile(r"(?<![\w*])([*_])(?=\S)(.+?)(?<=\S)\1(?![\w*])")
_STRIKE_RE = re.compile(r"~~(?=\S)(.+?)(?<=\S)~~")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def render_plain_text(markdown: str | bytes) -> str:
    """Render *markdown* (front matter already removed) as plain text."""
    if isinstance(markdown, bytes):
        markdown = markdown.decode("utf-8", errors="replace")

    text = markdown.replace("\r\n", "\n").replace("\r", "\n")

    text = _HTML_COMMENT_RE.sub("", text)
    text = _FENCE_RE.sub("", text)
    text = _LINK_DEF_RE.sub("", text)
    text = _IMAGE_RE.sub(r"\1", text)
    text = _LINK_RE.sub(r"\1", text)
    text = _REF_LINK_RE.sub(r"\1", text)
    text = _AUTOLINK_RE.sub(r"\1", text)
    text = _HTML_TAG_RE.sub("", text)

    text = _TABLE_DIVIDER_RE.sub("", text)
    text = _RULE_RE.sub("", text)
    text = _HEADING_RE.sub(r"\1", text)
    text = _BLOCKQUOTE_RE.sub("", text)
    text = _LIST_BULLET_RE.sub(r"\1", text)

    text = _INLINE_CODE_RE.sub(r"\2", text)
    text = _BOLD_RE.sub(r"\2", text)
    text = _ITALIC_RE.sub(r"\2", text)
    text = _STRIKE_RE.sub(r"\1", text)

    # Table cell separators
    lines = []
    for line in text.split("\n"):
        if line.count("|") >= 2:
            cells = [cell.strip() for cell in line.strip().strip("|").split("|")]
            line = " ".join(cell for cell in cells if cell)
        lines.append(line.rstrip())
    text = "\n".join(lines)

    text = _BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()
