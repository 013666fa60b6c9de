"""Page collaborators: loading, tag matching and markdown rendering."""

from .loader import load_page, split_front_matter
from .markdown import render_plain_text
from .tags import matched_tag

__all__ = ["load_page", "matched_tag", "render_plain_text", "split_front_matter"]
