"""Tag matching against restricted tag sets."""

from collections.abc import Iterable


def matched_tag(tags: Iterable[str], restricted: Iterable[str]) -> bool:
    """Return True if any of *tags* is in *restricted* (case-insensitive)."""
    restricted_set = {tag.strip().lower() for tag in restricted if tag.strip()}
    if not restricted_set:
        return False
    return any(tag.strip().lower() in restricted_set for tag in tags)
