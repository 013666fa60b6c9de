"""Per-index configuration for Gnosis.

An index section describes one on-disk index: which directories feed it,
which files count as pages, where the index lives and how its text is
analyzed. Sections are frozen; reloading configuration builds new ones.
"""

import os
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_DEBOUNCE_SECONDS = 10.0


class IndexSection(BaseModel):
    """Configuration for one index and the directories it watches.

    Accepts both snake_case keys and the key names used by legacy
    ``config.json`` layout (``WatchDirs``, ``IndexPath``, ...).
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    watch_dirs: dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("watch_dirs", "WatchDirs"),
        description="Physical directory -> URI prefix for every watched root",
    )
    watch_extension: str = Field(
        default=".md",
        validation_alias=AliasChoices("watch_extension", "WatchExtension"),
        description="Suffix a file name must end with to be indexed",
    )
    index_path: str = Field(
        validation_alias=AliasChoices("index_path", "IndexPath"),
        description="Directory holding the on-disk index",
    )
    index_type: str = Field(
        default="en",
        validation_alias=AliasChoices("index_type", "IndexType"),
        description="Analyzer used for text fields",
    )
    index_name: str = Field(
        default="wiki",
        validation_alias=AliasChoices("index_name", "IndexName"),
        description="Name of the index and its document type",
    )
    restricted: frozenset[str] = Field(
        default_factory=frozenset,
        validation_alias=AliasChoices("restricted", "Restricted"),
        description="Pages tagged with any of these are never indexed",
    )

    # Watcher behavior
    debounce_seconds: float = Field(
        default=DEFAULT_DEBOUNCE_SECONDS,
        gt=0,
        description="Idle window after the last event before queued events are applied",
    )
    max_latency_seconds: float | None = Field(
        default=None,
        gt=0,
        description=(
            "Force a flush once the oldest queued event is this old, even while "
            "events keep arriving (disabled by default)"
        ),
    )
    flush_on_close: bool = Field(
        default=True, description="Apply still-queued events when a watcher closes"
    )

    # Population behavior
    cleanup_orphans: bool = Field(
        default=True,
        description="Delete documents whose files disappeared while no session ran",
    )
    fulltext: bool = Field(
        default=True, description="Maintain the engine's full-text search index"
    )

    @field_validator("watch_dirs")
    @classmethod
    def normalize_watch_dirs(cls, v: dict[str, str]) -> dict[str, str]:
        """Trim trailing separators from roots and URI prefixes."""
        normalized: dict[str, str] = {}
        for dir_path, web_path in v.items():
            new_dir = dir_path.rstrip(os.sep) or os.sep
            new_web = web_path.rstrip("/") or "/"
            normalized[new_dir] = new_web
        return normalized

    @field_validator("watch_extension")
    @classmethod
    def validate_watch_extension(cls, v: str) -> str:
        """Require a non-empty extension."""
        if not v:
            raise ValueError("watch_extension cannot be empty")
        return v

    @field_validator("index_path")
    @classmethod
    def validate_index_path(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("index_path cannot be empty")
        return os.path.normpath(v)

    @field_validator("index_name", "index_type")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("value cannot be empty")
        return v.strip()

    @field_validator("restricted", mode="before")
    @classmethod
    def parse_restricted(cls, v: object) -> object:
        """Allow a comma separated string as well as a list."""
        if isinstance(v, str):
            return frozenset(tag.strip() for tag in v.split(",") if tag.strip())
        return v

    @property
    def roots(self) -> list[Path]:
        """Watched root directories in configuration order."""
        return [Path(dir_path) for dir_path in self.watch_dirs]

    def get_index_path(self) -> Path:
        """Directory holding the on-disk index."""
        return Path(self.index_path)

    def uri_prefix(self, root: Path | str) -> str:
        """URI prefix documents under *root* are served from."""
        for dir_path, web_path in self.watch_dirs.items():
            if Path(dir_path) == Path(root):
                return web_path
        raise KeyError(str(root))
