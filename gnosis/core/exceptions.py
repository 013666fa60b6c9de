"""Exception hierarchy for Gnosis.

Errors fall into two groups:

- Recoverable: raised for a single file or a single store operation. The
  indexing loops catch these, log them and move on to the next file.
- Fatal: raised while an index is being opened, populated or watched. These
  propagate to whoever opened the index, which decides whether to disable
  that one index or stop the process.
"""

from pathlib import Path


class GnosisError(Exception):
    """Base class for all Gnosis errors."""


# Recoverable


class PageLoadError(GnosisError):
    """A page could not be read or its metadata could not be parsed."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to load page {self.path}: {reason}")


class RestrictedPageError(GnosisError):
    """A page carries a restricted tag and must not be indexed."""

    def __init__(self, path: Path | str, title: str, tags: list[str]):
        self.path = str(path)
        self.title = title
        self.tags = tags
        super().__init__(f"Hit a restricted page - {title} ({self.path})")


class StoreError(GnosisError):
    """A single upsert or delete against the index engine failed."""


# Fatal


class ConfigError(GnosisError):
    """Configuration could not be read or is invalid."""


class IndexOpenError(GnosisError):
    """The index engine could not open or create the index at a location."""

    def __init__(self, index_path: Path | str, reason: str):
        self.index_path = str(index_path)
        self.reason = reason
        super().__init__(f"Cannot open index at {self.index_path}: {reason}")


class IndexLockedError(IndexOpenError):
    """Another session in this process already owns the index location."""

    def __init__(self, index_path: Path | str):
        super().__init__(index_path, "index is already open in this process")


class MappingError(GnosisError):
    """The document mapping could not be built from configuration."""


class StoreClosedError(GnosisError):
    """An operation was attempted on a store that has been closed."""


class DirectoryWalkError(GnosisError):
    """A directory could not be listed during initial population."""

    def __init__(self, directory: Path | str, cause: OSError):
        self.directory = str(directory)
        self.cause = cause
        super().__init__(f"Cannot list directory {self.directory}: {cause}")


class WatchError(GnosisError):
    """A filesystem watch could not be established or stopped working."""

    def __init__(self, root: Path | str, reason: str):
        self.root = str(root)
        self.reason = reason
        super().__init__(f"Watch on {self.root} failed: {reason}")
