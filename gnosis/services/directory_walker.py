"""Directory walker for initial population of an index."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from gnosis.core.exceptions import DirectoryWalkError
from gnosis.core.paths import relative_id

from .indexing_coordinator import IndexingCoordinator


@dataclass
class WalkResult:
    """Outcome of walking one watched root."""

    root: Path
    files_seen: int = 0
    indexed: int = 0
    document_ids: set[str] = field(default_factory=set)

    @property
    def not_indexed(self) -> int:
        """Matching files that were skipped or failed to index."""
        return self.files_seen - self.indexed


def walk_directory(
    directory: Path | str,
    root: Path | str,
    coordinator: IndexingCoordinator,
    result: WalkResult | None = None,
) -> WalkResult:
    """Index every matching file below *directory*, depth first in name order.

    Files are processed one at a time through the coordinator, so a file that
    fails to load or is restricted only affects itself. Symlinked directories
    are not followed.

    Args:
        directory: Directory to walk
        root: Watched root the document ids are relative to
        coordinator: Applies each file to the index
        result: Accumulator used when recursing

    Returns:
        Counts and ids for everything written below *directory*

    Raises:
        DirectoryWalkError: If any directory cannot be listed
    """
    if result is None:
        result = WalkResult(root=Path(root))
        logger.info(f"Indexing {directory}")

    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        raise DirectoryWalkError(directory, e) from e

    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as e:
            raise DirectoryWalkError(entry.path, e) from e

        if is_dir:
            walk_directory(entry.path, root, coordinator, result)
        elif coordinator.matches_extension(entry.name):
            result.files_seen += 1
            if coordinator.process_update(entry.path, root):
                result.indexed += 1
                result.document_ids.add(relative_id(entry.path, root))

    return result
