"""Index command: populate every configured index once and exit."""

import argparse
import time

from loguru import logger

from gnosis.core.config import Config
from gnosis.services import open_indexes

from ..utils.rich_output import RichOutputFormatter


def index_command(args: argparse.Namespace, config: Config) -> int:
    """Open, populate and close every configured index.

    Returns:
        Process exit code: 1 if any index failed
    """
    formatter = RichOutputFormatter(verbose=args.verbose)
    formatter.info(f"Indexing {len(config.indexes)} index(es)")
    for section in config.indexes:
        formatter.verbose_info(
            f"Index {section.index_name} at {section.index_path}: "
            f"{len(section.roots)} directories, analyzer '{section.index_type}'"
        )

    start_time = time.perf_counter()
    sessions, errors = open_indexes(config, watch=False)
    elapsed = time.perf_counter() - start_time

    for session in sessions:
        stats = session.coordinator.stats
        formatter.verbose_info(
            f"Index {session.name}: {stats.updated} updated, {stats.skipped} skipped, "
            f"{stats.failed} failed"
        )

    try:
        formatter.index_summary(sessions, errors)
    finally:
        for session in sessions:
            session.close()

    logger.debug(f"Indexing finished in {elapsed:.2f}s")
    if errors:
        formatter.error(f"{len(errors)} index(es) failed: {', '.join(errors)}")
        return 1

    formatter.success(f"Indexed {len(sessions)} index(es) in {elapsed:.2f}s")
    return 0
