"""Watch command: populate every configured index and keep it in sync."""

import argparse
import time

from gnosis.core.config import Config
from gnosis.services import IndexSession, open_indexes

from ..utils.rich_output import RichOutputFormatter

# How often the main thread checks watcher health
POLL_INTERVAL = 1.0


def watch_command(args: argparse.Namespace, config: Config) -> int:
    """Run every configured index until interrupted.

    A session whose watcher fails is closed and reported while the others
    keep running.

    Returns:
        Process exit code: 1 if no index is left running
    """
    formatter = RichOutputFormatter(verbose=args.verbose)

    sessions, errors = open_indexes(config, watch=True)
    formatter.index_summary(sessions, errors)

    if not sessions:
        formatter.error("No index could be opened")
        return 1

    formatter.info(f"Watching {len(sessions)} index(es), press Ctrl+C to stop")
    for session in sessions:
        formatter.verbose_info(
            f"Index {session.name}: idle window {session.section.debounce_seconds}s, "
            f"{len(session.watchers)} watchers"
        )

    try:
        while sessions:
            sessions = _close_failed(sessions, formatter)
            if sessions:
                time.sleep(POLL_INTERVAL)
    except KeyboardInterrupt:
        formatter.info("Stopping watchers")
    finally:
        for session in sessions:
            session.close()

    if not sessions:
        formatter.error("No index left running")
        return 1
    return 0


def _close_failed(
    sessions: list[IndexSession], formatter: RichOutputFormatter
) -> list[IndexSession]:
    running = []
    for session in sessions:
        if session.healthy:
            running.append(session)
            continue
        for watcher in session.failed_watchers:
            formatter.error(f"Index {session.name}: {watcher.error}")
        session.close(drain=False)
        formatter.warning(f"Index {session.name} closed")
    return running
