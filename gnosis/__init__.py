"""Gnosis: keeps full-text indexes of wiki directories in sync with disk."""

from .core.config import Config, IndexSection
from .core.exceptions import GnosisError
from .core.models import Document, Page
from .core.paths import ROOT_ID, relative_id
from .services import IndexSession, close_index, open_index, open_indexes
from .version import __version__

__all__ = [
    "Config",
    "Document",
    "GnosisError",
    "IndexSection",
    "IndexSession",
    "Page",
    "ROOT_ID",
    "__version__",
    "close_index",
    "open_index",
    "open_indexes",
    "relative_id",
]
