"""Configuration models for Gnosis."""

from .config import Config
from .index_config import DEFAULT_DEBOUNCE_SECONDS, IndexSection

__all__ = ["Config", "DEFAULT_DEBOUNCE_SECONDS", "IndexSection"]
