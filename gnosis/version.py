"""Version information for Gnosis."""

__version__ = "0.1.0"
