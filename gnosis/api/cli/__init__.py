"""Command line interface for Gnosis."""
