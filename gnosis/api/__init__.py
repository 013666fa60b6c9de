"""User-facing entry points for Gnosis."""
