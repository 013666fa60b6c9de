"""Core types, configuration and helpers shared by Gnosis services."""
