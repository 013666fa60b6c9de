"""Providers package for Gnosis - index engine implementations."""
