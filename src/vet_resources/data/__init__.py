"""Packaged starter data."""
