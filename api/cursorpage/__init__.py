"""Cursor-based pagination service."""

__version__ = "1.0.0"
