"""Bounding-box annotation ingestion and image matching."""

__version__ = "1.0.0"
