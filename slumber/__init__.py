"""Bedtime audio player core."""

__version__ = "0.1.0"
