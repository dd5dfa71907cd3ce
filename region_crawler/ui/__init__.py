"""User interaction helpers."""

from .progress import LevelProgress, ProgressActivity

__all__ = ["LevelProgress", "ProgressActivity"]
