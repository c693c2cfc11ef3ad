"""Result persistence."""

from .cache import FeastResultCache

__all__ = ["FeastResultCache"]
