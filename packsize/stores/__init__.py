"""In-memory stores used while scanning a repository."""

from .content_cache import ContentCache

__all__ = ["ContentCache"]
