"""Block graph passes run before emission."""

from .settle import settle

__all__ = ["settle"]
