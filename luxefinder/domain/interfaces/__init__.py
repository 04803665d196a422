# Domain Interfaces Package
"""
Abstract base classes defining contracts for search back ends.
"""

from .search_backend import SearchBackend

__all__ = ["SearchBackend"]
