"""
In-memory sink backend.
"""

from .adapter import MemorySink

__all__ = ['MemorySink']
