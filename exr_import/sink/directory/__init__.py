"""
Directory sink backend.

Writes converted layers as image files, one folder per canvas.
"""

from .adapter import DirectorySink, OUTPUT_FORMATS

__all__ = ['DirectorySink', 'OUTPUT_FORMATS']
