"""Utility helpers"""

from .zip import zip_files

__all__ = ["zip_files"]
