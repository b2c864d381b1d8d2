"""
Media Layer.

This package produces the bytes that end up in a delivered file: real audio
fetched from the catalog, or a deterministic placeholder.
"""

from .downloader import Downloader
from .placeholder import PLACEHOLDER_SIGNATURE, make_placeholder

__all__ = ["Downloader", "PLACEHOLDER_SIGNATURE", "make_placeholder"]
