"""
Catalog API Layer.

This package handles all communication with the remote catalog proxy.
"""

from .client import CatalogClient

__all__ = ["CatalogClient"]
