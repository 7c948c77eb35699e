"""
Packman Protocols.

Defines interfaces for external system integration.
"""

from packman.protocols.catalog import CatalogBackend, ProductInfo
from packman.protocols.stores import StoreDirectory, StoreInfo

__all__ = [
    "CatalogBackend",
    "ProductInfo",
    "StoreDirectory",
    "StoreInfo",
]
