"""
Packman Adapters.

Implementations of protocols for external systems.
"""

from packman.adapters.backends import get_catalog, get_store_directory, reset_backends
from packman.adapters.noop import NoopCatalog, NoopStoreDirectory

__all__ = [
    "NoopCatalog",
    "NoopStoreDirectory",
    "get_catalog",
    "get_store_directory",
    "reset_backends",
]
