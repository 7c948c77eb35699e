"""
Backend loading — resolves the configured collaborator adapters.

Usage:
    from packman.adapters import get_catalog, get_store_directory

    catalog = get_catalog()
    info = catalog.get_product("P-100")

Settings:
    PACKMAN = {
        "CATALOG_BACKEND": "catalog.adapters.packman.CatalogAdapter",
        "STORE_DIRECTORY": "stores.adapters.packman.StoreDirectoryAdapter",
    }

Both default to the noop adapters. A configured path that cannot be
imported raises ImproperlyConfigured.
"""

from __future__ import annotations

import logging
import threading

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from packman.conf import packman_settings
from packman.protocols.catalog import CatalogBackend
from packman.protocols.stores import StoreDirectory

logger = logging.getLogger(__name__)


# Cached backend instances
_lock = threading.Lock()
_catalog: CatalogBackend | None = None
_store_directory: StoreDirectory | None = None


def _load(setting_name: str):
    path = getattr(packman_settings, setting_name)
    if not path:
        raise ImproperlyConfigured(f"PACKMAN['{setting_name}'] must be configured.")
    try:
        backend = import_string(path)()
    except ImportError as e:
        raise ImproperlyConfigured(
            f"Failed to import {setting_name} '{path}': {e}"
        ) from e
    logger.debug("Loaded %s: %s", setting_name, path)
    return backend


def get_catalog() -> CatalogBackend:
    """
    Return the configured catalog backend.

    Raises:
        ImproperlyConfigured: If the backend path is empty or import fails
    """
    global _catalog

    if _catalog is None:
        with _lock:
            if _catalog is None:  # double-checked
                _catalog = _load("CATALOG_BACKEND")
    return _catalog


def get_store_directory() -> StoreDirectory:
    """
    Return the configured store directory.

    Raises:
        ImproperlyConfigured: If the backend path is empty or import fails
    """
    global _store_directory

    if _store_directory is None:
        with _lock:
            if _store_directory is None:
                _store_directory = _load("STORE_DIRECTORY")
    return _store_directory


def reset_backends() -> None:
    """Reset the cached backends. Useful for testing."""
    global _catalog, _store_directory
    _catalog = None
    _store_directory = None
