"""
Packman configuration.

Usage in settings.py:
    PACKMAN = {
        "CATALOG_BACKEND": "catalog.adapters.packman.CatalogAdapter",
        "STORE_DIRECTORY": "stores.adapters.packman.StoreDirectoryAdapter",
        "VALIDATE_REFERENCES": True,
        "LOCK_NOWAIT": False,
        "DEFAULT_CURRENCY": "INR",
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class PackmanSettings:
    """Packman configuration settings."""

    # Product lookup backend (dotted path)
    CATALOG_BACKEND: str = "packman.adapters.noop.NoopCatalog"

    # Store lookup backend (dotted path)
    STORE_DIRECTORY: str = "packman.adapters.noop.NoopStoreDirectory"

    # Check store codes and product ids against the backends before reserving
    VALIDATE_REFERENCES: bool = False

    # Fail fast (CONCURRENT_CONFLICT) instead of waiting on a locked stock row
    LOCK_NOWAIT: bool = False

    # Currency assigned to stock entries received without one
    DEFAULT_CURRENCY: str = "INR"


def get_packman_settings() -> PackmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "PACKMAN", {})
    return PackmanSettings(**{
        k: v for k, v in user_settings.items()
        if k in PackmanSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_packman_settings(), name)


packman_settings = _LazySettings()
