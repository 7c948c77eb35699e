"""
Noop adapters — Stubs for development and testing.

These adapters implement the collaborator protocols with trivial defaults:
- Every product id resolves, with placeholder data
- Every store code resolves, with every role

Usage in settings.py:
    PACKMAN = {
        "CATALOG_BACKEND": "packman.adapters.noop.NoopCatalog",
        "STORE_DIRECTORY": "packman.adapters.noop.NoopStoreDirectory",
    }

WARNING: Do NOT rely on these in production with VALIDATE_REFERENCES
enabled. They accept any identifier, including nonexistent ones.
"""

from __future__ import annotations

from packman.protocols.catalog import ProductInfo
from packman.protocols.stores import StoreInfo


class NoopCatalog:
    """
    No-operation catalog for development and testing.

    Every product id is valid, every lookup returns minimal defaults.
    """

    def get_product(self, product_id: str) -> ProductInfo | None:
        return ProductInfo(product_id=product_id, name=product_id)

    def get_products(self, product_ids: list[str]) -> dict[str, ProductInfo]:
        return {pid: self.get_product(pid) for pid in product_ids}


class NoopStoreDirectory:
    """No-operation store directory. Every store code is valid."""

    def get_store(self, code: str) -> StoreInfo | None:
        return StoreInfo(code=code, name=code)
