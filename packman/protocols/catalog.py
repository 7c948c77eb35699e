"""
Catalog Protocol — Interface for product lookup.

Packman defines this protocol, the catalog app implements it.
Packman only needs to know whether a product id resolves, plus
display data for APIs.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ProductInfo:
    """Basic product information."""

    product_id: str
    name: str
    description: str | None = None
    base_price: Decimal | None = None
    is_active: bool = True


@runtime_checkable
class CatalogBackend(Protocol):
    """
    Protocol for product lookup.

    Implementations should provide methods to:
    - Resolve a single product id
    - Resolve many product ids at once
    """

    def get_product(self, product_id: str) -> ProductInfo | None:
        """
        Get product information.

        Args:
            product_id: Product identifier

        Returns:
            ProductInfo or None if not found
        """
        ...

    def get_products(self, product_ids: list[str]) -> dict[str, ProductInfo]:
        """
        Resolve multiple products at once.

        Args:
            product_ids: List of product identifiers

        Returns:
            Dict[product_id, ProductInfo] — unknown ids are absent
        """
        ...
