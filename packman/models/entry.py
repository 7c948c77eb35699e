"""
StockEntry model — on-hand quantity of a product at a store.
"""

import logging

from django.db import models
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _

logger = logging.getLogger('packman')


class StockEntryManager(models.Manager):
    """Manager with helper methods for StockEntry queries."""

    def for_store(self, store_code: str):
        """Filter entries of a store."""
        return self.filter(store_code=store_code)

    def in_stock(self):
        """Only entries with quantity on hand."""
        return self.filter(_quantity__gt=0)


class StockEntry(models.Model):
    """
    Quantity and price of a product at a store.

    Identified by (store_code, product_id). Stores and products are owned
    by external collaborators; Packman trusts the identifiers it is given.

    Rules:
    - _quantity is a cache updated atomically by StockMove
    - _quantity >= 0 always (enforced by lock + check, backed by a constraint)
    - Entries are never deleted; zero is distinct from "never stocked"
    """

    store_code = models.CharField(
        max_length=50,
        db_index=True,
        verbose_name=_('Loja'),
    )
    product_id = models.CharField(
        max_length=64,
        verbose_name=_('Produto'),
    )

    # Quantity cache (updated atomically by StockMove)
    _quantity = models.IntegerField(
        default=0,
        verbose_name=_('Quantidade'),
    )

    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        verbose_name=_('Preço unitário'),
    )
    currency = models.CharField(
        max_length=3,
        default='INR',
        verbose_name=_('Moeda'),
    )

    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = StockEntryManager()

    class Meta:
        verbose_name = _('Estoque da Loja')
        verbose_name_plural = _('Estoques das Lojas')
        ordering = ['store_code', 'product_id']
        constraints = [
            models.UniqueConstraint(
                fields=['store_code', 'product_id'],
                name='unique_stock_entry_per_store_product',
            ),
            models.CheckConstraint(
                condition=Q(_quantity__gte=0),
                name='stock_entry_quantity_non_negative',
            ),
        ]

    @property
    def quantity(self) -> int:
        """On-hand quantity — O(1) cache read."""
        return self._quantity

    @property
    def key(self) -> tuple[str, str]:
        return (self.store_code, self.product_id)

    def recalculate(self) -> int:
        """
        Recalculate quantity from StockMoves.

        Use for:
        - Integrity audit
        - Correction after detected inconsistency

        Returns:
            New calculated quantity
        """
        total = self.moves.aggregate(
            t=Coalesce(Sum('delta'), 0)
        )['t']

        if total != self._quantity:
            old = self._quantity
            self._quantity = total
            self.save(update_fields=['_quantity', 'updated_at'])

            logger.warning(
                f"StockEntry {self.pk} recalculated: {old} → {total} "
                f"(diff: {total - old})"
            )

        return total

    def __str__(self) -> str:
        return f"{self.product_id} [{self.store_code}]: {self._quantity}"
