"""
StockAlert model — configurable reorder level per store and product.

Usage:
    StockAlert.objects.create(
        store_code='loja-centro', product_id='P-100', min_quantity=10,
    )

    from packman.services.alerts import check_alerts
    triggered = check_alerts()
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class StockAlert(models.Model):
    """
    Low-stock alert for a product at a store.

    The alert is triggered when the entry's on-hand quantity drops below
    min_quantity. A product the store never stocked counts as zero.
    """

    store_code = models.CharField(
        max_length=50,
        verbose_name=_('Loja'),
    )
    product_id = models.CharField(
        max_length=64,
        verbose_name=_('Produto'),
    )

    min_quantity = models.PositiveIntegerField(
        verbose_name=_('Quantidade Mínima'),
        help_text=_('Alerta dispara quando quantidade < este valor'),
    )

    is_active = models.BooleanField(
        default=True,
        verbose_name=_('Ativo'),
    )

    last_triggered_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Último disparo'),
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Criado em'))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_('Atualizado em'))

    class Meta:
        verbose_name = _('Alerta de Estoque')
        verbose_name_plural = _('Alertas de Estoque')
        constraints = [
            models.UniqueConstraint(
                fields=['store_code', 'product_id'],
                name='unique_stock_alert_per_store_product',
            ),
        ]
        indexes = [
            models.Index(fields=['is_active'], name='packman_alert_active_idx'),
        ]

    def __str__(self) -> str:
        return f"Alert: {self.product_id} @ {self.store_code} < {self.min_quantity}"
