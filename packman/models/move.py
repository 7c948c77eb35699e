"""
StockMove model — Immutable ledger of quantity changes.
"""

from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class StockMove(models.Model):
    """
    Immutable record of quantity change.

    Rules:
    - NEVER update() or delete()
    - Corrections are new StockMoves with inverse delta
    - Updates StockEntry._quantity atomically on save()

    This is the ONLY model that changes quantity. Each row answers
    "why is this number X": store, product, delta, resulting quantity,
    timestamp, user and the document that caused it.
    """

    entry = models.ForeignKey(
        'packman.StockEntry',
        on_delete=models.PROTECT,
        related_name='moves',
        verbose_name=_('Estoque'),
    )

    delta = models.IntegerField(
        verbose_name=_('Variação'),
        help_text=_('Positivo = entrada, Negativo = saída'),
    )
    resulting_quantity = models.IntegerField(
        verbose_name=_('Saldo resultante'),
    )

    # Document that caused the move (packing list, sales invoice, ...)
    reference_type = models.ForeignKey(
        ContentType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Tipo de Referência'),
    )
    reference_id = models.PositiveBigIntegerField(null=True, blank=True, verbose_name=_('ID da Referência'))
    reference = GenericForeignKey('reference_type', 'reference_id')

    reason = models.CharField(
        max_length=255,
        verbose_name=_('Motivo'),
        help_text=_('Obrigatório. Ex: "Romaneio #12", "Venda #123"'),
    )
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadados'))

    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Data/Hora'))
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Usuário'),
    )

    class Meta:
        verbose_name = _('Movimento')
        verbose_name_plural = _('Movimentos')
        ordering = ['timestamp', 'pk']
        indexes = [
            models.Index(fields=['entry', 'timestamp'], name='packman_move_entry_ts_idx'),
            models.Index(fields=['reference_type', 'reference_id'], name='packman_move_reference_idx'),
        ]

    def save(self, *args, **kwargs):
        """Save move and update entry cache atomically."""
        if self.pk:
            raise ValueError(
                "Movimentos são imutáveis. "
                "Para corrigir, crie um novo StockMove com delta inverso."
            )

        if not self.reason:
            raise ValueError("Motivo é obrigatório")

        with transaction.atomic():
            super().save(*args, **kwargs)

            from packman.models.entry import StockEntry

            StockEntry.objects.filter(pk=self.entry_id).update(
                _quantity=F('_quantity') + self.delta,
                updated_at=timezone.now()
            )

    def delete(self, *args, **kwargs):
        """Prevent deletion — moves are immutable."""
        raise ValueError(
            "Movimentos são imutáveis. "
            "Para estornar, crie um novo StockMove com delta inverso."
        )

    def __str__(self) -> str:
        signal = '+' if self.delta > 0 else ''
        return f"{signal}{self.delta} → {self.resulting_quantity} | {self.reason}"
