"""
Document model — stock-moving document (packing list or sales invoice).
"""

from django.conf import settings
from django.db import models
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _

from packman.models.enums import DocumentKind, DocumentStatus


class DocumentQuerySet(models.QuerySet):
    """Custom QuerySet for Document with convenience filters."""

    def drafts(self):
        return self.filter(status=DocumentStatus.DRAFT)

    def approved(self):
        return self.filter(status=DocumentStatus.APPROVED)

    def from_store(self, store_code: str):
        return self.filter(source_store=store_code)

    def referencing(self, store_code: str, product_id: str):
        """Documents with a line reserving stock of this store/product."""
        return self.filter(source_store=store_code, lines__product_id=product_id).distinct()


class Document(models.Model):
    """
    Header of a stock-moving document.

    LIFECYCLE:

        ┌───────┐   approve()   ┌──────────┐   transmit()   ┌──────────────────┐
        │ DRAFT │ ────────────► │ APPROVED │ ─────────────► │ APPROVED         │
        └───────┘               └──────────┘  (once)        │ + transmitted_at │
            │                                               └──────────────────┘
            │ delete() — restores every reserved quantity
            ▼
         (gone)

    Stock is reserved (debited from the source store) when the document is
    created or edited, never at approval. Approval only marks the
    document final: no more edits, no deletion. Transmission credits the
    lines to the destination store; it never touches the reservation.

    ``version`` increments on every successful update/approve/transmit so
    callers can detect that someone else changed the document since they
    read it.
    """

    kind = models.CharField(
        max_length=20,
        choices=DocumentKind.choices,
        default=DocumentKind.PACKING_LIST,
        db_index=True,
        verbose_name=_('Tipo'),
    )
    number = models.CharField(
        max_length=64,
        blank=True,
        default='',
        verbose_name=_('Número'),
        help_text=_('Número da caixa ou da nota'),
    )

    source_store = models.CharField(
        max_length=50,
        db_index=True,
        verbose_name=_('Loja de origem'),
    )
    destination_store = models.CharField(
        max_length=50,
        blank=True,
        default='',
        verbose_name=_('Loja de destino'),
    )

    status = models.CharField(
        max_length=20,
        choices=DocumentStatus.choices,
        default=DocumentStatus.DRAFT,
        db_index=True,
        verbose_name=_('Status'),
    )
    version = models.PositiveIntegerField(
        default=1,
        verbose_name=_('Versão'),
    )

    document_date = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Data do documento'),
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        verbose_name=_('Metadados'),
        help_text=_('Datas de embarque, número da carga, cliente, observações...'),
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Criado por'),
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Aprovado por'),
    )
    approved_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Aprovado em'))

    transmitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Transmitido por'),
    )
    transmitted_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Transmitido em'))

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Criado em'))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_('Atualizado em'))

    objects = DocumentQuerySet.as_manager()

    class Meta:
        verbose_name = _('Documento')
        verbose_name_plural = _('Documentos')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['source_store', 'status'], name='packman_doc_store_status_idx'),
        ]

    @property
    def is_draft(self) -> bool:
        return self.status == DocumentStatus.DRAFT

    @property
    def is_approved(self) -> bool:
        return self.status == DocumentStatus.APPROVED

    @property
    def is_transmitted(self) -> bool:
        return self.transmitted_at is not None

    @property
    def document_id(self) -> str:
        """Return document identifier in standard format."""
        return f"doc:{self.pk}"

    @property
    def total_quantity(self) -> int:
        return self.lines.aggregate(t=Coalesce(Sum('quantity'), 0))['t']

    def reserved_quantities(self) -> dict[str, int]:
        """Quantities currently reserved by this document, per product."""
        return dict(self.lines.values_list('product_id', 'quantity'))

    def __str__(self) -> str:
        number = f" {self.number}" if self.number else ""
        return f"{self.get_kind_display()}{number} [{self.source_store}] ({self.get_status_display()})"


class DocumentLine(models.Model):
    """
    One product + quantity of a document.

    The line's quantity is exactly what it has debited from
    StockEntry(document.source_store, product_id). ``unit_price`` is
    captured from the ledger at reservation time and never re-derived.
    """

    document = models.ForeignKey(
        Document,
        on_delete=models.CASCADE,
        related_name='lines',
        verbose_name=_('Documento'),
    )
    product_id = models.CharField(
        max_length=64,
        verbose_name=_('Produto'),
    )
    quantity = models.PositiveIntegerField(
        verbose_name=_('Quantidade'),
    )
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        verbose_name=_('Preço unitário na reserva'),
    )
    description = models.CharField(
        max_length=255,
        blank=True,
        default='',
        verbose_name=_('Descrição'),
    )

    class Meta:
        verbose_name = _('Item')
        verbose_name_plural = _('Itens')
        ordering = ['product_id']
        constraints = [
            models.UniqueConstraint(
                fields=['document', 'product_id'],
                name='unique_document_line_per_product',
            ),
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name='document_line_quantity_positive',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.product_id}"
