"""
Enums for Packman models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class DocumentKind(models.TextChoices):
    """
    Type of stock-moving document.

    PACKING_LIST:  Shipment from a source store, optionally to a destination store.
    SALES_INVOICE: Sale from a store to a customer.

    Both reserve stock in the source store the same way.
    """
    PACKING_LIST = 'packing_list', _('Romaneio')
    SALES_INVOICE = 'sales_invoice', _('Nota de Venda')


class DocumentStatus(models.TextChoices):
    """Document lifecycle status. DRAFT -> APPROVED only."""
    DRAFT = 'draft', _('Rascunho')        # Editable, deletable, stock already reserved
    APPROVED = 'approved', _('Aprovado')  # Terminal, immutable
