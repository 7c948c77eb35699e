"""
Packman Admin.

Provides read-only views for production debugging:
- StockEntry: read-only (store, product, quantity, price)
- StockMove: read-only audit trail (timestamp, delta, resulting quantity, reason)
- Document: read-only with lines inline and "approve" action
- StockAlert: configurable reorder levels

Stock only changes through the Packman services, never through forms.
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from packman.exceptions import StockError
from packman.models import Document, DocumentLine, DocumentStatus, StockAlert, StockEntry, StockMove

logger = logging.getLogger(__name__)


class ReadOnlyAdminMixin:
    """Deny add/change/delete through the admin."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# STOCK ENTRY ADMIN (read-only)
# =========================================================================

@admin.register(StockEntry)
class StockEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """StockEntry admin — read-only. Stock only changes via StockLedger."""

    list_display = ['store_code', 'product_id', 'quantity_display', 'unit_price', 'currency', 'updated_at']
    list_filter = ['store_code', 'currency']
    search_fields = ['store_code', 'product_id']
    readonly_fields = ['store_code', 'product_id', '_quantity', 'unit_price', 'currency',
                       'metadata', 'created_at', 'updated_at']

    @admin.display(description=_('Quantidade'), ordering='_quantity')
    def quantity_display(self, obj):
        return obj.quantity


# =========================================================================
# STOCK MOVE ADMIN (read-only audit trail)
# =========================================================================

@admin.register(StockMove)
class StockMoveAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """StockMove admin — read-only. Immutable audit trail."""

    list_display = ['timestamp', 'entry', 'delta', 'resulting_quantity', 'reason', 'user']
    list_filter = ['timestamp', 'entry__store_code']
    search_fields = ['reason', 'entry__product_id']
    readonly_fields = ['entry', 'delta', 'resulting_quantity', 'reference_type', 'reference_id',
                       'reason', 'metadata', 'timestamp', 'user']
    date_hierarchy = 'timestamp'


# =========================================================================
# DOCUMENT ADMIN (read-only with approve action)
# =========================================================================

class DocumentLineInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = DocumentLine
    extra = 0
    fields = ['product_id', 'quantity', 'unit_price', 'description']
    readonly_fields = fields


@admin.register(Document)
class DocumentAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """Document admin — read-only with approve action."""

    list_display = ['id', 'kind', 'number', 'source_store', 'destination_store',
                    'status', 'version', 'transmitted_at', 'created_at']
    list_filter = ['kind', 'status', 'source_store']
    search_fields = ['number', 'source_store', 'destination_store']
    readonly_fields = ['kind', 'number', 'source_store', 'destination_store', 'status',
                       'version', 'document_date', 'metadata', 'created_by', 'approved_by',
                       'approved_at', 'transmitted_by', 'transmitted_at', 'created_at', 'updated_at']
    inlines = [DocumentLineInline]
    actions = ['approve_documents']

    @admin.action(description=_('Aprovar documentos selecionados'))
    def approve_documents(self, request, queryset):
        from packman import fulfillment

        count = 0
        for document in queryset.filter(status=DocumentStatus.DRAFT):
            try:
                fulfillment.approve(document.pk, user=request.user)
                count += 1
            except StockError as exc:
                logger.warning("approve_documents: failed to approve %s: %s", document.document_id, exc)

        self.message_user(request, _('{count} documento(s) aprovado(s).').format(count=count))


# =========================================================================
# STOCK ALERT ADMIN
# =========================================================================

@admin.register(StockAlert)
class StockAlertAdmin(admin.ModelAdmin):
    """StockAlert admin — configurable reorder levels."""

    list_display = ['__str__', 'min_quantity', 'store_code', 'is_active', 'last_triggered_at']
    list_filter = ['is_active', 'store_code']
    search_fields = ['store_code', 'product_id']
    readonly_fields = ['last_triggered_at', 'created_at', 'updated_at']
