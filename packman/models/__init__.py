"""
Packman Models.

Core models for store-scoped reservation:
- StockEntry: On-hand quantity per (store, product)
- StockMove: Immutable ledger of changes
- Document: Packing list / sales invoice header
- DocumentLine: Quantity reserved by a document, per product
- StockAlert: Configurable reorder level per store and product
"""

from packman.models.alert import StockAlert
from packman.models.document import Document, DocumentLine
from packman.models.entry import StockEntry
from packman.models.enums import DocumentKind, DocumentStatus
from packman.models.move import StockMove

__all__ = [
    'DocumentKind',
    'DocumentStatus',
    'StockEntry',
    'StockMove',
    'Document',
    'DocumentLine',
    'StockAlert',
]
