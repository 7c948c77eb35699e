"""
Django Packman — Reservas de Estoque por Loja e Expedição.

Store-scoped stock ledger plus the engine that reserves stock for
packing lists and sales invoices.

Uso:
    from packman import stock, fulfillment, StockError

    stock.receive('loja-centro', 'P1', 10, reason='Saldo inicial')
    doc = fulfillment.create('loja-centro', [{'product_id': 'P1', 'quantity': 4}])
    stock.get('loja-centro', 'P1').quantity  # 6
    fulfillment.update(doc.pk, [{'product_id': 'P1', 'quantity': 7}])  # 3
    fulfillment.delete(doc.pk)  # back to 10
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'stock':
        from packman.services.ledger import StockLedger
        return StockLedger
    elif name == 'fulfillment':
        from packman.services.fulfillment import FulfillmentEngine
        return FulfillmentEngine
    elif name == 'StockError':
        from packman.exceptions import StockError
        return StockError
    elif name == 'StockEntry':
        from packman.models.entry import StockEntry
        return StockEntry
    elif name == 'StockMove':
        from packman.models.move import StockMove
        return StockMove
    elif name == 'Document':
        from packman.models.document import Document
        return Document
    elif name == 'DocumentLine':
        from packman.models.document import DocumentLine
        return DocumentLine
    elif name == 'DocumentKind':
        from packman.models.enums import DocumentKind
        return DocumentKind
    elif name == 'DocumentStatus':
        from packman.models.enums import DocumentStatus
        return DocumentStatus
    elif name == 'StockAlert':
        from packman.models.alert import StockAlert
        return StockAlert
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'stock',
    'fulfillment',
    'StockError',
    'StockEntry',
    'StockMove',
    'Document',
    'DocumentLine',
    'DocumentKind',
    'DocumentStatus',
    'StockAlert',
]

__version__ = '0.1.0'
