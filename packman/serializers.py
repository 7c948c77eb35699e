"""
Plain-dict serialization of Packman models for JSON responses.
"""

from packman.models.document import Document, DocumentLine
from packman.models.entry import StockEntry
from packman.services.validation import product_key


def serialize_entry(entry: StockEntry) -> dict:
    return {
        'store_code': entry.store_code,
        'product_id': entry.product_id,
        'quantity': entry.quantity,
        'unit_price': str(entry.unit_price),
        'currency': entry.currency,
        'updated_at': entry.updated_at.isoformat() if entry.updated_at else None,
    }


def serialize_line(line: DocumentLine) -> dict:
    return {
        'product_id': line.product_id,
        'quantity': line.quantity,
        'unit_price': str(line.unit_price),
        'description': line.description,
    }


def serialize_document(document: Document) -> dict:
    return {
        'document_id': document.document_id,
        'id': document.pk,
        'kind': document.kind,
        'number': document.number,
        'source_store': document.source_store,
        'destination_store': document.destination_store or None,
        'status': document.status,
        'version': document.version,
        'document_date': document.document_date.isoformat() if document.document_date else None,
        'metadata': document.metadata,
        'approved_at': document.approved_at.isoformat() if document.approved_at else None,
        'transmitted_at': document.transmitted_at.isoformat() if document.transmitted_at else None,
        'lines': [serialize_line(line) for line in document.lines.all()],
    }


def rejected_lines(submitted, rejections: list[dict]) -> list[dict]:
    """
    Submitted lines annotated with their rejection, if any.

    Every submitted line is echoed back so the caller can re-prompt
    the user with the full form.
    """
    by_product = {r['product_id']: r for r in rejections}
    lines = []
    for line in submitted:
        product_id = product_key(line.get('product_id'))
        data = {'product_id': product_id, 'quantity': line.get('quantity')}
        rejection = by_product.get(product_id)
        if rejection is not None:
            data['rejected'] = rejection['code']
            if 'available' in rejection:
                data['available'] = rejection['available']
        lines.append(data)
    return lines
