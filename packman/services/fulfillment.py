"""
Fulfillment engine — create, update, delete, approve and transmit
stock-moving documents.

Every operation runs as ONE transaction:

    1. lock the document row (update/delete/approve/transmit)
    2. lock the touched stock entries, in product_id order
    3. validate every line against the locked snapshot
    4. apply all deltas + write the document, or write nothing

Validation failures are collected for every line and raised together
as LINES_REJECTED. Lost races surface as CONCURRENT_CONFLICT.
"""

import logging
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from django.db import transaction
from django.utils import timezone

from packman.adapters.backends import get_catalog, get_store_directory
from packman.conf import packman_settings
from packman.exceptions import StockError
from packman.models.document import Document, DocumentLine
from packman.models.enums import DocumentKind, DocumentStatus
from packman.protocols.stores import ROLE_RECEIVE, ROLE_SOURCE
from packman.services.ledger import StockLedger, atomic_or_conflict
from packman.services.validation import Rejected, ReservationValidator, product_key
from packman.signals import document_approved, document_transmitted

logger = logging.getLogger('packman')


def _is_quantity(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _read_line(line) -> tuple[Any, Any, str]:
    if isinstance(line, Mapping):
        return line.get('product_id'), line.get('quantity'), line.get('description') or ''
    return (
        getattr(line, 'product_id', None),
        getattr(line, 'quantity', None),
        getattr(line, 'description', '') or '',
    )


def _normalize_lines(lines) -> tuple[dict[str, Any], dict[str, str], list[Rejected]]:
    """
    Collapse submitted lines to one quantity per product.

    Duplicate products are merged by summing their quantities. If any
    part of a merged product is not a positive integer, the invalid part
    is kept so the validator rejects the product.

    Returns:
        (quantities, descriptions, rejected) — rejected holds lines
        without a product id
    """
    quantities: dict[str, Any] = {}
    descriptions: dict[str, str] = {}
    rejected: list[Rejected] = []

    for line in lines or []:
        product_id, quantity, description = _read_line(line)
        product_id = product_key(product_id)
        if not product_id:
            rejected.append(Rejected('', quantity, 'UNKNOWN_STORE_OR_PRODUCT'))
            continue

        if product_id not in quantities:
            quantities[product_id] = quantity
        elif _is_quantity(quantities[product_id]) and _is_quantity(quantity):
            quantities[product_id] += quantity
        elif _is_quantity(quantities[product_id]):
            quantities[product_id] = quantity

        if description and not descriptions.get(product_id):
            descriptions[product_id] = description

    return quantities, descriptions, rejected


def _parse_document_id(document_id) -> int:
    """Extract PK from document_id ("doc:12" or 12)."""
    if isinstance(document_id, int) and not isinstance(document_id, bool):
        return document_id
    if isinstance(document_id, str):
        value = document_id.removeprefix('doc:')
        if value.isdigit():
            return int(value)
    raise StockError('DOCUMENT_NOT_FOUND', document_id=str(document_id))


def _raise_rejected(rejected: list[Rejected], **context):
    logger.info(
        "document.rejected",
        extra={
            **context,
            "rejected": [f"{r.product_id}:{r.code}" for r in rejected],
        },
    )
    raise StockError(
        'LINES_REJECTED',
        rejections=[r.as_dict() for r in rejected],
        **context,
    )


PRICE_LIMIT = Decimal('10000000000')


def _parse_price(value) -> Decimal | None:
    """Non-negative price with two decimal places, or None if unusable."""
    if isinstance(value, bool):
        return None
    try:
        price = Decimal(str(value)).quantize(Decimal('0.01'))
    except InvalidOperation:
        return None
    if not price.is_finite() or price < 0 or price >= PRICE_LIMIT:
        return None
    return price


def _resolve_prices(lines, prices) -> tuple[dict[str, Decimal], list[Rejected]]:
    """
    New unit price per line: prices[product_id], else the captured line price.

    Prices for products the document does not carry are rejected.
    """
    prices = {product_key(pid): value for pid, value in (prices or {}).items()}
    by_product = {line.product_id: line for line in lines}

    unit_prices: dict[str, Decimal] = {}
    rejected = [
        Rejected(pid, None, 'UNKNOWN_STORE_OR_PRODUCT')
        for pid in prices if pid not in by_product
    ]
    for pid, line in by_product.items():
        if pid not in prices:
            unit_prices[pid] = line.unit_price
            continue
        price = _parse_price(prices[pid])
        if price is None:
            rejected.append(Rejected(pid, line.quantity, 'INVALID_PRICE'))
        else:
            unit_prices[pid] = price

    return unit_prices, sorted(rejected, key=lambda r: r.product_id)


class FulfillmentEngine:
    """
    Reconcile document submissions against the stock ledger.

    The acting user is always passed explicitly; it is recorded on the
    document and on every stock move the operation writes.
    """

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def get(cls, document_id) -> Document:
        """
        Raises:
            StockError('DOCUMENT_NOT_FOUND'): If the document doesn't exist
        """
        pk = _parse_document_id(document_id)
        try:
            return Document.objects.prefetch_related('lines').get(pk=pk)
        except Document.DoesNotExist:
            raise StockError('DOCUMENT_NOT_FOUND', document_id=str(document_id)) from None

    # ══════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def create(cls, source_store: str, lines, *, kind=DocumentKind.PACKING_LIST,
               destination_store: str = '', number: str = '', document_date=None,
               user=None, **metadata) -> Document:
        """
        Create a DRAFT document and reserve every line.

        All-or-nothing: if any line is rejected, no document is written and
        no stock moves.

        Raises:
            StockError('LINES_REJECTED'): With one rejection per bad line
            StockError('UNKNOWN_STORE_OR_PRODUCT'): If a store is unknown
                (only when VALIDATE_REFERENCES is on)
            StockError('CONCURRENT_CONFLICT'): If the commit lost a race
        """
        kind = DocumentKind(kind)
        destination_store = destination_store or ''
        requested, descriptions, invalid = _normalize_lines(lines)
        cls._check_stores(source_store, destination_store)
        invalid += cls._check_products(requested)

        with atomic_or_conflict(source_store=source_store):
            entries = StockLedger.lock_entries(source_store, requested)
            accepted, rejected = ReservationValidator.validate_lines(entries, requested)
            if invalid or rejected:
                _raise_rejected(invalid + rejected, source_store=source_store)

            document = Document.objects.create(
                kind=kind,
                number=number,
                source_store=source_store,
                destination_store=destination_store,
                document_date=document_date,
                metadata=metadata,
                created_by=user,
            )
            DocumentLine.objects.bulk_create([
                DocumentLine(
                    document=document,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=entries[line.product_id].unit_price,
                    description=descriptions.get(line.product_id, ''),
                )
                for line in accepted
            ])
            for line in accepted:
                StockLedger.apply(
                    entries[line.product_id], line.delta,
                    reason=f"Reserva {document.document_id}",
                    reference=document,
                    user=user,
                )

        logger.info(
            "document.created",
            extra={
                "document_id": document.document_id,
                "kind": kind.value,
                "store": source_store,
                "lines": len(accepted),
                "qty": sum(line.quantity for line in accepted),
            },
        )
        return document

    @classmethod
    def update(cls, document_id, lines, *, expected_version: int | None = None,
               user=None, **metadata) -> Document:
        """
        Replace the lines of a DRAFT document.

        Each product is judged against its effective available
        (ledger quantity + what this document already holds). Products
        dropped from the line set return their whole reservation.

        Raises:
            StockError('DOCUMENT_NOT_FOUND')
            StockError('DOCUMENT_IMMUTABLE'): If the document is APPROVED
            StockError('LINES_REJECTED'): With one rejection per bad line
            StockError('CONCURRENT_CONFLICT'): If expected_version is stale
                or the commit lost a race
        """
        pk = _parse_document_id(document_id)
        requested, descriptions, invalid = _normalize_lines(lines)
        invalid += cls._check_products(requested)

        with atomic_or_conflict(document_id=str(document_id)):
            document = cls._lock_draft(pk, expected_version)
            current = {line.product_id: line for line in document.lines.all()}
            previous = {pid: line.quantity for pid, line in current.items()}

            entries = StockLedger.lock_entries(
                document.source_store, set(requested) | set(previous)
            )
            accepted, rejected = ReservationValidator.validate_lines(
                entries, requested, previous
            )
            if invalid or rejected:
                _raise_rejected(invalid + rejected, document_id=document.document_id)

            deltas = {line.product_id: line.delta for line in accepted}
            removed = sorted(set(previous) - set(requested))
            for product_id in removed:
                deltas[product_id] = previous[product_id]

            for product_id in sorted(deltas):
                entry = entries.get(product_id)
                if entry is None:
                    raise StockError(
                        'UNKNOWN_STORE_OR_PRODUCT',
                        store_code=document.source_store,
                        product_id=product_id,
                    )
                StockLedger.apply(
                    entry, deltas[product_id],
                    reason=f"Alteração {document.document_id}",
                    reference=document,
                    user=user,
                )

            document.lines.filter(product_id__in=removed).delete()
            for line in accepted:
                existing = current.get(line.product_id)
                if existing is None:
                    DocumentLine.objects.create(
                        document=document,
                        product_id=line.product_id,
                        quantity=line.quantity,
                        unit_price=entries[line.product_id].unit_price,
                        description=descriptions.get(line.product_id, ''),
                    )
                    continue
                existing.quantity = line.quantity
                if line.product_id in descriptions:
                    existing.description = descriptions[line.product_id]
                existing.save(update_fields=['quantity', 'description'])

            document.version += 1
            document.metadata.update(metadata)
            document.save(update_fields=['version', 'metadata', 'updated_at'])

        logger.info(
            "document.updated",
            extra={
                "document_id": document.document_id,
                "version": document.version,
                "deltas": {pid: d for pid, d in deltas.items() if d},
            },
        )
        return document

    @classmethod
    def delete(cls, document_id, *, expected_version: int | None = None,
               user=None) -> list[dict[str, Any]]:
        """
        Delete a DRAFT document, returning every reserved quantity.

        Returns:
            [{'product_id': ..., 'quantity': ...}] — what went back to stock

        Raises:
            StockError('DOCUMENT_NOT_FOUND')
            StockError('DOCUMENT_IMMUTABLE'): If the document is APPROVED
            StockError('CONCURRENT_CONFLICT')
        """
        pk = _parse_document_id(document_id)

        with atomic_or_conflict(document_id=str(document_id)):
            document = cls._lock_draft(pk, expected_version)
            reference = document.document_id
            previous = document.reserved_quantities()
            entries = StockLedger.lock_entries(document.source_store, previous)

            restored = []
            for product_id in sorted(previous):
                entry = entries.get(product_id)
                if entry is None:
                    raise StockError(
                        'UNKNOWN_STORE_OR_PRODUCT',
                        store_code=document.source_store,
                        product_id=product_id,
                    )
                StockLedger.apply(
                    entry, previous[product_id],
                    reason=f"Estorno {reference}",
                    reference=document,
                    user=user,
                )
                restored.append({'product_id': product_id, 'quantity': previous[product_id]})

            document.delete()

        logger.info(
            "document.deleted",
            extra={"document_id": reference, "restored": len(restored)},
        )
        return restored

    @classmethod
    def approve(cls, document_id, *, expected_version: int | None = None,
                user=None) -> Document:
        """
        Approve a DRAFT document.

        Transition: DRAFT -> APPROVED. No stock effect: stock moved when
        the lines were reserved. Approving twice is an error, not a no-op.

        Raises:
            StockError('DOCUMENT_NOT_FOUND')
            StockError('DOCUMENT_IMMUTABLE'): If already APPROVED
            StockError('CONCURRENT_CONFLICT')
        """
        pk = _parse_document_id(document_id)

        with atomic_or_conflict(document_id=str(document_id)):
            document = cls._lock_draft(pk, expected_version)
            document.status = DocumentStatus.APPROVED
            document.approved_by = user
            document.approved_at = timezone.now()
            document.version += 1
            document.save(update_fields=[
                'status', 'approved_by', 'approved_at', 'version', 'updated_at'
            ])

        logger.info(
            "document.approved",
            extra={"document_id": document.document_id, "user": str(user) if user else None},
        )
        transaction.on_commit(
            lambda: document_approved.send(sender=FulfillmentEngine, document=document, user=user)
        )
        return document

    @classmethod
    def transmit(cls, document_id, *, destination_store: str | None = None,
                 prices=None, currency: str | None = None,
                 expected_version: int | None = None, user=None) -> Document:
        """
        Credit an APPROVED packing list to its destination store.

        Every line is received at the destination (entry created on first
        receipt, otherwise added to) at its new unit price: prices[product_id]
        when given, else the price captured on the line. ``currency`` applies
        to every credited entry; None keeps the destination entry's currency.

        The whole document is credited in one transaction, and only once.
        The document stays APPROVED; its reservation in the source store is
        untouched.

        Raises:
            StockError('DOCUMENT_NOT_FOUND')
            StockError('DOCUMENT_NOT_TRANSMITTABLE'): If not an APPROVED packing list
            StockError('DOCUMENT_ALREADY_TRANSMITTED')
            StockError('INVALID_STORE'): If the destination is missing, is the
                source store, or cannot receive
            StockError('LINES_REJECTED'): With one rejection per bad price
            StockError('CONCURRENT_CONFLICT')
        """
        pk = _parse_document_id(document_id)

        with atomic_or_conflict(document_id=str(document_id)):
            document = cls._lock(pk)
            if (document.kind != DocumentKind.PACKING_LIST
                    or document.status != DocumentStatus.APPROVED):
                raise StockError(
                    'DOCUMENT_NOT_TRANSMITTABLE',
                    document_id=document.document_id,
                    kind=document.kind,
                    status=document.status,
                )
            if document.is_transmitted:
                raise StockError(
                    'DOCUMENT_ALREADY_TRANSMITTED',
                    document_id=document.document_id,
                    destination_store=document.destination_store,
                )
            cls._check_version(document, expected_version)

            destination = destination_store or document.destination_store
            if not destination or destination == document.source_store:
                raise StockError('INVALID_STORE', store_code=destination or '', role=ROLE_RECEIVE)
            cls._check_store(destination, ROLE_RECEIVE)

            lines = list(document.lines.all())
            unit_prices, rejected = _resolve_prices(lines, prices)
            if rejected:
                _raise_rejected(rejected, document_id=document.document_id)

            for line in sorted(lines, key=lambda item: item.product_id):
                StockLedger.receive(
                    destination, line.product_id, line.quantity,
                    unit_price=unit_prices[line.product_id],
                    currency=currency,
                    reason=f"Transmissão {document.document_id}",
                    reference=document,
                    user=user,
                    source_store=document.source_store,
                )

            document.destination_store = destination
            document.transmitted_at = timezone.now()
            document.transmitted_by = user
            document.version += 1
            document.save(update_fields=[
                'destination_store', 'transmitted_at', 'transmitted_by', 'version', 'updated_at'
            ])

        logger.info(
            "document.transmitted",
            extra={
                "document_id": document.document_id,
                "source": document.source_store,
                "destination": destination,
                "lines": len(lines),
                "qty": sum(line.quantity for line in lines),
            },
        )
        transaction.on_commit(lambda: document_transmitted.send(
            sender=FulfillmentEngine,
            document=document,
            destination_store=destination,
            user=user,
        ))
        return document

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _lock(cls, pk: int) -> Document:
        """Lock the document row."""
        try:
            return (
                Document.objects
                .select_for_update(nowait=packman_settings.LOCK_NOWAIT)
                .get(pk=pk)
            )
        except Document.DoesNotExist:
            raise StockError('DOCUMENT_NOT_FOUND', document_id=f"doc:{pk}") from None

    @classmethod
    def _check_version(cls, document: Document, expected_version: int | None) -> None:
        if expected_version is not None and document.version != int(expected_version):
            raise StockError(
                'CONCURRENT_CONFLICT',
                document_id=document.document_id,
                expected_version=int(expected_version),
                current_version=document.version,
            )

    @classmethod
    def _lock_draft(cls, pk: int, expected_version: int | None) -> Document:
        """Lock the document row and check it may still change."""
        document = cls._lock(pk)

        if document.status != DocumentStatus.DRAFT:
            raise StockError(
                'DOCUMENT_IMMUTABLE',
                document_id=document.document_id,
                status=document.status,
            )

        cls._check_version(document, expected_version)
        return document

    @classmethod
    def _check_store(cls, code: str, role: str) -> None:
        """Resolve a store code and check its role, when enabled."""
        if not packman_settings.VALIDATE_REFERENCES:
            return

        store = get_store_directory().get_store(code)
        if store is None:
            raise StockError('UNKNOWN_STORE_OR_PRODUCT', store_code=code)

        allowed = store.can_source if role == ROLE_SOURCE else store.can_receive
        if not allowed:
            raise StockError('INVALID_STORE', store_code=code, role=role)

    @classmethod
    def _check_stores(cls, source_store: str, destination_store: str) -> None:
        """Source must be able to source, destination (if any) to receive."""
        cls._check_store(source_store, ROLE_SOURCE)
        if destination_store:
            cls._check_store(destination_store, ROLE_RECEIVE)

    @classmethod
    def _check_products(cls, requested: dict[str, Any]) -> list[Rejected]:
        """
        Resolve product ids through the catalog, when enabled.

        Unknown products are removed from ``requested`` and returned as
        rejections.
        """
        if not packman_settings.VALIDATE_REFERENCES or not requested:
            return []

        known = get_catalog().get_products(sorted(requested))
        rejected = []
        for product_id in sorted(requested):
            if product_id not in known:
                rejected.append(Rejected(product_id, requested.pop(product_id), 'UNKNOWN_STORE_OR_PRODUCT'))
        return rejected
