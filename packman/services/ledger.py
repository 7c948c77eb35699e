"""
Stock ledger — the single source of truth for quantity per (store, product).

All state-changing methods use transaction.atomic() with row locking.
Locks are always taken in product_id order so two documents touching
overlapping products cannot deadlock each other.
"""

import logging
from contextlib import contextmanager

from django.db import DatabaseError, transaction

from packman.conf import packman_settings
from packman.exceptions import StockError
from packman.models.entry import StockEntry
from packman.models.move import StockMove
from packman.signals import stock_adjusted

logger = logging.getLogger('packman')


@contextmanager
def atomic_or_conflict(**context):
    """
    transaction.atomic() that reports lost races as CONCURRENT_CONFLICT.

    Lock timeouts, NOWAIT failures, deadlocks, serialization failures and
    constraint violations all mean another writer changed a touched row
    between our read and our commit. The whole block is rolled back.
    """
    try:
        with transaction.atomic():
            yield
    except DatabaseError as exc:
        logger.warning(
            "stock.conflict",
            extra={**{k: str(v) for k, v in context.items()}, "error": str(exc)},
        )
        raise StockError('CONCURRENT_CONFLICT', **context) from exc


class StockLedger:
    """Read and adjust on-hand quantities."""

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def get(cls, store_code: str, product_id: str) -> StockEntry | None:
        """Current snapshot, or None if the store never stocked the product."""
        return StockEntry.objects.filter(
            store_code=store_code,
            product_id=product_id,
        ).first()

    @classmethod
    def list_by_store(cls, store_code: str, include_empty: bool = True):
        """
        Entries of a store, ordered by product_id.

        Returns a lazy QuerySet: iterate it as many times as needed,
        each iteration reads fresh rows.
        """
        qs = StockEntry.objects.for_store(store_code).order_by('product_id')
        if not include_empty:
            qs = qs.in_stock()
        return qs

    # ══════════════════════════════════════════════════════════════
    # LOCKING
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def lock_entries(cls, store_code: str, product_ids) -> dict[str, StockEntry]:
        """
        Lock the entries of a store for the given products.

        Must run inside transaction.atomic(). Rows are locked in product_id
        order. Products without an entry are simply absent from the result.

        Returns:
            {product_id: locked StockEntry}
        """
        ids = sorted(set(product_ids))
        if not ids:
            return {}

        qs = (
            StockEntry.objects
            .select_for_update(nowait=packman_settings.LOCK_NOWAIT)
            .filter(store_code=store_code, product_id__in=ids)
            .order_by('product_id')
        )
        return {entry.product_id: entry for entry in qs}

    # ══════════════════════════════════════════════════════════════
    # MOVEMENTS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def apply(cls, entry: StockEntry, delta: int, *, reason: str,
              reference=None, user=None, **metadata) -> StockEntry:
        """
        Post a delta to an entry already locked by lock_entries().

        Raises:
            StockError('INSUFFICIENT_STOCK'): If the result would be negative.
                Nothing is written in that case.
        """
        if delta == 0:
            return entry

        resulting = entry._quantity + delta
        if resulting < 0:
            raise StockError(
                'INSUFFICIENT_STOCK',
                store_code=entry.store_code,
                product_id=entry.product_id,
                available=entry._quantity,
                requested=-delta,
            )

        move = StockMove.objects.create(
            entry=entry,
            delta=delta,
            resulting_quantity=resulting,
            reference=reference,
            reason=reason,
            user=user,
            metadata=metadata,
        )
        entry.refresh_from_db(fields=['_quantity', 'updated_at'])

        logger.info(
            "stock.adjust",
            extra={
                "store": entry.store_code,
                "product": entry.product_id,
                "delta": delta,
                "resulting_quantity": resulting,
                "reason": reason,
                "move_id": move.pk,
            },
        )
        transaction.on_commit(lambda: stock_adjusted.send(
            sender=StockLedger,
            entry=entry,
            move=move,
            store_code=entry.store_code,
            product_id=entry.product_id,
            delta=delta,
            resulting_quantity=resulting,
            timestamp=move.timestamp,
        ))
        return entry

    @classmethod
    def adjust(cls, store_code: str, product_id: str, delta: int, *,
               reason: str, reference=None, user=None, **metadata) -> StockEntry:
        """
        Atomically add delta (may be negative) to an entry.

        Raises:
            StockError('REASON_REQUIRED'): If reason is empty
            StockError('UNKNOWN_STORE_OR_PRODUCT'): If the store never stocked the product
            StockError('INSUFFICIENT_STOCK'): If the result would be negative
            StockError('CONCURRENT_CONFLICT'): If the row lock could not be taken

        Concurrency:
            - Runs under transaction.atomic()
            - Uses select_for_update() on the entry
            - Checks the new quantity after the lock
        """
        if not reason:
            raise StockError('REASON_REQUIRED')

        with atomic_or_conflict(store_code=store_code, product_id=product_id):
            entry = cls.lock_entries(store_code, [product_id]).get(product_id)
            if entry is None:
                raise StockError(
                    'UNKNOWN_STORE_OR_PRODUCT',
                    store_code=store_code,
                    product_id=product_id,
                )
            return cls.apply(
                entry, delta,
                reason=reason, reference=reference, user=user, **metadata
            )

    @classmethod
    def receive(cls, store_code: str, product_id: str, quantity: int, *,
                unit_price=None, currency: str | None = None,
                reason: str = 'Recebimento', reference=None, user=None,
                **metadata) -> StockEntry:
        """
        Stock entry (opening balance, purchase, transfer into a store).

        Creates the entry on first receipt. Updates the price context
        when unit_price or currency is given.

        Concurrency:
            - Runs under transaction.atomic()
            - Uses get_or_create, then select_for_update() on the entry
        """
        if quantity <= 0:
            raise StockError('INVALID_QUANTITY', requested=quantity)

        with atomic_or_conflict(store_code=store_code, product_id=product_id):
            defaults = {
                'currency': currency or packman_settings.DEFAULT_CURRENCY,
                'metadata': metadata,
            }
            if unit_price is not None:
                defaults['unit_price'] = unit_price
            StockEntry.objects.get_or_create(
                store_code=store_code,
                product_id=product_id,
                defaults=defaults,
            )
            entry = cls.lock_entries(store_code, [product_id])[product_id]

            changed = []
            if unit_price is not None and entry.unit_price != unit_price:
                entry.unit_price = unit_price
                changed.append('unit_price')
            if currency and entry.currency != currency:
                entry.currency = currency
                changed.append('currency')
            if changed:
                entry.save(update_fields=[*changed, 'updated_at'])

            entry = cls.apply(
                entry, quantity,
                reason=reason, reference=reference, user=user, **metadata
            )
            logger.info(
                "stock.receive",
                extra={
                    "store": store_code,
                    "product": product_id,
                    "qty": quantity,
                    "reason": reason,
                    "entry_id": entry.pk,
                },
            )
            return entry
