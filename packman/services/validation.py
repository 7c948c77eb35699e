"""
Reservation validation — may this line take this much stock?

Pure functions of their inputs. The engine calls them with entries locked
by StockLedger.lock_entries() inside the same transaction that applies the
resulting deltas, so an accept decision cannot be invalidated between the
check and the commit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from packman.models.entry import StockEntry


def product_key(value) -> str:
    """Product id of a submitted line as the engine keys it ('' when missing)."""
    if value is None or value == '':
        return ''
    return str(value)


@dataclass(frozen=True)
class Accepted:
    """Line accepted. ``delta`` is what must be posted to the ledger."""

    product_id: str
    quantity: int
    delta: int
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Rejected:
    """Line rejected, with the reason and (for stock) what is available."""

    product_id: str
    quantity: Any
    code: str
    available: int | None = None
    ok: bool = field(default=False, init=False)

    def as_dict(self) -> dict[str, Any]:
        data = {
            'product_id': self.product_id,
            'quantity': self.quantity,
            'code': self.code,
        }
        if self.available is not None:
            data['available'] = self.available
        return data


class ReservationValidator:
    """
    Effective-available rule:

        available = entry.quantity + previously_reserved

    Stock this line already holds has not been returned to the ledger yet,
    so it is added back before judging the new request.
    """

    @classmethod
    def validate(cls, entry: StockEntry | None, product_id: str, requested: int,
                 previously_reserved: int = 0) -> Accepted | Rejected:
        """
        Decide a single line.

        Args:
            entry: Locked ledger entry (None if the store never stocked the product)
            product_id: Product of the line
            requested: New quantity for the line
            previously_reserved: Quantity the line holds today (0 for a new line)

        Returns:
            Accepted(delta=previously_reserved - requested) or Rejected(code)
        """
        if isinstance(requested, bool) or not isinstance(requested, int) or requested <= 0:
            return Rejected(product_id, requested, 'INVALID_QUANTITY')

        if entry is None and not previously_reserved:
            return Rejected(product_id, requested, 'UNKNOWN_STORE_OR_PRODUCT')

        on_hand = entry.quantity if entry is not None else 0
        available = on_hand + previously_reserved

        if requested > available:
            return Rejected(product_id, requested, 'INSUFFICIENT_STOCK', available=available)

        return Accepted(product_id, requested, delta=previously_reserved - requested)

    @classmethod
    def validate_lines(cls, entries: dict[str, StockEntry], requested: dict[str, Any],
                       previous: dict[str, int] | None = None
                       ) -> tuple[list[Accepted], list[Rejected]]:
        """
        Validate every requested line; never stops at the first rejection.

        Args:
            entries: {product_id: locked StockEntry}
            requested: {product_id: new quantity}
            previous: {product_id: quantity currently reserved by the document}

        Returns:
            (accepted, rejected), each in product_id order
        """
        previous = previous or {}
        accepted: list[Accepted] = []
        rejected: list[Rejected] = []

        for product_id in sorted(requested):
            result = cls.validate(
                entries.get(product_id),
                product_id,
                requested[product_id],
                previous.get(product_id, 0),
            )
            if result.ok:
                accepted.append(result)
            else:
                rejected.append(result)

        return accepted, rejected
