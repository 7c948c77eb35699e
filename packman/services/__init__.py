"""
Packman services — modular organization of stock and document operations.

    from packman.services import StockLedger, ReservationValidator, FulfillmentEngine
"""

from packman.services.fulfillment import FulfillmentEngine
from packman.services.ledger import StockLedger
from packman.services.validation import Accepted, Rejected, ReservationValidator

__all__ = [
    'StockLedger',
    'ReservationValidator',
    'Accepted',
    'Rejected',
    'FulfillmentEngine',
]
