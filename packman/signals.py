"""
Packman signals.

stock_adjusted:
    Sent after every committed quantity change.
    kwargs: entry, move, store_code, product_id, delta, resulting_quantity, timestamp

document_approved:
    Sent after a document moves DRAFT -> APPROVED.
    kwargs: document, user

document_transmitted:
    Sent after an approved packing list is credited to its destination.
    kwargs: document, destination_store, user

stock_alert_triggered:
    Sent by check_alerts() for each alert below its minimum.
    kwargs: alert, quantity

stock_adjusted, document_approved and document_transmitted are sent with
transaction.on_commit, so receivers never observe a change that is later
rolled back.
"""

from django.dispatch import Signal

stock_adjusted = Signal()
document_approved = Signal()
document_transmitted = Signal()
stock_alert_triggered = Signal()
