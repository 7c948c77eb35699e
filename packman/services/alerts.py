"""
Stock alerts — check and trigger reorder-level alerts.

Usage:
    from packman.services.alerts import check_alerts

    # Run periodically (celery beat, cron) or after stock changes
    triggered = check_alerts()
    # Returns list of (StockAlert, current_quantity) tuples
"""

import logging

from django.utils import timezone

from packman.models.alert import StockAlert
from packman.models.entry import StockEntry
from packman.signals import stock_alert_triggered

logger = logging.getLogger('packman')


def check_alerts(store_code: str | None = None) -> list[tuple[StockAlert, int]]:
    """
    Check all active alerts and return those that are triggered.

    An alert is triggered when on-hand quantity < min_quantity.
    A product the store never stocked counts as 0.

    Args:
        store_code: Optional store to check alerts for (None = all).

    Returns:
        List of (alert, current_quantity) tuples for triggered alerts.
    """
    qs = StockAlert.objects.filter(is_active=True).order_by('store_code', 'product_id')
    if store_code is not None:
        qs = qs.filter(store_code=store_code)

    triggered = []
    now = timezone.now()

    for alert in qs:
        quantity = (
            StockEntry.objects
            .filter(store_code=alert.store_code, product_id=alert.product_id)
            .values_list('_quantity', flat=True)
            .first()
        ) or 0

        if quantity < alert.min_quantity:
            alert.last_triggered_at = now
            alert.save(update_fields=['last_triggered_at'])
            triggered.append((alert, quantity))
            logger.warning(
                "stock.alert.triggered",
                extra={
                    "alert_id": alert.pk,
                    "store": alert.store_code,
                    "product": alert.product_id,
                    "min_quantity": alert.min_quantity,
                    "quantity": quantity,
                },
            )
            stock_alert_triggered.send(sender=StockAlert, alert=alert, quantity=quantity)

    return triggered
