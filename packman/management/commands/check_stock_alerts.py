"""
Management command to evaluate reorder-level alerts.

Usage:
    python manage.py check_stock_alerts
    python manage.py check_stock_alerts --store loja-centro
"""

from django.core.management.base import BaseCommand

from packman.services.alerts import check_alerts


class Command(BaseCommand):
    """Check stock alerts command."""

    help = 'Verifica alertas de estoque mínimo'

    def add_arguments(self, parser):
        parser.add_argument(
            '--store',
            help='Verifica apenas os alertas de uma loja'
        )

    def handle(self, *args, **options):
        triggered = check_alerts(store_code=options['store'])

        for alert, quantity in triggered:
            self.stdout.write(
                self.style.WARNING(
                    f'{alert.store_code}/{alert.product_id}: {quantity} < {alert.min_quantity}'
                )
            )

        self.stdout.write(f'{len(triggered)} alerta(s) disparado(s)')
