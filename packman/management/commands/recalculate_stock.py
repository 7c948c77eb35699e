"""
Management command to rebuild cached stock quantities from the move ledger.

Usage:
    python manage.py recalculate_stock
    python manage.py recalculate_stock --store loja-centro
    python manage.py recalculate_stock --dry-run
"""

from django.core.management.base import BaseCommand
from django.db.models import Sum
from django.db.models.functions import Coalesce

from packman.models import StockEntry


class Command(BaseCommand):
    """Recalculate stock entries command."""

    help = 'Recalcula o saldo das entradas de estoque a partir dos movimentos'

    def add_arguments(self, parser):
        parser.add_argument(
            '--store',
            help='Limita o recálculo a uma loja'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Mostra as divergências sem corrigir'
        )

    def handle(self, *args, **options):
        if options['store']:
            entries = StockEntry.objects.for_store(options['store'])
        else:
            entries = StockEntry.objects.all()

        drifted = 0
        for entry in entries.iterator():
            expected = entry.moves.aggregate(t=Coalesce(Sum('delta'), 0))['t']
            if expected == entry.quantity:
                continue

            drifted += 1
            self.stdout.write(
                f'{entry.store_code}/{entry.product_id}: {entry.quantity} → {expected}'
            )
            if not options['dry_run']:
                entry.recalculate()

        if options['dry_run']:
            self.stdout.write(f'{drifted} entrada(s) seria(m) corrigida(s)')
        else:
            self.stdout.write(
                self.style.SUCCESS(f'{drifted} entrada(s) corrigida(s)')
            )
