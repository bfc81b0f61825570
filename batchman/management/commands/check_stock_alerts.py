"""
Management command to list triggered stock alerts.

Usage:
    python manage.py check_stock_alerts
    python manage.py check_stock_alerts --product prod-42 --product prod-43
"""

from django.core.management.base import BaseCommand

from batchman import ledger
from batchman.services.alerts import AlertKind


class Command(BaseCommand):
    """Check low-stock and expiry alerts command."""

    help = 'Lists low-stock and expiring batches'

    def add_arguments(self, parser):
        parser.add_argument(
            '--product',
            action='append',
            dest='products',
            help='Product id to check (repeatable). Default: every product with batches.'
        )

    def handle(self, *args, **options):
        alerts = ledger.check_alerts(options['products'])

        for alert in alerts:
            if alert.kind == AlertKind.LOW_STOCK:
                self.stdout.write(
                    f'LOW STOCK {alert.product_id}: '
                    f'{alert.total_stock} left (min {alert.minimum_stock})'
                )
            else:
                self.stdout.write(
                    f'EXPIRY {alert.product_id} {alert.batch.batch_number}: '
                    f'{alert.status.state.value} ({alert.status.days_remaining} days)'
                )

        if alerts:
            self.stdout.write(self.style.WARNING(f'{len(alerts)} alert(s) triggered'))
        else:
            self.stdout.write(self.style.SUCCESS('No alerts'))
