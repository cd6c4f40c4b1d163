"""
Management command to compare stock levels against the ledger.

Usage:
    python manage.py verify_stock --tenant 3
    python manage.py verify_stock --tenant 3 --fix
"""

from django.core.management.base import BaseCommand

from nowstock.models import StockLevel
from nowstock.services.ledger import MovementLedger
from nowstock.services.projection import StockProjection


class Command(BaseCommand):
    """Verify projection vs ledger command."""

    help = 'Confere os saldos com o histórico de movimentações'

    def add_arguments(self, parser):
        parser.add_argument('--tenant', type=int, required=True, help='ID da empresa')
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Recalcula os saldos divergentes a partir do histórico'
        )

    def handle(self, *args, **options):
        tenant_id = options['tenant']
        drifted = 0

        for level in StockLevel.objects.filter(tenant_id=tenant_id).select_related('product'):
            expected = MovementLedger.replay(tenant_id, level.product_id)
            if expected == level.quantity:
                continue
            drifted += 1
            self.stdout.write(self.style.WARNING(
                f'{level.product}: saldo {level.quantity}, histórico {expected}'
            ))
            if options['fix']:
                StockProjection.recalculate(tenant_id, level.product_id)

        if drifted and options['fix']:
            self.stdout.write(self.style.SUCCESS(f'{drifted} saldo(s) corrigido(s)'))
        elif drifted:
            self.stdout.write(f'{drifted} saldo(s) divergente(s)')
        else:
            self.stdout.write(self.style.SUCCESS('Todos os saldos conferem'))
