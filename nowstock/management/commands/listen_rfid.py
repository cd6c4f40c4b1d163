"""
Management command to feed an RFID reader into the movement engine.

Usage:
    python manage.py listen_rfid --tenant 3
    python manage.py listen_rfid --tenant 3 --device /dev/ttyUSB0
    python manage.py listen_rfid --tenant 3 --actor 12 < tags.txt

The reader must emit one tag per line.
"""

import sys

from django.core.management.base import BaseCommand, CommandError

from nowstock.adapters.rfid import ScanAdapter


class Command(BaseCommand):
    """Listen for RFID reads command."""

    help = 'Lê etiquetas RFID (uma por linha) e registra as movimentações'
    stealth_options = ('stdin',)

    def add_arguments(self, parser):
        parser.add_argument('--tenant', type=int, required=True, help='ID da empresa')
        parser.add_argument(
            '--device',
            default=None,
            help='Arquivo/porta do leitor (padrão: entrada padrão)'
        )
        parser.add_argument(
            '--actor',
            type=int,
            default=None,
            help='Usuário das leituras (padrão: NOWSTOCK["SCANNER_ACTOR_ID"])'
        )

    def handle(self, *args, **options):
        adapter = ScanAdapter(actor_id=options['actor'])
        tenant_id = options['tenant']

        if options['device']:
            try:
                stream = open(options['device'], encoding='ascii', errors='ignore')
            except OSError as e:
                raise CommandError(f"Não foi possível abrir {options['device']}: {e}") from e
        else:
            stream = options.get('stdin') or sys.stdin

        self.stdout.write(f'Leitor ativo para a empresa {tenant_id}. Operador: {adapter.actor_id}.')
        try:
            for tag, outcome in adapter.consume(tenant_id, stream):
                if outcome.ok:
                    self.stdout.write(self.style.SUCCESS(
                        f'{tag}: {outcome.kind.upper()} {outcome.product.name} '
                        f'(estoque: {outcome.new_quantity})'
                    ))
                else:
                    self.stdout.write(self.style.WARNING(f'{tag}: {outcome.message}'))
        finally:
            if stream is not sys.stdin:
                stream.close()
