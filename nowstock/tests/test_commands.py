"""
Tests for management commands.
"""

import io

import pytest
from django.core.management import CommandError, call_command

from nowstock.models import Movement, StockLevel, TagRead
from nowstock.services.projection import StockProjection

from .conftest import TENANT


class TestVerifyStock:
    """Tests for verify_stock."""

    pytestmark = pytest.mark.django_db

    def test_consistent(self, stocked):
        out = io.StringIO()

        call_command('verify_stock', tenant=TENANT, stdout=out)

        assert 'Todos os saldos conferem' in out.getvalue()

    def test_reports_drift(self, stocked):
        StockLevel.objects.filter(product=stocked).update(quantity=4)
        out = io.StringIO()

        call_command('verify_stock', tenant=TENANT, stdout=out)

        output = out.getvalue()
        assert 'Caixa de Parafusos: saldo 4, histórico 10' in output
        assert '1 saldo(s) divergente(s)' in output
        assert StockProjection.current(TENANT, stocked.pk) == 4

    def test_fix(self, stocked):
        StockLevel.objects.filter(product=stocked).update(quantity=4)
        out = io.StringIO()

        call_command('verify_stock', tenant=TENANT, fix=True, stdout=out)

        assert '1 saldo(s) corrigido(s)' in out.getvalue()
        assert StockProjection.current(TENANT, stocked.pk) == 10


@pytest.mark.django_db(transaction=True)
class TestListenRfid:
    """Tests for listen_rfid."""

    def test_reads_from_stdin(self, scanner, product):
        out = io.StringIO()
        reader = io.StringIO(f"{product.rfid_tag}\nDESCONHECIDA\n")

        call_command('listen_rfid', tenant=TENANT, actor=scanner.pk, stdin=reader, stdout=out)

        output = out.getvalue()
        assert f'Leitor ativo para a empresa {TENANT}. Operador: {scanner.pk}.' in output
        assert f'{product.rfid_tag}: ENTRADA Caixa de Parafusos (estoque: 1)' in output
        assert 'DESCONHECIDA: Etiqueta RFID não cadastrada' in output
        assert Movement.objects.count() == 1
        assert TagRead.objects.count() == 1

    def test_actor_from_settings(self, settings, scanner, product):
        settings.NOWSTOCK = {'SCANNER_ACTOR_ID': scanner.pk}
        out = io.StringIO()

        call_command('listen_rfid', tenant=TENANT, stdin=io.StringIO(product.rfid_tag), stdout=out)

        assert Movement.objects.get().actor_id == scanner.pk

    def test_reads_from_device(self, tmp_path, scanner, product):
        device = tmp_path / 'leitor.txt'
        device.write_text(f"{product.rfid_tag}\n")
        out = io.StringIO()

        call_command('listen_rfid', tenant=TENANT, actor=scanner.pk, device=str(device), stdout=out)

        assert StockProjection.current(TENANT, product.pk) == 1

    def test_missing_device(self, tmp_path, scanner):
        with pytest.raises(CommandError):
            call_command(
                'listen_rfid', tenant=TENANT, actor=scanner.pk,
                device=str(tmp_path / 'nao-existe'),
            )
