"""
Enums for NowStock models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class MovementKind(models.TextChoices):
    """
    Audit classification of a movement.

    The kind does not decide the sign on its own: AJUSTE can go
    either way (see AdjustDirection).
    """
    ENTRADA = 'entrada', _('Entrada')          # Receiving
    SAIDA = 'saida', _('Saída')                # Withdrawal
    DEVOLUCAO = 'devolucao', _('Devolução')    # Return to stock
    AJUSTE = 'ajuste', _('Ajuste')             # Manual correction


class AdjustDirection(models.TextChoices):
    """Direction of an AJUSTE movement."""
    INCREASE = 'increase', _('Acréscimo')
    DECREASE = 'decrease', _('Redução')


class MovementSource(models.TextChoices):
    """Where the movement came from."""
    RFID = 'rfid', _('Leitura RFID')
    MANUAL = 'manual', _('Lançamento manual')


# Kinds whose justification is mandatory
JUSTIFIED_KINDS = frozenset({MovementKind.DEVOLUCAO, MovementKind.AJUSTE})
