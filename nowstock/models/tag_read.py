"""
TagRead model — Audit log of accepted RFID reads.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from nowstock.models.enums import MovementKind


class TagRead(models.Model):
    """
    One row per scan that produced a movement.

    Written in the same transaction as its Movement, so reader activity
    can be audited separately from manual entries.
    """

    tenant_id = models.PositiveIntegerField(
        verbose_name=_('Empresa'),
    )
    rfid_tag = models.CharField(
        max_length=64,
        db_index=True,
        verbose_name=_('Etiqueta RFID'),
    )
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='+',
        verbose_name=_('Usuário'),
    )
    kind = models.CharField(
        max_length=20,
        choices=MovementKind.choices,
        verbose_name=_('Ação'),
    )
    movement = models.OneToOneField(
        'nowstock.Movement',
        on_delete=models.PROTECT,
        related_name='tag_read',
        verbose_name=_('Movimentação'),
    )
    created_at = models.DateTimeField(default=timezone.now, verbose_name=_('Data/Hora'))

    class Meta:
        verbose_name = _('Leitura RFID')
        verbose_name_plural = _('Leituras RFID')
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.rfid_tag} → {self.kind}"
