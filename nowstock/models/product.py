"""
Product model — Catalog entry read by the movement engine.
"""

from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _


class Product(models.Model):
    """
    Product registered by a tenant.

    Owned by the catalog: NowStock never changes it, it only reads
    identity, RFID tag and minimum quantity (through a TagResolver).
    """

    tenant_id = models.PositiveIntegerField(
        db_index=True,
        verbose_name=_('Empresa'),
    )
    name = models.CharField(
        max_length=150,
        verbose_name=_('Nome'),
    )
    rfid_tag = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        verbose_name=_('Etiqueta RFID'),
        help_text=_('EPC da etiqueta. Única por empresa.'),
    )
    minimum_quantity = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Quantidade Mínima'),
        help_text=_('Estoque em falta quando o saldo chega a este valor'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Produto')
        verbose_name_plural = _('Produtos')
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant_id', 'rfid_tag'],
                condition=Q(rfid_tag__isnull=False),
                name='unique_rfid_tag_per_tenant',
            ),
        ]

    def __str__(self) -> str:
        return self.name
