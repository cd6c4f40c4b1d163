"""
Movement model — Immutable ledger of quantity changes.
"""

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from nowstock.models.enums import MovementKind, MovementSource


IMMUTABLE_MESSAGE = (
    "Movimentos são imutáveis. "
    "Para corrigir, registre um novo movimento compensatório."
)


class MovementQuerySet(models.QuerySet):
    """Insert-only: bulk update/delete are refused."""

    def update(self, **kwargs):
        raise ValueError(IMMUTABLE_MESSAGE)

    def delete(self):
        raise ValueError(IMMUTABLE_MESSAGE)


class Movement(models.Model):
    """
    Immutable record of a quantity change.

    Rules:
    - NEVER update() or delete()
    - Corrections are new Movements with the inverse delta
    - Inserted in the same transaction as the StockLevel delta
    """

    tenant_id = models.PositiveIntegerField(
        verbose_name=_('Empresa'),
    )
    product = models.ForeignKey(
        'nowstock.Product',
        on_delete=models.PROTECT,
        related_name='movements',
        verbose_name=_('Produto'),
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
        verbose_name=_('Tipo'),
    )
    quantity = models.PositiveIntegerField(
        verbose_name=_('Quantidade'),
    )
    delta = models.IntegerField(
        verbose_name=_('Variação'),
        help_text=_('Positivo = entrada, Negativo = saída'),
    )
    balance_after = models.PositiveIntegerField(
        verbose_name=_('Saldo após'),
    )
    unit = models.CharField(
        max_length=20,
        default='unidade',
        verbose_name=_('Unidade'),
    )
    justification = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        verbose_name=_('Justificativa'),
    )
    source = models.CharField(
        max_length=10,
        choices=MovementSource.choices,
        default=MovementSource.MANUAL,
        verbose_name=_('Origem'),
    )
    rfid_tag = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        verbose_name=_('Etiqueta RFID'),
    )
    created_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        verbose_name=_('Data/Hora'),
    )

    objects = MovementQuerySet.as_manager()

    class Meta:
        verbose_name = _('Movimentação')
        verbose_name_plural = _('Movimentações')
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['tenant_id', 'product', 'created_at'], name='movement_tenant_product_idx'),
            models.Index(fields=['tenant_id', 'created_at'], name='movement_tenant_created_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name='movement_quantity_positive',
            ),
            models.CheckConstraint(
                condition=Q(delta=F('quantity')) | Q(delta=-F('quantity')),
                name='movement_delta_matches_quantity',
            ),
        ]

    def save(self, *args, **kwargs):
        """Insert only."""
        if self.pk:
            raise ValueError(IMMUTABLE_MESSAGE)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Movements are immutable."""
        raise ValueError(IMMUTABLE_MESSAGE)

    def __str__(self) -> str:
        signal = '+' if self.delta > 0 else ''
        return f"{self.get_kind_display()} {signal}{self.delta} | {self.product_id}"
