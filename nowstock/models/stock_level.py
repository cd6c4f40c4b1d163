"""
StockLevel model — Current quantity projection per (tenant, product).
"""

from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _


# Largest value every supported backend stores in a PositiveIntegerField
MAX_QUANTITY = 2_147_483_647


class StockLevel(models.Model):
    """
    Current on-hand quantity of a product for a tenant.

    - Cache of the ledger: quantity == sum(Movement.delta)
    - Created lazily by the first movement
    - Written only by StockProjection, under a row lock
    """

    tenant_id = models.PositiveIntegerField(
        verbose_name=_('Empresa'),
    )
    product = models.ForeignKey(
        'nowstock.Product',
        on_delete=models.PROTECT,
        related_name='stock_levels',
        verbose_name=_('Produto'),
    )
    quantity = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Quantidade Atual'),
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Saldo')
        verbose_name_plural = _('Saldos')
        constraints = [
            models.UniqueConstraint(
                fields=['tenant_id', 'product'],
                name='unique_stock_level_per_tenant_product',
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=0),
                name='stock_level_quantity_non_negative',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.product}: {self.quantity}"
