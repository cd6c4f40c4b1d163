"""
Movement ledger — append-only history.

append() must run inside the same transaction as the StockLevel
delta it accompanies.
"""

from django.contrib.auth import get_user_model
from django.db import DEFAULT_DB_ALIAS
from django.db.models import F, Sum
from django.db.models.functions import Coalesce

from nowstock.models.movement import Movement


class MovementLedger:
    """Insert and read Movement rows. No update, no delete."""

    @classmethod
    def append(cls, *, tenant_id: int, product_id: int, actor_id, kind: str,
               delta: int, balance_after: int, unit: str,
               justification: str | None = None, source: str = 'manual',
               rfid_tag: str | None = None,
               using: str = DEFAULT_DB_ALIAS) -> Movement:
        """
        Insert a movement.

        Returns:
            The stored Movement (movement id is its pk)
        """
        return Movement.objects.using(using).create(
            tenant_id=tenant_id,
            product_id=product_id,
            actor_id=actor_id,
            kind=kind,
            quantity=abs(delta),
            delta=delta,
            balance_after=balance_after,
            unit=unit,
            justification=justification,
            source=source,
            rfid_tag=rfid_tag,
        )

    @classmethod
    def history(cls, tenant_id: int, kind: str | None = None,
                product_id: int | None = None, actor_id=None,
                using: str = DEFAULT_DB_ALIAS):
        """
        Movements of a tenant, newest first.

        Each row is annotated with product_name and actor_name.
        """
        username_field = get_user_model().USERNAME_FIELD
        qs = (
            Movement.objects.using(using)
            .filter(tenant_id=tenant_id)
            .select_related('product', 'actor')
            .annotate(
                product_name=F('product__name'),
                actor_name=F(f'actor__{username_field}'),
            )
        )

        if kind:
            qs = qs.filter(kind=kind)
        if product_id is not None:
            qs = qs.filter(product_id=product_id)
        if actor_id is not None:
            qs = qs.filter(actor_id=actor_id)

        return qs.order_by('-created_at', '-id')

    @classmethod
    def replay(cls, tenant_id: int, product_id: int,
               using: str = DEFAULT_DB_ALIAS) -> int:
        """Signed sum of all deltas for a product."""
        return Movement.objects.using(using).filter(
            tenant_id=tenant_id,
            product_id=product_id,
        ).aggregate(
            t=Coalesce(Sum('delta'), 0)
        )['t']
