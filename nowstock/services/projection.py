"""
Stock projection — current quantity per (tenant, product).

Reads use no locking. Writes must run inside the caller's
transaction.atomic() and lock the StockLevel row first.
"""

import enum
import logging

from django.db import DEFAULT_DB_ALIAS, transaction
from django.db.models import F, IntegerField, OuterRef, Subquery, Value
from django.db.models.functions import Coalesce
from django.db.transaction import TransactionManagementError
from django.utils import timezone

from nowstock.exceptions import MovementError
from nowstock.models.product import Product
from nowstock.models.stock_level import StockLevel

logger = logging.getLogger('nowstock')


class Guard(enum.Enum):
    """Check applied before writing a delta."""

    REJECT_NEGATIVE = 'reject-negative'
    NONE = 'none'


class StockProjection:
    """Read and conditional write of StockLevel rows."""

    @classmethod
    def current(cls, tenant_id: int, product_id: int,
                using: str = DEFAULT_DB_ALIAS) -> int:
        """
        Current quantity. A missing row means zero stock.

        Always hits the database (no cache), so a committed delta is
        visible to the next call.
        """
        quantity = (
            StockLevel.objects.using(using)
            .filter(tenant_id=tenant_id, product_id=product_id)
            .values_list('quantity', flat=True)
            .first()
        )
        return quantity or 0

    @classmethod
    def lock(cls, tenant_id: int, product_id: int,
             using: str = DEFAULT_DB_ALIAS) -> StockLevel:
        """
        Get or create the StockLevel row under an exclusive row lock.

        The lock is held until the surrounding transaction ends, which
        serializes movements of the same product. Other products are
        not affected.

        Raises:
            TransactionManagementError: If called outside atomic()
        """
        if not transaction.get_connection(using).in_atomic_block:
            raise TransactionManagementError(
                "StockProjection.lock() must run inside transaction.atomic()"
            )
        level, _ = (
            StockLevel.objects.using(using)
            .select_for_update()
            .get_or_create(
                tenant_id=tenant_id,
                product_id=product_id,
                defaults={'quantity': 0},
            )
        )
        return level

    @classmethod
    def apply_delta(cls, tenant_id: int, product_id: int, delta: int,
                    guard: Guard = Guard.REJECT_NEGATIVE,
                    using: str = DEFAULT_DB_ALIAS) -> int:
        """
        Add delta to the current quantity (upsert).

        Does not commit: the caller's transaction decides.

        Returns:
            New quantity

        Raises:
            MovementError('INSUFFICIENT_STOCK'): If guarded and the result
                would be negative. Nothing is written.
        """
        level = cls.lock(tenant_id, product_id, using=using)
        new_quantity = level.quantity + delta

        if guard is Guard.REJECT_NEGATIVE and new_quantity < 0:
            raise MovementError(
                'INSUFFICIENT_STOCK',
                available=level.quantity,
                requested=-delta,
            )

        cls._write(level, delta, using=using)
        return new_quantity

    @classmethod
    def _write(cls, level: StockLevel, delta: int, using: str = DEFAULT_DB_ALIAS) -> None:
        StockLevel.objects.using(using).filter(pk=level.pk).update(
            quantity=F('quantity') + delta,
            updated_at=timezone.now(),
        )

    @classmethod
    def levels(cls, tenant_id: int, using: str = DEFAULT_DB_ALIAS):
        """
        Every product of the tenant with its current quantity.

        Products without a StockLevel row show quantity 0. Each row has
        a below_minimum flag (quantity <= minimum_quantity).

        Returns:
            List of dicts ordered by product name
        """
        quantity = StockLevel.objects.using(using).filter(
            tenant_id=tenant_id,
            product_id=OuterRef('pk'),
        ).values('quantity')[:1]

        products = (
            Product.objects.using(using)
            .filter(tenant_id=tenant_id)
            .annotate(current_quantity=Coalesce(
                Subquery(quantity), Value(0), output_field=IntegerField(),
            ))
            .order_by('name', 'pk')
        )
        return [
            {
                'product_id': p.pk,
                'name': p.name,
                'rfid_tag': p.rfid_tag,
                'minimum_quantity': p.minimum_quantity,
                'quantity': p.current_quantity,
                'below_minimum': p.current_quantity <= p.minimum_quantity,
            }
            for p in products
        ]

    @classmethod
    def recalculate(cls, tenant_id: int, product_id: int,
                    using: str = DEFAULT_DB_ALIAS) -> int:
        """
        Recalculate quantity from the ledger.

        Use for:
        - Integrity audit
        - Correction after detected inconsistency

        Returns:
            Quantity according to the ledger
        """
        from nowstock.services.ledger import MovementLedger

        with transaction.atomic(using=using):
            level = cls.lock(tenant_id, product_id, using=using)
            total = MovementLedger.replay(tenant_id, product_id, using=using)

            if total != level.quantity:
                old = level.quantity
                StockLevel.objects.using(using).filter(pk=level.pk).update(
                    quantity=total,
                    updated_at=timezone.now(),
                )
                logger.warning(
                    "stock.recalculated",
                    extra={
                        "tenant_id": tenant_id,
                        "product_id": product_id,
                        "old": old,
                        "new": total,
                    },
                )

        return total
