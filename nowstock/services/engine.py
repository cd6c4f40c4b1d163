"""
Movement engine — the single write path for stock quantities.

Every accepted movement is:
1. classified (entrada / saida / devolucao / ajuste)
2. validated against the freshly locked quantity
3. appended to the ledger
4. applied to the StockLevel projection

all inside one transaction.atomic() block. Business rejections come
back as MovementOutcome; database failures are raised as StorageFault.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from django.db import DEFAULT_DB_ALIAS, DatabaseError, OperationalError, transaction

from nowstock.conf import nowstock_settings
from nowstock.exceptions import MovementError, StorageFault
from nowstock.models.enums import (
    JUSTIFIED_KINDS,
    AdjustDirection,
    MovementKind,
    MovementSource,
)
from nowstock.models.movement import Movement
from nowstock.models.stock_level import MAX_QUANTITY
from nowstock.models.tag_read import TagRead
from nowstock.protocols.tag import ProductIdentity, TagResolver
from nowstock.services.ledger import MovementLedger
from nowstock.services.projection import Guard, StockProjection

logger = logging.getLogger('nowstock')


@dataclass(frozen=True)
class MovementOutcome:
    """
    Result of a movement request.

    ok=True: the movement was committed.
    ok=False: rejected before any write; error is one of
    UNREGISTERED_TAG, INSUFFICIENT_STOCK, VALIDATION_ERROR.
    """

    ok: bool
    kind: str | None = None
    product: ProductIdentity | None = None
    quantity: int | None = None
    new_quantity: int | None = None
    movement_id: int | None = None
    below_minimum: bool = False
    error: str | None = None
    error_code: str | None = None
    message: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def rejected(cls, exc: MovementError, product: ProductIdentity | None = None,
                 kind: str | None = None) -> MovementOutcome:
        return cls(
            ok=False,
            kind=kind,
            product=product,
            error=exc.kind,
            error_code=exc.code,
            message=exc.message,
            data=dict(exc.data),
        )

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'ok': self.ok,
            'kind': self.kind,
            'product_id': self.product.product_id if self.product else None,
            'product_name': self.product.name if self.product else None,
            'quantity': self.quantity,
            'new_quantity': self.new_quantity,
            'movement_id': self.movement_id,
            'below_minimum': self.below_minimum,
            'error': self.error,
            'code': self.error_code,
            'message': self.message,
            'data': dict(self.data),
        }


def _scan_direction(current: int) -> tuple[str, int]:
    # A tag carries no direction: empty stock means receiving, otherwise withdrawal.
    if current == 0:
        return MovementKind.ENTRADA, 1
    return MovementKind.SAIDA, -1


class MovementEngine:
    """
    Entry points for scans, manual movements and history.

    Args:
        resolver: TagResolver (None = configured NOWSTOCK['TAG_RESOLVER'])
        using: Database alias all reads and writes go through
    """

    def __init__(self, resolver: TagResolver | None = None, using: str | None = None):
        if resolver is None:
            from nowstock.adapters.catalog import get_tag_resolver
            resolver = get_tag_resolver()
        self.resolver = resolver
        self.using = using or DEFAULT_DB_ALIAS

    # ══════════════════════════════════════════════════════════════
    # WRITES
    # ══════════════════════════════════════════════════════════════

    def record_scan(self, tenant_id: int, rfid_tag: str, actor_id) -> MovementOutcome:
        """
        Register one RFID read as a one-unit movement.

        Direction toggle, decided on the locked quantity:
            0  → entrada (+1)
            >0 → saida   (-1)

        Returns:
            MovementOutcome (UNREGISTERED_TAG when no product of the
            tenant carries the tag; nothing is written in that case)

        Raises:
            StorageFault: Transaction rolled back by the database
        """
        try:
            self._require_identity(tenant_id, actor_id)
            tag = (rfid_tag or '').strip()
            product = self.resolver.resolve(tenant_id, tag)
            if product is None:
                raise MovementError('UNREGISTERED_TAG', rfid_tag=tag)
        except MovementError as exc:
            return self._reject(exc, tenant_id=tenant_id, source=MovementSource.RFID)

        return self._commit(
            product,
            actor_id=actor_id,
            classify=_scan_direction,
            unit=nowstock_settings.DEFAULT_UNIT,
            justification=None,
            source=MovementSource.RFID,
            rfid_tag=tag,
        )

    def record_manual(self, tenant_id: int, actor_id, kind: str, quantity: int,
                      unit: str | None = None, justification: str | None = None,
                      rfid_tag: str | None = None, product_id: int | None = None,
                      direction: str | None = None) -> MovementOutcome:
        """
        Register an operator movement.

        Product reference: rfid_tag (wins when both are given) or
        product_id. AJUSTE requires product_id.

        Delta sign:
            entrada, devolucao, ajuste/increase → +quantity
            saida, ajuste/decrease              → -quantity (guarded)

        Returns:
            MovementOutcome

        Raises:
            StorageFault: Transaction rolled back by the database
        """
        try:
            self._require_identity(tenant_id, actor_id)
            delta = self._validate_manual(kind, quantity, justification, direction, unit)
            product = self._resolve_manual_product(tenant_id, kind, rfid_tag, product_id)
        except MovementError as exc:
            return self._reject(exc, tenant_id=tenant_id, source=MovementSource.MANUAL,
                                kind=kind if kind in MovementKind.values else None)

        justification = (justification or '').strip() or None
        return self._commit(
            product,
            actor_id=actor_id,
            classify=lambda current: (MovementKind(kind), delta),
            unit=(unit or '').strip() or nowstock_settings.DEFAULT_UNIT,
            justification=justification,
            source=MovementSource.MANUAL,
            rfid_tag=product.rfid_tag if rfid_tag else None,
        )

    # ══════════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════════

    def history(self, tenant_id: int, kind: str | None = None,
                product_id: int | None = None, actor_id=None):
        """
        Tenant movements joined with product/actor names, newest first.

        Raises:
            MovementError('INVALID_KIND'): Unknown kind filter
        """
        if kind and kind not in MovementKind.values:
            raise MovementError('INVALID_KIND', kind=kind)
        return MovementLedger.history(
            tenant_id,
            kind=kind or None,
            product_id=product_id,
            actor_id=actor_id,
            using=self.using,
        )

    def current(self, tenant_id: int, product_id: int) -> int:
        """Current quantity of a product (0 when never moved)."""
        return StockProjection.current(tenant_id, product_id, using=self.using)

    def levels(self, tenant_id: int):
        """Stock listing of a tenant with below_minimum flags."""
        return StockProjection.levels(tenant_id, using=self.using)

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    @staticmethod
    def _require_identity(tenant_id, actor_id) -> None:
        if tenant_id is None:
            raise MovementError('TENANT_REQUIRED')
        if actor_id is None:
            raise MovementError('ACTOR_REQUIRED')

    @staticmethod
    def _validate_manual(kind, quantity, justification, direction, unit=None) -> int:
        """Check input before any transaction. Returns the signed delta."""
        if kind not in MovementKind.values:
            raise MovementError('INVALID_KIND', kind=kind)

        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise MovementError('INVALID_QUANTITY', requested=quantity)
        if quantity > MAX_QUANTITY:
            raise MovementError('QUANTITY_TOO_LARGE', requested=quantity, maximum=MAX_QUANTITY)

        justification = (justification or '').strip()
        min_length = nowstock_settings.JUSTIFICATION_MIN_LENGTH
        if kind in JUSTIFIED_KINDS and len(justification) < min_length:
            raise MovementError('JUSTIFICATION_REQUIRED', min_length=min_length)
        max_length = Movement._meta.get_field('justification').max_length
        if len(justification) > max_length:
            raise MovementError('JUSTIFICATION_TOO_LONG', max_length=max_length)

        if unit is not None and not isinstance(unit, str):
            raise MovementError('INVALID_UNIT', unit=unit)
        max_length = Movement._meta.get_field('unit').max_length
        if len((unit or '').strip()) > max_length:
            raise MovementError('INVALID_UNIT', max_length=max_length)

        if kind == MovementKind.AJUSTE:
            if direction in (None, AdjustDirection.INCREASE):
                return quantity
            if direction == AdjustDirection.DECREASE:
                return -quantity
            raise MovementError('INVALID_DIRECTION', direction=direction)

        if direction is not None:
            raise MovementError('INVALID_DIRECTION', direction=direction)
        if kind == MovementKind.SAIDA:
            return -quantity
        return quantity

    def _resolve_manual_product(self, tenant_id, kind, rfid_tag, product_id) -> ProductIdentity:
        tag = (rfid_tag or '').strip()

        if kind == MovementKind.AJUSTE and product_id is None:
            raise MovementError('PRODUCT_REQUIRED', kind=kind)

        if tag:
            product = self.resolver.resolve(tenant_id, tag)
            if product is None:
                raise MovementError('UNREGISTERED_TAG', rfid_tag=tag)
            return product

        if product_id is None:
            raise MovementError('PRODUCT_REQUIRED', kind=kind)

        product = self.resolver.get(tenant_id, product_id)
        if product is None:
            raise MovementError('PRODUCT_NOT_FOUND', product_id=product_id)
        return product

    @contextmanager
    def _atomic(self):
        """transaction.atomic() with the configured lock wait limit."""
        with transaction.atomic(using=self.using):
            connection = transaction.get_connection(self.using)
            timeout_ms = nowstock_settings.LOCK_TIMEOUT_MS
            if timeout_ms and connection.vendor == 'postgresql':
                with connection.cursor() as cursor:
                    cursor.execute(
                        "SELECT set_config('lock_timeout', %s, true)",
                        [f"{int(timeout_ms)}ms"],
                    )
            yield

    def _commit(self, product: ProductIdentity, actor_id, classify, unit: str,
                justification: str | None, source: str,
                rfid_tag: str | None = None) -> MovementOutcome:
        """
        Atomic append + apply.

        classify(current_quantity) -> (kind, delta) runs after the row
        lock, so validation always sees the value that will be written
        over.
        """
        tenant_id = product.tenant_id
        kind = None
        try:
            with self._atomic():
                level = StockProjection.lock(tenant_id, product.product_id, using=self.using)
                kind, delta = classify(level.quantity)

                if delta < 0 and level.quantity + delta < 0:
                    raise MovementError(
                        'INSUFFICIENT_STOCK',
                        available=level.quantity,
                        requested=-delta,
                    )
                if level.quantity + delta > MAX_QUANTITY:
                    raise MovementError(
                        'QUANTITY_OVERFLOW',
                        available=level.quantity,
                        requested=delta,
                        maximum=MAX_QUANTITY,
                    )

                if source == MovementSource.RFID:
                    justification = f"Leitura RFID - {kind.upper()}"

                movement = MovementLedger.append(
                    tenant_id=tenant_id,
                    product_id=product.product_id,
                    actor_id=actor_id,
                    kind=kind,
                    delta=delta,
                    balance_after=level.quantity + delta,
                    unit=unit,
                    justification=justification,
                    source=source,
                    rfid_tag=rfid_tag,
                    using=self.using,
                )
                new_quantity = StockProjection.apply_delta(
                    tenant_id,
                    product.product_id,
                    delta,
                    guard=Guard.REJECT_NEGATIVE,
                    using=self.using,
                )
                if source == MovementSource.RFID:
                    TagRead.objects.using(self.using).create(
                        tenant_id=tenant_id,
                        rfid_tag=rfid_tag,
                        actor_id=actor_id,
                        kind=kind,
                        movement=movement,
                    )
        except MovementError as exc:
            return self._reject(exc, tenant_id=tenant_id, source=source,
                                product=product, kind=kind)
        except DatabaseError as exc:
            logger.error(
                "movement.storage_fault",
                exc_info=True,
                extra={
                    "tenant_id": tenant_id,
                    "product_id": product.product_id,
                    "kind": kind,
                    "source": source,
                },
            )
            raise StorageFault(
                str(exc) or None,
                retryable=isinstance(exc, OperationalError),
                product_id=product.product_id,
            ) from exc

        below_minimum = new_quantity <= product.minimum_quantity
        logger.info(
            "movement.recorded",
            extra={
                "tenant_id": tenant_id,
                "product_id": product.product_id,
                "movement_id": movement.pk,
                "kind": kind,
                "delta": delta,
                "new_quantity": new_quantity,
                "source": source,
            },
        )
        if below_minimum:
            logger.warning(
                "stock.below_minimum",
                extra={
                    "tenant_id": tenant_id,
                    "product_id": product.product_id,
                    "minimum_quantity": product.minimum_quantity,
                    "quantity": new_quantity,
                },
            )

        return MovementOutcome(
            ok=True,
            kind=str(kind),
            product=product,
            quantity=abs(delta),
            new_quantity=new_quantity,
            movement_id=movement.pk,
            below_minimum=below_minimum,
        )

    @staticmethod
    def _reject(exc: MovementError, tenant_id, source: str,
                product: ProductIdentity | None = None,
                kind: str | None = None) -> MovementOutcome:
        logger.info(
            "movement.rejected",
            extra={
                "tenant_id": tenant_id,
                "product_id": product.product_id if product else None,
                "code": exc.code,
                "source": source,
            },
        )
        return MovementOutcome.rejected(
            exc, product=product, kind=str(kind) if kind else None,
        )
