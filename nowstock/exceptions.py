"""
Exceptions for NowStock.

All errors carry a structured code for programmatic handling.

- MovementError: expected business outcomes (unregistered tag, insufficient
  stock, invalid input). The engine converts them into MovementOutcome.
- StorageFault: the database could not commit. Everything was rolled back.
"""

from typing import Any


class BaseError(Exception):
    """
    Base for coded errors.

    Usage:
        raise MovementError('INSUFFICIENT_STOCK', available=3, requested=5)

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.data!r})"


class MovementError(BaseError):
    """
    Business rejection of a stock movement.

    Usage:
        try:
            StockProjection.apply_delta(tenant_id, product_id, -5)
        except MovementError as e:
            if e.code == 'INSUFFICIENT_STOCK':
                print(f"Saldo atual: {e.available}")
    """

    UNREGISTERED_TAG = 'UNREGISTERED_TAG'
    INSUFFICIENT_STOCK = 'INSUFFICIENT_STOCK'
    VALIDATION_ERROR = 'VALIDATION_ERROR'

    _default_messages = {
        'UNREGISTERED_TAG': 'Etiqueta RFID não cadastrada para esta empresa',
        'INSUFFICIENT_STOCK': 'Estoque insuficiente para esta saída',
        'INVALID_KIND': 'Tipo de movimento inválido',
        'INVALID_QUANTITY': 'A quantidade deve ser um inteiro positivo',
        'QUANTITY_TOO_LARGE': 'Quantidade acima do limite permitido',
        'QUANTITY_OVERFLOW': 'O saldo resultante excede o limite permitido',
        'INVALID_UNIT': 'Unidade inválida',
        'JUSTIFICATION_TOO_LONG': 'Justificativa muito longa',
        'INVALID_DIRECTION': 'Direção de ajuste inválida',
        'JUSTIFICATION_REQUIRED': (
            'A justificativa é obrigatória para devolução ou ajuste'
        ),
        'PRODUCT_REQUIRED': 'Etiqueta RFID ou ID do produto é obrigatório',
        'PRODUCT_NOT_FOUND': 'Produto não encontrado para esta empresa',
        'TENANT_REQUIRED': 'Empresa não informada',
        'ACTOR_REQUIRED': 'Usuário não informado',
    }

    @property
    def kind(self) -> str:
        """Error class: UNREGISTERED_TAG, INSUFFICIENT_STOCK or VALIDATION_ERROR."""
        if self.code in (self.UNREGISTERED_TAG, self.INSUFFICIENT_STOCK):
            return self.code
        return self.VALIDATION_ERROR

    @property
    def available(self) -> int:
        """Shortcut for data['available']."""
        return self.data.get('available', 0)

    @property
    def requested(self) -> int:
        """Shortcut for data['requested']."""
        return self.data.get('requested', 0)

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'error': self.kind,
            'code': self.code,
            'message': self.message,
            'data': dict(self.data),
        }


class StorageFault(BaseError):
    """
    The movement transaction did not commit.

    Raised (never returned) by the engine after a full rollback.
    Only retryable faults should be retried, and only by adapters.
    """

    _default_messages = {
        'STORAGE_FAULT': 'Falha ao gravar a movimentação; nada foi aplicado',
    }

    def __init__(self, message: str | None = None, retryable: bool = True, **data: Any):
        super().__init__('STORAGE_FAULT', message, **data)
        self.retryable = retryable
