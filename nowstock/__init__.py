"""
NowStock — RFID stock movement engine.

Uso:
    from nowstock import MovementEngine

    engine = MovementEngine()
    engine.record_scan(tenant_id, "E2000017221101441890", actor_id)
    engine.record_manual(tenant_id, actor_id, "saida", 3, product_id=42)
    engine.current(tenant_id, 42)
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'MovementEngine':
        from nowstock.services.engine import MovementEngine
        return MovementEngine
    elif name == 'MovementOutcome':
        from nowstock.services.engine import MovementOutcome
        return MovementOutcome
    elif name == 'MovementError':
        from nowstock.exceptions import MovementError
        return MovementError
    elif name == 'StorageFault':
        from nowstock.exceptions import StorageFault
        return StorageFault
    elif name == 'ScanAdapter':
        from nowstock.adapters.rfid import ScanAdapter
        return ScanAdapter
    elif name == 'Product':
        from nowstock.models.product import Product
        return Product
    elif name == 'StockLevel':
        from nowstock.models.stock_level import StockLevel
        return StockLevel
    elif name == 'Movement':
        from nowstock.models.movement import Movement
        return Movement
    elif name == 'MovementKind':
        from nowstock.models.enums import MovementKind
        return MovementKind
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'MovementEngine',
    'MovementOutcome',
    'MovementError',
    'StorageFault',
    'ScanAdapter',
    'Product',
    'StockLevel',
    'Movement',
    'MovementKind',
]

__version__ = '0.1.0'
