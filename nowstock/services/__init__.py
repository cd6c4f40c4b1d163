"""
Stock services — modular organization of stock operations.

    from nowstock.services import MovementEngine, MovementLedger, StockProjection
"""

from nowstock.services.engine import MovementEngine, MovementOutcome
from nowstock.services.ledger import MovementLedger
from nowstock.services.projection import Guard, StockProjection

__all__ = [
    'MovementEngine',
    'MovementOutcome',
    'MovementLedger',
    'StockProjection',
    'Guard',
]
