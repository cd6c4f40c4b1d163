"""
NowStock Models.

Core models for RFID stock tracking:
- Product: Catalog entry (read-only to the engine)
- StockLevel: Current quantity cache per tenant/product
- Movement: Immutable ledger of changes
- TagRead: Audit log of accepted RFID reads
"""

from nowstock.models.enums import AdjustDirection, MovementKind, MovementSource
from nowstock.models.movement import Movement
from nowstock.models.product import Product
from nowstock.models.stock_level import MAX_QUANTITY, StockLevel
from nowstock.models.tag_read import TagRead

__all__ = [
    'MovementKind',
    'AdjustDirection',
    'MovementSource',
    'Product',
    'StockLevel',
    'Movement',
    'TagRead',
    'MAX_QUANTITY',
]
