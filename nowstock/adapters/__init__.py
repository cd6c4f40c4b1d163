"""
NowStock Adapters.

Implementations of protocols and ingestion entry points.
"""

from nowstock.adapters.catalog import ModelTagResolver, get_tag_resolver, reset_tag_resolver
from nowstock.adapters.rfid import ScanAdapter

__all__ = [
    "ModelTagResolver",
    "get_tag_resolver",
    "reset_tag_resolver",
    "ScanAdapter",
]
