"""
NowStock Protocols.

Defines interfaces for external system integration.
"""

from nowstock.protocols.tag import ProductIdentity, TagResolver

__all__ = [
    "ProductIdentity",
    "TagResolver",
]
