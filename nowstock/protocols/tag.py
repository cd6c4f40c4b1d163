"""
Tag Resolution Protocol — Interface to the product catalog.

NowStock defines this protocol, the catalog implements it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ProductIdentity:
    """What the movement engine needs to know about a product."""

    product_id: int
    tenant_id: int
    name: str
    rfid_tag: str | None = None
    minimum_quantity: int = 0


@runtime_checkable
class TagResolver(Protocol):
    """
    Protocol for product lookup, always scoped by tenant.

    Returning None is the normal "not registered" answer, not a fault.
    """

    def resolve(self, tenant_id: int, rfid_tag: str) -> ProductIdentity | None:
        """
        Find the product carrying an RFID tag.

        Args:
            tenant_id: Tenant doing the lookup
            rfid_tag: Tag string as read by the reader

        Returns:
            ProductIdentity or None if no product of that tenant has the tag
        """
        ...

    def get(self, tenant_id: int, product_id: int) -> ProductIdentity | None:
        """
        Find a product by id.

        Returns:
            ProductIdentity or None if it does not exist for that tenant
        """
        ...
