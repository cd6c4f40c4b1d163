"""
NowStock Catalog Adapter — tag resolution.

This adapter loads the configured TagResolver from settings.

Usage:
    from nowstock.adapters import get_tag_resolver

    resolver = get_tag_resolver()
    identity = resolver.resolve(tenant_id, "E2000017221101441890")

Settings:
    NOWSTOCK = {
        "TAG_RESOLVER": "nowstock.adapters.catalog.ModelTagResolver",
    }
"""

from __future__ import annotations

import logging
import threading

from django.core.exceptions import ImproperlyConfigured
from django.db import DEFAULT_DB_ALIAS
from django.utils.module_loading import import_string

from nowstock.conf import nowstock_settings
from nowstock.models.product import Product
from nowstock.protocols.tag import ProductIdentity, TagResolver

logger = logging.getLogger(__name__)


class ModelTagResolver:
    """
    Resolve tags against the Product model.

    Every query is filtered by tenant_id, so a tag registered by
    another tenant is simply not found.
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def resolve(self, tenant_id: int, rfid_tag: str) -> ProductIdentity | None:
        tag = (rfid_tag or '').strip()
        if not tag:
            return None
        product = (
            Product.objects.using(self.using)
            .filter(tenant_id=tenant_id, rfid_tag=tag)
            .first()
        )
        return self._identity(product)

    def get(self, tenant_id: int, product_id: int) -> ProductIdentity | None:
        product = (
            Product.objects.using(self.using)
            .filter(tenant_id=tenant_id, pk=product_id)
            .first()
        )
        return self._identity(product)

    @staticmethod
    def _identity(product: Product | None) -> ProductIdentity | None:
        if product is None:
            return None
        return ProductIdentity(
            product_id=product.pk,
            tenant_id=product.tenant_id,
            name=product.name,
            rfid_tag=product.rfid_tag,
            minimum_quantity=product.minimum_quantity,
        )


# Cached resolver instance
_lock = threading.Lock()
_tag_resolver: TagResolver | None = None


def get_tag_resolver() -> TagResolver:
    """
    Return the configured tag resolver.

    Raises:
        ImproperlyConfigured: If TAG_RESOLVER is empty or import fails
    """
    global _tag_resolver

    if _tag_resolver is None:
        with _lock:
            if _tag_resolver is None:  # double-checked
                resolver_path = nowstock_settings.TAG_RESOLVER

                if not resolver_path:
                    raise ImproperlyConfigured(
                        "NOWSTOCK['TAG_RESOLVER'] must be configured. "
                        "Example: 'nowstock.adapters.catalog.ModelTagResolver'"
                    )

                try:
                    resolver_class = import_string(resolver_path)
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import tag resolver '{resolver_path}': {e}"
                    ) from e
                _tag_resolver = resolver_class()
                logger.debug("Loaded tag resolver: %s", resolver_path)

    return _tag_resolver


def reset_tag_resolver() -> None:
    """Reset the cached resolver. Useful for testing."""
    global _tag_resolver
    _tag_resolver = None
