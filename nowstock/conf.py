"""
NowStock configuration.

Usage in settings.py:
    NOWSTOCK = {
        "TAG_RESOLVER": "nowstock.adapters.catalog.ModelTagResolver",
        "SCANNER_ACTOR_ID": 1,
        "SCAN_DEBOUNCE_SECONDS": 2.0,
        "LOCK_TIMEOUT_MS": 5000,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class NowstockSettings:
    """NowStock configuration settings."""

    # Tag resolver backend (dotted path)
    TAG_RESOLVER: str = "nowstock.adapters.catalog.ModelTagResolver"

    # User recorded as actor of hardware scans (no login on the reader)
    SCANNER_ACTOR_ID: int | None = None

    DEFAULT_UNIT: str = "unidade"

    # Minimum justification length for devolucao / ajuste
    JUSTIFICATION_MIN_LENGTH: int = 5

    # Repeated reads of the same tag inside this window are dropped
    SCAN_DEBOUNCE_SECONDS: float = 2.0

    # Adapter-level retry of retryable storage faults
    STORAGE_RETRY_ATTEMPTS: int = 3
    STORAGE_RETRY_BACKOFF_SECONDS: float = 0.2

    # Row lock wait limit on PostgreSQL (0 = backend default)
    LOCK_TIMEOUT_MS: int = 0

    # Request attribute set by the auth layer with the caller's tenant
    TENANT_REQUEST_ATTRIBUTE: str = "tenant_id"


def get_nowstock_settings() -> NowstockSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "NOWSTOCK", {})
    return NowstockSettings(**{
        k: v for k, v in user_settings.items()
        if k in NowstockSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_nowstock_settings(), name)


nowstock_settings = _LazySettings()
