"""
Batchman configuration.

Usage in settings.py:
    BATCHMAN = {
        "PRODUCT_CATALOG": "catalog.adapters.ledger.CatalogProductPolicies",
        "DEFAULT_EXPIRY_NOTIFICATION_DAYS": 30,
        "DEFAULT_USE_FIFO": True,
        "DEFAULT_MINIMUM_STOCK": 0,
        "BATCH_NUMBER_PREFIX": "BATCH",
    }

The DEFAULT_* keys fill any ProductPolicy flag a catalog does not set,
whichever catalog builds the policy.
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class BatchmanSettings:
    """Batchman configuration settings."""

    # Product catalog backend (dotted path)
    PRODUCT_CATALOG: str = "batchman.adapters.noop.NoopProductCatalog"

    # Policy defaults for products that don't configure them
    DEFAULT_EXPIRY_NOTIFICATION_DAYS: int = 30
    DEFAULT_USE_FIFO: bool = True
    DEFAULT_MINIMUM_STOCK: int = 0

    # Prefix for generated batch numbers (BATCH-2026-10-18-001)
    BATCH_NUMBER_PREFIX: str = "BATCH"


def get_batchman_settings() -> BatchmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "BATCHMAN", {})
    return BatchmanSettings(**{
        k: v for k, v in user_settings.items()
        if k in BatchmanSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_batchman_settings(), name)


batchman_settings = _LazySettings()
