"""
Noop Product Catalog — Stub adapter for development and testing.

This adapter implements the ProductCatalog protocol with trivial defaults:
- Every product id is considered known
- Policies come from BATCHMAN default settings

Usage in settings.py:
    BATCHMAN = {
        "PRODUCT_CATALOG": "batchman.adapters.noop.NoopProductCatalog",
    }

WARNING: Do NOT use in production. Low-stock thresholds and FIFO/expiry
flags configured in the real catalog are ignored.
"""

from __future__ import annotations

from batchman.protocols.catalog import ProductPolicy


class NoopProductCatalog:
    """
    No-operation product catalog.

    Every product exists and gets the configured default policy.
    """

    def get_policy(self, product_id: str) -> ProductPolicy | None:
        # DEFAULT_* settings fill every flag
        return ProductPolicy(product_id=str(product_id))
