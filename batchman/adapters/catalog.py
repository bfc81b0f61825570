"""
Batchman Catalog Adapter — loads the configured ProductCatalog.

Usage:
    from batchman.adapters import get_product_catalog

    catalog = get_product_catalog()
    policy = catalog.get_policy("prod-42")

Settings:
    BATCHMAN = {
        "PRODUCT_CATALOG": "catalog.adapters.ledger.CatalogProductPolicies",
    }

If PRODUCT_CATALOG is empty or cannot be imported, get_product_catalog()
raises ImproperlyConfigured.
"""

from __future__ import annotations

import logging
import threading

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from batchman.conf import batchman_settings
from batchman.exceptions import NotFoundError
from batchman.protocols.catalog import ProductCatalog, ProductPolicy

logger = logging.getLogger(__name__)


# Cached catalog instance
_lock = threading.Lock()
_product_catalog: ProductCatalog | None = None


def get_product_catalog() -> ProductCatalog:
    """
    Return the configured product catalog.

    Raises:
        ImproperlyConfigured: If PRODUCT_CATALOG is not configured or import fails
    """
    global _product_catalog

    if _product_catalog is None:
        with _lock:
            if _product_catalog is None:  # double-checked
                catalog_path = batchman_settings.PRODUCT_CATALOG

                if not catalog_path:
                    raise ImproperlyConfigured(
                        "BATCHMAN['PRODUCT_CATALOG'] must be configured. "
                        "Example: 'batchman.adapters.noop.NoopProductCatalog'"
                    )

                try:
                    catalog_class = import_string(catalog_path)
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import product catalog '{catalog_path}': {e}"
                    ) from e

                _product_catalog = catalog_class()
                logger.debug("Loaded product catalog: %s", catalog_path)

    return _product_catalog


def reset_product_catalog() -> None:
    """Reset the cached catalog. Useful for testing."""
    global _product_catalog
    _product_catalog = None


def get_policy(product_id) -> ProductPolicy:
    """
    Policy for a product, or NotFoundError('PRODUCT_NOT_FOUND').
    """
    policy = get_product_catalog().get_policy(str(product_id))
    if policy is None:
        raise NotFoundError('PRODUCT_NOT_FOUND', product_id=product_id)
    return policy
