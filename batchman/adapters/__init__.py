"""
Batchman Adapters.

Implementations of protocols for external systems.
"""

from batchman.adapters.catalog import (
    get_policy,
    get_product_catalog,
    reset_product_catalog,
)

__all__ = [
    "get_policy",
    "get_product_catalog",
    "reset_product_catalog",
]
