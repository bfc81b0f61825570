"""
Product Catalog Protocol — Interface for reading product ledger policies.

Batchman defines this protocol, the product catalog implements it.
The ledger only ever reads these flags; it never writes back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from batchman.conf import batchman_settings


def _setting(name):
    return field(default_factory=lambda: getattr(batchman_settings, name))


@dataclass(frozen=True)
class ProductPolicy:
    """
    Ledger-relevant flags of a catalog product.

    Flags a catalog leaves out take the BATCHMAN DEFAULT_* settings,
    read when the policy is built.
    """

    product_id: str
    has_expiry: bool = False
    expiry_notification_days: int = _setting('DEFAULT_EXPIRY_NOTIFICATION_DAYS')
    use_fifo: bool = _setting('DEFAULT_USE_FIFO')
    minimum_stock: int = _setting('DEFAULT_MINIMUM_STOCK')


@runtime_checkable
class ProductCatalog(Protocol):
    """
    Protocol for product policy lookup.

    Implementations should return None for unknown products so the
    ledger can report PRODUCT_NOT_FOUND.
    """

    def get_policy(self, product_id: str) -> ProductPolicy | None:
        """
        Get the ledger policy of a product.

        Args:
            product_id: Catalog product identifier

        Returns:
            ProductPolicy or None if not found
        """
        ...
