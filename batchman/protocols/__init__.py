"""
Batchman Protocols.

Defines interfaces for external system integration.
"""

from batchman.protocols.catalog import (
    ProductCatalog,
    ProductPolicy,
)

__all__ = [
    "ProductCatalog",
    "ProductPolicy",
]
