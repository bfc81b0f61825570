"""
Batchman Models.

Core models for the batch ledger:
- Batch: Received lot with running balance and optional expiry
- BatchTransaction: Immutable ledger of movements against a batch
"""

from batchman.models.batch import Batch
from batchman.models.enums import Direction, TransactionType
from batchman.models.transaction import BatchTransaction

__all__ = [
    'TransactionType',
    'Direction',
    'Batch',
    'BatchTransaction',
]
