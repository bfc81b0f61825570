"""
Ledger services — modular organization of ledger operations.

Re-exports all public classes:
    from batchman.services import LedgerBatches, LedgerTransactions, LedgerQueries, LedgerConsumption
"""

from batchman.services.batches import LedgerBatches
from batchman.services.consumption import Allocation, LedgerConsumption
from batchman.services.queries import LedgerQueries
from batchman.services.transactions import LedgerTransactions

__all__ = [
    'Allocation',
    'LedgerBatches',
    'LedgerConsumption',
    'LedgerQueries',
    'LedgerTransactions',
]
