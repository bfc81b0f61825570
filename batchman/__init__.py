"""
Django Batchman — batch inventory ledger.

Tracks stock per product as dated batches with optional expiry, keeps an
immutable transaction log per batch, and plans FIFO/LIFO consumption.

Usage:
    from batchman import ledger, LedgerError

    batch = ledger.create_batch("prod-42", 10)
    ledger.record_transaction(batch.pk, 4, 'sale', order_id='ORD-1')
    ledger.select_batches_to_consume("prod-42", 3)
    ledger.total_stock("prod-42")  # 6
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'ledger':
        from batchman.service import Ledger
        return Ledger
    elif name == 'LedgerError':
        from batchman.exceptions import LedgerError
        return LedgerError
    elif name == 'InsufficientStockError':
        from batchman.exceptions import InsufficientStockError
        return InsufficientStockError
    elif name == 'Batch':
        from batchman.models.batch import Batch
        return Batch
    elif name == 'BatchTransaction':
        from batchman.models.transaction import BatchTransaction
        return BatchTransaction
    elif name == 'TransactionType':
        from batchman.models.enums import TransactionType
        return TransactionType
    elif name == 'Direction':
        from batchman.models.enums import Direction
        return Direction
    elif name == 'ExpiryState':
        from batchman.expiry import ExpiryState
        return ExpiryState
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'ledger',
    'LedgerError',
    'InsufficientStockError',
    'Batch',
    'BatchTransaction',
    'TransactionType',
    'Direction',
    'ExpiryState',
]

__version__ = '0.1.0'
