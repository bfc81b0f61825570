"""
Exceptions for Batchman.

Every error is a LedgerError with a structured code for programmatic handling.
The subclasses split the taxonomy by what the caller should do about it:

- ValidationError: malformed input, fix the request
- ConsistencyError: attempt to bypass the ledger
- ConflictError: operation blocked by existing ledger entries
- InsufficientStockError: deduction exceeds what the batch(es) hold
- NotFoundError: unknown batch or product
"""

from typing import Any


class LedgerError(Exception):
    """
    Structured exception for ledger operations.

    Usage:
        try:
            ledger.record_transaction(batch.pk, 10, 'sale')
        except InsufficientStockError as e:
            print(f"Short by {e.shortfall} units")
        except LedgerError as e:
            if e.code == 'DIRECTION_REQUIRED':
                ...

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    default_code = 'LEDGER_ERROR'

    _default_messages = {
        'LEDGER_ERROR': 'Ledger operation failed',
        'INVALID_INPUT': 'Invalid input',
        'INVALID_QUANTITY': 'Invalid quantity',
        'INVALID_TRANSACTION_TYPE': 'Unknown transaction type',
        'EXPIRY_DATE_REQUIRED': 'Expiry date is required when the batch has expiry',
        'DIRECTION_REQUIRED': 'Adjustments must state a direction (in/out)',
        'DIRECTION_MISMATCH': 'Direction contradicts the transaction type',
        'FIELD_NOT_EDITABLE': 'Field cannot be edited on a batch',
        'QUANTITY_IS_LEDGER_MANAGED': 'Batch quantity can only change through transactions',
        'BATCH_HAS_TRANSACTIONS': 'Batch has transactions and cannot be deleted',
        'INSUFFICIENT_STOCK': 'Requested quantity exceeds available stock',
        'NOT_FOUND': 'Not found',
        'BATCH_NOT_FOUND': 'Batch not found',
        'PRODUCT_NOT_FOUND': 'Product not found in catalog',
    }

    def __init__(self, code: str | None = None, message: str | None = None, **data):
        self.code = code or self.default_code
        self.message = message or self._default_messages.get(self.code, self.code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.data:
            details = ', '.join(f'{k}={v}' for k, v in self.data.items())
            return f"[{self.code}] {self.message} ({details})"
        return f"[{self.code}] {self.message}"

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: v if isinstance(v, (int, float, bool, type(None))) else str(v)
                for k, v in self.data.items()
            },
        }


class ValidationError(LedgerError):
    """Malformed input (missing expiry date, non-positive quantity, ...)."""

    default_code = 'INVALID_INPUT'


class ConsistencyError(LedgerError):
    """Direct write to a ledger-managed field."""

    default_code = 'QUANTITY_IS_LEDGER_MANAGED'


class ConflictError(LedgerError):
    """Delete of a batch still referenced by transactions."""

    default_code = 'BATCH_HAS_TRANSACTIONS'


class InsufficientStockError(LedgerError):
    """Deduction exceeds available quantity. Carries the shortfall."""

    default_code = 'INSUFFICIENT_STOCK'

    @property
    def shortfall(self) -> int:
        """Shortcut for data['shortfall']."""
        return self.data.get('shortfall', 0)

    @property
    def available(self) -> int:
        """Shortcut for data['available']."""
        return self.data.get('available', 0)

    @property
    def requested(self) -> int:
        """Shortcut for data['requested']."""
        return self.data.get('requested', 0)


class NotFoundError(LedgerError):
    """Unknown batch or product."""

    default_code = 'NOT_FOUND'
