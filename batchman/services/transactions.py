"""
Transaction ledger — record and list batch movements.

All state changes use transaction.atomic() with a row lock on the batch.
"""

import logging

from django.db import transaction

from batchman.exceptions import (
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from batchman.models.batch import Batch
from batchman.models.enums import Direction, TransactionType
from batchman.models.transaction import BatchTransaction

logger = logging.getLogger('batchman')


def _resolve_type(transaction_type) -> TransactionType:
    try:
        return TransactionType(transaction_type)
    except ValueError:
        raise ValidationError(
            'INVALID_TRANSACTION_TYPE',
            transaction_type=transaction_type,
        ) from None


def _resolve_direction(tx_type: TransactionType, direction) -> Direction:
    """Direction fixed by the type, or the explicit one for adjustments."""
    if direction is not None:
        try:
            direction = Direction(direction)
        except ValueError:
            raise ValidationError('INVALID_INPUT', direction=direction) from None

    fixed = tx_type.fixed_direction
    if fixed is None:
        if direction is None:
            raise ValidationError('DIRECTION_REQUIRED', transaction_type=tx_type.value)
        return direction

    if direction is not None and direction != fixed:
        raise ValidationError(
            'DIRECTION_MISMATCH',
            transaction_type=tx_type.value,
            direction=direction.value,
        )
    return fixed


class LedgerTransactions:
    """Transaction ledger methods."""

    @classmethod
    def record_transaction(cls, batch_id, quantity, transaction_type,
                           order_id='', notes='', direction=None,
                           user=None, **metadata) -> BatchTransaction:
        """
        Record a stock movement against one batch.

        sale/waste take units out, return puts them back, adjustment goes
        whichever way `direction` says ('in' or 'out').

        Outgoing movements are checked against the locked batch balance,
        never against a previously computed plan. Incoming movements are
        not capped.

        Raises:
            ValidationError: Bad quantity, type or direction
            NotFoundError('BATCH_NOT_FOUND')
            InsufficientStockError: Outgoing quantity > batch balance

        Concurrency:
            - Runs under transaction.atomic()
            - Uses select_for_update() on Batch
            - Verifies balance after lock
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError('INVALID_QUANTITY', quantity=quantity)

        tx_type = _resolve_type(transaction_type)
        resolved = _resolve_direction(tx_type, direction)

        with transaction.atomic():
            try:
                batch = Batch.objects.select_for_update().get(pk=batch_id)
            except (Batch.DoesNotExist, ValueError, TypeError):
                raise NotFoundError('BATCH_NOT_FOUND', batch_id=batch_id) from None

            if resolved == Direction.OUT and quantity > batch.quantity:
                raise InsufficientStockError(
                    'INSUFFICIENT_STOCK',
                    batch_id=batch.pk,
                    shortfall=quantity - batch.quantity,
                    available=batch.quantity,
                    requested=quantity,
                )

            entry = BatchTransaction.objects.create(
                batch=batch,
                order_id=order_id or '',
                quantity=quantity,
                transaction_type=tx_type,
                direction=resolved,
                notes=notes or '',
                user=user,
                metadata=metadata,
            )

        logger.info(
            "ledger.transaction.recorded",
            extra={
                "transaction_id": entry.pk,
                "batch_id": batch.pk,
                "product_id": batch.product_id,
                "type": tx_type.value,
                "direction": resolved.value,
                "qty": str(quantity),
                "order_id": entry.order_id,
            },
        )
        return entry

    @classmethod
    def list_transactions_for_batch(cls, batch_id):
        """Transactions of a batch, oldest first."""
        try:
            exists = Batch.objects.filter(pk=batch_id).exists()
        except (ValueError, TypeError):
            exists = False
        if not exists:
            raise NotFoundError('BATCH_NOT_FOUND', batch_id=batch_id)
        return list(
            BatchTransaction.objects.filter(batch_id=batch_id)
            .order_by('created_at', 'pk')
        )

    @classmethod
    def list_transactions_for_product(cls, product_id):
        """Transactions across every batch of a product, oldest first."""
        return list(
            BatchTransaction.objects.filter(batch__product_id=str(product_id))
            .select_related('batch')
            .order_by('created_at', 'pk')
        )
