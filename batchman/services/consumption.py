"""
Consumption policy — pick which batches a deduction comes from.

select_batches_to_consume() only plans. Each leg of the plan is recorded
with its own record_transaction(), which re-validates the batch balance
under lock, so a plan that went stale between planning and recording
fails loudly instead of over-selling.
"""

import logging
from dataclasses import dataclass
from datetime import date

from django.db import transaction

from batchman.adapters.catalog import get_policy
from batchman.exceptions import InsufficientStockError, ValidationError
from batchman.models.batch import Batch
from batchman.models.enums import TransactionType

logger = logging.getLogger('batchman')


@dataclass(frozen=True)
class Allocation:
    """One leg of a consumption plan."""

    batch: Batch
    quantity: int


class LedgerConsumption:
    """FIFO/LIFO batch selection methods."""

    @classmethod
    def select_batches_to_consume(cls, product_id, quantity_needed,
                                  exclude_expired: bool = False,
                                  today: date | None = None) -> list[Allocation]:
        """
        Plan a deduction of quantity_needed units across batches.

        Oldest received first when the product uses FIFO (default),
        newest first otherwise. Empty batches are skipped.

        Returns:
            Allocations in consumption order, summing to quantity_needed

        Raises:
            ValidationError('INVALID_QUANTITY'): quantity_needed <= 0
            NotFoundError('PRODUCT_NOT_FOUND')
            InsufficientStockError: Total stock < quantity_needed (nothing planned)
        """
        if (isinstance(quantity_needed, bool) or not isinstance(quantity_needed, int)
                or quantity_needed <= 0):
            raise ValidationError('INVALID_QUANTITY', quantity=quantity_needed)

        policy = get_policy(product_id)

        candidates = Batch.objects.for_product(policy.product_id).active()
        if exclude_expired:
            candidates = candidates.exclude(
                has_expiry=True, expiry_date__lt=today or date.today(),
            )
        candidates = candidates.fifo() if policy.use_fifo else candidates.lifo()

        plan = []
        remaining = quantity_needed
        for batch in candidates:
            if remaining == 0:
                break
            take = min(batch.quantity, remaining)
            plan.append(Allocation(batch=batch, quantity=take))
            remaining -= take

        if remaining:
            available = quantity_needed - remaining
            raise InsufficientStockError(
                'INSUFFICIENT_STOCK',
                product_id=policy.product_id,
                shortfall=remaining,
                available=available,
                requested=quantity_needed,
            )

        return plan

    @classmethod
    def consume(cls, product_id, quantity, order_id='', notes='',
                user=None, exclude_expired: bool = False):
        """
        Plan and record a sale across batches in one database transaction.

        Every leg goes through record_transaction(), so each batch is
        locked and re-checked. If any leg fails, no leg is kept.

        Returns:
            List of created BatchTransaction, one per allocation

        Raises:
            InsufficientStockError: Not enough stock, at plan or record time
        """
        from batchman.services.transactions import LedgerTransactions

        with transaction.atomic():
            plan = cls.select_batches_to_consume(
                product_id, quantity, exclude_expired=exclude_expired,
            )
            entries = [
                LedgerTransactions.record_transaction(
                    leg.batch.pk,
                    leg.quantity,
                    TransactionType.SALE,
                    order_id=order_id,
                    notes=notes,
                    user=user,
                )
                for leg in plan
            ]

        logger.info(
            "ledger.consume",
            extra={
                "product_id": str(product_id),
                "qty": str(quantity),
                "order_id": order_id,
                "legs": len(entries),
            },
        )
        return entries
