"""
Ledger Service — The single public interface for all batch ledger operations.

Usage:
    from batchman import ledger, LedgerError

    batch = ledger.create_batch("prod-42", 10, received_date=date.today())
    ledger.record_transaction(batch.pk, 4, 'sale', order_id='ORD-1')
    ledger.total_stock("prod-42")  # 6
"""

from datetime import date

from django.db import transaction

from batchman.exceptions import NotFoundError
from batchman.models.batch import Batch
from batchman.services.alerts import check_alerts, is_expiring_soon, is_low_stock
from batchman.services.batches import LedgerBatches
from batchman.services.consumption import LedgerConsumption
from batchman.services.queries import LedgerQueries
from batchman.services.transactions import LedgerTransactions


class Ledger(LedgerBatches, LedgerTransactions, LedgerQueries, LedgerConsumption):
    """
    Single interface for all batch ledger operations.

    Parameter convention: (target, quantity, ...)
    "Record 4 units sold from batch 7" → record_transaction(7, 4, 'sale')

    IMPORTANT: All state-changing methods use atomic transactions
    with a row lock on the batch. See each method's docstring.

    Sections:
        BATCHES       create_batch, update_batch, delete_batch, get_batch,
                      list_batches_for_product
        TRANSACTIONS  record_transaction, list_transactions_for_batch,
                      list_transactions_for_product
        QUERIES       total_stock, expiry_status, batch_statuses,
                      batches_expiring_within
        CONSUMPTION   select_batches_to_consume, consume
        ALERTS        is_low_stock, is_expiring_soon, check_alerts
    """

    # ══════════════════════════════════════════════════════════════
    # ALERTS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def is_low_stock(cls, product, total_stock: int) -> bool:
        return is_low_stock(product, total_stock)

    @classmethod
    def is_expiring_soon(cls, batch, product, today: date | None = None) -> bool:
        return is_expiring_soon(batch, product, today)

    @classmethod
    def check_alerts(cls, product_ids=None, today: date | None = None):
        return check_alerts(product_ids, today)

    # ══════════════════════════════════════════════════════════════
    # INTEGRITY
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def recalculate(cls, batch_id) -> int:
        """
        Rebuild a batch balance from its transaction log.

        Raises:
            NotFoundError('BATCH_NOT_FOUND')

        Concurrency:
            - Runs under transaction.atomic()
            - Uses select_for_update() on Batch, so no transaction can be
              recorded between the ledger sum and the write-back
        """
        with transaction.atomic():
            try:
                batch = Batch.objects.select_for_update().get(pk=batch_id)
            except (Batch.DoesNotExist, ValueError, TypeError):
                raise NotFoundError('BATCH_NOT_FOUND', batch_id=batch_id) from None
            return batch.recalculate()
