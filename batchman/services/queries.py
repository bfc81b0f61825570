"""
Ledger queries — read-only aggregation over batches.

No locking: results are display-grade snapshots, never used to enforce
invariants (record_transaction re-checks under lock).
"""

from datetime import date, timedelta

from django.db.models import IntegerField, Sum, Value
from django.db.models.functions import Coalesce

from batchman.adapters.catalog import get_policy
from batchman.expiry import ExpiryStatus, expiry_status
from batchman.models.batch import Batch


class LedgerQueries:
    """Read-only ledger query methods."""

    @classmethod
    def total_stock(cls, product_id) -> int:
        """
        Total remaining quantity of a product.

        total = Σ batch.quantity over every batch of the product
        """
        return Batch.objects.for_product(str(product_id)).aggregate(
            t=Coalesce(Sum('quantity'), Value(0), output_field=IntegerField())
        )['t']

    @classmethod
    def expiry_status(cls, batch: Batch, notification_days: int,
                      today: date | None = None) -> ExpiryStatus:
        """Expiry classification of one batch (see batchman.expiry)."""
        return expiry_status(batch, notification_days, today)

    @classmethod
    def batch_statuses(cls, product_id, today: date | None = None) -> list[tuple[Batch, ExpiryStatus]]:
        """
        Every batch of a product with its expiry status, FIFO order.

        The notification window comes from the product policy.
        """
        policy = get_policy(product_id)
        batches = Batch.objects.for_product(policy.product_id).fifo()
        return [
            (batch, expiry_status(batch, policy.expiry_notification_days, today))
            for batch in batches
        ]

    @classmethod
    def batches_expiring_within(cls, days: int, today: date | None = None,
                                include_expired: bool = False,
                                include_empty: bool = True) -> list[Batch]:
        """
        Batches of any product expiring between today and today + days.

        Args:
            days: Window size in days (inclusive)
            today: Reference date (None = today)
            include_expired: Also return batches already past expiry
            include_empty: Include batches with quantity 0

        Returns:
            Batches ordered by expiry date
        """
        ref = today or date.today()
        qs = Batch.objects.expiring_before(ref + timedelta(days=days))
        if not include_expired:
            qs = qs.filter(expiry_date__gte=ref)
        if not include_empty:
            qs = qs.active()
        return list(qs.order_by('expiry_date', 'received_date', 'pk'))
