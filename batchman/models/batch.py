"""
Batch model — one received lot of a product.

A Batch carries its own running balance (quantity) and, optionally, an
expiry date. The balance is mutated ONLY by BatchTransaction.save(); the
transaction log explains every change to it.

Usage:
    batch = ledger.create_batch(
        "prod-42",
        quantity=24,
        received_date=date.today(),
        has_expiry=True,
        expiry_date=date.today() + timedelta(days=90),
    )
"""

import logging
from datetime import date

from django.db import models
from django.db.models import Case, F, Q, Sum, Value, When
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _

from batchman.models.enums import Direction

logger = logging.getLogger('batchman')


class BatchQuerySet(models.QuerySet):
    """Custom QuerySet for Batch with convenience filters."""

    def for_product(self, product_id):
        """Filter batches for a specific product."""
        return self.filter(product_id=product_id)

    def active(self):
        """Batches with remaining stock."""
        return self.filter(quantity__gt=0)

    def retired(self):
        """Batches fully consumed (kept for the audit trail)."""
        return self.filter(quantity=0)

    def with_expiry(self):
        """Batches that track an expiry date."""
        return self.filter(has_expiry=True, expiry_date__isnull=False)

    def expiring_before(self, day):
        """Batches expiring on or before the given date."""
        return self.with_expiry().filter(expiry_date__lte=day)

    def expired(self, today=None):
        """Batches past their expiry date."""
        return self.with_expiry().filter(expiry_date__lt=today or date.today())

    def fifo(self):
        """Oldest received first."""
        return self.order_by('received_date', 'created_at', 'pk')

    def lifo(self):
        """Newest received first."""
        return self.order_by('-received_date', '-created_at', '-pk')


class Batch(models.Model):
    """
    Received lot of a product with its own quantity and optional expiry.

    Rules:
    - quantity >= 0 at all times (CHECK constraint)
    - has_expiry implies expiry_date (CHECK constraint)
    - quantity is a cache of quantity_received + Σ signed transactions
    - retirement (quantity == 0) is derived, never stored
    """

    # Product reference (owned by the external catalog)
    product_id = models.CharField(
        max_length=64,
        db_index=True,
        verbose_name=_('Product ID'),
    )

    batch_number = models.CharField(
        max_length=100,
        verbose_name=_('Batch number'),
        help_text=_('Free-text label, unique per product by convention.'),
    )

    quantity_received = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Quantity received'),
        help_text=_('Opening balance of the batch.'),
    )
    quantity = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Quantity'),
        help_text=_('Remaining quantity. Changed only through transactions.'),
    )

    # Dates
    received_date = models.DateField(
        default=date.today,
        verbose_name=_('Received date'),
    )
    has_expiry = models.BooleanField(
        default=False,
        verbose_name=_('Has expiry'),
    )
    expiry_date = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Expiry date'),
        help_text=_('Last day the batch can be sold.'),
    )

    notes = models.TextField(
        blank=True,
        default='',
        verbose_name=_('Notes'),
    )

    # Tracking
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Created at'))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_('Updated at'))

    objects = BatchQuerySet.as_manager()

    class Meta:
        verbose_name = _('Batch')
        verbose_name_plural = _('Batches')
        ordering = ['received_date', 'created_at', 'pk']
        indexes = [
            models.Index(fields=['product_id', 'received_date'], name='batchman_batch_prod_recv_idx'),
            models.Index(fields=['expiry_date'], name='batchman_batch_expiry_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gte=0),
                name='batchman_batch_quantity_non_negative',
            ),
            models.CheckConstraint(
                condition=Q(has_expiry=False) | Q(expiry_date__isnull=False),
                name='batchman_batch_expiry_date_required',
            ),
        ]

    # ══════════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════════

    @property
    def is_retired(self) -> bool:
        """Fully consumed?"""
        return self.quantity == 0

    @property
    def is_expired(self) -> bool:
        """Is this batch past its expiry date?"""
        if not self.has_expiry or self.expiry_date is None:
            return False
        return date.today() > self.expiry_date

    # ══════════════════════════════════════════════════════════════
    # METHODS
    # ══════════════════════════════════════════════════════════════

    def ledger_balance(self) -> int:
        """Balance implied by the ledger: received + Σ signed transactions."""
        delta = self.transactions.aggregate(
            t=Coalesce(
                Sum(
                    Case(
                        When(direction=Direction.IN, then=F('quantity')),
                        default=-F('quantity'),
                        output_field=models.IntegerField(),
                    )
                ),
                Value(0),
                output_field=models.IntegerField(),
            )
        )['t']
        return self.quantity_received + delta

    def recalculate(self) -> int:
        """
        Recalculate quantity from the transaction log.

        Use for:
        - Integrity audit
        - Correction after detected inconsistency

        The caller must hold a row lock on this batch (ledger.recalculate
        does), otherwise a concurrent transaction's delta can be overwritten.

        Returns:
            New calculated quantity
        """
        total = self.ledger_balance()

        if total != self.quantity:
            old = self.quantity
            self.quantity = total
            self.save(update_fields=['quantity', 'updated_at'])

            logger.warning(
                "ledger.batch.recalculated",
                extra={
                    "batch_id": self.pk,
                    "old": str(old),
                    "new": str(total),
                    "diff": str(total - old),
                },
            )

        return total

    def __str__(self) -> str:
        expiry = f" (exp:{self.expiry_date})" if self.has_expiry and self.expiry_date else ""
        return f"{self.batch_number} [{self.product_id}]: {self.quantity}{expiry}"
