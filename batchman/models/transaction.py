"""
BatchTransaction model — immutable ledger of batch movements.
"""

from django.conf import settings
from django.db import models, transaction
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from batchman.models.enums import Direction, TransactionType


class BatchTransaction(models.Model):
    """
    Immutable record of one stock movement against one batch.

    Rules:
    - NEVER update() or delete()
    - quantity is a magnitude (> 0); direction carries the sign
    - Corrections are new transactions in the opposite direction
    - Updates Batch.quantity atomically on save()

    This is the ONLY model that changes Batch.quantity.
    """

    batch = models.ForeignKey(
        'batchman.Batch',
        on_delete=models.PROTECT,
        related_name='transactions',
        verbose_name=_('Batch'),
    )

    # Order that caused the movement (sales and returns)
    order_id = models.CharField(
        max_length=64,
        blank=True,
        default='',
        db_index=True,
        verbose_name=_('Order ID'),
    )

    quantity = models.PositiveIntegerField(
        verbose_name=_('Quantity'),
        help_text=_('Magnitude of the movement. Direction gives the sign.'),
    )
    transaction_type = models.CharField(
        max_length=20,
        choices=TransactionType.choices,
        verbose_name=_('Type'),
    )
    direction = models.CharField(
        max_length=3,
        choices=Direction.choices,
        verbose_name=_('Direction'),
    )

    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadata'))

    created_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Created at'))
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('User'),
    )

    class Meta:
        verbose_name = _('Batch transaction')
        verbose_name_plural = _('Batch transactions')
        ordering = ['created_at', 'pk']
        indexes = [
            models.Index(fields=['batch', 'created_at'], name='batchman_tx_batch_created_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name='batchman_transaction_quantity_positive',
            ),
        ]

    @property
    def signed_quantity(self) -> int:
        """Quantity with sign applied: + for in, - for out."""
        if self.direction == Direction.IN:
            return self.quantity
        return -self.quantity

    def save(self, *args, **kwargs):
        """Save transaction and apply it to the batch balance atomically."""
        # Immutability check
        if self.pk:
            raise ValueError(
                "Transactions are immutable. "
                "To correct one, record a new transaction in the opposite direction."
            )

        with transaction.atomic():
            super().save(*args, **kwargs)

            # Import here to avoid circular import
            from batchman.models.batch import Batch

            Batch.objects.filter(pk=self.batch_id).update(
                quantity=F('quantity') + self.signed_quantity,
                updated_at=timezone.now(),
            )

    def delete(self, *args, **kwargs):
        """Prevent deletion — transactions are immutable."""
        raise ValueError(
            "Transactions are immutable. "
            "To reverse one, record a new transaction in the opposite direction."
        )

    def __str__(self) -> str:
        sign = '+' if self.direction == Direction.IN else '-'
        return f"{sign}{self.quantity} {self.transaction_type} | batch {self.batch_id}"
