"""
Enums for Batchman models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class TransactionType(models.TextChoices):
    """
    Kind of stock movement recorded against a batch.

    SALE:       Units leave with an order (out)
    RETURN:     Units come back from a cancelled/returned order (in)
    WASTE:      Damaged or expired units written off (out)
    ADJUSTMENT: Manual correction, either way. Direction must be explicit.
    """
    SALE = 'sale', _('Sale')
    ADJUSTMENT = 'adjustment', _('Adjustment')
    RETURN = 'return', _('Return')
    WASTE = 'waste', _('Waste')

    @property
    def fixed_direction(self) -> 'Direction | None':
        """Direction implied by the type, None when the caller must choose."""
        return _FIXED_DIRECTIONS.get(self)


class Direction(models.TextChoices):
    """Effect of a transaction on the batch balance."""
    IN = 'in', _('In')      # Restock, balance goes up
    OUT = 'out', _('Out')   # Deduction, balance goes down


_FIXED_DIRECTIONS = {
    TransactionType.SALE: Direction.OUT,
    TransactionType.WASTE: Direction.OUT,
    TransactionType.RETURN: Direction.IN,
}
