"""
Expiry status — isolated, testable, reusable.

Classifies a batch by how far it is from its expiry date, relative to
the product's notification window (days before expiry to start warning).

Examples (notification_days=30, today=2026-10-18):
    - no expiry tracked           → NO_EXPIRY
    - expiry 2026-10-17           → EXPIRED (days_remaining=-1)
    - expiry 2026-11-17 (30 days) → EXPIRING_SOON (days_remaining=30)
    - expiry 2026-11-18 (31 days) → HEALTHY (days_remaining=31)
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum


class ExpiryState(str, Enum):
    """Expiry classification of a batch."""

    NO_EXPIRY = "no_expiry"
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring_soon"
    HEALTHY = "healthy"


@dataclass(frozen=True)
class ExpiryStatus:
    """Expiry state plus whole days left (None when not tracked)."""

    state: ExpiryState
    days_remaining: int | None = None

    @property
    def needs_attention(self) -> bool:
        return self.state in (ExpiryState.EXPIRED, ExpiryState.EXPIRING_SOON)


NO_EXPIRY = ExpiryStatus(ExpiryState.NO_EXPIRY)


def days_until_expiry(batch, today: date | None = None) -> int | None:
    """
    Whole calendar days from today until the batch expiry date.

    Negative once the batch has expired, None if the batch has no expiry.
    """
    if not batch.has_expiry or batch.expiry_date is None:
        return None
    return (batch.expiry_date - (today or date.today())).days


def expiry_status(batch, notification_days: int, today: date | None = None) -> ExpiryStatus:
    """
    Classify a batch by expiry.

    Args:
        batch: Batch instance (needs .has_expiry, .expiry_date)
        notification_days: Days before expiry that count as "expiring soon"
        today: Reference date (None = today)

    Returns:
        ExpiryStatus
    """
    days = days_until_expiry(batch, today)

    if days is None:
        return NO_EXPIRY
    if days < 0:
        return ExpiryStatus(ExpiryState.EXPIRED, days)
    if days <= notification_days:
        return ExpiryStatus(ExpiryState.EXPIRING_SOON, days)
    return ExpiryStatus(ExpiryState.HEALTHY, days)
