"""
Stock alerts — low-stock and expiry conditions.

The predicates are pure; check_alerts() evaluates them over the ledger
for a notification dispatcher to poll. Nothing here sends anything.

Usage:
    from batchman.services.alerts import check_alerts

    # Run periodically (celery beat, cron) or after stock changes
    for alert in check_alerts():
        notify(alert)
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from batchman.adapters.catalog import get_policy, get_product_catalog
from batchman.expiry import ExpiryStatus, expiry_status
from batchman.models.batch import Batch
from batchman.protocols.catalog import ProductPolicy

logger = logging.getLogger('batchman')


class AlertKind(str, Enum):
    LOW_STOCK = "low_stock"
    EXPIRY = "expiry"


@dataclass(frozen=True)
class StockAlert:
    """A triggered alert condition."""

    kind: AlertKind
    product_id: str
    total_stock: int | None = None
    minimum_stock: int | None = None
    batch: Batch | None = None
    status: ExpiryStatus | None = None


def is_low_stock(product: ProductPolicy, total_stock: int) -> bool:
    """Total at or below the product minimum (0 = alert only when out)."""
    minimum = getattr(product, 'minimum_stock', None) or 0
    return total_stock <= minimum


def is_expiring_soon(batch, product: ProductPolicy, today: date | None = None) -> bool:
    """Expired, or inside the product's notification window."""
    return expiry_status(batch, product.expiry_notification_days, today).needs_attention


def check_alerts(product_ids=None, today: date | None = None) -> list[StockAlert]:
    """
    Evaluate low-stock and expiry alerts.

    Args:
        product_ids: Products to check (None = every product with batches)
        today: Reference date for expiry (None = today)

    Returns:
        Triggered alerts: low-stock first per product, then its batches
        in FIFO order.

    Raises:
        NotFoundError('PRODUCT_NOT_FOUND'): An explicitly requested product
            is unknown. Products found only through their batches are
            skipped (and logged) when the catalog no longer lists them.
    """
    from batchman.services.queries import LedgerQueries

    explicit = product_ids is not None
    if not explicit:
        product_ids = (
            Batch.objects.order_by('product_id')
            .values_list('product_id', flat=True)
            .distinct()
        )

    triggered = []

    for product_id in product_ids:
        if explicit:
            policy = get_policy(product_id)
        else:
            policy = get_product_catalog().get_policy(str(product_id))
            if policy is None:
                logger.warning(
                    "ledger.alert.unknown_product",
                    extra={"product_id": product_id},
                )
                continue

        total = LedgerQueries.total_stock(policy.product_id)

        if is_low_stock(policy, total):
            triggered.append(StockAlert(
                kind=AlertKind.LOW_STOCK,
                product_id=policy.product_id,
                total_stock=total,
                minimum_stock=policy.minimum_stock,
            ))
            logger.warning(
                "ledger.alert.low_stock",
                extra={
                    "product_id": policy.product_id,
                    "total": str(total),
                    "minimum_stock": str(policy.minimum_stock),
                },
            )

        batches = Batch.objects.for_product(policy.product_id).active().with_expiry().fifo()
        for batch in batches:
            status = expiry_status(batch, policy.expiry_notification_days, today)
            if not status.needs_attention:
                continue
            triggered.append(StockAlert(
                kind=AlertKind.EXPIRY,
                product_id=policy.product_id,
                batch=batch,
                status=status,
            ))
            logger.warning(
                "ledger.alert.expiry",
                extra={
                    "product_id": policy.product_id,
                    "batch_id": batch.pk,
                    "batch_number": batch.batch_number,
                    "state": status.state.value,
                    "days_remaining": str(status.days_remaining),
                },
            )

    return triggered
