"""
Batch repository — create, edit, delete and list batches.

Quantity is only set here at creation (or while a batch has no
transactions yet). Afterwards it belongs to the transaction ledger.
"""

import logging
from datetime import date, datetime

from django.db import transaction

from batchman.adapters.catalog import get_policy
from batchman.conf import batchman_settings
from batchman.exceptions import (
    ConflictError,
    ConsistencyError,
    NotFoundError,
    ValidationError,
)
from batchman.models.batch import Batch
from batchman.models.transaction import BatchTransaction

logger = logging.getLogger('batchman')

EDITABLE_FIELDS = frozenset({
    'batch_number',
    'received_date',
    'has_expiry',
    'expiry_date',
    'notes',
})

# field -> (expected type, None allowed)
FIELD_TYPES = {
    'batch_number': (str, False),
    'received_date': (date, False),
    'has_expiry': (bool, False),
    'expiry_date': (date, True),
    'notes': (str, True),
}


def _validate_field(field: str, value) -> None:
    expected, nullable = FIELD_TYPES[field]
    if value is None:
        ok = nullable
    elif expected is date:
        # datetime is a date subclass
        ok = isinstance(value, date) and not isinstance(value, datetime)
    else:
        ok = isinstance(value, expected)
    if not ok:
        raise ValidationError('INVALID_INPUT', field=field, value=value)


def _validate_quantity(quantity) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise ValidationError('INVALID_QUANTITY', quantity=quantity)


def _validate_expiry(has_expiry: bool, expiry_date: date | None, batch_number: str) -> None:
    if has_expiry and expiry_date is None:
        raise ValidationError('EXPIRY_DATE_REQUIRED', batch_number=batch_number)


def _next_batch_number(product_id: str, received_date: date) -> str:
    """BATCH-<received date>-<seq>, seq counted per product."""
    seq = Batch.objects.for_product(product_id).count() + 1
    prefix = batchman_settings.BATCH_NUMBER_PREFIX
    return f"{prefix}-{received_date.isoformat()}-{seq:03d}"


class LedgerBatches:
    """Batch repository methods."""

    @classmethod
    def get_batch(cls, batch_id) -> Batch:
        """
        Fetch a batch by id.

        Raises:
            NotFoundError('BATCH_NOT_FOUND')
        """
        try:
            return Batch.objects.get(pk=batch_id)
        except (Batch.DoesNotExist, ValueError, TypeError):
            raise NotFoundError('BATCH_NOT_FOUND', batch_id=batch_id) from None

    @classmethod
    def create_batch(cls, product_id, quantity, received_date=None,
                     has_expiry=None, expiry_date=None,
                     batch_number='', notes='') -> Batch:
        """
        Register a received lot.

        has_expiry=None inherits the product's policy. The batch starts
        with quantity_received == quantity and no transactions.

        Raises:
            NotFoundError('PRODUCT_NOT_FOUND'): Unknown product
            ValidationError('INVALID_QUANTITY'): quantity < 0
            ValidationError('INVALID_INPUT'): Wrongly typed field
            ValidationError('EXPIRY_DATE_REQUIRED'): has_expiry without expiry_date
        """
        policy = get_policy(product_id)
        _validate_quantity(quantity)

        given = {
            'batch_number': batch_number,
            'received_date': received_date,
            'has_expiry': has_expiry,
            'expiry_date': expiry_date,
            'notes': notes,
        }
        for field, value in given.items():
            # None falls back to the default
            if value is not None:
                _validate_field(field, value)

        if has_expiry is None:
            has_expiry = policy.has_expiry
        received = received_date or date.today()
        _validate_expiry(has_expiry, expiry_date, batch_number)

        with transaction.atomic():
            batch = Batch.objects.create(
                product_id=policy.product_id,
                batch_number=batch_number or _next_batch_number(policy.product_id, received),
                quantity_received=quantity,
                quantity=quantity,
                received_date=received,
                has_expiry=has_expiry,
                expiry_date=expiry_date if has_expiry else None,
                notes=notes or '',
            )

        logger.info(
            "ledger.batch.created",
            extra={
                "batch_id": batch.pk,
                "product_id": batch.product_id,
                "batch_number": batch.batch_number,
                "qty": str(quantity),
                "expiry": str(batch.expiry_date) if batch.has_expiry else "none",
            },
        )
        return batch

    @classmethod
    def update_batch(cls, batch_id, **patch) -> Batch:
        """
        Edit non-ledger fields of a batch.

        quantity may be included only while the batch has no
        transactions; it then also resets quantity_received.

        Raises:
            NotFoundError('BATCH_NOT_FOUND')
            ValidationError('FIELD_NOT_EDITABLE'): Unknown or protected field
            ValidationError('INVALID_INPUT'): None or wrongly typed value
            ValidationError('EXPIRY_DATE_REQUIRED')
            ConsistencyError('QUANTITY_IS_LEDGER_MANAGED'): quantity with transactions

        Concurrency:
            - Runs under transaction.atomic()
            - Uses select_for_update() on Batch
        """
        unknown = set(patch) - EDITABLE_FIELDS - {'quantity'}
        if unknown:
            raise ValidationError('FIELD_NOT_EDITABLE', fields=', '.join(sorted(unknown)))

        for field in sorted(EDITABLE_FIELDS & set(patch)):
            _validate_field(field, patch[field])

        with transaction.atomic():
            try:
                batch = Batch.objects.select_for_update().get(pk=batch_id)
            except (Batch.DoesNotExist, ValueError, TypeError):
                raise NotFoundError('BATCH_NOT_FOUND', batch_id=batch_id) from None

            update_fields = ['updated_at']

            if 'quantity' in patch:
                quantity = patch['quantity']
                _validate_quantity(quantity)
                count = batch.transactions.count()
                if count:
                    raise ConsistencyError(
                        'QUANTITY_IS_LEDGER_MANAGED',
                        batch_id=batch.pk,
                        transactions=count,
                    )
                batch.quantity = quantity
                batch.quantity_received = quantity
                update_fields += ['quantity', 'quantity_received']

            for field in EDITABLE_FIELDS & set(patch):
                setattr(batch, field, patch[field])
                update_fields.append(field)

            if batch.notes is None:
                batch.notes = ''
            if not batch.has_expiry and batch.expiry_date is not None:
                batch.expiry_date = None
                update_fields.append('expiry_date')
            _validate_expiry(batch.has_expiry, batch.expiry_date, batch.batch_number)

            batch.save(update_fields=sorted(set(update_fields)))

        logger.info(
            "ledger.batch.updated",
            extra={"batch_id": batch.pk, "fields": ", ".join(sorted(patch))},
        )
        return batch

    @classmethod
    def delete_batch(cls, batch_id, force: bool = False) -> int:
        """
        Delete a batch.

        A batch referenced by transactions is protected. With force=True
        its transactions are deleted first (cascade) and the caller owns
        the reconciliation of any aggregate view.

        Returns:
            Number of transactions removed with the batch

        Raises:
            NotFoundError('BATCH_NOT_FOUND')
            ConflictError('BATCH_HAS_TRANSACTIONS'): Referenced and not forced
        """
        with transaction.atomic():
            try:
                batch = Batch.objects.select_for_update().get(pk=batch_id)
            except (Batch.DoesNotExist, ValueError, TypeError):
                raise NotFoundError('BATCH_NOT_FOUND', batch_id=batch_id) from None

            count = batch.transactions.count()
            if count and not force:
                raise ConflictError(
                    'BATCH_HAS_TRANSACTIONS',
                    batch_id=batch.pk,
                    transactions=count,
                )

            if count:
                # QuerySet.delete() bypasses BatchTransaction.delete()
                BatchTransaction.objects.filter(batch=batch).delete()
                logger.warning(
                    "ledger.batch.cascade",
                    extra={
                        "batch_id": batch.pk,
                        "product_id": batch.product_id,
                        "transactions": count,
                        "qty": str(batch.quantity),
                    },
                )

            pk = batch.pk
            batch.delete()

        logger.info(
            "ledger.batch.deleted",
            extra={"batch_id": pk, "forced": force},
        )
        return count

    @classmethod
    def list_batches_for_product(cls, product_id, include_empty: bool = True):
        """
        Batches of a product, oldest received first (FIFO order).

        Args:
            product_id: Catalog product identifier
            include_empty: Include retired (quantity=0) batches
        """
        qs = Batch.objects.for_product(str(product_id))
        if not include_empty:
            qs = qs.active()
        return list(qs.fifo())
