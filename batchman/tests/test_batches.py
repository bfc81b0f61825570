"""
Tests for the batch repository (create, update, delete, list).
"""

from datetime import date, datetime, timedelta

import pytest

from batchman import ledger
from batchman.exceptions import (
    ConflictError,
    ConsistencyError,
    NotFoundError,
    ValidationError,
)
from batchman.models import Batch, BatchTransaction


pytestmark = pytest.mark.django_db


class TestCreateBatch:
    """Tests for ledger.create_batch()."""

    def test_create_sets_opening_balance(self, product, today):
        """New batch starts with quantity == quantity_received and no transactions."""
        batch = ledger.create_batch(product.product_id, 10, received_date=today, batch_number='BATCH-A')

        assert batch.quantity == 10
        assert batch.quantity_received == 10
        assert batch.batch_number == 'BATCH-A'
        assert batch.received_date == today
        assert batch.transactions.count() == 0

    def test_create_zero_quantity_allowed(self, product):
        """A batch may be registered empty."""
        batch = ledger.create_batch(product.product_id, 0)

        assert batch.quantity == 0
        assert batch.is_retired

    def test_create_negative_quantity_rejected(self, product):
        """Negative opening quantity raises ValidationError."""
        with pytest.raises(ValidationError) as exc:
            ledger.create_batch(product.product_id, -1)

        assert exc.value.code == 'INVALID_QUANTITY'
        assert Batch.objects.count() == 0

    def test_create_expiry_without_date_rejected(self, product):
        """has_expiry=True without expiry_date raises ValidationError."""
        with pytest.raises(ValidationError) as exc:
            ledger.create_batch(product.product_id, 5, has_expiry=True)

        assert exc.value.code == 'EXPIRY_DATE_REQUIRED'

    def test_create_inherits_product_expiry_policy(self, perishable_product):
        """has_expiry defaults to the product's policy."""
        with pytest.raises(ValidationError):
            ledger.create_batch(perishable_product.product_id, 5)

    def test_create_with_expiry(self, perishable_product, today):
        """Expiry date is stored when the batch has expiry."""
        expiry = today + timedelta(days=90)
        batch = ledger.create_batch(perishable_product.product_id, 5, expiry_date=expiry)

        assert batch.has_expiry
        assert batch.expiry_date == expiry

    def test_create_without_expiry_drops_date(self, product, today):
        """expiry_date is ignored when has_expiry is False."""
        batch = ledger.create_batch(
            product.product_id, 5,
            has_expiry=False,
            expiry_date=today + timedelta(days=10),
        )

        assert batch.expiry_date is None

    def test_create_generates_batch_number(self, product, today):
        """Empty batch_number becomes BATCH-<date>-<seq>."""
        first = ledger.create_batch(product.product_id, 1, received_date=today)
        second = ledger.create_batch(product.product_id, 1, received_date=today)

        assert first.batch_number == f'BATCH-{today.isoformat()}-001'
        assert second.batch_number == f'BATCH-{today.isoformat()}-002'

    def test_create_batch_number_prefix_setting(self, product, today, settings):
        """BATCH_NUMBER_PREFIX changes the generated label."""
        settings.BATCHMAN = {**settings.BATCHMAN, 'BATCH_NUMBER_PREFIX': 'LOT'}
        batch = ledger.create_batch(product.product_id, 1, received_date=today)

        assert batch.batch_number.startswith('LOT-')

    @pytest.mark.parametrize('kwargs, field', [
        ({'has_expiry': 'yes', 'expiry_date': date(2030, 1, 1)}, 'has_expiry'),
        ({'has_expiry': True, 'expiry_date': '2030-01-01'}, 'expiry_date'),
        ({'received_date': '2026-01-01'}, 'received_date'),
        ({'batch_number': 7}, 'batch_number'),
    ])
    def test_create_wrongly_typed_value_rejected(self, product, kwargs, field):
        """Wrongly typed fields raise ValidationError and nothing is stored."""
        with pytest.raises(ValidationError) as exc:
            ledger.create_batch(product.product_id, 5, **kwargs)

        assert exc.value.code == 'INVALID_INPUT'
        assert exc.value.data['field'] == field
        assert Batch.objects.count() == 0

    def test_create_unknown_product(self, catalog):
        """Product missing from the catalog raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc:
            ledger.create_batch('nope', 5)

        assert exc.value.code == 'PRODUCT_NOT_FOUND'


class TestUpdateBatch:
    """Tests for ledger.update_batch()."""

    def test_update_metadata_fields(self, product, today):
        """Non-ledger fields can be edited freely."""
        batch = ledger.create_batch(product.product_id, 10)
        ledger.record_transaction(batch.pk, 2, 'sale')

        updated = ledger.update_batch(
            batch.pk,
            batch_number='RELABELED',
            notes='moved to shelf 3',
            received_date=today - timedelta(days=3),
        )

        assert updated.batch_number == 'RELABELED'
        assert updated.notes == 'moved to shelf 3'
        assert updated.received_date == today - timedelta(days=3)
        assert updated.quantity == 8

    def test_update_quantity_before_transactions(self, product):
        """quantity is editable while the ledger is empty."""
        batch = ledger.create_batch(product.product_id, 10)

        updated = ledger.update_batch(batch.pk, quantity=12)

        assert updated.quantity == 12
        assert updated.quantity_received == 12

    def test_update_quantity_after_transactions(self, product):
        """quantity is ledger-managed once a transaction exists."""
        batch = ledger.create_batch(product.product_id, 10)
        ledger.record_transaction(batch.pk, 1, 'sale')

        with pytest.raises(ConsistencyError) as exc:
            ledger.update_batch(batch.pk, quantity=20)

        assert exc.value.code == 'QUANTITY_IS_LEDGER_MANAGED'
        batch.refresh_from_db()
        assert batch.quantity == 9

    def test_update_enable_expiry_requires_date(self, product):
        """Turning expiry on without a date raises ValidationError."""
        batch = ledger.create_batch(product.product_id, 10)

        with pytest.raises(ValidationError) as exc:
            ledger.update_batch(batch.pk, has_expiry=True)

        assert exc.value.code == 'EXPIRY_DATE_REQUIRED'
        batch.refresh_from_db()
        assert batch.has_expiry is False

    def test_update_disable_expiry_clears_date(self, perishable_product, today):
        """Turning expiry off clears the date."""
        batch = ledger.create_batch(
            perishable_product.product_id, 10, expiry_date=today + timedelta(days=5),
        )

        updated = ledger.update_batch(batch.pk, has_expiry=False)

        assert updated.expiry_date is None

    @pytest.mark.parametrize('field', ['product_id', 'quantity_received', 'created_at'])
    def test_update_protected_fields_rejected(self, product, field):
        """Fields outside the editable set raise ValidationError."""
        batch = ledger.create_batch(product.product_id, 10)

        with pytest.raises(ValidationError) as exc:
            ledger.update_batch(batch.pk, **{field: 'x'})

        assert exc.value.code == 'FIELD_NOT_EDITABLE'

    @pytest.mark.parametrize('field, value', [
        ('received_date', None),
        ('received_date', '2026-01-01'),
        ('received_date', datetime(2026, 1, 1, 12, 0)),
        ('batch_number', None),
        ('batch_number', 42),
        ('has_expiry', None),
        ('has_expiry', 'yes'),
        ('expiry_date', 'tomorrow'),
        ('notes', 5),
    ])
    def test_update_wrongly_typed_value_rejected(self, product, field, value):
        """None or wrongly typed values raise ValidationError, not a database error."""
        batch = ledger.create_batch(product.product_id, 10, batch_number='KEEP')

        with pytest.raises(ValidationError) as exc:
            ledger.update_batch(batch.pk, **{field: value})

        assert exc.value.code == 'INVALID_INPUT'
        assert exc.value.data['field'] == field
        batch.refresh_from_db()
        assert batch.batch_number == 'KEEP'

    def test_update_notes_none_clears(self, product):
        """notes=None is accepted and stored as empty."""
        batch = ledger.create_batch(product.product_id, 10, notes='old')

        updated = ledger.update_batch(batch.pk, notes=None)

        assert updated.notes == ''

    def test_update_unknown_batch(self, db):
        """Unknown batch id raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc:
            ledger.update_batch(999999, notes='x')

        assert exc.value.code == 'BATCH_NOT_FOUND'


class TestDeleteBatch:
    """Tests for ledger.delete_batch()."""

    def test_delete_unreferenced_batch(self, product):
        """Batch without transactions is deleted."""
        batch = ledger.create_batch(product.product_id, 10)

        removed = ledger.delete_batch(batch.pk)

        assert removed == 0
        assert not Batch.objects.filter(pk=batch.pk).exists()

    def test_delete_referenced_batch_conflict(self, product):
        """Batch with transactions is protected without force."""
        batch = ledger.create_batch(product.product_id, 10)
        ledger.record_transaction(batch.pk, 3, 'sale')

        with pytest.raises(ConflictError) as exc:
            ledger.delete_batch(batch.pk)

        assert exc.value.code == 'BATCH_HAS_TRANSACTIONS'
        assert exc.value.data['transactions'] == 1
        assert Batch.objects.filter(pk=batch.pk).exists()
        assert BatchTransaction.objects.filter(batch_id=batch.pk).count() == 1

    def test_delete_force_cascades(self, product):
        """force=True removes the transactions with the batch."""
        batch = ledger.create_batch(product.product_id, 10)
        ledger.record_transaction(batch.pk, 3, 'sale')
        ledger.record_transaction(batch.pk, 1, 'return')

        removed = ledger.delete_batch(batch.pk, force=True)

        assert removed == 2
        assert not Batch.objects.filter(pk=batch.pk).exists()
        assert not BatchTransaction.objects.filter(batch_id=batch.pk).exists()

    def test_delete_force_updates_total(self, product, two_batches):
        """Aggregate stock no longer counts a force-deleted batch."""
        b1, _ = two_batches
        ledger.record_transaction(b1.pk, 1, 'sale')

        ledger.delete_batch(b1.pk, force=True)

        assert ledger.total_stock(product.product_id) == 5

    def test_delete_unknown_batch(self, db):
        """Unknown batch id raises NotFoundError."""
        with pytest.raises(NotFoundError):
            ledger.delete_batch(999999)


class TestListBatches:
    """Tests for ledger.list_batches_for_product()."""

    def test_list_oldest_first(self, product, today):
        """Batches come back ordered by received_date ascending."""
        newer = ledger.create_batch(product.product_id, 1, received_date=today)
        older = ledger.create_batch(product.product_id, 1, received_date=today - timedelta(days=7))
        middle = ledger.create_batch(product.product_id, 1, received_date=today - timedelta(days=2))

        batches = ledger.list_batches_for_product(product.product_id)

        assert [b.pk for b in batches] == [older.pk, middle.pk, newer.pk]

    def test_list_scoped_to_product(self, product, lifo_product):
        """Only the requested product's batches are listed."""
        mine = ledger.create_batch(product.product_id, 1)
        ledger.create_batch(lifo_product.product_id, 1)

        assert [b.pk for b in ledger.list_batches_for_product(product.product_id)] == [mine.pk]

    def test_list_exclude_empty(self, product):
        """include_empty=False hides retired batches."""
        empty = ledger.create_batch(product.product_id, 2)
        full = ledger.create_batch(product.product_id, 2)
        ledger.record_transaction(empty.pk, 2, 'sale')

        active = ledger.list_batches_for_product(product.product_id, include_empty=False)

        assert [b.pk for b in active] == [full.pk]
        assert len(ledger.list_batches_for_product(product.product_id)) == 2
