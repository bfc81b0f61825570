"""
Pytest fixtures for Batchman tests.
"""

from datetime import date, timedelta

import pytest
from django.contrib.auth import get_user_model

from batchman import ledger
from batchman.adapters import get_product_catalog, reset_product_catalog


User = get_user_model()


@pytest.fixture(autouse=True)
def catalog():
    """In-memory catalog configured in tests/settings.py, emptied per test."""
    reset_product_catalog()
    catalog = get_product_catalog()
    catalog.clear()
    yield catalog
    catalog.clear()
    reset_product_catalog()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='stockkeeper',
        password='testpass123'
    )


@pytest.fixture
def product(catalog):
    """Non-perishable product, FIFO, alert only at zero."""
    return catalog.register('honey-jar')


@pytest.fixture
def lifo_product(catalog):
    """Product consumed newest batch first."""
    return catalog.register('wine-bottle', use_fifo=False)


@pytest.fixture
def perishable_product(catalog):
    """Product with expiry, warned 30 days ahead."""
    return catalog.register(
        'chocolate-box',
        has_expiry=True,
        expiry_notification_days=30,
    )


@pytest.fixture
def watched_product(catalog):
    """Product with a minimum stock of 5."""
    return catalog.register('gift-bag', minimum_stock=5)


@pytest.fixture
def today():
    """Return today's date."""
    return date.today()


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


@pytest.fixture
def two_batches(db, product, today):
    """B1 received first (qty 5), B2 received the next day (qty 5)."""
    b1 = ledger.create_batch(
        product.product_id, 5,
        received_date=today - timedelta(days=2),
        batch_number='B1',
    )
    b2 = ledger.create_batch(
        product.product_id, 5,
        received_date=today - timedelta(days=1),
        batch_number='B2',
    )
    return b1, b2
