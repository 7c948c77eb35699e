"""
Pytest fixtures for Packman tests.
"""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from packman import stock
from packman.adapters.backends import reset_backends


User = get_user_model()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='testuser',
        password='testpass123'
    )


@pytest.fixture
def store():
    """Source store code."""
    return 'S1'


@pytest.fixture
def other_store():
    """A second store code."""
    return 'S2'


@pytest.fixture
def p1(db, store):
    """P1 at S1 with 10 units on hand."""
    return stock.receive(store, 'P1', 10, unit_price=Decimal('25.00'), reason='Saldo inicial')


@pytest.fixture
def p2(db, store):
    """P2 at S1 with 5 units on hand."""
    return stock.receive(store, 'P2', 5, unit_price=Decimal('8.50'), reason='Saldo inicial')


@pytest.fixture
def p3(db, store):
    """P3 at S1 with 3 units on hand."""
    return stock.receive(store, 'P3', 3, unit_price=Decimal('100.00'), reason='Saldo inicial')


@pytest.fixture
def strict_references(settings):
    """Validate store codes and product ids against the fixed fakes."""
    settings.PACKMAN = {
        'VALIDATE_REFERENCES': True,
        'CATALOG_BACKEND': 'packman.tests.fakes.FixedCatalog',
        'STORE_DIRECTORY': 'packman.tests.fakes.FixedStoreDirectory',
    }
    reset_backends()
    yield
    reset_backends()


@pytest.fixture
def on_hand(db):
    """Return a lookup of the current on-hand quantity (0 if never stocked)."""
    def lookup(store_code, product_id):
        entry = stock.get(store_code, product_id)
        return entry.quantity if entry is not None else 0
    return lookup
