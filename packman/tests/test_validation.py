"""
Tests for ReservationValidator (pure, no database).
"""

import pytest

from packman.models import StockEntry
from packman.services.validation import Accepted, Rejected, ReservationValidator, product_key


def entry(quantity, product_id='P1'):
    return StockEntry(store_code='S1', product_id=product_id, _quantity=quantity)


class TestValidate:
    """Tests for ReservationValidator.validate()."""

    def test_new_line_within_stock(self):
        """New line reserves its whole quantity."""
        result = ReservationValidator.validate(entry(10), 'P1', 4)

        assert result == Accepted('P1', 4, delta=-4)
        assert result.ok

    def test_new_line_exactly_all_stock(self):
        result = ReservationValidator.validate(entry(5), 'P1', 5)

        assert result.ok
        assert result.delta == -5

    def test_new_line_exceeds_stock(self):
        """Rejected with the available amount."""
        result = ReservationValidator.validate(entry(5), 'P1', 6)

        assert result == Rejected('P1', 6, 'INSUFFICIENT_STOCK', available=5)
        assert not result.ok

    def test_edit_counts_previous_reservation(self):
        """Editing 4 -> 7 with 6 left is judged against 6 + 4."""
        result = ReservationValidator.validate(entry(6), 'P1', 7, previously_reserved=4)

        assert result.ok
        assert result.delta == -3

    def test_edit_reduction_returns_stock(self):
        """Lowering a line yields a positive delta."""
        result = ReservationValidator.validate(entry(3), 'P1', 2, previously_reserved=7)

        assert result.ok
        assert result.delta == 5

    def test_edit_same_quantity_is_zero_delta(self):
        result = ReservationValidator.validate(entry(0), 'P1', 4, previously_reserved=4)

        assert result.ok
        assert result.delta == 0

    def test_edit_exceeds_effective_available(self):
        result = ReservationValidator.validate(entry(6), 'P1', 11, previously_reserved=4)

        assert result.code == 'INSUFFICIENT_STOCK'
        assert result.available == 10

    @pytest.mark.parametrize('requested', [0, -1, True, 2.5, '3', None])
    def test_invalid_quantity(self, requested):
        """Only positive integers are quantities."""
        result = ReservationValidator.validate(entry(10), 'P1', requested)

        assert result.code == 'INVALID_QUANTITY'
        assert result.available is None

    def test_unknown_entry(self):
        """No ledger entry and nothing held means unknown product."""
        result = ReservationValidator.validate(None, 'P1', 1)

        assert result.code == 'UNKNOWN_STORE_OR_PRODUCT'

    def test_missing_entry_with_previous_reservation(self):
        """A held quantity is still available to its own line."""
        result = ReservationValidator.validate(None, 'P1', 3, previously_reserved=4)

        assert result.ok
        assert result.delta == 1


class TestValidateLines:
    """Tests for ReservationValidator.validate_lines()."""

    def test_collects_every_rejection(self):
        """Validation does not stop at the first bad line."""
        entries = {'P1': entry(10), 'P2': entry(5, 'P2')}
        requested = {'P3': 1, 'P2': 6, 'P1': 4}

        accepted, rejected = ReservationValidator.validate_lines(entries, requested)

        assert [a.product_id for a in accepted] == ['P1']
        assert [(r.product_id, r.code) for r in rejected] == [
            ('P2', 'INSUFFICIENT_STOCK'),
            ('P3', 'UNKNOWN_STORE_OR_PRODUCT'),
        ]

    def test_uses_previous_quantities(self):
        entries = {'P1': entry(6)}

        accepted, rejected = ReservationValidator.validate_lines(entries, {'P1': 7}, {'P1': 4})

        assert rejected == []
        assert accepted[0].delta == -3

    def test_rejected_as_dict(self):
        rejected = Rejected('P2', 6, 'INSUFFICIENT_STOCK', available=5)

        assert rejected.as_dict() == {
            'product_id': 'P2',
            'quantity': 6,
            'code': 'INSUFFICIENT_STOCK',
            'available': 5,
        }
        assert 'available' not in Rejected('P2', 0, 'INVALID_QUANTITY').as_dict()


class TestProductKey:
    """Tests for product_key()."""

    @pytest.mark.parametrize('value, expected', [
        ('P1', 'P1'),
        (0, '0'),
        (42, '42'),
        (None, ''),
        ('', ''),
    ])
    def test_product_key(self, value, expected):
        """Only a missing id is empty; falsy ids like 0 are kept."""
        assert product_key(value) == expected
