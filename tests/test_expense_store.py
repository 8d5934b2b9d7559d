"""Tests for the ExpenseStore and its id generator."""

import pytest
from datetime import date
from decimal import Decimal

from src.models.expense import ExpenseRecord
from src.store import ExpenseStore, MonotonicIdGenerator
from src.validation import ValidationError


TODAY = date(2024, 3, 15)


@pytest.fixture
def store():
    return ExpenseStore(budget=Decimal("30000"), today=lambda: TODAY)


class TestMonotonicIdGenerator:
    """Tests for time-derived ids."""

    def test_ids_come_from_the_clock(self):
        """Test that ids are epoch milliseconds."""
        generator = MonotonicIdGenerator(clock=lambda: 1710000000.123)
        assert generator() == 1710000000123

    def test_same_millisecond_still_unique(self):
        """Test that a frozen clock still yields increasing ids."""
        generator = MonotonicIdGenerator(clock=lambda: 1.0)
        ids = [generator() for _ in range(5)]
        assert ids == [1000, 1001, 1002, 1003, 1004]

    def test_observe_keeps_ids_ahead_of_restored_ones(self):
        """Test that restored ids are never reused."""
        generator = MonotonicIdGenerator(clock=lambda: 1.0)
        generator.observe(5000)
        assert generator() == 5001


class TestExpenseStore:
    """Tests for store mutations."""

    def test_defaults(self):
        """Test the default budget and empty record list."""
        store = ExpenseStore()
        assert store.budget == Decimal("30000")
        assert len(store) == 0

    def test_add_expense(self, store):
        """Test that a valid add appends a record with today's date."""
        record = store.add_expense("500", "Transport", "Metro card")
        assert record.amount == Decimal("500")
        assert record.category == "Transport"
        assert record.date == TODAY
        assert store.records == (record,)

    def test_add_expense_defaults(self, store):
        """Test default category and note."""
        record = store.add_expense(120)
        assert record.category == "Food & Dining"
        assert record.note == ""

    def test_add_expense_explicit_date(self, store):
        """Test that an explicit date is kept."""
        record = store.add_expense(10, expense_date=date(2023, 12, 31))
        assert record.date == date(2023, 12, 31)

    @pytest.mark.parametrize("amount", ["", "abc", "0", -5, None])
    def test_invalid_amount_leaves_store_untouched(self, store, amount):
        """Test that a rejected add changes nothing."""
        store.add_expense(100)
        before = store.snapshot()
        with pytest.raises(ValidationError):
            store.add_expense(amount)
        assert store.snapshot() == before

    def test_ids_are_unique_across_adds(self, store):
        """Test that rapid adds get distinct ids."""
        ids = [store.add_expense(1).id for _ in range(20)]
        assert len(set(ids)) == 20

    def test_delete_expense(self, store):
        """Test that delete removes exactly the matching record."""
        first = store.add_expense(100)
        second = store.add_expense(200)
        assert store.delete_expense(first.id) is True
        assert store.records == (second,)

    def test_delete_unknown_id_is_noop(self, store):
        """Test that deleting a missing id is idempotent."""
        store.add_expense(100)
        before = store.snapshot()
        assert store.delete_expense(123) is False
        assert store.delete_expense(123) is False
        assert store.snapshot() == before

    def test_set_budget_accepts_any_number(self, store):
        """Test that budgets may be zero or negative."""
        store.set_budget("0")
        assert store.budget == Decimal("0")
        store.set_budget(-50)
        assert store.budget == Decimal("-50")

    def test_replace_all(self, store):
        """Test restoring a full set of records and a budget."""
        restored = [
            ExpenseRecord(id=9_000_000_000_000, amount=Decimal("10"), date=TODAY),
        ]
        store.replace_all(restored, budget="1500")
        assert store.budget == Decimal("1500")
        assert store.records == tuple(restored)
        assert store.add_expense(5).id > 9_000_000_000_000

    def test_snapshot_is_immutable_copy(self, store):
        """Test that later mutations do not change an earlier snapshot."""
        store.add_expense(100)
        snapshot = store.snapshot()
        store.add_expense(200)
        assert snapshot.transaction_count == 1
        assert len(store) == 2
