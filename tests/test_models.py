"""
Tests for Budget Tracker

Test strategy:
1. Unit tests for individual components (models, validators, analytics)
2. Integration tests for flows (with fake completion clients and in-memory storage)
3. No real API calls in tests
"""

import pytest
from datetime import date
from decimal import Decimal

from src.models.expense import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    FALLBACK_CATEGORY,
    MAX_BUDGET,
    MAX_EXPENSE_AMOUNT,
    ExpenseRecord,
    ExpenseSnapshot,
    category_definition,
    is_known_category,
)
from src.models.advisory import AdvisoryOutcome, Answer
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from src.validation import INVALID_AMOUNT_MESSAGE, ExpenseValidator, ValidationError


class TestCategoryTable:
    """Tests for the fixed category display table."""

    def test_table_has_eight_categories_ending_with_other(self):
        """Test the table order and the fallback entry."""
        names = [cat.name for cat in CATEGORIES]
        assert len(names) == 8
        assert names[0] == DEFAULT_CATEGORY == "Food & Dining"
        assert names[-1] == FALLBACK_CATEGORY == "Other"

    def test_known_category_lookup(self):
        """Test that a known name returns its own icon and color."""
        cat = category_definition("Transport")
        assert cat.icon == "🚗"
        assert cat.color == "#85C1E9"

    def test_unknown_category_falls_back_to_other(self):
        """Test that unknown or missing names display as Other."""
        assert category_definition("Gadgets").name == "Other"
        assert category_definition(None).name == "Other"
        assert not is_known_category("Gadgets")
        assert is_known_category("Health")


class TestExpenseRecord:
    """Tests for the ExpenseRecord model."""

    def test_expense_record_creation(self):
        """Test ExpenseRecord model creation."""
        record = ExpenseRecord(
            id=1,
            amount=Decimal("250.50"),
            category="Transport",
            note="Cab",
            date=date(2024, 3, 5),
        )
        assert record.amount == Decimal("250.50")
        assert record.title == "Cab"

    def test_expense_record_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        with pytest.raises(ValueError):
            ExpenseRecord(id=1, amount=Decimal("0"), date=date(2024, 3, 5))
        with pytest.raises(ValueError):
            ExpenseRecord(id=1, amount=Decimal("-10"), date=date(2024, 3, 5))

    def test_expense_record_rejects_oversized_amount(self):
        """Test the upper bound that keeps totals inside Decimal precision."""
        ExpenseRecord(id=1, amount=MAX_EXPENSE_AMOUNT, date=date(2024, 3, 5))
        with pytest.raises(ValueError):
            ExpenseRecord(id=1, amount=Decimal("1e28"), date=date(2024, 3, 5))

    def test_expense_record_is_frozen(self):
        """Test that records cannot be edited in place."""
        record = ExpenseRecord(id=1, amount=Decimal("10"), date=date(2024, 3, 5))
        with pytest.raises(ValueError):
            record.amount = Decimal("20")

    def test_unknown_category_is_kept_verbatim(self):
        """Test that an unknown category is stored as-is but displayed as Other."""
        record = ExpenseRecord(id=1, amount=Decimal("10"), category="Gadgets", date=date(2024, 3, 5))
        assert record.category == "Gadgets"
        assert record.display_category.name == "Other"

    def test_title_falls_back_to_category(self):
        """Test that a blank note shows the category name."""
        record = ExpenseRecord(id=1, amount=Decimal("10"), category="Health", date=date(2024, 3, 5))
        assert record.title == "Health"

    def test_storage_dict_round_trip(self):
        """Test that a stored dict validates back into an equal record."""
        record = ExpenseRecord(
            id=1710000000000,
            amount=Decimal("99.99"),
            category="Shopping",
            note="Shoes",
            date=date(2024, 3, 9),
        )
        data = record.to_storage_dict()
        assert data["amount"] == "99.99"
        assert data["date"] == "2024-03-09"
        assert ExpenseRecord.model_validate(data) == record

    def test_snapshot_transaction_count(self):
        """Test ExpenseSnapshot counts its records."""
        records = tuple(
            ExpenseRecord(id=i, amount=Decimal("1"), date=date(2024, 3, 5))
            for i in range(3)
        )
        snapshot = ExpenseSnapshot(records=records, budget=Decimal("100"))
        assert snapshot.transaction_count == 3


class TestExpenseValidator:
    """Tests for form input validation."""

    @pytest.fixture
    def validator(self):
        return ExpenseValidator()

    @pytest.mark.parametrize("raw", ["500", 500, 500.0, Decimal("500"), "  500 "])
    def test_parse_amount_accepts_numbers(self, validator, raw):
        """Test that common numeric inputs parse to Decimal 500."""
        assert validator.parse_amount(raw) == Decimal("500")

    def test_parse_amount_keeps_float_precision(self, validator):
        """Test that floats convert by their short repr."""
        assert validator.parse_amount(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "0", 0, "-5", "NaN", "inf", True])
    def test_parse_amount_rejects_invalid(self, validator, raw):
        """Test that bad amounts raise with the user-facing message."""
        with pytest.raises(ValidationError) as exc_info:
            validator.parse_amount(raw)
        assert exc_info.value.field == "amount"
        assert exc_info.value.message == INVALID_AMOUNT_MESSAGE

    @pytest.mark.parametrize("raw", ["1e28", "9e999999", MAX_EXPENSE_AMOUNT + 1])
    def test_parse_amount_rejects_oversized(self, validator, raw):
        """Test that amounts above the cap are rejected like any bad input."""
        with pytest.raises(ValidationError) as exc_info:
            validator.parse_amount(raw)
        assert exc_info.value.message == INVALID_AMOUNT_MESSAGE

    def test_parse_amount_accepts_the_cap(self, validator):
        """Test the boundary value itself."""
        assert validator.parse_amount(str(MAX_EXPENSE_AMOUNT)) == MAX_EXPENSE_AMOUNT

    @pytest.mark.parametrize("raw", ["1e28", "-1e28", MAX_BUDGET + 1])
    def test_parse_budget_rejects_oversized(self, validator, raw):
        """Test that budgets beyond the cap in either direction are rejected."""
        with pytest.raises(ValidationError):
            validator.parse_budget(raw)

    def test_parse_budget_accepts_zero_and_negative(self, validator):
        """Test that zero and negative budgets are allowed."""
        assert validator.parse_budget("0") == Decimal("0")
        assert validator.parse_budget(-100) == Decimal("-100")

    def test_parse_budget_rejects_text(self, validator):
        """Test that a non-numeric budget is rejected."""
        with pytest.raises(ValidationError):
            validator.parse_budget("lots")

    def test_clean_question(self, validator):
        """Test that blank questions become None."""
        assert validator.clean_question("  Am I overspending?  ") == "Am I overspending?"
        assert validator.clean_question("   ") is None
        assert validator.clean_question(None) is None


class TestAdvisoryModels:
    """Tests for advisory result models."""

    def test_answer_must_not_be_empty(self):
        """Test that an empty answer is rejected."""
        with pytest.raises(ValueError):
            Answer(text="")

    def test_outcome_ok(self):
        """Test the ok flag for answered and failed outcomes."""
        answered = AdvisoryOutcome(sequence=1, question="q", answer="a", message="a")
        failed = AdvisoryOutcome(sequence=2, question="q", error_kind="network", message="x")
        assert answered.ok
        assert not failed.ok
        assert not answered.stale


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Test event",
        )
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test AuditEvent serialization for logging."""
        event = AuditEvent(
            event_type=AuditEventType.ADVICE_FAILED,
            severity=AuditSeverity.WARNING,
            description="Test",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "advice_failed"
        assert log_dict["severity"] == "warning"

    def test_audit_builder_expense_added(self):
        """Test AuditEventBuilder for expense additions."""
        event = AuditEventBuilder.expense_added(42, "500", "Transport")
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.entity_id == "42"
        assert event.details["category"] == "Transport"
        assert event.is_user_action

    def test_audit_builder_advice_discarded(self):
        """Test AuditEventBuilder for superseded advice."""
        event = AuditEventBuilder.advice_discarded(1, 2)
        assert event.event_type == AuditEventType.ADVICE_DISCARDED
