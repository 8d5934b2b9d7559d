"""
Expense Store

Owns the list of expense records and the budget limit.

DESIGN DECISION: The store is plain in-memory state with a handful of
mutation methods. It knows nothing about persistence, logging or the UI;
the orchestrator wires those around it. Mutations are synchronous and
complete fully before the next one starts, so no locking is needed.
"""

import time
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional

from src.models.expense import (
    DEFAULT_CATEGORY,
    ExpenseRecord,
    ExpenseSnapshot,
)
from src.validation import ExpenseValidator


class MonotonicIdGenerator:
    """
    Time-derived record ids (epoch milliseconds).

    Two adds within the same millisecond would collide, so an id is
    always at least one greater than the previous one.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0

    def observe(self, existing_id: int) -> None:
        """Make sure future ids sort after an id restored from storage."""
        self._last = max(self._last, existing_id)

    def __call__(self) -> int:
        candidate = int(self._clock() * 1000)
        self._last = max(candidate, self._last + 1)
        return self._last


class ExpenseStore:
    """
    In-memory expense records plus the budget limit.

    Records are kept in insertion order. Every record is frozen, and
    snapshot() returns an immutable copy for the analytics layer.
    """

    def __init__(
        self,
        budget: Any = Decimal("30000"),
        records: Optional[Iterable[ExpenseRecord]] = None,
        id_generator: Optional[Callable[[], int]] = None,
        today: Callable[[], date] = date.today,
    ):
        self._validator = ExpenseValidator()
        self._id_generator = id_generator or MonotonicIdGenerator()
        self._today = today
        self._records: list[ExpenseRecord] = []
        self._budget = self._validator.parse_budget(budget)
        if records is not None:
            self.replace_all(records)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_expense(
        self,
        amount: Any,
        category: Optional[str] = DEFAULT_CATEGORY,
        note: Optional[str] = "",
        expense_date: Optional[date] = None,
    ) -> ExpenseRecord:
        """
        Validate and append a new expense.

        Raises:
            ValidationError: amount missing, non-numeric or not positive.
                The store is left untouched.
        """
        parsed = self._validator.parse_amount(amount)

        record = ExpenseRecord(
            id=self._id_generator(),
            amount=parsed,
            category=category or DEFAULT_CATEGORY,
            note=note or "",
            date=expense_date or self._today(),
        )
        self._records.append(record)
        return record

    def delete_expense(self, expense_id: int) -> bool:
        """
        Remove the record with this id.

        Idempotent: returns False (and changes nothing) when the id is absent.
        """
        for index, record in enumerate(self._records):
            if record.id == expense_id:
                del self._records[index]
                return True
        return False

    def set_budget(self, value: Any) -> None:
        """
        Replace the budget limit.

        Zero or negative values are accepted as-is; the analytics layer
        treats them as 0% spent.
        """
        self._budget = self._validator.parse_budget(value)

    def replace_all(
        self,
        records: Iterable[ExpenseRecord],
        budget: Optional[Any] = None,
    ) -> None:
        """Swap in a full set of records (used when restoring saved state)."""
        self._records = list(records)
        observe = getattr(self._id_generator, "observe", None)
        if observe is not None:
            for record in self._records:
                observe(record.id)
        if budget is not None:
            self.set_budget(budget)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def budget(self) -> Decimal:
        return self._budget

    @property
    def records(self) -> tuple[ExpenseRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def snapshot(self) -> ExpenseSnapshot:
        """Immutable view of the current records and budget."""
        return ExpenseSnapshot(records=tuple(self._records), budget=self._budget)
