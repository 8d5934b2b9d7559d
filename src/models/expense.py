"""
Core Data Models for Budget Tracker

These models define the schemas for all expense data flowing through the system.
They are designed to:
1. Enforce the positive-amount invariant at runtime
2. Be immutable once created (records are replaced, never edited)
3. Be serializable for persistence and logging

DESIGN DECISION: Categories are a fixed lookup table used for DISPLAY only.
A record keeps whatever category string it was created with. An unknown
name is shown with the "Other" styling but is never silently rewritten.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# CATEGORIES - Static display table
# =============================================================================

class CategoryDefinition(BaseModel):
    """One entry of the fixed category table."""
    model_config = ConfigDict(frozen=True)

    name: str
    icon: str
    color: str


CATEGORIES: tuple[CategoryDefinition, ...] = (
    CategoryDefinition(name="Food & Dining", icon="🍽️", color="#E8A87C"),
    CategoryDefinition(name="Transport", icon="🚗", color="#85C1E9"),
    CategoryDefinition(name="Shopping", icon="🛍️", color="#C39BD3"),
    CategoryDefinition(name="Entertainment", icon="🎬", color="#82E0AA"),
    CategoryDefinition(name="Health", icon="💊", color="#F1948A"),
    CategoryDefinition(name="Housing", icon="🏠", color="#F7DC6F"),
    CategoryDefinition(name="Education", icon="📚", color="#A9CCE3"),
    CategoryDefinition(name="Other", icon="📦", color="#BFC9CA"),
)

DEFAULT_CATEGORY = "Food & Dining"
FALLBACK_CATEGORY = "Other"

_CATEGORIES_BY_NAME = {cat.name: cat for cat in CATEGORIES}


def category_definition(name: Optional[str]) -> CategoryDefinition:
    """Look up display data for a category, falling back to "Other"."""
    return _CATEGORIES_BY_NAME.get(name or "", _CATEGORIES_BY_NAME[FALLBACK_CATEGORY])


def is_known_category(name: Optional[str]) -> bool:
    return (name or "") in _CATEGORIES_BY_NAME


# Upper bounds keep every total well inside Decimal's default 28-digit precision.
MAX_EXPENSE_AMOUNT = Decimal("1000000000")
MAX_BUDGET = Decimal("1000000000000")


# =============================================================================
# EXPENSE RECORD
# =============================================================================

class ExpenseRecord(BaseModel):
    """
    One logged spending transaction.

    Frozen: a record is created once and then only ever deleted or
    replaced wholesale (e.g. when persisted state is restored).
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(
        ...,
        description="Time-derived unique identifier (milliseconds, monotonic)"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        le=MAX_EXPENSE_AMOUNT,
        description="Amount in INR"
    )
    category: str = Field(
        default=DEFAULT_CATEGORY,
        description="Category name as entered by the user"
    )
    note: str = Field(
        default="",
        description="Optional free text"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the expense"
    )

    @property
    def display_category(self) -> CategoryDefinition:
        return category_definition(self.category)

    @property
    def title(self) -> str:
        """Text shown in the history list: the note, or the category when blank."""
        return self.note or self.category

    def to_storage_dict(self) -> dict:
        """
        Convert to a JSON-safe dictionary for the key-value store.

        Amounts are written as strings so that Decimal precision survives.
        """
        return {
            "id": self.id,
            "amount": str(self.amount),
            "category": self.category,
            "note": self.note,
            "date": self.date.isoformat(),
        }


class ExpenseSnapshot(BaseModel):
    """
    Immutable view of the store: the records in insertion order plus the budget.

    Records are frozen and held in a tuple, so nothing handed out here
    can be used to mutate the store.
    """
    model_config = ConfigDict(frozen=True)

    records: tuple[ExpenseRecord, ...] = ()
    budget: Decimal = Decimal("0")

    @property
    def transaction_count(self) -> int:
        return len(self.records)
