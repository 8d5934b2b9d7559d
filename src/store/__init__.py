"""In-memory expense state."""

from src.store.expense_store import ExpenseStore, MonotonicIdGenerator

__all__ = ["ExpenseStore", "MonotonicIdGenerator"]
