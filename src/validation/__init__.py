"""Input validation package."""

from src.validation.validator import (
    INVALID_AMOUNT_MESSAGE,
    ExpenseValidator,
    ValidationError,
)

__all__ = ["INVALID_AMOUNT_MESSAGE", "ExpenseValidator", "ValidationError"]
