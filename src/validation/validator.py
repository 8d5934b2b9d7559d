"""
Input Validation

DESIGN DECISION: User input is validated BEFORE any mutation.
A rejected amount leaves the store exactly as it was.

Validation NEVER silently fixes issues. A bad amount is reported back
to the user as a notice; it is not rounded, clamped or defaulted.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from src.models.expense import MAX_BUDGET, MAX_EXPENSE_AMOUNT


class ValidationError(Exception):
    """Malformed user input. Always recovered locally by the controller."""

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(message)


INVALID_AMOUNT_MESSAGE = "Please enter a valid amount"


class ExpenseValidator:
    """
    Validates raw form values for the expense and advisory inputs.

    Accepts what a form hands over: strings, ints, floats or Decimals.
    """

    def parse_amount(self, raw: Any) -> Decimal:
        """
        Convert a raw amount into a positive Decimal.

        Raises:
            ValidationError: missing, non-numeric, NaN/infinite, <= 0 or
                above MAX_EXPENSE_AMOUNT
        """
        if raw is None or isinstance(raw, bool):
            raise ValidationError("amount", INVALID_AMOUNT_MESSAGE, raw)

        if isinstance(raw, str):
            raw = raw.strip()
            if not raw:
                raise ValidationError("amount", INVALID_AMOUNT_MESSAGE, raw)

        try:
            # str() first so floats convert by their shortest repr (0.1 -> "0.1")
            amount = Decimal(str(raw))
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError("amount", INVALID_AMOUNT_MESSAGE, raw)

        if not amount.is_finite() or amount <= 0 or amount > MAX_EXPENSE_AMOUNT:
            raise ValidationError("amount", INVALID_AMOUNT_MESSAGE, raw)

        return amount

    def parse_budget(self, raw: Any) -> Decimal:
        """
        Convert a raw budget into a Decimal.

        Zero and negative budgets are accepted on purpose; analytics treat
        them as "no budget" (0% spent). Non-numeric input and anything beyond
        MAX_BUDGET either way is rejected.
        """
        if raw is None or isinstance(raw, bool):
            raise ValidationError("budget", "Please enter a valid budget", raw)
        try:
            value = Decimal(str(raw).strip())
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError("budget", "Please enter a valid budget", raw)
        if not value.is_finite() or abs(value) > MAX_BUDGET:
            raise ValidationError("budget", "Please enter a valid budget", raw)
        return value

    def clean_question(self, question: Optional[str]) -> Optional[str]:
        """Return the stripped question, or None when it is blank."""
        if question is None:
            return None
        cleaned = question.strip()
        return cleaned or None
