"""
Derived Analytics Models

Everything here is computed from an ExpenseSnapshot and is NEVER persisted.
The dashboard re-derives these after every mutation.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.models.expense import ExpenseRecord


class CategoryTotal(BaseModel):
    """Spending total for one display category (always > 0)."""
    model_config = ConfigDict(frozen=True)

    category: str
    total: Decimal = Field(..., gt=0)
    icon: str = ""
    color: str = ""
    share_percent: Decimal = Field(
        default=Decimal("0"),
        description="Share of total spent, 0-100 (drives the per-category bar)"
    )


class MonthlyTotal(BaseModel):
    """One bucket of the monthly trend."""
    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(..., ge=1, le=12)
    label: str
    total: Decimal = Decimal("0")
    bar_ratio: Decimal = Field(
        default=Decimal("0"),
        description="total / max(largest month, 1), for bar heights"
    )
    is_current: bool = False


class SpendSignals(BaseModel):
    """Budget usage signals."""
    model_config = ConfigDict(frozen=True)

    total_spent: Decimal
    remaining: Decimal
    spend_ratio_percent: Decimal
    danger_zone: bool

    @property
    def over_budget(self) -> bool:
        return self.remaining < 0


class AnalyticsSnapshot(BaseModel):
    """
    The full dashboard view-model.

    Built in one pass by analytics.engine.build_analytics().
    """
    model_config = ConfigDict(frozen=True)

    budget: Decimal
    total_spent: Decimal
    remaining: Decimal
    spend_ratio: Decimal = Field(..., ge=0, le=1)
    spend_ratio_percent: Decimal
    danger_zone: bool
    category_breakdown: tuple[CategoryTotal, ...] = ()
    recent_transactions: tuple[ExpenseRecord, ...] = ()
    monthly_trend: tuple[MonthlyTotal, ...] = ()
    transaction_count: int = 0
    average_per_active_day: Decimal = Decimal("0")
    top_category: Optional[CategoryTotal] = None
