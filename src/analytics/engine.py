"""
Analytics Engine

DESIGN DECISION: Every analytic is a PURE function of an ExpenseSnapshot
(plus "today" for the date-relative ones). There is no cache and no
internal state, so the dashboard simply recomputes after each mutation
and these are safe to call from anywhere, any number of times.

Money stays in Decimal throughout. Percentages are Decimals in 0-100.
"""

from collections import OrderedDict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from src.models.analytics import (
    AnalyticsSnapshot,
    CategoryTotal,
    MonthlyTotal,
    SpendSignals,
)
from src.models.expense import (
    CATEGORIES,
    ExpenseRecord,
    ExpenseSnapshot,
    category_definition,
)


MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

DEFAULT_RECENT_LIMIT = 10
DEFAULT_TREND_MONTHS = 6
DANGER_THRESHOLD_PERCENT = Decimal("90")

_ZERO = Decimal("0")
_ONE = Decimal("1")
_HUNDRED = Decimal("100")


# =============================================================================
# Totals and signals
# =============================================================================

def total_spent(snapshot: ExpenseSnapshot) -> Decimal:
    return sum((record.amount for record in snapshot.records), _ZERO)


def spend_ratio(snapshot: ExpenseSnapshot) -> Decimal:
    """Spent / budget clamped to [0, 1]; 0 when the budget is zero or negative."""
    if snapshot.budget <= 0:
        return _ZERO
    return max(_ZERO, min(total_spent(snapshot) / snapshot.budget, _ONE))


def spend_signals(
    snapshot: ExpenseSnapshot,
    danger_threshold_percent: Decimal = DANGER_THRESHOLD_PERCENT,
) -> SpendSignals:
    spent = total_spent(snapshot)
    percent = spend_ratio(snapshot) * _HUNDRED
    return SpendSignals(
        total_spent=spent,
        remaining=snapshot.budget - spent,
        spend_ratio_percent=percent,
        danger_zone=percent >= danger_threshold_percent,
    )


def average_per_active_day(snapshot: ExpenseSnapshot) -> Decimal:
    """
    Total spent divided by the number of distinct dates that have expenses.

    With no expenses the divisor is clamped to 1, which yields the total
    unchanged (i.e. 0).
    """
    active_days = len({record.date for record in snapshot.records})
    return total_spent(snapshot) / max(1, active_days)


# =============================================================================
# Breakdown and history
# =============================================================================

def category_breakdown(snapshot: ExpenseSnapshot) -> list[CategoryTotal]:
    """
    Per-category totals, largest first.

    Records are grouped by their DISPLAY category, so an unrecognised
    stored name counts towards "Other". Zero totals are dropped. Ties
    keep the order of the fixed category table (sorted() is stable).
    """
    totals: "OrderedDict[str, Decimal]" = OrderedDict(
        (cat.name, _ZERO) for cat in CATEGORIES
    )
    for record in snapshot.records:
        totals[record.display_category.name] += record.amount

    spent = sum(totals.values(), _ZERO)
    breakdown = []
    for cat in CATEGORIES:
        total = totals[cat.name]
        if total <= 0:
            continue
        breakdown.append(CategoryTotal(
            category=cat.name,
            total=total,
            icon=cat.icon,
            color=cat.color,
            share_percent=total / spent * _HUNDRED,
        ))

    return sorted(breakdown, key=lambda item: item.total, reverse=True)


def top_category(snapshot: ExpenseSnapshot) -> Optional[CategoryTotal]:
    breakdown = category_breakdown(snapshot)
    return breakdown[0] if breakdown else None


def recent_transactions(
    snapshot: ExpenseSnapshot,
    limit: int = DEFAULT_RECENT_LIMIT,
) -> list[ExpenseRecord]:
    """Newest first by date; records sharing a date keep insertion order."""
    ordered = sorted(snapshot.records, key=lambda record: record.date, reverse=True)
    return ordered[:max(0, limit)]


# =============================================================================
# Monthly trend
# =============================================================================

def _shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move (year, month) by offset months; month is 1-based."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def monthly_trend(
    snapshot: ExpenseSnapshot,
    months: int = DEFAULT_TREND_MONTHS,
    today: Optional[date] = None,
) -> list[MonthlyTotal]:
    """
    Totals for the `months` calendar months ending with the current one.

    Always returns exactly `months` buckets, oldest first, zero-filled.
    """
    today = today or date.today()
    keys = [
        _shift_month(today.year, today.month, offset)
        for offset in range(-(months - 1), 1)
    ]

    totals = {key: _ZERO for key in keys}
    for record in snapshot.records:
        key = (record.date.year, record.date.month)
        if key in totals:
            totals[key] += record.amount

    largest = max(max(totals.values(), default=_ZERO), _ONE)
    current = keys[-1] if keys else None

    return [
        MonthlyTotal(
            year=year,
            month=month,
            label=MONTH_ABBREVIATIONS[month - 1],
            total=totals[(year, month)],
            bar_ratio=totals[(year, month)] / largest,
            is_current=(year, month) == current,
        )
        for year, month in keys
    ]


def trend_chart_rows(trend: Iterable[MonthlyTotal]) -> list[dict]:
    """
    Rows for the trend bar chart, oldest first.

    Months are keyed "2024-03" rather than by abbreviation, so a trend
    longer than a year never merges two months and an alphabetical axis
    is still chronological.
    """
    return [
        {"month": f"{item.year:04d}-{item.month:02d}", "total": float(item.total)}
        for item in trend
    ]


# =============================================================================
# Full view-model
# =============================================================================

def build_analytics(
    snapshot: ExpenseSnapshot,
    today: Optional[date] = None,
    recent_limit: int = DEFAULT_RECENT_LIMIT,
    trend_months: int = DEFAULT_TREND_MONTHS,
    danger_threshold_percent: Decimal = DANGER_THRESHOLD_PERCENT,
) -> AnalyticsSnapshot:
    """Derive everything the dashboard shows from one snapshot."""
    signals = spend_signals(snapshot, danger_threshold_percent)
    breakdown = category_breakdown(snapshot)

    return AnalyticsSnapshot(
        budget=snapshot.budget,
        total_spent=signals.total_spent,
        remaining=signals.remaining,
        spend_ratio=spend_ratio(snapshot),
        spend_ratio_percent=signals.spend_ratio_percent,
        danger_zone=signals.danger_zone,
        category_breakdown=tuple(breakdown),
        recent_transactions=tuple(recent_transactions(snapshot, recent_limit)),
        monthly_trend=tuple(monthly_trend(snapshot, trend_months, today)),
        transaction_count=snapshot.transaction_count,
        average_per_active_day=average_per_active_day(snapshot),
        top_category=breakdown[0] if breakdown else None,
    )


# =============================================================================
# Display formatting
# =============================================================================

def _group_indian(digits: str) -> str:
    """1234567 -> 12,34,567 (last three digits, then pairs)."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs) + "," + tail


def format_currency(amount: Decimal) -> str:
    """Rupees with Indian digit grouping and no paise: ₹1,23,457."""
    rounded = Decimal(amount).to_integral_value(rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}₹{_group_indian(str(abs(int(rounded))))}"


def format_short_date(value: date) -> str:
    """5 Mar"""
    return f"{value.day} {MONTH_ABBREVIATIONS[value.month - 1]}"
