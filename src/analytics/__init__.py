"""Pure analytics over expense snapshots."""

from src.analytics.engine import (
    MONTH_ABBREVIATIONS,
    average_per_active_day,
    build_analytics,
    category_breakdown,
    format_currency,
    format_short_date,
    monthly_trend,
    recent_transactions,
    spend_ratio,
    spend_signals,
    top_category,
    total_spent,
    trend_chart_rows,
)

__all__ = [
    "MONTH_ABBREVIATIONS",
    "average_per_active_day",
    "build_analytics",
    "category_breakdown",
    "format_currency",
    "format_short_date",
    "monthly_trend",
    "recent_transactions",
    "spend_ratio",
    "spend_signals",
    "top_category",
    "total_spent",
    "trend_chart_rows",
]
