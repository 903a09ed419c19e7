"""Report query package."""

from homeledger.queries.reports import (
    ReportService,
    can_edit,
    category_breakdown,
    filter_by_period,
    period_start,
    sort_expenses,
    spending_trend,
)

__all__ = [
    "ReportService",
    "can_edit",
    "category_breakdown",
    "filter_by_period",
    "period_start",
    "sort_expenses",
    "spending_trend",
]
