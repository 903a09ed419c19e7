"""
Report Queries

DESIGN DECISION: Reports are DETERMINISTIC reads over repository
snapshots. Nothing here writes, and every function that depends on the
current time takes `now` so tests can pin it.

Period windows end "now" and reach back:
- week:  7 days
- month: to the same day of the previous month
- year:  to the same day of the previous year

The start day is included. There is no upper bound, so an expense dated
after `now` still counts toward the current period.

Expenses whose category no longer exists are grouped under "Unknown".
"""

import calendar
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from homeledger.models.auth import Session
from homeledger.models.ledger import Category, Expense, utc_now
from homeledger.models.reports import (
    UNKNOWN_CATEGORY_COLOR,
    UNKNOWN_CATEGORY_NAME,
    CategoryTotal,
    DashboardSummary,
    PeriodReport,
    ReportPeriod,
    TrendPoint,
)
from homeledger.services.storage import CategoryRepository, ExpenseRepository


TREND_BUCKETS = 6
SORT_FIELDS = ("date", "amount")


# =============================================================================
# Pure helpers
# =============================================================================

def _as_date(now: datetime | date) -> date:
    return now.date() if isinstance(now, datetime) else now


def _shift_months(day: date, months: int) -> date:
    """Move by whole months, clamping to the last day of the target month."""
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def period_start(period: ReportPeriod, now: datetime | date) -> date:
    today = _as_date(now)
    period = ReportPeriod(period)
    if period == ReportPeriod.WEEK:
        return today - timedelta(days=7)
    if period == ReportPeriod.MONTH:
        return _shift_months(today, -1)
    return _shift_months(today, -12)


def filter_by_period(
    expenses: Iterable[Expense],
    period: ReportPeriod,
    now: datetime | date,
) -> list[Expense]:
    """Expenses dated on or after the start of the period."""
    start = period_start(period, now)
    return [expense for expense in expenses if expense.date >= start]


def sort_expenses(
    expenses: Iterable[Expense],
    by: str = "date",
    descending: bool = True,
) -> list[Expense]:
    """
    Sort by expense date or amount.

    Ties on date fall back to created_at so newer entries stay on top.
    """
    if by not in SORT_FIELDS:
        raise ValueError(f"Cannot sort expenses by {by!r}; use one of {SORT_FIELDS}")
    if by == "amount":
        key = lambda expense: expense.amount
    else:
        key = lambda expense: (expense.date, expense.created_at)
    return sorted(expenses, key=key, reverse=descending)


def can_edit(expense: Expense, session: Optional[Session]) -> bool:
    """Admins can edit anything; users only their own expenses."""
    if session is None:
        return False
    return session.is_admin or expense.user_id == session.user_id


def category_breakdown(
    expenses: list[Expense],
    categories: Iterable[Category],
) -> list[CategoryTotal]:
    """Totals per category, largest first."""
    by_id = {category.id: category for category in categories}
    amounts: dict[str, Decimal] = defaultdict(Decimal)
    counts: dict[str, int] = defaultdict(int)

    for expense in expenses:
        amounts[expense.category_id] += expense.amount
        counts[expense.category_id] += 1

    grand_total = sum(amounts.values(), Decimal("0"))
    totals = []
    for category_id, amount in amounts.items():
        category = by_id.get(category_id)
        share = float(amount / grand_total * 100) if grand_total else 0.0
        totals.append(CategoryTotal(
            category_id=category_id,
            name=category.name if category else UNKNOWN_CATEGORY_NAME,
            color=category.color if category else UNKNOWN_CATEGORY_COLOR,
            amount=amount,
            count=counts[category_id],
            share=min(share, 100.0),
        ))

    totals.sort(key=lambda item: item.amount, reverse=True)
    return totals


def spending_trend(expenses: list[Expense], period: ReportPeriod) -> list[TrendPoint]:
    """
    Spending per day (week, month) or per month (year).

    Only buckets with spending appear; the last TREND_BUCKETS are kept.
    """
    monthly = ReportPeriod(period) == ReportPeriod.YEAR
    buckets: dict[date, Decimal] = defaultdict(Decimal)

    for expense in expenses:
        start = expense.date.replace(day=1) if monthly else expense.date
        buckets[start] += expense.amount

    label_format = "%b %Y" if monthly else "%d %b"
    return [
        TrendPoint(bucket_start=start, label=start.strftime(label_format), amount=buckets[start])
        for start in sorted(buckets)[-TREND_BUCKETS:]
    ]


# =============================================================================
# Report service
# =============================================================================

class ReportService:
    """
    Builds the dashboard and period reports from stored data.

    GUARANTEES:
    - Only reports what storage returns
    - Empty periods give zero totals and an empty breakdown, never an error
    """

    def __init__(
        self,
        expenses: ExpenseRepository,
        categories: CategoryRepository,
        recent_limit: int = 5,
    ):
        self._expenses = expenses
        self._categories = categories
        self._recent_limit = recent_limit

    async def period_report(
        self,
        period: ReportPeriod,
        now: Optional[datetime] = None,
    ) -> PeriodReport:
        now = now or utc_now()
        period = ReportPeriod(period)

        in_period = filter_by_period(await self._expenses.get_all(), period, now)
        categories = await self._categories.get_all()

        total = sum((expense.amount for expense in in_period), Decimal("0"))
        count = len(in_period)
        average = total / count if count else Decimal("0")

        return PeriodReport(
            period=period,
            start=period_start(period, now),
            end=_as_date(now),
            total=total,
            count=count,
            average=average,
            by_category=category_breakdown(in_period, categories),
            trend=spending_trend(in_period, period),
        )

    async def dashboard(self, now: Optional[datetime] = None) -> DashboardSummary:
        today = _as_date(now or utc_now())
        expenses = await self._expenses.get_all()
        todays = [expense for expense in expenses if expense.date == today]

        # Newest first; on equal timestamps the later-stored expense wins.
        recent = sorted(reversed(expenses), key=lambda expense: expense.created_at, reverse=True)

        return DashboardSummary(
            total=sum((expense.amount for expense in expenses), Decimal("0")),
            count=len(expenses),
            today_total=sum((expense.amount for expense in todays), Decimal("0")),
            today_count=len(todays),
            recent=recent[:self._recent_limit],
        )

    async def category_names(self) -> dict[str, str]:
        """Lookup used by the expense list; missing ids render as Unknown."""
        return defaultdict(
            lambda: UNKNOWN_CATEGORY_NAME,
            {category.id: category.name for category in await self._categories.get_all()},
        )
