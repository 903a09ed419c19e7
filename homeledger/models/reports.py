"""
Report Models

Read-only views computed from the expense collection. Charts and
dashboard cards render these directly.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from homeledger.models.ledger import Expense


UNKNOWN_CATEGORY_NAME = "Unknown"
UNKNOWN_CATEGORY_COLOR = "#9E9E9E"


class ReportPeriod(str, Enum):
    """Time window for reports, always ending now."""
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class CategoryTotal(BaseModel):
    """One slice of the category breakdown."""

    category_id: str
    name: str
    color: str
    amount: Decimal
    count: int = Field(ge=0)
    share: float = Field(
        ge=0.0,
        le=100.0,
        description="Percentage of the period total"
    )


class TrendPoint(BaseModel):
    """One bucket of the spending trend (a day or a month)."""

    bucket_start: date
    label: str
    amount: Decimal


class PeriodReport(BaseModel):
    period: ReportPeriod
    start: date
    end: date
    total: Decimal
    count: int
    average: Decimal
    by_category: list[CategoryTotal] = Field(default_factory=list)
    trend: list[TrendPoint] = Field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return self.count > 0


class DashboardSummary(BaseModel):
    total: Decimal
    count: int
    today_total: Decimal
    today_count: int
    recent: list[Expense] = Field(default_factory=list)
