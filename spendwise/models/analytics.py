from typing import List

from spendwise.models.common import CamelModel


class CategoryTotal(CamelModel):
    category: str
    total: float
    count: int


class MonthlyTrendPoint(CamelModel):
    year: int
    month: int
    month_name: str
    total: float
    count: int


class CategoryAmount(CamelModel):
    category: str
    total: float


class CategoryMonthTrend(CamelModel):
    year: int
    month: int
    month_name: str
    categories: List[CategoryAmount]
    month_total: float


class MonthSummary(CamelModel):
    month: int
    month_name: str
    total: float
    count: int


class TopCategory(CamelModel):
    category: str
    total: float
    count: int
    avg_expense: float


class ExpenseSummary(CamelModel):
    total_expenses: float = 0.0
    expense_count: int = 0
    avg_expense: float = 0.0
    max_expense: float = 0.0
    min_expense: float = 0.0
