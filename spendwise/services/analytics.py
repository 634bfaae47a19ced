from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from spendwise.db.expenses import ExpenseStore
from spendwise.models.analytics import (
    CategoryMonthTrend,
    CategoryTotal,
    MonthlyTrendPoint,
    TopCategory,
)
from spendwise.services.budgets import BudgetService
from spendwise.utils.analyzer import SpendingAnalyzer
from spendwise.utils.reconciliation import percentage
from spendwise.utils.timeutils import month_bounds, month_key, utcnow, year_bounds


class AnalyticsService:
    """Reads a user's expenses from the store and runs them through the analyzer."""

    def __init__(
        self,
        expenses: ExpenseStore,
        budgets: BudgetService,
        analyzer: SpendingAnalyzer,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.expenses = expenses
        self.budgets = budgets
        self.analyzer = analyzer
        self.clock = clock

    def category_totals(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        # Without an explicit range the current month is reported.
        if start is None and end is None:
            start, end = month_bounds(month_key(self.clock()))
        totals = self.analyzer.category_totals(self.expenses.list(user_id, start, end), start, end)
        return {"totals": totals, "start": start, "end": end}

    def monthly_trend(self, user_id: str, months: int = 6) -> List[MonthlyTrendPoint]:
        return self.analyzer.monthly_trend(self.expenses.list(user_id), months)

    def category_trend(self, user_id: str, months: int = 6) -> List[CategoryMonthTrend]:
        return self.analyzer.category_monthly_trend(self.expenses.list(user_id), months)

    def yearly_summary(self, user_id: str, year: Optional[int] = None) -> Dict[str, Any]:
        year = year or self.clock().year
        start, end = year_bounds(year)
        return {"year": year, "summary": self.analyzer.yearly_summary(self.expenses.list(user_id, start, end), year)}

    def top_categories(
        self,
        user_id: str,
        limit: int = 5,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[TopCategory]:
        return self.analyzer.top_categories(self.expenses.list(user_id, start, end), limit, start, end)

    def dashboard(self, user_id: str) -> Dict[str, Any]:
        month = month_key(self.clock())
        start, end = month_bounds(month)
        month_expenses = self.expenses.list(user_id, start, end)

        category_totals: List[CategoryTotal] = self.analyzer.category_totals(month_expenses)
        summary = self.analyzer.summary(month_expenses)
        rollup = self.budgets.month_status(user_id, month)

        return {
            "currentMonth": {
                "month": month,
                "total": summary.total_expenses,
                "expenseCount": summary.expense_count,
                "totalBudget": rollup.total_monthly_budget,
                "budgetUsed": rollup.total_spent,
                "budgetRemaining": round(rollup.total_monthly_budget - rollup.total_spent, 2),
                "budgetPercentageUsed": percentage(rollup.total_spent, rollup.total_monthly_budget),
            },
            "categoryTotals": [row.to_dict() for row in category_totals],
            "monthlyTrend": [point.to_dict() for point in self.monthly_trend(user_id, 6)],
            "topCategories": [row.to_dict() for row in self.analyzer.top_categories(month_expenses, 5)],
        }

