import logging
from datetime import datetime
from typing import Any, Callable, Dict

from spendwise.ai.generator import InsightGenerator, build_spending_snapshot
from spendwise.db.expenses import ExpenseStore
from spendwise.models.insight import InsightType
from spendwise.services.budgets import BudgetService
from spendwise.services.insight_cache import InsightCache
from spendwise.utils.analyzer import SpendingAnalyzer
from spendwise.utils.timeutils import month_bounds, month_key, utcnow

logger = logging.getLogger(__name__)


class InsightService:
    """
    Builds snapshots for the current month, asks the generator for text and
    keeps spending analyses and saving tips in the insight cache.
    """

    def __init__(
        self,
        expenses: ExpenseStore,
        budgets: BudgetService,
        analyzer: SpendingAnalyzer,
        cache: InsightCache,
        generator: InsightGenerator,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.expenses = expenses
        self.budgets = budgets
        self.analyzer = analyzer
        self.cache = cache
        self.generator = generator
        self.clock = clock

    def generate_insights(self, user_id: str, force_refresh: bool = False) -> Dict[str, Any]:
        if not force_refresh:
            cached = self.cache.find_recent(user_id, InsightType.SPENDING_ANALYSIS)
            if cached:
                logger.info(f"Serving cached spending analysis {cached.id} for user {user_id}")
                return {"insights": cached.response, "cached": True, "generatedAt": cached.created_at}

        month = month_key(self.clock())
        start, end = month_bounds(month)
        month_expenses = self.expenses.list(user_id, start, end)

        category_totals = self.analyzer.category_totals(month_expenses)
        monthly_trend = self.analyzer.monthly_trend(self.expenses.list(user_id), 6)
        top_categories = self.analyzer.top_categories(month_expenses, 5)
        rollup = self.budgets.month_status(user_id, month)

        snapshot = build_spending_snapshot(month, category_totals, monthly_trend, top_categories, rollup)
        text = self.generator.spending_insights(snapshot)
        insight = self.cache.store_insight(user_id, InsightType.SPENDING_ANALYSIS, snapshot, text)

        return {
            "insights": insight.response,
            "cached": False,
            "generatedAt": insight.created_at,
            "dataUsed": {
                "categoriesAnalyzed": len(category_totals),
                "monthsAnalyzed": len(monthly_trend),
                "budgetsTracked": len(rollup.budgets),
            },
        }

    def saving_tips(self, user_id: str) -> Dict[str, Any]:
        cached = self.cache.find_recent(user_id, InsightType.BUDGET_OPTIMIZATION)
        if cached:
            return {"tips": cached.response, "cached": True}

        rollup = self.budgets.current_month_status(user_id)
        start, end = month_bounds(rollup.month)
        category_totals = self.analyzer.category_totals(self.expenses.list(user_id, start, end))

        snapshot = {
            "categoryTotals": [row.to_dict() for row in category_totals],
            "budgetStatus": [
                {"category": s.category, "monthlyLimit": s.monthly_limit, "actual": s.actual}
                for s in rollup.budgets
            ],
        }
        tips = self.generator.saving_tips(snapshot)
        insight = self.cache.store_insight(user_id, InsightType.BUDGET_OPTIMIZATION, snapshot, tips)
        return {"tips": insight.response, "cached": False}

    def predict_risk(self, user_id: str) -> Dict[str, Any]:
        month = month_key(self.clock())
        start, end = month_bounds(month)

        snapshot = {
            "monthlyTrend": [p.to_dict() for p in self.analyzer.monthly_trend(self.expenses.list(user_id), 6)],
            "currentSpending": [
                {"category": row.category, "total": row.total}
                for row in self.analyzer.category_totals(self.expenses.list(user_id, start, end))
            ],
            "budgets": [
                {"category": b["category"], "monthlyLimit": b["monthly_limit"], "month": b["month"]}
                for b in self.budgets.list_budgets(user_id, month)
            ],
        }
        return {"prediction": self.generator.risk_prediction(snapshot)}

    def cached(self, user_id: str, limit: int = 10) -> Dict[str, Any]:
        return {"insights": [insight.to_dict() for insight in self.cache.list_active(user_id, limit)]}
