import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from spendwise.core.exceptions import ConflictError
from spendwise.db.budgets import BudgetStore, budget_key
from spendwise.db.expenses import ExpenseStore
from spendwise.models.budget import BudgetRollup, BudgetSet, OverspendingCategory
from spendwise.utils.analyzer import SpendingAnalyzer
from spendwise.utils.reconciliation import overspending, reconcile
from spendwise.utils.timeutils import month_bounds, month_key, utcnow

logger = logging.getLogger(__name__)


class BudgetService:

    def __init__(
        self,
        budgets: BudgetStore,
        expenses: ExpenseStore,
        analyzer: SpendingAnalyzer,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.budgets = budgets
        self.expenses = expenses
        self.analyzer = analyzer
        self.clock = clock

    def current_month(self) -> str:
        return month_key(self.clock())

    def set_budget(self, user_id: str, payload: BudgetSet) -> Tuple[Dict[str, Any], bool]:
        """
        Create or update the budget for (category, month).
        Returns the record and whether it was created.
        """
        category = payload.category.value
        if self.budgets.get(user_id, category, payload.month):
            return self._update(user_id, category, payload.month, payload.monthly_limit), False
        try:
            return self.budgets.insert(user_id, category, payload.month, payload.monthly_limit), True
        except ConflictError:
            # lost the race against a concurrent create for the same key
            logger.info(f"Budget {category} {payload.month} created concurrently, updating in place")
            return self._update(user_id, category, payload.month, payload.monthly_limit), False

    def _update(self, user_id: str, category: str, month: str, monthly_limit: float) -> Dict[str, Any]:
        return self.budgets.update_limit(user_id, budget_key(month, category), monthly_limit)

    def list_budgets(self, user_id: str, month: Optional[str] = None) -> List[Dict[str, Any]]:
        if month:
            month_bounds(month)
        return self.budgets.list(user_id, month)

    def update_budget(self, user_id: str, budget_id: str, monthly_limit: float) -> Dict[str, Any]:
        budget = self.budgets.find_by_id(user_id, budget_id)
        return self.budgets.update_limit(user_id, budget["budget_key"], monthly_limit)

    def delete_budget(self, user_id: str, budget_id: str) -> None:
        budget = self.budgets.find_by_id(user_id, budget_id)
        self.budgets.delete(user_id, budget["budget_key"])

    def month_status(self, user_id: str, month: str) -> BudgetRollup:
        start, end = month_bounds(month)
        totals = self.analyzer.category_totals(self.expenses.list(user_id, start, end), start, end)
        return reconcile(self.budgets.list(user_id, month), totals, month)

    def current_month_status(self, user_id: str) -> BudgetRollup:
        return self.month_status(user_id, self.current_month())

    def overspending(self, user_id: str, month: Optional[str] = None) -> Tuple[str, List[OverspendingCategory]]:
        month = month or self.current_month()
        return month, overspending(self.month_status(user_id, month).budgets)
