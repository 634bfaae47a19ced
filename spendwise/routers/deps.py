"""Dependency providers shared by the routers (override in tests via app.dependency_overrides)."""

from functools import lru_cache
from typing import Optional

from fastapi import Depends

from spendwise.ai.client import build_text_client
from spendwise.ai.generator import InsightGenerator
from spendwise.core.config import settings
from spendwise.db.budgets import BudgetStore
from spendwise.db.dynamo import get_table
from spendwise.db.expenses import ExpenseStore
from spendwise.db.insights import InsightStore
from spendwise.db.users import UserStore
from spendwise.services.ai import InsightService
from spendwise.services.analytics import AnalyticsService
from spendwise.services.budgets import BudgetService
from spendwise.services.insight_cache import InsightCache, policies_from_settings
from spendwise.utils.analyzer import SpendingAnalyzer


def get_user_store() -> UserStore:
    return UserStore(get_table("users"))


def get_expense_store() -> ExpenseStore:
    return ExpenseStore(get_table("expenses"))


def get_budget_store() -> BudgetStore:
    return BudgetStore(get_table("budgets"))


def get_insight_store() -> InsightStore:
    return InsightStore(get_table("insights"))


def get_analyzer() -> SpendingAnalyzer:
    return SpendingAnalyzer()


@lru_cache
def get_insight_generator() -> InsightGenerator:
    return InsightGenerator(build_text_client(settings))


def get_insight_cache(store: Optional[InsightStore] = None) -> InsightCache:
    return InsightCache(store or get_insight_store(), policies_from_settings(settings))


def get_budget_service(
    budgets: BudgetStore = Depends(get_budget_store),
    expenses: ExpenseStore = Depends(get_expense_store),
    analyzer: SpendingAnalyzer = Depends(get_analyzer),
) -> BudgetService:
    return BudgetService(budgets, expenses, analyzer)


def get_analytics_service(
    expenses: ExpenseStore = Depends(get_expense_store),
    budgets: BudgetService = Depends(get_budget_service),
    analyzer: SpendingAnalyzer = Depends(get_analyzer),
) -> AnalyticsService:
    return AnalyticsService(expenses, budgets, analyzer)


def get_insight_service(
    expenses: ExpenseStore = Depends(get_expense_store),
    budgets: BudgetService = Depends(get_budget_service),
    analyzer: SpendingAnalyzer = Depends(get_analyzer),
    insights: InsightStore = Depends(get_insight_store),
    generator: InsightGenerator = Depends(get_insight_generator),
) -> InsightService:
    return InsightService(expenses, budgets, analyzer, get_insight_cache(insights), generator)
