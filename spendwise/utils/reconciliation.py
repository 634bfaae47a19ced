"""Budget vs. actual for one month. Pure functions, no store access."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List

from spendwise.models.analytics import CategoryTotal
from spendwise.models.budget import BudgetRollup, BudgetStatus, OverspendingCategory


def percentage(numerator: float, denominator: float) -> int:
    """Whole-number percentage, halves rounded up. Zero denominator gives 0."""
    if not denominator:
        return 0
    value = Decimal(str(numerator)) / Decimal(str(denominator)) * 100
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def budget_status(category: str, monthly_limit: float, actual: float, month: str) -> BudgetStatus:
    actual = round(actual, 2)
    monthly_limit = round(monthly_limit, 2)
    return BudgetStatus(
        category=category,
        monthly_limit=monthly_limit,
        actual=actual,
        remaining=round(monthly_limit - actual, 2),
        percentage_used=percentage(actual, monthly_limit),
        is_overspent=actual > monthly_limit,
        month=month,
    )


def reconcile(
    budgets: Iterable[Dict[str, Any]],
    category_totals: Iterable[CategoryTotal],
    month: str,
) -> BudgetRollup:
    """
    One BudgetStatus per budget of ``month``. Spending in categories without a
    budget only shows up in ``unbudgeted_spent``; a budget with no spending
    reports ``actual = 0``.
    """
    spent = {row.category: row.total for row in category_totals}

    statuses = [
        budget_status(b["category"], float(b["monthly_limit"]), spent.get(b["category"], 0.0), month)
        for b in budgets
    ]
    budgeted = {s.category for s in statuses}

    total_budget = round(sum(s.monthly_limit for s in statuses), 2)
    total_spent = round(sum(s.actual for s in statuses), 2)
    difference = round(total_budget - total_spent, 2)
    unbudgeted = round(sum(total for category, total in spent.items() if category not in budgeted), 2)

    return BudgetRollup(
        month=month,
        budgets=statuses,
        total_monthly_budget=total_budget,
        total_spent=total_spent,
        overspent_amount=-difference if difference < 0 else 0.0,
        remaining_amount=difference if difference > 0 else 0.0,
        unbudgeted_spent=unbudgeted,
        total_spent_all_categories=round(sum(spent.values()), 2),
    )


def overspending(statuses: Iterable[BudgetStatus]) -> List[OverspendingCategory]:
    """Overspent budgets, largest overspend first."""
    rows = [
        OverspendingCategory(
            category=s.category,
            budget=s.monthly_limit,
            actual=s.actual,
            overspent=round(s.actual - s.monthly_limit, 2),
            percentage_over=percentage(s.actual - s.monthly_limit, s.monthly_limit),
        )
        for s in statuses
        if s.is_overspent
    ]
    return sorted(rows, key=lambda row: row.overspent, reverse=True)
