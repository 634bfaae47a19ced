from spendwise.models.analytics import CategoryTotal
from spendwise.utils.analyzer import SpendingAnalyzer
from spendwise.utils.reconciliation import budget_status, overspending, percentage, reconcile


def _budget(category, limit, month="2025-03"):
    return {"category": category, "monthly_limit": limit, "month": month}


def test_overspent_budget_and_unbudgeted_category():
    expenses = [
        {"category": "Food", "amount": 300, "date": "2025-03-01T10:00:00.000000"},
        {"category": "Travel", "amount": 100, "date": "2025-03-15T10:00:00.000000"},
    ]
    totals = SpendingAnalyzer().category_totals(expenses)

    rollup = reconcile([_budget("Food", 250)], totals, "2025-03")

    assert len(rollup.budgets) == 1
    status = rollup.budgets[0]
    assert status.category == "Food"
    assert status.monthly_limit == 250
    assert status.actual == 300
    assert status.remaining == -50
    assert status.is_overspent is True
    assert status.percentage_used == 120

    assert rollup.total_monthly_budget == 250
    assert rollup.total_spent == 300
    assert rollup.overspent_amount == 50
    assert rollup.remaining_amount == 0
    assert rollup.unbudgeted_spent == 100
    assert rollup.total_spent_all_categories == 400


def test_budget_without_spending_has_zero_actual():
    rollup = reconcile([_budget("Bills", 120)], [], "2025-03")
    status = rollup.budgets[0]
    assert status.actual == 0
    assert status.remaining == 120
    assert status.is_overspent is False
    assert rollup.remaining_amount == 120
    assert rollup.overspent_amount == 0


def test_zero_limit_gives_zero_percentage():
    status = budget_status("Food", 0, 0, "2025-03")
    assert status.percentage_used == 0
    assert status.is_overspent is False

    status = budget_status("Food", 0, 12.5, "2025-03")
    assert status.percentage_used == 0
    assert status.is_overspent is True


def test_exactly_one_of_overspent_or_non_negative_remaining():
    for limit, actual in [(100, 99.99), (100, 100), (100, 100.01), (0.1, 0.3), (33.33, 33.329)]:
        status = budget_status("Food", limit, actual, "2025-03")
        assert status.is_overspent != (status.remaining >= 0)


def test_percentage_rounds_half_up():
    assert percentage(1, 8) == 13  # 12.5
    assert percentage(3, 8) == 38  # 37.5
    assert percentage(5, 0) == 0


def test_overspending_sorted_by_overspent_amount():
    totals = [
        CategoryTotal(category="Food", total=330, count=3),
        CategoryTotal(category="Shopping", total=900, count=2),
        CategoryTotal(category="Bills", total=50, count=1),
    ]
    rollup = reconcile(
        [_budget("Food", 300), _budget("Shopping", 600), _budget("Bills", 100)],
        totals,
        "2025-03",
    )

    rows = overspending(rollup.budgets)

    assert [r.category for r in rows] == ["Shopping", "Food"]
    assert rows[0].overspent == 300
    assert rows[0].percentage_over == 50
    assert rows[1].overspent == 30
    assert rows[1].percentage_over == 10
