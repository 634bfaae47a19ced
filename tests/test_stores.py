"""DynamoDB-backed store tests (moto)."""

from datetime import datetime

import pytest

from spendwise.core.exceptions import ConflictError, NotFoundError
from spendwise.db.budgets import BudgetStore, budget_key
from spendwise.db.dynamo import get_table
from spendwise.db.expenses import ExpenseStore
from spendwise.db.users import UserStore
from spendwise.models.budget import BudgetSet
from spendwise.services.budgets import BudgetService
from spendwise.utils.analyzer import SpendingAnalyzer


@pytest.fixture
def expense_store(dynamodb_tables):
    return ExpenseStore(get_table("expenses"))


@pytest.fixture
def budget_store(dynamodb_tables):
    return BudgetStore(get_table("budgets"))


@pytest.fixture
def budget_service(budget_store, expense_store, clock):
    return BudgetService(budget_store, expense_store, SpendingAnalyzer(), clock=clock)


def test_expense_crud(expense_store):
    created = expense_store.create("user-1", 12.5, "Food", "Lunch", datetime(2025, 3, 1, 12, 0))

    fetched = expense_store.get("user-1", created["expense_id"])
    assert fetched["amount"] == 12.5
    assert fetched["date"] == "2025-03-01T12:00:00.000000"

    updated = expense_store.update("user-1", created["expense_id"], {"amount": 20, "description": "Dinner"})
    assert updated["amount"] == 20
    assert updated["description"] == "Dinner"

    expense_store.delete("user-1", created["expense_id"])
    with pytest.raises(NotFoundError):
        expense_store.get("user-1", created["expense_id"])


def test_expense_owned_by_other_user_is_not_found(expense_store):
    created = expense_store.create("user-1", 5, "Bills", "Phone", datetime(2025, 3, 2))

    with pytest.raises(NotFoundError):
        expense_store.get("user-2", created["expense_id"])
    with pytest.raises(NotFoundError):
        expense_store.update("user-2", created["expense_id"], {"amount": 1})
    with pytest.raises(NotFoundError):
        expense_store.delete("user-2", created["expense_id"])


def test_expense_list_range_category_and_order(expense_store):
    expense_store.create("user-1", 10, "Food", "a", datetime(2025, 2, 28, 23, 59))
    expense_store.create("user-1", 20, "Food", "b", datetime(2025, 3, 1))
    expense_store.create("user-1", 30, "Travel", "c", datetime(2025, 3, 31, 23, 59, 59))
    expense_store.create("user-2", 40, "Food", "d", datetime(2025, 3, 10))

    march = expense_store.list("user-1", datetime(2025, 3, 1), datetime(2025, 3, 31, 23, 59, 59, 999999))
    assert [e["description"] for e in march] == ["b", "c"]

    newest = expense_store.list("user-1", newest_first=True)
    assert [e["description"] for e in newest] == ["c", "b", "a"]

    food = expense_store.list("user-1", category="Food")
    assert [e["description"] for e in food] == ["a", "b"]


def test_budget_insert_conflict(budget_store):
    budget_store.insert("user-1", "Food", "2025-03", 250)
    with pytest.raises(ConflictError):
        budget_store.insert("user-1", "Food", "2025-03", 300)


def test_budget_list_by_month_sorted(budget_store):
    budget_store.insert("user-1", "Travel", "2025-03", 100)
    budget_store.insert("user-1", "Food", "2025-03", 250)
    budget_store.insert("user-1", "Food", "2025-04", 260)

    assert [b["category"] for b in budget_store.list("user-1", "2025-03")] == ["Food", "Travel"]
    assert [b["month"] for b in budget_store.list("user-1")] == ["2025-04", "2025-03", "2025-03"]


def test_set_budget_creates_then_updates_in_place(budget_service, budget_store):
    created, was_created = budget_service.set_budget("user-1", BudgetSet(category="Food", monthly_limit=250, month="2025-03"))
    updated, was_created_again = budget_service.set_budget(
        "user-1", BudgetSet(category="Food", monthly_limit=275.456, month="2025-03")
    )

    assert was_created is True
    assert was_created_again is False
    assert updated["budget_id"] == created["budget_id"]
    assert updated["monthly_limit"] == 275.46
    assert len(budget_store.list("user-1", "2025-03")) == 1


def test_set_budget_recovers_from_concurrent_create(budget_service, budget_store, monkeypatch):
    budget_store.insert("user-1", "Food", "2025-03", 100)
    # simulate the existence check running before the other writer committed
    monkeypatch.setattr(budget_store, "get", lambda *args: None)

    record, created = budget_service.set_budget("user-1", BudgetSet(category="Food", monthly_limit=180, month="2025-03"))

    assert created is False
    assert record["monthly_limit"] == 180


def test_update_and_delete_budget_by_id(budget_service, budget_store):
    record = budget_store.insert("user-1", "Rent", "2025-03", 900)

    with pytest.raises(NotFoundError):
        budget_service.update_budget("user-2", record["budget_id"], 10)

    assert budget_service.update_budget("user-1", record["budget_id"], 950)["monthly_limit"] == 950
    budget_service.delete_budget("user-1", record["budget_id"])
    assert budget_store.get("user-1", "Rent", "2025-03") is None


def test_month_status_reconciles_month_spending(budget_service, budget_store, expense_store):
    expense_store.create("user-1", 300, "Food", "groceries", datetime(2025, 3, 1))
    expense_store.create("user-1", 100, "Travel", "train", datetime(2025, 3, 15))
    expense_store.create("user-1", 999, "Food", "last month", datetime(2025, 2, 27))
    budget_store.insert("user-1", "Food", "2025-03", 250)

    rollup = budget_service.current_month_status("user-1")

    assert rollup.month == "2025-03"
    assert [s.to_dict() for s in rollup.budgets] == [{
        "category": "Food",
        "monthlyLimit": 250.0,
        "actual": 300.0,
        "remaining": -50.0,
        "percentageUsed": 120,
        "isOverspent": True,
        "month": "2025-03",
    }]
    month, rows = budget_service.overspending("user-1")
    assert month == "2025-03"
    assert [(r.category, r.overspent, r.percentage_over) for r in rows] == [("Food", 50.0, 20)]


def test_budget_key_format():
    assert budget_key("2025-03", "Food") == "2025-03#Food"


def test_user_email_is_unique_and_lowercased(dynamodb_tables):
    users = UserStore(get_table("users"))
    user = users.create("Ada", "Ada@Example.com", "hash")

    assert users.get_by_email("ada@example.com")["user_id"] == user["user_id"]
    with pytest.raises(ConflictError):
        users.create("Ada Again", "ada@example.com", "hash")
