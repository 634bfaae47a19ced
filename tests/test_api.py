"""HTTP surface tests: routing, auth, envelope and error mapping."""

import pytest
from fastapi.testclient import TestClient

from spendwise.ai.generator import InsightGenerator
from spendwise.core.security import create_refresh_token
from spendwise.main import app
from spendwise.routers.deps import get_insight_generator
from spendwise.utils.timeutils import month_key, utcnow


@pytest.fixture
def client(dynamodb_tables):
    app.dependency_overrides[get_insight_generator] = lambda: InsightGenerator(None)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "Test User", "email": "test@example.com", "password": "secret123"},
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['data']['accessToken']}"}


def _add_expense(client, headers, amount, category, description="item", date=None):
    body = {"amount": amount, "category": category, "description": description}
    if date:
        body["date"] = date
    response = client.post("/api/expenses", json=body, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]["expense"]


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "healthy"


def test_register_login_refresh_profile(client):
    register = client.post(
        "/api/auth/register",
        json={"name": "Ada", "email": "Ada@Example.com", "password": "secret123"},
    )
    assert register.json()["data"]["user"]["email"] == "ada@example.com"

    duplicate = client.post(
        "/api/auth/register",
        json={"name": "Ada", "email": "ada@example.com", "password": "secret123"},
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["success"] is False

    bad_login = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "wrong"})
    assert bad_login.status_code == 401
    assert bad_login.json()["error"]["code"] == "UNAUTHORIZED"

    login = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "secret123"})
    assert login.status_code == 200
    tokens = login.json()["data"]

    refreshed = client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert refreshed.status_code == 200

    profile = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {tokens['accessToken']}"})
    assert profile.json()["data"]["user"]["name"] == "Ada"


def test_requests_without_token_are_rejected(client):
    response = client.get("/api/expenses")
    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "message": "Access denied. No token provided.",
        "error": {"code": "UNAUTHORIZED"},
    }


def test_validation_errors_use_envelope(client, auth_headers):
    response = client.post(
        "/api/expenses",
        json={"amount": -5, "category": "Gadgets", "description": ""},
        headers=auth_headers,
    )
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert {"amount", "category", "description"} <= set(body["error"]["details"])


def test_bad_query_date_is_validation_error(client, auth_headers):
    response = client.get("/api/analytics/category-totals?startDate=yesterday", headers=auth_headers)
    assert response.status_code == 400


def test_expense_lifecycle_and_pagination(client, auth_headers):
    first = _add_expense(client, auth_headers, 10.456, "Food", date="2025-01-10T12:00:00Z")
    _add_expense(client, auth_headers, 20, "Bills", date="2025-01-11T12:00:00Z")
    _add_expense(client, auth_headers, 30, "Food", date="2025-01-12T12:00:00Z")
    assert first["amount"] == 10.46

    page = client.get("/api/expenses?limit=2&skip=0", headers=auth_headers).json()["data"]
    assert [e["amount"] for e in page["expenses"]] == [30, 20]
    assert page["pagination"] == {"total": 3, "limit": 2, "skip": 0, "hasMore": True}

    food = client.get(
        "/api/expenses?category=Food&startDate=2025-01-01&endDate=2025-01-10",
        headers=auth_headers,
    ).json()["data"]
    assert [e["id"] for e in food["expenses"]] == [first["id"]]

    updated = client.put(f"/api/expenses/{first['id']}", json={"description": "Brunch"}, headers=auth_headers)
    assert updated.json()["data"]["expense"]["description"] == "Brunch"

    summary = client.get("/api/expenses/summary", headers=auth_headers).json()["data"]["summary"]
    assert summary["expenseCount"] == 3
    assert summary["maxExpense"] == 30

    assert client.delete(f"/api/expenses/{first['id']}", headers=auth_headers).status_code == 200
    missing = client.get(f"/api/expenses/{first['id']}", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "NOT_FOUND"


def test_budget_upsert_and_overspending(client, auth_headers):
    month = month_key(utcnow())
    _add_expense(client, auth_headers, 300, "Food")
    _add_expense(client, auth_headers, 100, "Travel")

    created = client.post(
        "/api/budgets",
        json={"category": "Food", "monthlyLimit": 200, "month": month},
        headers=auth_headers,
    )
    assert created.status_code == 201
    assert created.json()["message"] == "Budget created successfully"

    updated = client.post(
        "/api/budgets",
        json={"category": "Food", "monthlyLimit": 250, "month": month},
        headers=auth_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["message"] == "Budget updated successfully"

    current = client.get("/api/budgets/current-month", headers=auth_headers).json()["data"]
    assert current["month"] == month
    assert len(current["budgets"]) == 1
    assert current["budgets"][0]["remaining"] == -50
    assert current["budgets"][0]["percentageUsed"] == 120

    overspending = client.get("/api/analytics/overspending", headers=auth_headers).json()["data"]
    assert overspending["count"] == 1
    assert overspending["overspendingCategories"][0]["overspent"] == 50

    bad_month = client.post(
        "/api/budgets",
        json={"category": "Food", "monthlyLimit": 250, "month": "2025-13"},
        headers=auth_headers,
    )
    assert bad_month.status_code == 400


def test_dashboard_and_analytics(client, auth_headers):
    month = month_key(utcnow())
    _add_expense(client, auth_headers, 300, "Food")
    _add_expense(client, auth_headers, 100, "Travel")
    client.post("/api/budgets", json={"category": "Food", "monthlyLimit": 250, "month": month}, headers=auth_headers)

    dashboard = client.get("/api/analytics/dashboard", headers=auth_headers).json()["data"]
    assert dashboard["currentMonth"]["total"] == 400
    assert dashboard["currentMonth"]["expenseCount"] == 2
    assert dashboard["currentMonth"]["budgetUsed"] == 300
    assert dashboard["currentMonth"]["budgetPercentageUsed"] == 120
    assert [c["category"] for c in dashboard["categoryTotals"]] == ["Food", "Travel"]

    totals = client.get("/api/analytics/category-totals", headers=auth_headers).json()["data"]
    assert totals["categoryTotals"][0] == {"category": "Food", "total": 300, "count": 1}

    trend = client.get("/api/analytics/monthly-trend?months=3", headers=auth_headers).json()["data"]
    assert len(trend["monthlyTrend"]) == 1

    top = client.get("/api/analytics/top-categories?limit=1", headers=auth_headers).json()["data"]
    assert [t["category"] for t in top["topCategories"]] == ["Food"]

    yearly = client.get("/api/analytics/yearly-summary", headers=auth_headers).json()["data"]
    assert yearly["year"] == utcnow().year
    assert yearly["summary"][0]["total"] == 400


def test_ai_insights_are_cached(client, auth_headers):
    _add_expense(client, auth_headers, 300, "Food")
    _add_expense(client, auth_headers, 100, "Travel")

    first = client.post("/api/ai/generate-insights", headers=auth_headers).json()
    assert first["data"]["cached"] is False
    assert first["data"]["dataUsed"]["categoriesAnalyzed"] == 2
    assert "75% of this month's spending" in first["data"]["insights"]

    second = client.post("/api/ai/generate-insights", headers=auth_headers).json()
    assert second["message"] == "Retrieved cached insights"
    assert second["data"]["cached"] is True
    assert second["data"]["insights"] == first["data"]["insights"]

    forced = client.post("/api/ai/generate-insights?forceRefresh=true", headers=auth_headers).json()
    assert forced["data"]["cached"] is False

    tips = client.get("/api/ai/saving-tips", headers=auth_headers).json()["data"]
    assert tips["cached"] is False
    assert client.get("/api/ai/saving-tips", headers=auth_headers).json()["data"]["cached"] is True

    prediction = client.get("/api/ai/predict-risk", headers=auth_headers).json()["data"]
    assert "Risk Level" in prediction["prediction"]

    cached = client.get("/api/ai/cached", headers=auth_headers).json()["data"]["insights"]
    assert len(cached) == 3
    assert cached[0]["insightType"] == "budget_optimization"


def test_refresh_for_unknown_user_is_unauthorized(client):
    token = create_refresh_token({"sub": "missing-user"})

    response = client.post("/api/auth/refresh", json={"refreshToken": token})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"
