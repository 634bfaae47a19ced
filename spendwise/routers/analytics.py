from typing import Optional

from fastapi import APIRouter, Depends, Query

from spendwise.core.responses import success_response
from spendwise.core.security import get_current_user_id
from spendwise.routers.deps import get_analytics_service, get_budget_service
from spendwise.services.analytics import AnalyticsService
from spendwise.services.budgets import BudgetService
from spendwise.utils.timeutils import parse_query_date, to_iso

router = APIRouter()


@router.get("/dashboard")
def dashboard(
    user_id: str = Depends(get_current_user_id),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return success_response(service.dashboard(user_id))


@router.get("/category-totals")
def category_totals(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user_id: str = Depends(get_current_user_id),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Defaults to the current month when no range is given."""
    result = service.category_totals(
        user_id,
        parse_query_date(start_date),
        parse_query_date(end_date, end_of_day=True),
    )
    return success_response({
        "categoryTotals": [row.to_dict() for row in result["totals"]],
        "period": {
            "start": to_iso(result["start"]) if result["start"] else None,
            "end": to_iso(result["end"]) if result["end"] else None,
        },
    })


@router.get("/monthly-trend")
def monthly_trend(
    months: int = Query(6, ge=1, le=60),
    user_id: str = Depends(get_current_user_id),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return success_response({"monthlyTrend": [p.to_dict() for p in service.monthly_trend(user_id, months)]})


@router.get("/category-trend")
def category_trend(
    months: int = Query(6, ge=1, le=60),
    user_id: str = Depends(get_current_user_id),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return success_response({"categoryTrend": [t.to_dict() for t in service.category_trend(user_id, months)]})


@router.get("/yearly-summary")
def yearly_summary(
    year: Optional[int] = Query(None, ge=1970, le=9999),
    user_id: str = Depends(get_current_user_id),
    service: AnalyticsService = Depends(get_analytics_service),
):
    result = service.yearly_summary(user_id, year)
    return success_response({"year": result["year"], "summary": [m.to_dict() for m in result["summary"]]})


@router.get("/overspending")
def overspending(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    user_id: str = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    month, rows = service.overspending(user_id, month)
    return success_response({
        "month": month,
        "overspendingCategories": [row.to_dict() for row in rows],
        "count": len(rows),
    })


@router.get("/top-categories")
def top_categories(
    limit: int = Query(5, ge=1, le=50),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user_id: str = Depends(get_current_user_id),
    service: AnalyticsService = Depends(get_analytics_service),
):
    rows = service.top_categories(
        user_id,
        limit,
        parse_query_date(start_date),
        parse_query_date(end_date, end_of_day=True),
    )
    return success_response({"topCategories": [row.to_dict() for row in rows]})
