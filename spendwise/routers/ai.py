from fastapi import APIRouter, Depends, Query

from spendwise.core.responses import success_response
from spendwise.core.security import get_current_user_id
from spendwise.routers.deps import get_insight_service
from spendwise.services.ai import InsightService

router = APIRouter()


@router.post("/generate-insights")
def generate_insights(
    force_refresh: bool = Query(False, alias="forceRefresh"),
    user_id: str = Depends(get_current_user_id),
    service: InsightService = Depends(get_insight_service),
):
    """Spending analysis for the current month; served from cache unless forceRefresh is set."""
    data = service.generate_insights(user_id, force_refresh=force_refresh)
    message = "Retrieved cached insights" if data["cached"] else "AI insights generated successfully"
    return success_response(data, message=message)


@router.get("/saving-tips")
def saving_tips(
    user_id: str = Depends(get_current_user_id),
    service: InsightService = Depends(get_insight_service),
):
    return success_response(service.saving_tips(user_id))


@router.get("/predict-risk")
def predict_risk(
    user_id: str = Depends(get_current_user_id),
    service: InsightService = Depends(get_insight_service),
):
    return success_response(service.predict_risk(user_id))


@router.get("/cached")
def cached_insights(
    user_id: str = Depends(get_current_user_id),
    service: InsightService = Depends(get_insight_service),
):
    return success_response(service.cached(user_id))
