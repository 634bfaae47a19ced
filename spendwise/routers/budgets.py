from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from spendwise.core.responses import success_response
from spendwise.core.security import get_current_user_id
from spendwise.models.budget import BudgetPublic, BudgetSet, BudgetUpdate
from spendwise.routers.deps import get_budget_service
from spendwise.services.budgets import BudgetService

router = APIRouter()


@router.post("")
def set_budget(
    payload: BudgetSet,
    user_id: str = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    """Create the budget for (category, month), or update its limit if it already exists."""
    record, created = service.set_budget(user_id, payload)
    data = {"budget": BudgetPublic.from_record(record).to_dict()}
    if created:
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=success_response(data, message="Budget created successfully"),
        )
    return success_response(data, message="Budget updated successfully")


@router.get("")
def list_budgets(
    month: Optional[str] = Query(None, description="YYYY-MM"),
    user_id: str = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    budgets = service.list_budgets(user_id, month)
    return success_response({"budgets": [BudgetPublic.from_record(b).to_dict() for b in budgets]})


@router.get("/current-month")
def current_month_budgets(
    user_id: str = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    rollup = service.current_month_status(user_id)
    return success_response(rollup.to_dict())


@router.get("/status/{month}")
def month_budget_status(
    month: str,
    user_id: str = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    return success_response(service.month_status(user_id, month).to_dict())


@router.put("/{budget_id}")
def update_budget(
    budget_id: str,
    payload: BudgetUpdate,
    user_id: str = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    updated = service.update_budget(user_id, budget_id, payload.monthly_limit)
    return success_response({"budget": BudgetPublic.from_record(updated).to_dict()}, message="Budget updated successfully")


@router.delete("/{budget_id}")
def delete_budget(
    budget_id: str,
    user_id: str = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    service.delete_budget(user_id, budget_id)
    return success_response(message="Budget deleted successfully")
