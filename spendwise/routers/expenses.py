from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from spendwise.core.exceptions import ValidationError
from spendwise.core.responses import success_response
from spendwise.core.security import get_current_user_id
from spendwise.db.expenses import ExpenseStore
from spendwise.models.common import Category
from spendwise.models.expense import ExpenseCreate, ExpensePublic, ExpenseUpdate
from spendwise.routers.deps import get_analyzer, get_expense_store
from spendwise.utils.analyzer import SpendingAnalyzer
from spendwise.utils.timeutils import parse_query_date, utcnow

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_expense(
    expense: ExpenseCreate,
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_expense_store),
):
    record = store.create(
        user_id,
        amount=expense.amount,
        category=expense.category.value,
        description=expense.description,
        date=expense.date or utcnow(),
    )
    body = success_response({"expense": ExpensePublic.from_record(record).to_dict()}, message="Expense created successfully")
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=body)


@router.get("")
def list_expenses(
    category: Optional[Category] = None,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    limit: int = Query(100, ge=1, le=1000),
    skip: int = Query(0, ge=0),
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_expense_store),
):
    """Newest first, paginated with limit/skip."""
    expenses = store.list(
        user_id,
        start=parse_query_date(start_date),
        end=parse_query_date(end_date, end_of_day=True),
        category=category.value if category else None,
        newest_first=True,
    )
    page = expenses[skip: skip + limit]
    return success_response({
        "expenses": [ExpensePublic.from_record(e).to_dict() for e in page],
        "pagination": {
            "total": len(expenses),
            "limit": limit,
            "skip": skip,
            "hasMore": skip + len(page) < len(expenses),
        },
    })


@router.get("/summary")
def expense_summary(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_expense_store),
    analyzer: SpendingAnalyzer = Depends(get_analyzer),
):
    start = parse_query_date(start_date)
    end = parse_query_date(end_date, end_of_day=True)
    summary = analyzer.summary(store.list(user_id, start, end), start, end)
    return success_response({"summary": summary.to_dict()})


@router.get("/{expense_id}")
def get_expense(
    expense_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_expense_store),
):
    return success_response({"expense": ExpensePublic.from_record(store.get(user_id, expense_id)).to_dict()})


@router.put("/{expense_id}")
def update_expense(
    expense_id: str,
    expense_update: ExpenseUpdate,
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_expense_store),
):
    mutable_fields = expense_update.model_dump(exclude_unset=True, exclude_none=True)
    if not mutable_fields:
        raise ValidationError("No fields to update")
    if "category" in mutable_fields:
        mutable_fields["category"] = mutable_fields["category"].value

    updated = store.update(user_id, expense_id, mutable_fields)
    return success_response({"expense": ExpensePublic.from_record(updated).to_dict()}, message="Expense updated successfully")


@router.delete("/{expense_id}")
def delete_expense(
    expense_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_expense_store),
):
    store.delete(user_id, expense_id)
    return success_response(message="Expense deleted successfully")
