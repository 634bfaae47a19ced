from typing import Any, Dict, List

from pydantic import Field, field_validator

from spendwise.models.common import CamelModel, Category


class BudgetSet(CamelModel):
    category: Category
    monthly_limit: float = Field(..., ge=0)
    month: str = Field(..., pattern=r"^\d{4}-(0[1-9]|1[0-2])$", description="YYYY-MM")

    @field_validator("monthly_limit")
    @classmethod
    def round_limit(cls, value: float) -> float:
        return round(value, 2)


class BudgetUpdate(CamelModel):
    monthly_limit: float = Field(..., ge=0)

    @field_validator("monthly_limit")
    @classmethod
    def round_limit(cls, value: float) -> float:
        return round(value, 2)


class BudgetPublic(CamelModel):
    id: str
    category: str
    monthly_limit: float
    month: str
    created_at: str
    updated_at: str

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "BudgetPublic":
        return cls(
            id=record["budget_id"],
            category=record["category"],
            monthly_limit=record["monthly_limit"],
            month=record["month"],
            created_at=record["created_at"],
            updated_at=record["updated_at"],
        )


class BudgetStatus(CamelModel):
    """Budget vs. actual for one budgeted category in one month."""

    category: str
    monthly_limit: float
    actual: float
    remaining: float
    percentage_used: int
    is_overspent: bool
    month: str


class OverspendingCategory(CamelModel):
    category: str
    budget: float
    actual: float
    overspent: float
    percentage_over: int


class BudgetRollup(CamelModel):
    month: str
    budgets: List[BudgetStatus]
    total_monthly_budget: float
    # spending in budgeted categories only
    total_spent: float
    overspent_amount: float
    remaining_amount: float
    unbudgeted_spent: float
    total_spent_all_categories: float
