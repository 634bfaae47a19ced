from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from spendwise.models.common import CamelModel, Category


class ExpenseCreate(CamelModel):
    amount: float = Field(..., ge=0.01, description="Expense amount")
    category: Category
    description: str = Field(..., min_length=1, max_length=200)
    date: Optional[datetime] = None

    @field_validator("amount")
    @classmethod
    def round_amount(cls, value: Optional[float]) -> Optional[float]:
        return round(value, 2) if value is not None else None


class ExpenseUpdate(CamelModel):
    amount: Optional[float] = Field(None, ge=0.01)
    category: Optional[Category] = None
    description: Optional[str] = Field(None, min_length=1, max_length=200)
    date: Optional[datetime] = None

    @field_validator("amount")
    @classmethod
    def round_amount(cls, value: Optional[float]) -> Optional[float]:
        return round(value, 2) if value is not None else None


class ExpensePublic(CamelModel):
    id: str
    amount: float
    category: str
    description: str
    date: str
    created_at: str
    updated_at: str

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ExpensePublic":
        return cls(
            id=record["expense_id"],
            amount=record["amount"],
            category=record["category"],
            description=record.get("description", ""),
            date=record["date"],
            created_at=record["created_at"],
            updated_at=record["updated_at"],
        )
