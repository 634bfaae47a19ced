from typing import Any, Dict

from pydantic import EmailStr, Field

from spendwise.models.common import CamelModel


class UserCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class UserPublic(CamelModel):
    id: str
    name: str
    email: str
    created_at: str

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "UserPublic":
        return cls(
            id=record["user_id"],
            name=record.get("name", ""),
            email=record["email"],
            created_at=record.get("created_at", ""),
        )
