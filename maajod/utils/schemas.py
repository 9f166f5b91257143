from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _In(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class LoginIn(_In):
    username: str
    password: str


class RegisterIn(_In):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    role: Optional[Literal["admin", "user"]] = None

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("username 不可為空")
        return v


class ChangePasswordIn(_In):
    old_password: str = Field(..., alias="oldPassword")
    new_password: str = Field(..., alias="newPassword", min_length=1)


class StoreIn(_In):
    name: str = Field(..., max_length=255)
    description: Optional[str] = None


class StoreUpdateIn(_In):
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class MemberIn(_In):
    user_id: str = Field(..., alias="userId")
    role: str = "member"


class TransactionIn(_In):
    type: Optional[str] = None
    amount: Optional[Decimal] = None
    category: Optional[str] = None
    note: Optional[str] = None
    date: Optional[str] = None
