from decimal import Decimal
from enum import Enum
from typing import List
from pydantic import BaseModel, field_validator


class ExpenseCategory(str, Enum):
    FOOD = "Food & Dining"
    TRANSPORTATION = "Transportation"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    BILLS = "Bills & Utilities"
    TRAVEL = "Travel"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    OTHER = "Other"

    @classmethod
    def _missing_(cls, value):
        return cls.OTHER


class Member(BaseModel):
    user_id: str
    name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _none_name(cls, v):
        return v or ""

    class Config:
        from_attributes = True


class Expense(BaseModel):
    id: str
    group_id: str
    amount: Decimal
    paid_by: str
    description: str = ""
    category: ExpenseCategory = ExpenseCategory.OTHER

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, v):
        return ExpenseCategory(v) if v else ExpenseCategory.OTHER

    class Config:
        from_attributes = True


class ExpenseSplit(BaseModel):
    expense_id: str
    user_id: str
    amount: Decimal

    class Config:
        from_attributes = True


class Settlement(BaseModel):
    id: str
    group_id: str
    from_user: str
    to_user: str
    amount: Decimal

    class Config:
        from_attributes = True


class LedgerSnapshot(BaseModel):
    group_id: str
    members: List[Member] = []
    expenses: List[Expense] = []
    splits: List[ExpenseSplit] = []
    settlements: List[Settlement] = []
