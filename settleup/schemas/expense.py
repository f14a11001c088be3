from decimal import Decimal
from enum import Enum
from pydantic import BaseModel
from typing import List
from settleup.schemas.ledger import ExpenseCategory


class SplitStrategy(str, Enum):
    EQUAL = "equal"
    EXACT = "exact"
    PERCENTAGE = "percentage"


class SplitInput(BaseModel):
    user_id: str
    amount: Decimal
    percentage: Decimal | None = None

class ExpenseCreate(BaseModel):
    description: str
    amount: Decimal
    paid_by: str
    category: ExpenseCategory = ExpenseCategory.OTHER
    strategy: SplitStrategy = SplitStrategy.EQUAL
    splits: List[SplitInput]
    notes: str | None = None

class ExpenseOut(BaseModel):
    id: str
    group_id: str
    amount: Decimal
    description: str = ""
    category: ExpenseCategory = ExpenseCategory.OTHER
    paid_by: str
    strategy: SplitStrategy = SplitStrategy.EQUAL

    class Config:
        from_attributes = True
