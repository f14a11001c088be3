from decimal import Decimal
from typing import List
from pydantic import BaseModel
from settleup.core.utils import qround


class Balance(BaseModel):
    user_id: str
    name: str = ""
    amount: Decimal


class SettlementRecommendation(BaseModel):
    from_user: Balance
    to_user: Balance
    amount: Decimal

    @property
    def display_amount(self) -> Decimal:
        return qround(self.amount)


class Transfer(BaseModel):
    from_user: str
    to_user: str
    amount: Decimal


class GroupBalances(BaseModel):
    group_id: str
    balances: List[Balance]
    recommendation: SettlementRecommendation | None = None


class UserBalanceSummary(BaseModel):
    user_id: str
    total_balance: Decimal
    you_owe: Decimal
    you_are_owed: Decimal
