import logging
from typing import Dict, List, Protocol, Sequence
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from settleup.models.expense import Expense as ExpenseRow
from settleup.models.expense_split import ExpenseSplit as ExpenseSplitRow
from settleup.models.group_member import GroupMember
from settleup.models.settlement import Settlement as SettlementRow
from settleup.schemas.ledger import (
    Expense,
    ExpenseSplit,
    LedgerSnapshot,
    Member,
    Settlement,
)

logger = logging.getLogger(__name__)


class LedgerSource(Protocol):
    """Where group records come from. Balances are always derived from these."""

    async def list_group_members(self, group_id: str) -> List[Member]: ...

    async def list_expenses(self, group_id: str) -> List[Expense]: ...

    async def list_expense_splits(self, expense_ids: Sequence[str]) -> List[ExpenseSplit]: ...

    async def list_settlements(self, group_id: str) -> List[Settlement]: ...


class InMemoryLedgerSource:
    def __init__(
        self,
        members: Dict[str, List[Member]] | None = None,
        expenses: List[Expense] | None = None,
        splits: List[ExpenseSplit] | None = None,
        settlements: List[Settlement] | None = None,
    ):
        self.members = members or {}
        self.expenses = expenses or []
        self.splits = splits or []
        self.settlements = settlements or []

    async def list_group_members(self, group_id: str) -> List[Member]:
        return list(self.members.get(group_id, []))

    async def list_expenses(self, group_id: str) -> List[Expense]:
        return [e for e in self.expenses if e.group_id == group_id]

    async def list_expense_splits(self, expense_ids: Sequence[str]) -> List[ExpenseSplit]:
        wanted = set(expense_ids)
        return [s for s in self.splits if s.expense_id in wanted]

    async def list_settlements(self, group_id: str) -> List[Settlement]:
        return [s for s in self.settlements if s.group_id == group_id]


class SqlLedgerSource:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_group_members(self, group_id: str) -> List[Member]:
        q = (
            select(GroupMember)
            .where(GroupMember.group_id == group_id)
            .order_by(GroupMember.id)
        )
        res = await self.db.execute(q)
        return [Member.model_validate(m) for m in res.scalars().all()]

    async def list_expenses(self, group_id: str) -> List[Expense]:
        q = (
            select(ExpenseRow)
            .where(ExpenseRow.group_id == group_id, ExpenseRow.is_deleted == False)
            .order_by(ExpenseRow.created_at, ExpenseRow.id)
        )
        res = await self.db.execute(q)
        return [Expense.model_validate(e) for e in res.scalars().all()]

    async def list_expense_splits(self, expense_ids: Sequence[str]) -> List[ExpenseSplit]:
        if not expense_ids:
            return []

        q = (
            select(ExpenseSplitRow)
            .where(ExpenseSplitRow.expense_id.in_(list(expense_ids)))
            .order_by(ExpenseSplitRow.id)
        )
        res = await self.db.execute(q)
        return [ExpenseSplit.model_validate(s) for s in res.scalars().all()]

    async def list_settlements(self, group_id: str) -> List[Settlement]:
        q = (
            select(SettlementRow)
            .where(SettlementRow.group_id == group_id)
            .order_by(SettlementRow.created_at, SettlementRow.id)
        )
        res = await self.db.execute(q)
        return [Settlement.model_validate(s) for s in res.scalars().all()]


async def load_snapshot(source: LedgerSource, group_id: str) -> LedgerSnapshot:
    members = await source.list_group_members(group_id)
    expenses = await source.list_expenses(group_id)
    splits = await source.list_expense_splits([e.id for e in expenses])
    settlements = await source.list_settlements(group_id)

    logger.debug(
        "snapshot %s: %d members, %d expenses, %d splits, %d settlements",
        group_id, len(members), len(expenses), len(splits), len(settlements),
    )

    return LedgerSnapshot(
        group_id=group_id,
        members=members,
        expenses=expenses,
        splits=splits,
        settlements=settlements,
    )
