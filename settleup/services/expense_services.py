import logging
from decimal import Decimal, ROUND_DOWN
from typing import List, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from settleup.core.config import settings
from settleup.core.context import UserContext
from settleup.core.errors import InvalidExpense, NotFound
from settleup.core.utils import CENTS, ZERO, is_zero, new_id, qround, to_decimal
from settleup.models.expense import Expense
from settleup.models.expense_split import ExpenseSplit
from settleup.models.group_member import GroupMember
from settleup.schemas.activity import ActivityType
from settleup.schemas.expense import ExpenseCreate, SplitInput, SplitStrategy
from settleup.services.activity_service import log_activity
from settleup.services.group_services import ensure_group_member

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def build_splits(
    amount,
    user_ids: Sequence[str],
    strategy: SplitStrategy | str = SplitStrategy.EQUAL,
    values: Sequence | None = None,
) -> List[SplitInput]:
    """
    Turn an expense amount into per-user splits.

    ``equal`` divides to the cent and hands the leftover cents, one each, to
    the first users. ``exact`` takes ``values`` as amounts. ``percentage``
    takes ``values`` as percentages totalling 100, rounds each share down to
    the cent and hands the leftover cents to the largest fractional parts.
    Zero shares are dropped.
    """
    try:
        strategy = SplitStrategy(strategy)
    except ValueError:
        raise InvalidExpense(f"Unknown split strategy: {strategy}")
    amount = to_decimal(amount)

    if amount <= 0:
        raise InvalidExpense("Expense amount must be positive")

    if not user_ids:
        raise InvalidExpense("At least one user is required to split an expense")

    if len(user_ids) != len(set(user_ids)):
        raise InvalidExpense("Duplicate users found in splits")

    if strategy != SplitStrategy.EQUAL:
        if values is None or len(values) != len(user_ids):
            raise InvalidExpense(f"{strategy.value} split needs one value per user")
        values = [to_decimal(v) for v in values]
        if any(v < 0 for v in values):
            raise InvalidExpense("Split values cannot be negative")

    percentages = [None] * len(user_ids)

    if strategy == SplitStrategy.EQUAL:
        n = len(user_ids)
        base = (amount / n).quantize(CENTS, rounding=ROUND_DOWN)
        leftover = amount - base * n
        extra_cents = int(leftover // CENTS)

        amounts = [base + CENTS if i < extra_cents else base for i in range(n)]
        # sub-cent dust when the amount itself is not in whole cents
        amounts[0] += leftover - CENTS * extra_cents

    elif strategy == SplitStrategy.EXACT:
        amounts = list(values)

    else:
        total_pct = sum(values, ZERO)
        if not is_zero(total_pct - HUNDRED, settings.BALANCE_TOLERANCE):
            raise InvalidExpense(f"Percentages must total 100 (got {total_pct})")

        # shares of the actual total so they sum to the amount even at 100 +- tolerance
        raw = [amount * p / total_pct for p in values]
        amounts = [r.quantize(CENTS, rounding=ROUND_DOWN) for r in raw]
        leftover = amount - sum(amounts, ZERO)
        extra_cents = int(leftover // CENTS)

        by_fraction = sorted(range(len(raw)), key=lambda i: raw[i] - amounts[i], reverse=True)
        for i in by_fraction[:extra_cents]:
            amounts[i] += CENTS

        largest = max(range(len(raw)), key=lambda i: raw[i])
        amounts[largest] += leftover - CENTS * extra_cents
        percentages = list(values)

    return [
        SplitInput(user_id=uid, amount=amt, percentage=pct)
        for uid, amt, pct in zip(user_ids, amounts, percentages)
        if amt > 0
    ]


async def create_expense(db: AsyncSession, ctx: UserContext, group_id: str, data: ExpenseCreate):
    await ensure_group_member(db, group_id, ctx.user_id)

    amount = to_decimal(data.amount)
    if amount <= 0:
        raise InvalidExpense("Expense amount must be positive")

    if qround(amount) != amount:
        raise InvalidExpense("Expense amount cannot have fractions of a cent")

    # -----------------------------------
    # 1. Payer must belong to the group
    # -----------------------------------
    member_q = select(GroupMember.user_id).where(GroupMember.group_id == group_id)
    member_res = await db.execute(member_q)
    group_user_ids = {row[0] for row in member_res.all()}

    if data.paid_by not in group_user_ids:
        raise InvalidExpense("Payer is not a member of the group")

    # -----------------------------------
    # 2. Extract & validate split users
    # -----------------------------------
    if not data.splits:
        raise InvalidExpense("An expense needs at least one split")

    user_ids = [s.user_id for s in data.splits]

    if len(user_ids) != len(set(user_ids)):
        raise InvalidExpense("Duplicate users found in splits")

    if not set(user_ids) <= group_user_ids:
        raise InvalidExpense("One or more users in splits are not members of the group")

    # -----------------------------------
    # 3. Validate amounts
    # -----------------------------------
    if any(to_decimal(s.amount) < 0 for s in data.splits):
        raise InvalidExpense("Split amounts cannot be negative")

    if any(qround(to_decimal(s.amount)) != to_decimal(s.amount) for s in data.splits):
        raise InvalidExpense("Split amounts cannot have fractions of a cent")

    total_split = sum((to_decimal(s.amount) for s in data.splits), ZERO)
    if not is_zero(total_split - amount, settings.BALANCE_TOLERANCE):
        raise InvalidExpense(
            f"Split total ({total_split}) must equal expense amount ({amount})"
        )

    # -----------------------------------
    # 4. Create expense, splits and activity
    # -----------------------------------
    expense = Expense(
        id=new_id("exp"),
        group_id=group_id,
        description=data.description,
        amount=amount,
        category=data.category.value,
        strategy=data.strategy.value,
        paid_by=data.paid_by,
        created_by=ctx.user_id,
        notes=data.notes,
    )

    db.add(expense)
    await db.flush()

    db.add_all([
        ExpenseSplit(
            expense_id=expense.id,
            user_id=s.user_id,
            amount=to_decimal(s.amount),
            percentage=s.percentage,
        )
        for s in data.splits
    ])

    log_activity(
        db,
        ctx.user_id,
        ActivityType.EXPENSE_ADDED,
        f"{ctx.name or 'Someone'} added \"{data.description}\"",
        group_id=group_id,
        related_id=expense.id,
    )

    await db.commit()
    await db.refresh(expense)

    logger.info("expense %s (%s) recorded in group %s", expense.id, amount, group_id)
    return expense

async def delete_expense(db: AsyncSession, ctx: UserContext, expense_id: str):
    q = select(Expense).where(Expense.id == expense_id, Expense.is_deleted == False)
    res = await db.execute(q)
    expense = res.scalar_one_or_none()

    if not expense:
        raise NotFound("Expense not found")

    await ensure_group_member(db, expense.group_id, ctx.user_id)

    # only the payer or whoever entered it can delete
    if ctx.user_id not in (expense.paid_by, expense.created_by):
        raise InvalidExpense("You cannot delete this expense", status_code=403)

    expense.is_deleted = True
    await db.commit()

    logger.info("expense %s deleted by %s", expense_id, ctx.user_id)
    return {"status": "deleted"}

async def get_expenses_by_group(db: AsyncSession, ctx: UserContext, group_id: str):
    await ensure_group_member(db, group_id, ctx.user_id)

    q = (
        select(Expense)
        .where(Expense.group_id == group_id, Expense.is_deleted == False)
        .order_by(Expense.created_at.desc(), Expense.id.desc())
    )

    res = await db.execute(q)
    return res.scalars().all()
