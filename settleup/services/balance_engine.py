"""
Balance and settlement computation for a single group.

Everything here is pure: callers hand in a snapshot of ledger records and get
derived values back. Nothing is cached, nothing is mutated, and nothing here
raises for well-typed input. Unknown users, missing names, unbalanced splits
and empty lists all degrade to zero or omitted entries.

Sign convention: a positive balance means the group owes that member money,
a negative balance means the member owes the group.
"""

import logging
from collections import deque
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from settleup.core.config import settings
from settleup.core.utils import ZERO, is_zero, qround, to_decimal
from settleup.schemas.balances import (
    Balance,
    GroupBalances,
    SettlementRecommendation,
    Transfer,
    UserBalanceSummary,
)
from settleup.schemas.ledger import (
    Expense,
    ExpenseSplit,
    LedgerSnapshot,
    Member,
    Settlement,
)

logger = logging.getLogger(__name__)


def _tolerance(tolerance: Optional[Decimal]) -> Decimal:
    if tolerance is None:
        return settings.BALANCE_TOLERANCE
    return to_decimal(tolerance)


def compute_balances(
    members: Iterable[Member],
    expenses: Iterable[Expense],
    splits: Iterable[ExpenseSplit],
    settlements: Iterable[Settlement],
    *,
    tolerance: Optional[Decimal] = None,
) -> List[Balance]:
    """
    Net balance per member.

    Payers are credited with what they fronted, split holders are debited with
    their share, and each settlement credits the payer and debits the
    receiver. Users referenced by records but missing from ``members`` are
    kept with an empty name, after the members, in order of first appearance.
    Entries within ``tolerance`` of zero are omitted.
    """
    tol = _tolerance(tolerance)

    # dicts keep insertion order: members first, then lazily added users
    names: Dict[str, str] = {}
    amounts: Dict[str, Decimal] = {}

    for m in members:
        if m.user_id not in amounts:
            names[m.user_id] = m.name or ""
            amounts[m.user_id] = ZERO

    def adjust(user_id: str, delta: Decimal):
        if user_id not in amounts:
            logger.debug("balance for unknown user %s created lazily", user_id)
            names[user_id] = ""
            amounts[user_id] = ZERO
        amounts[user_id] += delta

    for exp in expenses:
        adjust(exp.paid_by, to_decimal(exp.amount))

    for s in splits:
        adjust(s.user_id, -to_decimal(s.amount))

    for st in settlements:
        amt = to_decimal(st.amount)
        adjust(st.from_user, amt)
        adjust(st.to_user, -amt)

    return [
        Balance(user_id=uid, name=names[uid], amount=amt)
        for uid, amt in amounts.items()
        if not is_zero(amt, tol)
    ]


def recommend_settlement(
    balances: Sequence[Balance],
) -> Optional[SettlementRecommendation]:
    """
    Suggest one payment: largest debtor pays largest creditor.

    Ties go to the first entry in input order. Returns None when there is
    nothing to recommend, including when every remaining balance has the
    same sign. The amount is kept at full precision; use
    ``display_amount`` for a 2-place value.
    """
    if not balances:
        return None

    debtor = balances[0]
    creditor = balances[0]
    for b in balances[1:]:
        if b.amount < debtor.amount:
            debtor = b
        if b.amount > creditor.amount:
            creditor = b

    if debtor.amount >= 0 or creditor.amount <= 0:
        return None

    amount = min(abs(debtor.amount), creditor.amount)

    return SettlementRecommendation(
        from_user=debtor,
        to_user=creditor,
        amount=amount,
    )


def recompute(
    snapshot: LedgerSnapshot,
    *,
    tolerance: Optional[Decimal] = None,
) -> GroupBalances:
    """Balances and recommendation for a group snapshot."""
    expense_ids = {e.id for e in snapshot.expenses}
    # splits of expenses outside the snapshot belong to another group
    splits = [s for s in snapshot.splits if s.expense_id in expense_ids]

    balances = compute_balances(
        snapshot.members,
        snapshot.expenses,
        splits,
        snapshot.settlements,
        tolerance=tolerance,
    )

    return GroupBalances(
        group_id=snapshot.group_id,
        balances=balances,
        recommendation=recommend_settlement(balances),
    )


def plan_settlements(
    balances: Iterable[Balance],
    *,
    tolerance: Optional[Decimal] = None,
) -> List[Transfer]:
    """
    Greedy plan that settles every balance.

    Largest debtor pays largest creditor, each leg rounded to cents, until
    nothing is left outside the tolerance. This is independent from
    ``recommend_settlement``, which only ever proposes a single payment.
    """
    tol = _tolerance(tolerance)

    creditors: List[List] = []
    debtors: List[List] = []

    for b in balances:
        if b.amount > tol:
            creditors.append([b.user_id, b.amount])
        elif b.amount < -tol:
            debtors.append([b.user_id, -b.amount])

    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    creditors = deque(creditors)
    debtors = deque(debtors)

    transfers: List[Transfer] = []

    while creditors and debtors:
        cred_id, cred_amt = creditors[0]
        debt_id, debt_amt = debtors[0]

        pay_amt = min(cred_amt, debt_amt)

        # only the transfer is rounded; bookkeeping stays exact so one side always clears
        if qround(pay_amt) > 0:
            transfers.append(Transfer(from_user=debt_id, to_user=cred_id, amount=qround(pay_amt)))

        new_cred = cred_amt - pay_amt
        new_debt = debt_amt - pay_amt

        creditors.popleft()
        debtors.popleft()

        if new_cred > tol:
            creditors.appendleft([cred_id, new_cred])
        if new_debt > tol:
            debtors.appendleft([debt_id, new_debt])

    return transfers


def find_unbalanced_expenses(
    expenses: Iterable[Expense],
    splits: Iterable[ExpenseSplit],
    *,
    tolerance: Optional[Decimal] = None,
) -> List[str]:
    """Ids of expenses whose splits do not add up to the expense amount."""
    tol = _tolerance(tolerance)

    split_totals: Dict[str, Decimal] = {}
    for s in splits:
        split_totals[s.expense_id] = split_totals.get(s.expense_id, ZERO) + to_decimal(s.amount)

    flagged = []
    for exp in expenses:
        total = split_totals.get(exp.id, ZERO)
        if not is_zero(to_decimal(exp.amount) - total, tol):
            logger.warning(
                "expense %s: splits total %s, expense amount %s",
                exp.id, total, exp.amount,
            )
            flagged.append(exp.id)

    return flagged


def summarize_user_balance(
    user_id: str,
    group_balances: Iterable[Sequence[Balance]],
) -> UserBalanceSummary:
    # dashboard roll-up of one user's position across groups
    owed: Decimal = ZERO
    owing: Decimal = ZERO

    for balances in group_balances:
        for b in balances:
            if b.user_id != user_id:
                continue
            if b.amount > 0:
                owed += b.amount
            else:
                owing += -b.amount

    return UserBalanceSummary(
        user_id=user_id,
        total_balance=owed - owing,
        you_owe=owing,
        you_are_owed=owed,
    )

