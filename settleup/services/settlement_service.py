import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from settleup.core.context import UserContext
from settleup.core.errors import NotFound, NothingToSettle, SettlementRejected
from settleup.core.utils import new_id, qround, to_decimal
from settleup.models.group_member import GroupMember
from settleup.models.settlement import Settlement
from settleup.schemas.activity import ActivityType
from settleup.schemas.balances import GroupBalances
from settleup.schemas.settlements import SettlementCreate
from settleup.services.activity_service import log_activity
from settleup.services.balance_engine import recompute
from settleup.services.group_services import ensure_group_member
from settleup.services.ledger_source import SqlLedgerSource, load_snapshot

logger = logging.getLogger(__name__)


async def get_group_balances(db: AsyncSession, ctx: UserContext, group_id: str) -> GroupBalances:
    await ensure_group_member(db, group_id, ctx.user_id)

    snapshot = await load_snapshot(SqlLedgerSource(db), group_id)
    return recompute(snapshot)


async def record_settlement(
    db: AsyncSession,
    ctx: UserContext,
    group_id: str,
    data: SettlementCreate,
) -> GroupBalances:
    """
    Validate and store a payment between two members, then return freshly
    recomputed balances for the group.

    Nothing is written unless the payer and receiver differ, the amount is
    positive and in whole cents, and the acting user, the payer and the
    receiver all belong to the group.
    """
    await ensure_group_member(db, group_id, ctx.user_id)

    amount = to_decimal(data.amount)

    if data.from_user == data.to_user:
        raise SettlementRejected("Payer and receiver must be different members")

    if amount <= 0:
        raise SettlementRejected("Settlement amount must be positive")

    if qround(amount) != amount:
        raise SettlementRejected("Settlement amount cannot have fractions of a cent")

    q = select(GroupMember).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id.in_([data.from_user, data.to_user])
    )
    res = await db.execute(q)
    names = {m.user_id: m.name for m in res.scalars().all()}

    if data.from_user not in names:
        raise SettlementRejected("Payer is not in this group")

    if data.to_user not in names:
        raise SettlementRejected("Receiver is not in this group")

    settlement = Settlement(
        id=new_id("set"),
        group_id=group_id,
        from_user=data.from_user,
        to_user=data.to_user,
        amount=amount,
        payment_method=data.payment_method,
        notes=data.notes,
        created_by=ctx.user_id,
    )
    db.add(settlement)

    from_name = names[data.from_user] or "Someone"
    to_name = names[data.to_user] or "Someone"

    log_activity(
        db,
        ctx.user_id,
        ActivityType.SETTLEMENT_ADDED,
        f"{from_name} paid {to_name} ${qround(amount)}",
        group_id=group_id,
        related_id=settlement.id,
    )

    await db.commit()

    logger.info(
        "settlement %s: %s paid %s %s in group %s",
        settlement.id, data.from_user, data.to_user, amount, group_id,
    )

    snapshot = await load_snapshot(SqlLedgerSource(db), group_id)
    return recompute(snapshot)


async def accept_recommendation(
    db: AsyncSession,
    ctx: UserContext,
    group_id: str,
    payment_method: str | None = None,
) -> GroupBalances:
    current = await get_group_balances(db, ctx, group_id)
    rec = current.recommendation

    if rec is None:
        raise NothingToSettle("Everyone in this group is settled up")

    return await record_settlement(
        db,
        ctx,
        group_id,
        SettlementCreate(
            from_user=rec.from_user.user_id,
            to_user=rec.to_user.user_id,
            amount=rec.display_amount,
            payment_method=payment_method,
        ),
    )


async def get_settlement_history(db: AsyncSession, ctx: UserContext, group_id: str):
    await ensure_group_member(db, group_id, ctx.user_id)

    q = select(Settlement).where(
        Settlement.group_id == group_id
    ).order_by(Settlement.created_at.desc(), Settlement.id.desc())

    result = await db.execute(q)
    return result.scalars().all()


async def undo_settlement(db: AsyncSession, ctx: UserContext, settlement_id: str):
    q = select(Settlement).where(Settlement.id == settlement_id)
    result = await db.execute(q)
    settlement = result.scalar_one_or_none()

    if not settlement:
        raise NotFound("Settlement entry not found")

    # Only the user who made the payment can undo it
    if settlement.from_user != ctx.user_id:
        raise SettlementRejected("You are not allowed to undo this settlement", status_code=403)

    await ensure_group_member(db, settlement.group_id, ctx.user_id)

    await db.delete(settlement)
    await db.commit()

    logger.info("settlement %s undone by %s", settlement_id, ctx.user_id)
    return {"status": "undo successful"}
