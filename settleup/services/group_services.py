import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from settleup.core.context import UserContext
from settleup.core.errors import NotAGroupMember, NotFound
from settleup.core.utils import new_id
from settleup.models.group import Group
from settleup.models.group_member import GroupMember
from settleup.schemas.activity import ActivityType
from settleup.services.activity_service import log_activity

logger = logging.getLogger(__name__)

async def create_group(db: AsyncSession, ctx: UserContext, name: str, description: str | None = None):
    group = Group(id=new_id("grp"), name=name, description=description, created_by=ctx.user_id)
    db.add(group)
    await db.flush()

    member = GroupMember(group_id=group.id, user_id=ctx.user_id, name=ctx.name, role="admin")
    db.add(member)

    log_activity(
        db,
        ctx.user_id,
        ActivityType.GROUP_CREATED,
        f"{ctx.name or 'Someone'} created \"{name}\"",
        group_id=group.id,
        related_id=group.id,
    )

    await db.commit()
    await db.refresh(group)
    logger.info("group %s created by %s", group.id, ctx.user_id)
    return group

async def add_member(db: AsyncSession, ctx: UserContext, group_id: str, user_id: str, name: str = ""):
    await ensure_group_member(db, group_id, ctx.user_id)

    existing = await get_member(db, group_id, user_id)
    if existing:
        return existing

    member = GroupMember(group_id=group_id, user_id=user_id, name=name)
    db.add(member)

    log_activity(
        db,
        ctx.user_id,
        ActivityType.MEMBER_JOINED,
        f"{name or 'Someone'} joined the group",
        group_id=group_id,
        related_id=user_id,
    )

    await db.commit()
    await db.refresh(member)
    logger.info("user %s added to group %s", user_id, group_id)
    return member

async def list_groups_for_user(db: AsyncSession, user_id: str):
    q = (
        select(Group)
        .join(GroupMember)
        .where(GroupMember.user_id == user_id, Group.is_deleted == False)
        .order_by(Group.created_at, Group.id)
    )
    result = await db.execute(q)
    return result.scalars().all()

async def get_group_members(db: AsyncSession, group_id: str):
    q = (
        select(GroupMember)
        .where(GroupMember.group_id == group_id)
        .order_by(GroupMember.id)
    )
    result = await db.execute(q)
    return result.scalars().all()

async def get_member(db: AsyncSession, group_id: str, user_id: str):
    q = select(GroupMember).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id
    )
    res = await db.execute(q)
    return res.scalar_one_or_none()

async def ensure_group_member(db: AsyncSession, group_id: str, user_id: str):
    q_group = select(Group).where(Group.id == group_id, Group.is_deleted == False)
    res_group = await db.execute(q_group)
    group = res_group.scalar_one_or_none()

    if not group:
        raise NotFound("Group does not exist")

    member = await get_member(db, group_id, user_id)

    if not member:
        raise NotAGroupMember("You are not a member of this group")

    return member
