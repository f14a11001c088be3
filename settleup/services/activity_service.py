import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from settleup.core.utils import new_id
from settleup.models.activity import Activity
from settleup.schemas.activity import ActivityType

logger = logging.getLogger(__name__)


def log_activity(
    db: AsyncSession,
    user_id: str,
    activity_type: ActivityType,
    description: str,
    group_id: str | None = None,
    related_id: str | None = None,
) -> Activity:
    # added to the caller's unit of work, committed with it
    activity = Activity(
        id=new_id("act"),
        user_id=user_id,
        group_id=group_id,
        type=ActivityType(activity_type).value,
        description=description,
        related_id=related_id,
    )
    db.add(activity)
    return activity


async def list_activities(
    db: AsyncSession,
    group_id: str,
    activity_type: ActivityType | str | None = None,
    search: str | None = None,
):
    """Group activity feed, newest first.

    ``activity_type`` narrows to one type (unrecognised stored types count as
    ``unknown``); ``search`` is a case-insensitive match on the description.
    """
    q = (
        select(Activity)
        .where(Activity.group_id == group_id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
    )

    res = await db.execute(q)
    activities = res.scalars().all()

    if activity_type is not None:
        wanted = ActivityType(activity_type)
        activities = [a for a in activities if ActivityType(a.type) == wanted]

    if search:
        needle = search.lower()
        activities = [a for a in activities if needle in (a.description or "").lower()]

    return activities
