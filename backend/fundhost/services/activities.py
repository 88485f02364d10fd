"""Activities — append audit entries for member and ledger events."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from fundhost.core.domain_types import ActivityType, CollectiveId, UserId
from fundhost.models.activity import Activity

logger = logging.getLogger(__name__)


def record_activity(
    db: AsyncSession,
    activity_type: ActivityType,
    collective_id: CollectiveId | None = None,
    user_id: UserId | None = None,
    transaction_id: int | None = None,
    data: dict | None = None,
) -> Activity:
    """Stage an activity in the current unit of work (the caller commits)."""
    activity = Activity(
        type=activity_type.value,
        collective_id=collective_id,
        user_id=user_id,
        transaction_id=transaction_id,
        data=data or {},
    )
    db.add(activity)
    logger.debug(
        f"Activity {activity_type.value}",
        extra={"collective_id": collective_id, "user_id": user_id},
    )
    return activity
