# app/utils/activity_helpers.py
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.activity_models import UserActivity


def log_user_activity(db: AsyncSession, user, message: str) -> UserActivity | None:
    """
    Stage an audit row on the caller's session so it commits (or rolls back)
    together with the change it describes. Anonymous calls are not recorded.
    """
    if user is None:
        return None
    activity = UserActivity(
        user_id=user.id,
        username=user.username,
        message=message,
    )
    db.add(activity)
    return activity
