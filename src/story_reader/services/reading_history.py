import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from story_reader.models.db import ReadingHistory

logger = logging.getLogger(__name__)


async def touch_reading_history(
    session: AsyncSession,
    user_id: str,
    story_id: str,
    now: datetime | None = None,
) -> ReadingHistory:
    """Create the (user, story) history entry or move its last_read_at forward."""
    now = now or datetime.now(timezone.utc)

    result = await session.execute(
        select(ReadingHistory).where(ReadingHistory.user_id == user_id, ReadingHistory.story_id == story_id)
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        entry = ReadingHistory(user_id=user_id, story_id=story_id, last_read_at=now)
        session.add(entry)
    else:
        entry.last_read_at = now

    await session.commit()
    return entry


async def record_reading_safely(session: AsyncSession, user_id: str, story_id: str) -> bool:
    """Update reading history without ever failing the surrounding request.

    Returns False when the update failed and was logged instead of raised.
    """
    try:
        await touch_reading_history(session, user_id, story_id)
    except Exception:
        await session.rollback()
        logger.exception("Error recording reading history for user %s, story %s", user_id, story_id)
        return False
    return True
