"""Story view counting with per-viewer deduplication.

A view is counted at most once per dedup window for each resolved identity:
the authenticated user id when present, otherwise the client ip (narrowed by
user agent when one is sent). Accepted views are appended to ``story_views``
and bump the denormalised ``stories.view_count`` counter.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from story_reader.config import settings
from story_reader.models.db import Story, StoryView

logger = logging.getLogger(__name__)

STATS_WINDOWS: dict[str, timedelta] = {
    "last_24_hours": timedelta(hours=24),
    "last_7_days": timedelta(days=7),
    "last_30_days": timedelta(days=30),
}


class StoryNotFoundError(LookupError):
    def __init__(self, story_id: str) -> None:
        super().__init__(f"Story not found: {story_id}")
        self.story_id = story_id


@dataclass(frozen=True)
class ViewerFingerprint:
    user_id: str | None = None
    ip: str | None = None
    user_agent: str | None = None

    def __post_init__(self) -> None:
        for name in ("user_id", "ip", "user_agent"):
            if getattr(self, name) == "":
                object.__setattr__(self, name, None)


@dataclass
class ViewStats:
    total_views: int
    last_24_hours: int
    last_7_days: int
    last_30_days: int


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def dedup_window() -> timedelta:
    return timedelta(minutes=settings.view_dedup_window_minutes)


def resolve_identity(fingerprint: ViewerFingerprint) -> list:
    """Column criteria that identify the viewer for deduplication."""
    if fingerprint.user_id is not None:
        return [StoryView.user_id == fingerprint.user_id]

    if fingerprint.ip is not None:
        criteria = [StoryView.ip == fingerprint.ip]
        if fingerprint.user_agent is not None:
            criteria.append(StoryView.user_agent == fingerprint.user_agent)
        return criteria

    # No user and no ip: all such viewers sharing a user agent look alike.
    criteria = [StoryView.user_id.is_(None), StoryView.ip.is_(None)]
    if fingerprint.user_agent is not None:
        criteria.append(StoryView.user_agent == fingerprint.user_agent)
    else:
        criteria.append(StoryView.user_agent.is_(None))
    return criteria


async def record_view(
    session: AsyncSession,
    story_id: str,
    fingerprint: ViewerFingerprint,
    now: datetime | None = None,
) -> int:
    """Count a view unless the same identity viewed the story within the dedup window.

    The story row stays locked from the duplicate check until commit, so
    concurrent calls for one identity cannot both be counted.

    Returns the story's view count after the call.
    Raises StoryNotFoundError without writing anything when the story does not exist.
    """
    now = now or _utcnow()
    window_start = now - dedup_window()

    try:
        story_result = await session.execute(
            select(Story.id, Story.view_count).where(Story.id == story_id).with_for_update()
        )
        row = story_result.first()
        if row is None:
            raise StoryNotFoundError(story_id)

        recent_result = await session.execute(
            select(StoryView.id)
            .where(
                StoryView.story_id == story_id,
                StoryView.viewed_at >= window_start,
                *resolve_identity(fingerprint),
            )
            .limit(1)
        )
        if recent_result.first() is not None:
            view_count = row.view_count
            await session.commit()
            return view_count

        session.add(
            StoryView(
                story_id=story_id,
                user_id=fingerprint.user_id,
                ip=fingerprint.ip,
                user_agent=fingerprint.user_agent,
                viewed_at=now,
            )
        )
        update_result = await session.execute(
            update(Story)
            .where(Story.id == story_id)
            .values(view_count=Story.view_count + 1)
            .returning(Story.view_count)
        )
        view_count = update_result.scalar_one()
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.debug("Counted view of story %s (view_count=%d)", story_id, view_count)
    return view_count


async def _count_views_since(session: AsyncSession, story_id: str, since: datetime) -> int:
    result = await session.execute(
        select(func.count(StoryView.id)).where(StoryView.story_id == story_id, StoryView.viewed_at > since)
    )
    return result.scalar_one()


async def get_view_stats(session: AsyncSession, story_id: str, now: datetime | None = None) -> ViewStats:
    now = now or _utcnow()

    result = await session.execute(select(Story.view_count).where(Story.id == story_id))
    total_views = result.scalar_one_or_none()
    if total_views is None:
        raise StoryNotFoundError(story_id)

    windowed = {
        name: await _count_views_since(session, story_id, now - window) for name, window in STATS_WINDOWS.items()
    }
    return ViewStats(total_views=total_views, **windowed)
