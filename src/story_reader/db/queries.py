from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from story_reader.models.db import Story, StoryView


async def get_story_count(session: AsyncSession) -> int:
    result = await session.execute(select(func.count(Story.id)))
    return result.scalar_one()


async def get_view_event_count(session: AsyncSession) -> int:
    result = await session.execute(select(func.count(StoryView.id)))
    return result.scalar_one()


async def get_story_by_id(session: AsyncSession, story_id: str) -> Story | None:
    result = await session.execute(select(Story).where(Story.id == story_id))
    return result.scalar_one_or_none()
