from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from story_reader.config import settings
from story_reader.db.queries import get_story_by_id
from story_reader.db.session import get_async_session
from story_reader.models.schemas import StoryDetail, ViewStatsResponse
from story_reader.services.reading_history import record_reading_safely
from story_reader.services.views import StoryNotFoundError, ViewerFingerprint, get_view_stats, record_view

router = APIRouter(tags=["stories"])


def _client_ip(request: Request) -> str | None:
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else None


def viewer_fingerprint(
    request: Request,
    x_user_id: str | None = Header(None, description="Authenticated user id set by the auth gateway"),
) -> ViewerFingerprint:
    return ViewerFingerprint(
        user_id=x_user_id,
        ip=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )


@router.get("/stories/{story_id}", response_model=StoryDetail)
async def get_story(
    story_id: str,
    fingerprint: ViewerFingerprint = Depends(viewer_fingerprint),
    session: AsyncSession = Depends(get_async_session),
):
    story = await get_story_by_id(session, story_id)
    if story is None:
        raise HTTPException(status_code=404, detail="Story not found")

    detail = StoryDetail.model_validate(story)

    try:
        view_count = await record_view(session, story_id, fingerprint)
    except StoryNotFoundError:
        raise HTTPException(status_code=404, detail="Story not found")

    if fingerprint.user_id is not None:
        await record_reading_safely(session, fingerprint.user_id, story_id)

    detail.view_count = view_count
    return detail


@router.get("/stories/{story_id}/views", response_model=ViewStatsResponse)
async def get_story_view_stats(
    story_id: str,
    fingerprint: ViewerFingerprint = Depends(viewer_fingerprint),
    session: AsyncSession = Depends(get_async_session),
):
    story = await get_story_by_id(session, story_id)
    if story is None:
        raise HTTPException(status_code=404, detail="Story not found")
    if fingerprint.user_id is None or fingerprint.user_id != story.author_id:
        raise HTTPException(status_code=403, detail="Only the author can view statistics for this story")

    try:
        stats = await get_view_stats(session, story_id)
    except StoryNotFoundError:
        raise HTTPException(status_code=404, detail="Story not found")
    return ViewStatsResponse(
        story_id=story_id,
        total_views=stats.total_views,
        last_24_hours=stats.last_24_hours,
        last_7_days=stats.last_7_days,
        last_30_days=stats.last_30_days,
    )
