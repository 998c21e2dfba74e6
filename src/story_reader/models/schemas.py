from datetime import datetime

from pydantic import BaseModel


class StoryDetail(BaseModel):
    id: str
    title: str
    description: str | None
    status: str
    author_id: str | None
    view_count: int
    created_at: datetime | None
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class ViewStatsResponse(BaseModel):
    story_id: str
    total_views: int
    last_24_hours: int
    last_7_days: int
    last_30_days: int


class HealthResponse(BaseModel):
    status: str
    story_count: int
    view_event_count: int
