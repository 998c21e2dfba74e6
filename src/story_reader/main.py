import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from story_reader.api import stories
from story_reader.config import settings
from story_reader.db.queries import get_story_count, get_view_event_count
from story_reader.db.session import get_async_session
from story_reader.logger import setup_logging
from story_reader.models.schemas import HealthResponse

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Story Reader", version="0.1.0", description="Story reading platform API")


def _get_cors_origins() -> list[str]:
    return [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_origin_regex=r"^http://localhost:\d+$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(stories.router)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health(session: AsyncSession = Depends(get_async_session)):
    return HealthResponse(
        status="ok",
        story_count=await get_story_count(session),
        view_event_count=await get_view_event_count(session),
    )
