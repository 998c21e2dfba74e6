import asyncio

import click

from story_reader.db.session import AsyncSessionLocal, sync_engine
from story_reader.models.db import Base
from story_reader.services.views import StoryNotFoundError, ViewStats, get_view_stats


async def _load_stats(story_id: str) -> ViewStats:
    async with AsyncSessionLocal() as session:
        return await get_view_stats(session, story_id)


def format_stats(story_id: str, stats: ViewStats) -> list[str]:
    return [
        f"Story {story_id}",
        f"  total views:   {stats.total_views}",
        f"  last 24 hours: {stats.last_24_hours}",
        f"  last 7 days:   {stats.last_7_days}",
        f"  last 30 days:  {stats.last_30_days}",
    ]


@click.command()
@click.argument("story_id")
@click.option("--init-db", is_flag=True, help="Create missing tables before querying.")
def main(story_id: str, init_db: bool) -> None:
    """Print view statistics for STORY_ID."""
    if init_db:
        Base.metadata.create_all(sync_engine)

    try:
        stats = asyncio.run(_load_stats(story_id))
    except StoryNotFoundError:
        raise click.ClickException(f"Story {story_id} not found.")

    for line in format_stats(story_id, stats):
        click.echo(line)


if __name__ == "__main__":
    main()
