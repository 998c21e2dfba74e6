import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from sqlite_support import SqliteTestCase
from story_reader.models.db import ReadingHistory
from story_reader.services.reading_history import record_reading_safely, touch_reading_history

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


class TouchReadingHistoryTests(SqliteTestCase):
    async def _entries(self) -> list[ReadingHistory]:
        result = await self.session.execute(select(ReadingHistory))
        return list(result.scalars().all())

    async def test_first_read_creates_entry(self) -> None:
        entry = await touch_reading_history(self.session, "u1", "story-1", now=NOW)

        self.assertEqual(entry.user_id, "u1")
        self.assertEqual(entry.story_id, "story-1")
        self.assertEqual(len(await self._entries()), 1)

    async def test_repeat_read_moves_last_read_at_forward(self) -> None:
        await touch_reading_history(self.session, "u1", "story-1", now=NOW)
        later = NOW + timedelta(days=2)

        entry = await touch_reading_history(self.session, "u1", "story-1", now=later)

        entries = await self._entries()
        self.assertEqual(len(entries), 1)
        self.assertIs(entries[0], entry)
        self.assertEqual(entry.last_read_at, later)

    async def test_safe_recording_succeeds_against_database(self) -> None:
        self.assertTrue(await record_reading_safely(self.session, "u1", "story-1"))
        self.assertEqual(len(await self._entries()), 1)

    async def test_unknown_user_is_logged_not_raised(self) -> None:
        with self.assertLogs("story_reader.services.reading_history", level="ERROR"):
            recorded = await record_reading_safely(self.session, "ghost", "story-1")

        self.assertFalse(recorded)
        self.assertEqual(await self._entries(), [])


class RecordReadingSafelyTests(unittest.IsolatedAsyncioTestCase):
    async def test_database_errors_are_logged_and_swallowed(self) -> None:
        session = AsyncMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("connection reset"))

        with self.assertLogs("story_reader.services.reading_history", level="ERROR") as logs:
            recorded = await record_reading_safely(session, "u1", "story-1")

        self.assertFalse(recorded)
        session.rollback.assert_awaited_once()
        self.assertIn("Error recording reading history", logs.output[0])

    async def test_non_database_errors_are_swallowed_too(self) -> None:
        session = AsyncMock()

        with (
            patch(
                "story_reader.services.reading_history.touch_reading_history",
                AsyncMock(side_effect=ValueError("bad history row")),
            ),
            self.assertLogs("story_reader.services.reading_history", level="ERROR"),
        ):
            recorded = await record_reading_safely(session, "u1", "story-1")

        self.assertFalse(recorded)
        session.rollback.assert_awaited_once()


if __name__ == "__main__":
    unittest.main()
