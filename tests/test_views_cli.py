import unittest
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from story_reader.cli import views
from story_reader.services.views import StoryNotFoundError, ViewStats


class ViewsCliTests(unittest.TestCase):
    def test_prints_stats_for_story(self) -> None:
        stats = ViewStats(total_views=42, last_24_hours=2, last_7_days=10, last_30_days=30)
        runner = CliRunner()

        with patch("story_reader.cli.views._load_stats", AsyncMock(return_value=stats)) as mock_load:
            result = runner.invoke(views.main, ["story-1"])

        self.assertEqual(result.exit_code, 0, msg=result.output)
        self.assertIn("Story story-1", result.output)
        self.assertIn("total views:   42", result.output)
        self.assertIn("last 30 days:  30", result.output)
        mock_load.assert_awaited_once_with("story-1")

    def test_missing_story_exits_with_error(self) -> None:
        runner = CliRunner()

        with patch(
            "story_reader.cli.views._load_stats",
            AsyncMock(side_effect=StoryNotFoundError("missing")),
        ):
            result = runner.invoke(views.main, ["missing"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Story missing not found.", result.output)

    def test_init_db_creates_tables_first(self) -> None:
        stats = ViewStats(total_views=0, last_24_hours=0, last_7_days=0, last_30_days=0)
        runner = CliRunner()

        with (
            patch("story_reader.cli.views.Base.metadata.create_all") as mock_create_all,
            patch("story_reader.cli.views._load_stats", AsyncMock(return_value=stats)),
        ):
            result = runner.invoke(views.main, ["story-1", "--init-db"])

        self.assertEqual(result.exit_code, 0, msg=result.output)
        mock_create_all.assert_called_once_with(views.sync_engine)


if __name__ == "__main__":
    unittest.main()
