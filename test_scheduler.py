"""Tests for scheduled reminder posts."""

import unittest
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import discord

from scheduler import TaskScheduler, bucket_deadlines


def deadline_task(name, deadline, user_id="1", task_type="main"):
    return {"name": name, "deadline": deadline, "user_id": user_id, "type": task_type}


def make_channel():
    channel = MagicMock(spec=discord.TextChannel)
    channel.send = AsyncMock()
    return channel


class BucketDeadlinesTests(unittest.TestCase):
    def test_buckets_exact_day_offsets(self) -> None:
        today = date(2026, 10, 17)
        tasks = [
            deadline_task("month", "2026-11-16"),
            deadline_task("two-weeks", "2026-10-31"),
            deadline_task("week", "2026-10-24"),
            deadline_task("eight-days", "2026-10-25"),
            deadline_task("past", "2026-10-10"),
        ]
        buckets = bucket_deadlines(tasks, today)
        self.assertEqual(list(buckets), ["1 month", "2 weeks", "1 week"])
        self.assertEqual([t["name"] for t in buckets["1 month"]], ["month"])
        self.assertEqual([t["name"] for t in buckets["2 weeks"]], ["two-weeks"])
        self.assertEqual([t["name"] for t in buckets["1 week"]], ["week"])

    def test_invalid_deadline_is_skipped(self) -> None:
        with self.assertLogs("scheduler", level="WARNING"):
            buckets = bucket_deadlines([deadline_task("bad", "soon")], date(2026, 10, 17))
        self.assertFalse(any(buckets.values()))


class TaskSchedulerTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.channel = make_channel()
        self.announce_channel = make_channel()
        channels = {100: self.channel, 200: self.announce_channel}

        self.bot = MagicMock()
        self.bot.get_channel.side_effect = channels.get
        self.bot.fetch_channel = AsyncMock(side_effect=discord.NotFound(MagicMock(status=404), "missing"))

        self.sheets = MagicMock()
        self.generator = MagicMock()
        self.generator.generate_character_line = AsyncMock(return_value="Stay sharp!")

        self.scheduler = TaskScheduler(
            self.bot,
            self.sheets,
            self.generator,
            general_channel_id=100,
            announce_channel_id=200,
            mention_role_id=300,
        )

    async def test_weekly_mentions(self) -> None:
        self.sheets.get_recurrent_tasks.return_value = [
            {"name": "Chores", "user_id": "2"},
            {"name": "Backup", "user_id": "3"},
        ]
        await self.scheduler.send_weekly_task_mentions()

        self.sheets.get_recurrent_tasks.assert_called_once_with("weekly")
        kwargs = self.channel.send.call_args.kwargs
        self.assertEqual(kwargs["content"], "<@&300>")
        embed = kwargs["embed"]
        self.assertEqual(embed.title, "Weekly Task Reminder")
        self.assertTrue(embed.description.startswith("Stay sharp!\n\n"))
        self.assertIn("- **Chores** (<@2>)", embed.description)
        self.assertIn("- **Backup** (<@3>)", embed.description)

    async def test_monthly_mentions_without_role(self) -> None:
        self.scheduler.mention_role_id = None
        self.generator.generate_character_line.return_value = ""
        self.sheets.get_recurrent_tasks.return_value = [{"name": "Invoices", "user_id": "4"}]

        await self.scheduler.send_monthly_task_mentions()

        self.sheets.get_recurrent_tasks.assert_called_once_with("monthly")
        kwargs = self.channel.send.call_args.kwargs
        self.assertIsNone(kwargs["content"])
        self.assertTrue(kwargs["embed"].description.startswith("Here are this month's"))

    async def test_no_recurrent_tasks_sends_nothing(self) -> None:
        self.sheets.get_recurrent_tasks.return_value = []
        await self.scheduler.send_weekly_task_mentions()
        self.channel.send.assert_not_awaited()

    async def test_check_deadlines_sends_one_embed_per_bucket(self) -> None:
        self.sheets.get_all_tasks_with_deadlines.return_value = [
            deadline_task("Report", "2026-11-16", "1"),
            deadline_task("Report-draft", "2026-10-24", "1", "sub"),
            deadline_task("Slides", "2026-10-24", "2"),
        ]
        await self.scheduler.check_deadlines(today=date(2026, 10, 17))

        self.assertEqual(self.channel.send.await_count, 2)
        first, second = [call.kwargs["embed"] for call in self.channel.send.call_args_list]
        self.assertEqual(first.title, "Deadline Reminder: 1 month left")
        self.assertIn("- **Report** (<@1>) - Deadline: 2026-11-16", first.description)
        self.assertEqual(second.title, "Deadline Reminder: 1 week left")
        self.assertIn("Report-draft", second.description)
        self.assertIn("Slides", second.description)

        prompt = self.generator.generate_character_line.call_args_list[1][0][0]
        self.assertIn("1 week", prompt)

    async def test_check_deadlines_nothing_due(self) -> None:
        self.sheets.get_all_tasks_with_deadlines.return_value = [deadline_task("Later", "2027-06-01")]
        await self.scheduler.check_deadlines(today=date(2026, 10, 17))
        self.channel.send.assert_not_awaited()

    async def test_missing_channel_is_logged(self) -> None:
        self.scheduler.general_channel_id = 999
        self.sheets.get_recurrent_tasks.return_value = [{"name": "Chores", "user_id": "2"}]

        with self.assertLogs("scheduler", level="ERROR"):
            await self.scheduler.send_weekly_task_mentions()
        self.bot.fetch_channel.assert_awaited_once_with(999)
        self.channel.send.assert_not_awaited()

    async def test_unset_channel_is_skipped(self) -> None:
        self.scheduler.announce_channel_id = None
        with self.assertLogs("scheduler", level="WARNING"):
            await self.scheduler.send_announce_tasks()
        self.sheets.get_tasks_by_genre_for_notifications.assert_not_called()

    async def test_announce_tasks(self) -> None:
        self.sheets.get_tasks_by_genre_for_notifications.return_value = [
            {"name": "Festival", "deadline": "2026-12-24", "user_id": "1"},
        ]
        await self.scheduler.send_announce_tasks()

        self.sheets.get_tasks_by_genre_for_notifications.assert_called_once_with("Announce", True)
        embed = self.announce_channel.send.call_args.kwargs["embed"]
        self.assertIn("- **Festival** (Deadline: 2026-12-24)", embed.description)
        self.channel.send.assert_not_awaited()

    async def test_job_errors_are_logged(self) -> None:
        self.sheets.get_all_tasks_with_deadlines.side_effect = Exception("quota exceeded")
        with self.assertLogs("scheduler", level="ERROR"):
            await self.scheduler.check_deadlines()

    async def test_start_registers_jobs_once(self) -> None:
        self.scheduler.start()
        self.addCleanup(self.scheduler.stop)
        with self.assertLogs("scheduler", level="WARNING"):
            self.scheduler.start()

        job_ids = {job.id for job in self.scheduler.scheduler.get_jobs()}
        self.assertEqual(job_ids, {"weekly_tasks", "monthly_tasks", "deadline_check", "announce_tasks"})

    def test_unknown_timezone_falls_back(self) -> None:
        scheduler = TaskScheduler(self.bot, self.sheets, self.generator, timezone="Mars/Olympus")
        self.assertEqual(scheduler.timezone.zone, "Asia/Tokyo")


if __name__ == "__main__":
    unittest.main()
