"""
Scheduler module for reminder posts.

Uses APScheduler to schedule:
- Weekly recurring task reminders (Monday 9:00)
- Monthly recurring task reminders (1st of the month, 9:00)
- Deadline warnings one month, two weeks and one week ahead (daily 9:00)
- "Announce" genre highlights (Sunday 10:00)
"""

import logging
from datetime import date, datetime
from typing import Dict, List, Optional

import discord
import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

import characters
from sheets_manager import DATE_FORMAT

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Asia/Tokyo"
ANNOUNCE_GENRE = "Announce"

# Days before the deadline -> label used in the reminder
DEADLINE_BUCKETS = {
    30: "1 month",
    14: "2 weeks",
    7: "1 week",
}

EMBED_DESCRIPTION_LIMIT = 4096


def bucket_deadlines(tasks: List[Dict], today: date) -> Dict[str, List[Dict]]:
    """
    Group tasks whose deadline is exactly 30, 14 or 7 days away.

    Tasks with an unparseable deadline are logged and skipped.

    Returns:
        Mapping of bucket label to tasks, in DEADLINE_BUCKETS order
    """
    buckets: Dict[str, List[Dict]] = {label: [] for label in DEADLINE_BUCKETS.values()}
    for task in tasks:
        try:
            deadline = datetime.strptime(task["deadline"].strip(), DATE_FORMAT).date()
        except ValueError:
            logger.warning(f"Skipping task '{task['name']}' with invalid deadline '{task['deadline']}'")
            continue
        label = DEADLINE_BUCKETS.get((deadline - today).days)
        if label:
            buckets[label].append(task)
    return buckets


def _truncate(text: str) -> str:
    if len(text) > EMBED_DESCRIPTION_LIMIT:
        return text[:EMBED_DESCRIPTION_LIMIT - 3] + "..."
    return text


class TaskScheduler:
    """Manages scheduled reminder posts."""

    def __init__(
        self,
        bot: discord.Client,
        sheets_manager,
        text_generator,
        general_channel_id: Optional[int] = None,
        announce_channel_id: Optional[int] = None,
        mention_role_id: Optional[int] = None,
        timezone: Optional[str] = None
    ):
        """
        Initialize the scheduler.

        Args:
            bot: Discord bot instance
            sheets_manager: GoogleSheetsManager instance
            text_generator: TextGenerator instance
            general_channel_id: Channel for recurring and deadline reminders
            announce_channel_id: Channel for "Announce" genre highlights
            mention_role_id: Optional role to ping on recurring reminders
            timezone: Timezone string (e.g., 'Asia/Tokyo'). Defaults to Asia/Tokyo.
        """
        self.bot = bot
        self.sheets_manager = sheets_manager
        self.text_generator = text_generator
        self.general_channel_id = general_channel_id
        self.announce_channel_id = announce_channel_id
        self.mention_role_id = mention_role_id
        self.scheduler = AsyncIOScheduler()

        try:
            self.timezone = pytz.timezone(timezone or DEFAULT_TIMEZONE)
        except pytz.exceptions.UnknownTimeZoneError:
            logger.warning(f"Unknown timezone '{timezone}', defaulting to {DEFAULT_TIMEZONE}")
            self.timezone = pytz.timezone(DEFAULT_TIMEZONE)

        self.is_running = False

    async def _get_channel(self, channel_id: Optional[int], setting: str):
        if not channel_id:
            logger.warning(f"{setting} is not set. Cannot send reminder.")
            return None

        channel = self.bot.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self.bot.fetch_channel(channel_id)
            except discord.HTTPException as e:
                logger.error(f"Channel {channel_id} not found: {e}")
                return None

        if not isinstance(channel, discord.abc.Messageable):
            logger.error(f"Channel {channel_id} is not a text channel.")
            return None
        return channel

    async def _build_embed(self, prompt_builder, title: str, body: str, color: discord.Color, footer: str) -> discord.Embed:
        character = characters.random_character()
        line = await self.text_generator.generate_character_line(prompt_builder(character.persona))
        description = f"{line}\n\n{body}" if line else body

        embed = discord.Embed(
            title=title,
            description=_truncate(description),
            color=color
        )
        embed.set_author(name=character.name, icon_url=character.image_url)
        embed.set_footer(text=footer)
        embed.timestamp = datetime.now(self.timezone)
        return embed

    async def send_recurrent_task_mentions(self, recurrent_type: str = "weekly"):
        """Post the list of weekly or monthly recurring tasks."""
        try:
            tasks = self.sheets_manager.get_recurrent_tasks(recurrent_type)
            if not tasks:
                logger.info(f"No {recurrent_type} tasks found.")
                return

            channel = await self._get_channel(self.general_channel_id, "GENERAL_CHANNEL_ID")
            if channel is None:
                return

            period = "week" if recurrent_type == "weekly" else "month"
            lines = [f"Here are this {period}'s recurring tasks. Let's get them done!"]
            lines += [f"- **{task['name']}** (<@{task['user_id']}>)" for task in tasks]

            prompt_builder = (
                characters.weekly_notification if recurrent_type == "weekly"
                else characters.monthly_notification
            )
            embed = await self._build_embed(
                prompt_builder,
                title=f"{recurrent_type.capitalize()} Task Reminder",
                body="\n".join(lines),
                color=discord.Color.gold(),
                footer="Automatic reminder"
            )

            content = f"<@&{self.mention_role_id}>" if self.mention_role_id else None
            await channel.send(content=content, embed=embed)
            logger.info(f"Sent {recurrent_type} task reminder ({len(tasks)} task(s))")

        except Exception as e:
            logger.error(f"Error sending {recurrent_type} task reminder: {e}")

    async def send_weekly_task_mentions(self):
        await self.send_recurrent_task_mentions("weekly")

    async def send_monthly_task_mentions(self):
        await self.send_recurrent_task_mentions("monthly")

    async def check_deadlines(self, today: Optional[date] = None):
        """Warn about tasks due in exactly one month, two weeks or one week."""
        try:
            tasks = self.sheets_manager.get_all_tasks_with_deadlines()
            if not tasks:
                logger.info("No tasks with deadlines found.")
                return

            today = today or datetime.now(self.timezone).date()
            buckets = bucket_deadlines(tasks, today)
            if not any(buckets.values()):
                logger.info(f"No deadline reminders due on {today}")
                return

            channel = await self._get_channel(self.general_channel_id, "GENERAL_CHANNEL_ID")
            if channel is None:
                return

            for label, due_tasks in buckets.items():
                if not due_tasks:
                    continue
                lines = [f"These tasks are due in {label}!"]
                lines += [
                    f"- **{task['name']}** (<@{task['user_id']}>) - Deadline: {task['deadline']}"
                    for task in due_tasks
                ]
                embed = await self._build_embed(
                    lambda persona, label=label: characters.deadline_notification(label, persona),
                    title=f"Deadline Reminder: {label} left",
                    body="\n".join(lines),
                    color=discord.Color.orange(),
                    footer="Automatic reminder"
                )
                await channel.send(embed=embed)
                logger.info(f"Sent {label} deadline reminder ({len(due_tasks)} task(s))")

        except Exception as e:
            logger.error(f"Error checking deadlines: {e}")

    async def send_announce_tasks(self):
        """Post main tasks in the Announce genre that have a deadline."""
        try:
            channel = await self._get_channel(self.announce_channel_id, "ANNOUNCE_CHANNEL_ID")
            if channel is None:
                return

            tasks = self.sheets_manager.get_tasks_by_genre_for_notifications(ANNOUNCE_GENRE, True)
            if not tasks:
                logger.info(f"No {ANNOUNCE_GENRE} tasks with deadlines found.")
                return

            lines = ["This week's featured tasks!"]
            lines += [f"- **{task['name']}** (Deadline: {task['deadline']})" for task in tasks]
            embed = await self._build_embed(
                characters.announce_notification,
                title=f"{ANNOUNCE_GENRE} Tasks",
                body="\n".join(lines),
                color=discord.Color.purple(),
                footer=f"Automatic reminder ({ANNOUNCE_GENRE})"
            )
            await channel.send(embed=embed)
            logger.info(f"Sent {ANNOUNCE_GENRE} reminder ({len(tasks)} task(s))")

        except Exception as e:
            logger.error(f"Error sending {ANNOUNCE_GENRE} tasks: {e}")

    def start(self):
        """Register the cron jobs and start the scheduler."""
        if self.is_running:
            logger.warning("Scheduler is already running.")
            return

        self.scheduler.add_job(
            self.send_weekly_task_mentions,
            trigger=CronTrigger(day_of_week="mon", hour=9, minute=0, timezone=self.timezone),
            id="weekly_tasks",
            name="Weekly Task Reminder",
            replace_existing=True
        )
        self.scheduler.add_job(
            self.send_monthly_task_mentions,
            trigger=CronTrigger(day=1, hour=9, minute=0, timezone=self.timezone),
            id="monthly_tasks",
            name="Monthly Task Reminder",
            replace_existing=True
        )
        self.scheduler.add_job(
            self.check_deadlines,
            trigger=CronTrigger(hour=9, minute=0, timezone=self.timezone),
            id="deadline_check",
            name="Deadline Reminder",
            replace_existing=True
        )
        self.scheduler.add_job(
            self.send_announce_tasks,
            trigger=CronTrigger(day_of_week="sun", hour=10, minute=0, timezone=self.timezone),
            id="announce_tasks",
            name="Announce Task Reminder",
            replace_existing=True
        )

        self.scheduler.start()
        self.is_running = True
        logger.info(f"Scheduler started ({self.timezone.zone})")

    def stop(self):
        """Stop the scheduler."""
        if self.is_running:
            self.scheduler.shutdown()
            self.is_running = False
            logger.info("Scheduler stopped")
