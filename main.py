"""
Main Discord bot module for task management.

This module handles:
- Environment configuration and logging setup
- Bot initialization and Discord event handlers
- Registration of the /task slash command group
- Google Sheets integration for task storage
- Scheduled reminder posts and the keep-alive web endpoint

The bot automatically:
- Reminds the team about weekly and monthly recurring tasks
- Warns about deadlines one month, two weeks and one week ahead
- Highlights "Announce" genre tasks every Sunday
"""

import base64
import json
import logging
import os
import sys
from typing import Optional

import discord
from discord.ext import commands
from dotenv import load_dotenv

import health_server
from scheduler import TaskScheduler
from sheets_manager import GoogleSheetsManager
from task_commands import TaskCommands
from text_generator import TextGenerator

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('bot.log'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name, '').strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning(f"{name} must be a numeric Discord ID, got '{value}'. Ignoring it.")
        return None


# Bot configuration
BOT_TOKEN = os.getenv('DISCORD_BOT_TOKEN')
SPREADSHEET_ID = os.getenv('SPREADSHEET_ID', '')
GOOGLE_CREDENTIALS_PATH = os.getenv('GOOGLE_CREDENTIALS_PATH', 'credentials.json')
GOOGLE_CREDENTIALS_BASE64 = os.getenv('GOOGLE_CREDENTIALS_BASE64')
OPENAI_API_KEY = os.getenv('OPENAI_API_KEY', '')
OPENAI_MODEL = os.getenv('OPENAI_MODEL')
GUILD_ID = _optional_int('GUILD_ID')
GENERAL_CHANNEL_ID = _optional_int('GENERAL_CHANNEL_ID')
ANNOUNCE_CHANNEL_ID = _optional_int('ANNOUNCE_CHANNEL_ID')
MENTION_ROLE_ID = _optional_int('MENTION_ROLE_ID')
TIMEZONE = os.getenv('TIMEZONE', 'Asia/Tokyo')
PORT = int(os.getenv('PORT', '3000'))


def write_base64_credentials(encoded: str, credentials_path: str):
    """Decode base64 service account credentials (e.g. from Heroku config) to a file."""
    credentials_json = base64.b64decode(encoded).decode('utf-8')
    # Validate it's valid JSON
    json.loads(credentials_json)
    with open(credentials_path, 'w') as f:
        f.write(credentials_json)
    logger.info(f"Credentials decoded from GOOGLE_CREDENTIALS_BASE64 and written to {credentials_path}")


class TaskBot(commands.Bot):
    """Main Discord bot class for task management."""

    def __init__(self, sheets_manager: GoogleSheetsManager, text_generator: TextGenerator):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True

        super().__init__(command_prefix='!', intents=intents)

        self.sheets_manager = sheets_manager
        self.text_generator = text_generator
        self.scheduler = TaskScheduler(
            self,
            sheets_manager,
            text_generator,
            general_channel_id=GENERAL_CHANNEL_ID,
            announce_channel_id=ANNOUNCE_CHANNEL_ID,
            mention_role_id=MENTION_ROLE_ID,
            timezone=TIMEZONE
        )

        self.tree.add_command(TaskCommands(sheets_manager, text_generator))

    async def setup_hook(self):
        """Called when the bot is starting up."""
        # Sync slash commands. A guild sync is immediate, a global one can take up to an hour.
        try:
            if GUILD_ID:
                guild = discord.Object(id=GUILD_ID)
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                logger.info(f"Synced {len(synced)} command(s) to guild {GUILD_ID}")
            else:
                synced = await self.tree.sync()
                logger.info(f"Synced {len(synced)} command(s) globally")
        except discord.HTTPException as e:
            logger.error(f"Error syncing commands: {e}")

        try:
            self.sheets_manager.set_conditional_formatting()
        except Exception as e:
            logger.warning(f"Failed to apply conditional formatting: {e}")

        self.scheduler.start()

    async def on_ready(self):
        """Called when the bot is ready."""
        logger.info(f'{self.user} has logged in')
        logger.info(f'Bot is in {len(self.guilds)} guild(s)')

        activity = discord.Activity(
            type=discord.ActivityType.watching,
            name="your tasks"
        )
        await self.change_presence(activity=activity, status=discord.Status.online)

    async def close(self):
        self.scheduler.stop()
        await super().close()


def create_sheets_manager() -> GoogleSheetsManager:
    if GOOGLE_CREDENTIALS_BASE64:
        write_base64_credentials(GOOGLE_CREDENTIALS_BASE64, GOOGLE_CREDENTIALS_PATH)
    return GoogleSheetsManager(
        spreadsheet_id=SPREADSHEET_ID,
        credentials_path=GOOGLE_CREDENTIALS_PATH
    )


def main():
    """Main entry point."""
    if not BOT_TOKEN:
        logger.error("DISCORD_BOT_TOKEN not found in environment variables!")
        sys.exit(1)
    if not SPREADSHEET_ID:
        logger.error("SPREADSHEET_ID not found in environment variables!")
        sys.exit(1)

    try:
        sheets_manager = create_sheets_manager()
    except Exception as e:
        logger.exception(f"Failed to initialize Google Sheets Manager: {type(e).__name__}: {e}")
        sys.exit(1)

    text_generator = TextGenerator(api_key=OPENAI_API_KEY or None, model=OPENAI_MODEL)
    bot = TaskBot(sheets_manager, text_generator)

    health_server.start_in_background(PORT)

    try:
        bot.run(BOT_TOKEN, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except discord.LoginFailure as e:
        logger.error(f"Login failed: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
