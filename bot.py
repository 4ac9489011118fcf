"""Discord Reminders - Main Bot.

Manages personal reminders from one Discord channel and posts the
notifications back into it when they come due.
"""

from typing import Optional

import discord
from discord.ext import commands

from logger import logger
from config import DISCORD_TOKEN, REMINDERS_CHANNEL_ID

from domains.reminders import (
    DiscordNotifier,
    JsonReminderStorage,
    NotificationScheduler,
    ReminderStore,
    RemindersHandler,
    SettingsService,
)
from domains.reminders.handler import split_message

# Initialize bot
intents = discord.Intents.default()
intents.message_content = True
bot = commands.Bot(command_prefix="/", intents=intents)

# Reminders domain, started in on_ready
scheduler = NotificationScheduler(DiscordNotifier(bot, REMINDERS_CHANNEL_ID))
store = ReminderStore(JsonReminderStorage(), scheduler)
settings = SettingsService()
handler = RemindersHandler(store, settings)

_started = False


async def start_reminders() -> int:
    """Load reminders and re-arm their notifications.

    Jobs do not survive a restart, so every active reminder is scheduled
    again from what is on disk.

    Returns:
        Count of reminders armed
    """
    scheduler.start()
    await scheduler.initialize()
    reminders = await store.load()
    armed = await scheduler.schedule_all(reminders)
    logger.info(f"Armed {armed} of {len(reminders)} reminders")
    return armed


@bot.event
async def on_ready():
    """Called when bot is connected and ready."""
    global _started
    logger.info(f"Logged in as {bot.user}")

    # on_ready fires again after reconnects
    if _started:
        return
    _started = True

    try:
        await start_reminders()
    except Exception as e:
        logger.error(f"Failed to start reminders: {e}")


@bot.event
async def on_message(message):
    """Handle incoming messages."""
    if message.author.bot:
        return

    if message.channel.id != REMINDERS_CHANNEL_ID:
        return

    response: Optional[str] = await handler.handle(message.content)
    if not response:
        return

    for chunk in split_message(response):
        await message.channel.send(chunk)


@bot.event
async def on_error(event, *args, **kwargs):
    """Handle errors."""
    logger.error(f"Bot error in {event}: {args}")


def main():
    """Entry point."""
    if not DISCORD_TOKEN:
        logger.error("DISCORD_TOKEN not set")
        return

    if not REMINDERS_CHANNEL_ID:
        logger.warning("REMINDERS_CHANNEL_ID not set, notifications will not be delivered")

    logger.info("Starting Discord Reminders...")
    try:
        bot.run(DISCORD_TOKEN)
    finally:
        scheduler.shutdown()


if __name__ == "__main__":
    main()
