"""Deliver reminder notifications to a Discord channel."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

import discord

from logger import logger


class Permission(str, Enum):
    """Delivery permission as reported by the host."""
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"  # not decided yet, worth asking again


class Notifier(ABC):
    """Notification-delivery collaborator used by the scheduler."""

    @abstractmethod
    async def request_permission(self) -> Permission:
        """Ask the host whether notifications can be delivered."""

    @abstractmethod
    async def deliver(self, title: str, body: str, tag: str) -> None:
        """Show a notification. ``tag`` identifies the scheduled task."""


class DiscordNotifier(Notifier):
    """Posts reminders into a single Discord channel.

    Permission maps onto the channel: granted when the bot can send messages
    there, default while the bot is still connecting, denied otherwise.
    """

    def __init__(self, bot: discord.Client, channel_id: int):
        self.bot = bot
        self.channel_id = channel_id

    async def _get_channel(self) -> Optional[discord.abc.Messageable]:
        channel = self.bot.get_channel(self.channel_id)
        if channel is not None:
            return channel
        try:
            return await self.bot.fetch_channel(self.channel_id)
        except (discord.NotFound, discord.Forbidden, discord.HTTPException) as e:
            logger.warning(f"Reminders channel {self.channel_id} unavailable: {e}")
            return None

    async def request_permission(self) -> Permission:
        if not self.bot.is_ready():
            return Permission.DEFAULT

        if not self.channel_id:
            logger.warning("REMINDERS_CHANNEL_ID not set, notifications disabled")
            return Permission.DENIED

        channel = await self._get_channel()
        if channel is None:
            return Permission.DENIED

        guild = getattr(channel, "guild", None)
        if guild is None:
            # DMs and group chats have no permission overwrites
            return Permission.GRANTED

        perms = channel.permissions_for(guild.me)
        return Permission.GRANTED if perms.send_messages else Permission.DENIED

    async def deliver(self, title: str, body: str, tag: str) -> None:
        channel = await self._get_channel()
        if channel is None:
            raise RuntimeError(f"Reminders channel {self.channel_id} not found")

        embed = discord.Embed(title=title, description=body or None)
        embed.set_footer(text=tag)
        await channel.send(content="**Reminder**", embed=embed)
