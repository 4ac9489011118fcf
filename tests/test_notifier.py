"""Tests for Discord notification delivery."""

from unittest.mock import AsyncMock, Mock

import discord
import pytest

from domains.reminders.notifier import DiscordNotifier, Permission


def make_bot(channel=None, ready=True):
    bot = Mock()
    bot.is_ready.return_value = ready
    bot.get_channel.return_value = channel
    bot.fetch_channel = AsyncMock(side_effect=discord.NotFound(Mock(status=404, reason="Not Found"), "Unknown Channel"))
    return bot


def make_channel(can_send=True):
    channel = Mock()
    channel.permissions_for.return_value = Mock(send_messages=can_send)
    channel.send = AsyncMock()
    return channel


@pytest.mark.asyncio
async def test_permission_default_until_ready():
    notifier = DiscordNotifier(make_bot(make_channel(), ready=False), 123)
    assert await notifier.request_permission() is Permission.DEFAULT


@pytest.mark.asyncio
async def test_permission_denied_without_channel_id():
    notifier = DiscordNotifier(make_bot(make_channel()), 0)
    assert await notifier.request_permission() is Permission.DENIED


@pytest.mark.asyncio
async def test_permission_denied_when_channel_missing():
    notifier = DiscordNotifier(make_bot(None), 123)
    assert await notifier.request_permission() is Permission.DENIED


@pytest.mark.asyncio
@pytest.mark.parametrize("can_send, expected", [(True, Permission.GRANTED), (False, Permission.DENIED)])
async def test_permission_follows_send_messages(can_send, expected):
    notifier = DiscordNotifier(make_bot(make_channel(can_send)), 123)
    assert await notifier.request_permission() is expected


@pytest.mark.asyncio
async def test_permission_granted_in_dm():
    channel = make_channel()
    channel.guild = None
    notifier = DiscordNotifier(make_bot(channel), 123)

    assert await notifier.request_permission() is Permission.GRANTED


@pytest.mark.asyncio
async def test_deliver_sends_embed():
    channel = make_channel()
    notifier = DiscordNotifier(make_bot(channel), 123)

    await notifier.deliver("Pay rent", "Transfer to landlord", "notif-0001")

    kwargs = channel.send.await_args.kwargs
    assert kwargs["content"] == "**Reminder**"
    assert kwargs["embed"].title == "Pay rent"
    assert kwargs["embed"].description == "Transfer to landlord"
    assert kwargs["embed"].footer.text == "notif-0001"


@pytest.mark.asyncio
async def test_deliver_without_channel_raises():
    notifier = DiscordNotifier(make_bot(None), 123)

    with pytest.raises(RuntimeError):
        await notifier.deliver("Pay rent", "", "notif-0001")
