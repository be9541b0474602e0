"""Discord gateway listener that forwards messages to the PDF bridge."""

import asyncio
import logging
import os

import discord
import requests
from discord import app_commands
from dotenv import load_dotenv
from pdf_bridge.models import BridgeReply, InboundEvent
from pdf_bridge.outcomes import GENERIC_FAILURE_NOTICE

load_dotenv()
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("discord_listener")

DISCORD_BOT_TOKEN = os.environ.get("DISCORD_BOT_TOKEN")
PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL")
DISCORD_CHANNEL_IDS = os.environ.get("DISCORD_CHANNEL_IDS", "")
ALLOWED_CHANNEL_IDS = {channel.strip() for channel in DISCORD_CHANNEL_IDS.split(",") if channel.strip()}
DISCORD_MAX_LEN = 2000
DEFAULT_TIMEOUT_SECONDS = 180.0
STATUS_TIMEOUT_SECONDS = 5.0
GREETING = "Hello! Send me a PDF or a URL and I'll forward it to your reMarkable™. Type `help` for the commands."

if not DISCORD_BOT_TOKEN:
    raise RuntimeError("DISCORD_BOT_TOKEN is required.")  # noqa: TRY003, EM101
if not PUBLIC_BASE_URL:
    raise RuntimeError("PUBLIC_BASE_URL is required.")  # noqa: TRY003, EM101
BRIDGE_EVENTS_URL = f"{PUBLIC_BASE_URL.rstrip('/')}/events/message"
BRIDGE_STATUS_URL = f"{PUBLIC_BASE_URL.rstrip('/')}/session/status"

intents = discord.Intents.default()
intents.message_content = True
client = discord.Client(intents=intents)
tree = app_commands.CommandTree(client)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _chunk_text(text: str, max_len: int = DISCORD_MAX_LEN) -> list[str]:
    if not text:
        return []
    chunks = []
    while text:
        if len(text) <= max_len:
            chunks.append(text)
            break
        split_at = text.rfind("\n", 0, max_len)
        if split_at == -1:
            split_at = text.rfind(" ", 0, max_len)
        if split_at == -1:
            split_at = max_len
        chunks.append(text[:split_at].rstrip())
        text = text[split_at:].lstrip()
    return chunks


def _is_registered() -> bool | None:
    try:
        response = requests.get(BRIDGE_STATUS_URL, timeout=STATUS_TIMEOUT_SECONDS)
        response.raise_for_status()
        return bool(response.json().get("registered"))
    except (requests.RequestException, ValueError):
        return None


def _is_served_channel(channel: object) -> bool:
    """DMs are always served; guild channels only when allow-listed (or no list is set)."""
    if isinstance(channel, discord.DMChannel):
        return True
    if not ALLOWED_CHANNEL_IDS:
        return True
    return str(getattr(channel, "id", "")) in ALLOWED_CHANNEL_IDS


def _to_events(message: discord.Message) -> list[InboundEvent]:
    """Normalize a Discord message into one event per attachment, or one text event."""
    common = {
        "provider": "discord",
        "room_id": str(message.channel.id),
        "sender_id": str(message.author.id),
        "bot_user_id": str(client.user.id) if client.user else None,
        "message_id": str(message.id),
    }
    content = (message.content or "").strip()
    if message.attachments:
        return [
            InboundEvent(
                **common,
                kind="file",
                body=content,
                file_name=attachment.filename,
                mime_type=attachment.content_type,
                content_url=attachment.url,
            )
            for attachment in message.attachments
        ]
    if content:
        return [InboundEvent(**common, kind="text", body=content)]
    return [InboundEvent(**common, kind="other")]


def _send_to_bridge(
    url: str,
    event: InboundEvent,
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> BridgeReply:
    """Post the normalized event to the bridge and parse its reply."""
    response = requests.post(url, json=event.model_dump(), timeout=timeout_seconds)
    response.raise_for_status()
    return BridgeReply.model_validate(response.json())


# ---------------------------------------------------------------------------
# Slash Commands
# ---------------------------------------------------------------------------


@tree.command(name="status", description="Show whether the bot is registered in the reMarkable cloud.")
async def status_command(interaction: discord.Interaction) -> None:
    """Report the registration state of the bridge.

    Args:
        interaction: Discord interaction payload for the slash command.

    Returns:
        None.

    """
    status = await asyncio.to_thread(_is_registered)
    if status is True:
        text = "The bot is registered in the reMarkable™ cloud."
    elif status is False:
        text = "The bot is not registered yet. Use `register <code>` to connect it."
    else:
        text = "The bridge service is unreachable right now."
    await interaction.response.send_message(text, ephemeral=True)


# ---------------------------------------------------------------------------
# Event Handlers
# ---------------------------------------------------------------------------


@client.event
async def on_ready() -> None:
    """Log the bot identity once connected."""
    logger.info("Logged in as %s", client.user)
    try:
        await tree.sync()
    except Exception:
        logger.exception("Failed to sync slash commands")


@client.event
async def on_guild_join(guild: discord.Guild) -> None:
    """Greet a guild the bot was just added to."""
    logger.info("Joined guild %s", guild.id)
    channel = guild.system_channel
    if channel is None:
        return
    await channel.send(GREETING)


@client.event
async def on_message(message: discord.Message) -> None:
    """Forward a message to the bridge and post the notice it returns.

    Args:
        message: Incoming Discord message event payload.

    Returns:
        None.

    """
    if not _is_served_channel(message.channel):
        return

    for event in _to_events(message):
        try:
            reply_obj = await asyncio.to_thread(
                _send_to_bridge,
                BRIDGE_EVENTS_URL,
                event,
            )
        except Exception:
            logger.exception("Failed to call bridge")
            await message.channel.send(GENERIC_FAILURE_NOTICE)
            continue

        for part in _chunk_text(reply_obj.reply):
            await message.channel.send(part)


def main() -> None:
    """Run the Discord gateway client."""
    assert DISCORD_BOT_TOKEN is not None
    client.run(DISCORD_BOT_TOKEN)


if __name__ == "__main__":
    main()
