"""Global configuration for Discord Reminders."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Discord
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN")

# Channel where reminders are managed and notifications are posted
REMINDERS_CHANNEL_ID = int(os.getenv("REMINDERS_CHANNEL_ID", "0") or 0)

# Local data (reminders.json, settings.json)
DATA_DIR = Path(os.getenv("REMINDERS_DATA_DIR") or Path(os.getenv("LOCALAPPDATA", ".")) / "discord-reminders")

# Logging
LOG_DIR = Path(os.getenv("REMINDERS_LOG_DIR") or DATA_DIR / "logs")
LOG_DIR.mkdir(parents=True, exist_ok=True)
LOG_LEVEL = os.getenv("REMINDERS_LOG_LEVEL", "INFO").upper()
