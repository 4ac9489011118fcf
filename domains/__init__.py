"""Domain modules for Discord Reminders."""
