"""Push a copy of the reminder list to a user-provided web app endpoint."""

from datetime import datetime
from typing import Iterable, Optional

import httpx

from logger import logger
from . import config
from .models import Reminder
from .storage import PersistenceError


class BackupError(Exception):
    """Backup did not complete. The message is meant for the user."""


class BackupTransportError(BackupError):
    """The endpoint could not be reached or answered with a non-2xx status."""


class BackupApplicationError(BackupError):
    """The endpoint answered but reported an error."""


async def backup_to_drive(
    web_app_url: str,
    secret_key: str,
    reminders: Iterable[Reminder],
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Send all reminders to the backup web app.

    Args:
        web_app_url: Deployment URL of the backup script
        secret_key: Shared secret the script checks
        reminders: Reminders to back up
        client: Optional client to use (a new one is created otherwise)

    Returns:
        The success message from the script

    Raises:
        BackupTransportError: network failure or non-2xx response
        BackupApplicationError: the script answered with status "error"
    """
    payload = {
        "secret": secret_key,
        "reminders": [r.to_dict() for r in reminders],
    }

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=config.BACKUP_TIMEOUT, follow_redirects=True) as own_client:
                response = await own_client.post(web_app_url, json=payload)
        else:
            response = await client.post(web_app_url, json=payload, follow_redirects=True)
    except httpx.HTTPError as e:
        logger.error(f"Backup request failed: {e}")
        raise BackupTransportError(
            f"Could not connect to the backup script. Check the URL and network. Details: {e}"
        ) from e

    if not response.is_success:
        logger.error(f"Backup endpoint returned {response.status_code}")
        raise BackupTransportError(
            f"Network error: {response.status_code} {response.reason_phrase}"
        )

    try:
        result = response.json()
    except ValueError as e:
        raise BackupApplicationError(f"Backup script returned an invalid response: {e}") from e

    if not isinstance(result, dict):
        raise BackupApplicationError("Backup script returned an invalid response.")

    if result.get("status") == "error":
        logger.error(f"Backup script reported an error: {result.get('message')}")
        raise BackupApplicationError(f"Backup script failed: {result.get('message')}")

    return result.get("message") or "Backup successful."


async def run_backup(store, settings, client: Optional[httpx.AsyncClient] = None) -> str:
    """Back up the store's current collection using the saved settings.

    Records the backup time in settings on success. If that cannot be saved
    the backup still counts, and the returned message says so.
    """
    if not settings.web_app_url:
        raise BackupError("No backup URL configured. Set one with `backup url <url>`.")

    reminders = store.reminders
    message = await backup_to_drive(settings.web_app_url, settings.backup_secret_key, reminders, client)
    logger.info(f"Backed up {len(reminders)} reminders: {message}")

    try:
        settings.last_backup = datetime.now().isoformat(timespec="seconds")
    except PersistenceError as e:
        logger.warning(f"Backup time not recorded: {e}")
        return f"{message} (backup time not recorded: {e})"
    return message
