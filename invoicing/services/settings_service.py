"""
Settings persistence service.

Handles reading and writing the app_setting key/value table.
Settings are created lazily on first write, updated in place and never
deleted. Values are always strings.
"""

import base64
import logging
import os
from typing import Any, Dict, List, Optional, cast

from supabase import Client

from invoicing.config import settings
from invoicing.utils.constants import SETTING_KEYS

logger = logging.getLogger(__name__)

SETTINGS_TABLE = "app_setting"


async def get_setting(supabase_client: Client, key: str) -> Optional[str]:
    """
    Fetch a setting value by key.

    Args:
        supabase_client: Supabase client
        key: Setting key (see SETTING_KEYS)

    Returns:
        The stored string value, or None if the key was never written
    """
    result = (
        supabase_client.table(SETTINGS_TABLE)
        .select("key, value")
        .eq("key", key)
        .execute()
    )

    if not result.data or len(result.data) == 0:
        logger.debug(f"Setting '{key}' not found")
        return None

    row = cast(Dict[str, Any], result.data[0])
    return str(row.get("value"))


async def set_setting(supabase_client: Client, key: str, value: str) -> str:
    """
    Create or overwrite a setting.

    Args:
        supabase_client: Supabase client
        key: Setting key
        value: New string value

    Returns:
        The persisted value

    Raises:
        Exception: If the database operation returns no row
    """
    result = (
        supabase_client.table(SETTINGS_TABLE)
        .upsert({"key": key, "value": value}, on_conflict="key")
        .execute()
    )

    if not result.data or len(result.data) == 0:
        raise Exception(f"Failed to save setting '{key}': no data returned")

    logger.info(f"Setting '{key}' saved")

    row = cast(Dict[str, Any], result.data[0])
    return str(row.get("value"))


async def ensure_setting(supabase_client: Client, key: str, default: str) -> str:
    """
    Return a setting, inserting ``default`` first if the key does not exist.

    The insert ignores duplicates, so two requests seeding the same key at
    once both end up reading whichever value won.
    """
    existing = await get_setting(supabase_client, key)
    if existing is not None:
        return existing

    logger.info(f"Seeding setting '{key}' with its default value")
    (
        supabase_client.table(SETTINGS_TABLE)
        .upsert({"key": key, "value": default}, on_conflict="key", ignore_duplicates=True)
        .execute()
    )

    seeded = await get_setting(supabase_client, key)
    if seeded is None:
        raise Exception(f"Failed to seed setting '{key}'")

    return seeded


async def compare_and_set_setting(
    supabase_client: Client,
    key: str,
    expected: str,
    new_value: str,
) -> bool:
    """
    Atomically replace a setting value only if it still equals ``expected``.

    This is a single conditional UPDATE (``WHERE key = ? AND value = ?``), so
    of several concurrent writers reading the same value exactly one wins.

    Returns:
        True if the row was updated, False if the stored value had changed
    """
    result = (
        supabase_client.table(SETTINGS_TABLE)
        .update({"value": new_value})
        .eq("key", key)
        .eq("value", expected)
        .execute()
    )

    rows = cast(List[Dict[str, Any]], result.data or [])
    updated = len(rows) > 0

    if not updated:
        logger.warning(f"Compare-and-set lost for setting '{key}'")

    return updated


def _load_default_logo() -> Optional[str]:
    """Read DEFAULT_LOGO_PATH as a PNG data URI, if the file exists."""
    logo_path = settings.DEFAULT_LOGO_PATH
    if not logo_path or not os.path.exists(logo_path):
        return None

    with open(logo_path, "rb") as logo_file:
        encoded = base64.b64encode(logo_file.read()).decode("utf-8")

    return f"data:image/png;base64,{encoded}"


async def get_logo(supabase_client: Client) -> Optional[str]:
    """
    Fetch the brand logo data URI.

    On first read, if no logo was ever uploaded and the bundled default logo
    file exists, it is stored as the logo and returned.
    """
    logo = await get_setting(supabase_client, SETTING_KEYS["APP_LOGO"])
    if logo is not None:
        return logo

    default_logo = _load_default_logo()
    if default_logo is None:
        return None

    logger.info("Seeding brand logo from bundled default asset")
    return await set_setting(supabase_client, SETTING_KEYS["APP_LOGO"], default_logo)


async def set_logo(supabase_client: Client, logo: str) -> str:
    """Store a new brand logo data URI."""
    return await set_setting(supabase_client, SETTING_KEYS["APP_LOGO"], logo)
