"""
Single-admin session gate.

There is one shared password and one global session token, both stored in
app_setting. A successful login overwrites the token, which silently
revokes whatever token was issued before. There is no logout and no expiry.
"""

import hmac
import logging
import time
from typing import Optional
from uuid import uuid4

from supabase import Client

from invoicing.config import settings
from invoicing.services.settings_service import ensure_setting, get_setting, set_setting
from invoicing.utils.constants import SETTING_KEYS

logger = logging.getLogger(__name__)


def generate_session_token() -> str:
    """Build an opaque token from the current time and a random component."""
    return f"{int(time.time() * 1000)}-{uuid4().hex}"


async def verify_password(supabase_client: Client, password: str) -> Optional[str]:
    """
    Check a submitted password and, on success, issue a new session token.

    If no password was ever stored, the configured default is stored first
    and the submission is checked against it.

    Args:
        supabase_client: Supabase client
        password: Password submitted by the client

    Returns:
        The new session token, or None if the password is wrong. A wrong
        password never touches the stored session.
    """
    stored_password = await ensure_setting(
        supabase_client,
        SETTING_KEYS["APP_PASSWORD"],
        settings.DEFAULT_APP_PASSWORD,
    )

    if not hmac.compare_digest(password.encode("utf-8"), stored_password.encode("utf-8")):
        logger.warning("Password verification failed")
        return None

    token = generate_session_token()
    await set_setting(supabase_client, SETTING_KEYS["ACTIVE_SESSION"], token)

    logger.info("Password verified; issued new session token")
    return token


async def is_session_valid(supabase_client: Client, token: Optional[str]) -> bool:
    """
    Check whether ``token`` is the currently active session token.

    Returns False without reading storage when no token is supplied.
    """
    if not token:
        return False

    active_session = await get_setting(supabase_client, SETTING_KEYS["ACTIVE_SESSION"])
    if active_session is None:
        return False

    return hmac.compare_digest(token.encode("utf-8"), active_session.encode("utf-8"))
