"""
FastAPI dependency functions for the session gate.

The client sends the token it received from POST /api/auth/verify in the
``x-app-session`` header. A request is authorised only if that token equals
the single active session token stored in app_setting.
"""

import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from supabase import Client

from invoicing.config import settings
from invoicing.db.client import get_supabase_client
from invoicing.services.session_service import is_session_valid
from invoicing.utils.constants import SESSION_HEADER

logger = logging.getLogger(__name__)


async def require_session(
    supabase_client: Annotated[Client, Depends(get_supabase_client)],
    x_app_session: Annotated[str | None, Header(alias=SESSION_HEADER)] = None,
) -> str:
    """
    Verify the session header and return the session token.

    Raises:
        HTTPException: 401 if the header is missing or the token is not the
            active session; 500 if the session could not be checked

    Usage:
        @router.get("/protected")
        async def protected_route(
            session: Annotated[str, Depends(require_session)]
        ):
            pass
    """
    if not x_app_session:
        logger.warning(f"Missing {SESSION_HEADER} header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "unauthorized", "details": "Missing session token"}
        )

    try:
        valid = await is_session_valid(supabase_client, x_app_session)
    except Exception as e:
        logger.error(f"Failed to check session: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "internal_error", "details": "Failed to verify session"}
        )

    if not valid:
        logger.warning("Rejected request with an inactive session token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "unauthorized", "details": "Invalid or expired session"}
        )

    return x_app_session


async def require_session_for_logo(
    supabase_client: Annotated[Client, Depends(get_supabase_client)],
    x_app_session: Annotated[str | None, Header(alias=SESSION_HEADER)] = None,
) -> str | None:
    """
    Gate for reading the logo.

    The logo read is public unless LOGO_READ_REQUIRES_SESSION is enabled,
    in which case it behaves like require_session.
    """
    if not settings.LOGO_READ_REQUIRES_SESSION:
        return x_app_session

    return await require_session(supabase_client, x_app_session)
