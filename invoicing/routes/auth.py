"""
Session gate API endpoints.

Flow:
1. POST /api/auth/verify - Exchange the shared password for a session token
2. GET /api/auth/session - Check that a stored token is still the active one
"""

import logging
from typing import Annotated, Union

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from supabase import Client

from invoicing.auth.dependencies import require_session
from invoicing.db.client import get_supabase_client
from invoicing.schemas.auth import (
    SessionResponse,
    VerifyPasswordRequest,
    VerifyPasswordResponse,
)
from invoicing.services import verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/verify",
    response_model=VerifyPasswordResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Verify the admin password",
    description="""
    Check the shared admin password and issue a session token.

    This endpoint:
    - Seeds the default password on the very first call
    - Returns a fresh token on success and makes it the only valid session
    - Returns 401 with success=false on a wrong password, leaving the
      current session untouched
    """,
    responses={401: {"model": VerifyPasswordResponse}},
)
async def verify(
    request: VerifyPasswordRequest,
    supabase_client: Annotated[Client, Depends(get_supabase_client)],
) -> Union[VerifyPasswordResponse, JSONResponse]:
    try:
        token = await verify_password(supabase_client, request.password)
    except Exception as e:
        logger.error(f"Password verification failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "internal_error", "details": "Failed to verify password"}
        )

    if token is None:
        failure = VerifyPasswordResponse(success=False, message="Invalid password")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=failure.model_dump(by_alias=True, exclude_none=True),
        )

    return VerifyPasswordResponse(success=True, token=token)


@router.get(
    "/session",
    response_model=SessionResponse,
    status_code=status.HTTP_200_OK,
    summary="Validate the current session",
    description="""
    Returns {"valid": true} when the x-app-session header carries the active
    session token, 401 otherwise. Clients call this on boot to decide
    whether to show the password prompt.
    """
)
async def check_session(
    session: Annotated[str, Depends(require_session)],
) -> SessionResponse:
    return SessionResponse(valid=True)
