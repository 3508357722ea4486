"""
Pydantic schemas for the session gate endpoints.
"""

from typing import Optional

from pydantic import ConfigDict, Field

from invoicing.schemas import CamelModel


class VerifyPasswordRequest(CamelModel):
    """
    Request for POST /api/auth/verify.

    The password is compared exactly as sent; surrounding whitespace is
    part of it.
    """
    password: str = Field(..., description="Shared admin password")

    model_config = ConfigDict(str_strip_whitespace=False)


class VerifyPasswordResponse(CamelModel):
    """
    Response for POST /api/auth/verify.

    On success ``token`` carries the new session token, which the client
    sends back in the x-app-session header. Any previously issued token
    stops working.
    """
    success: bool = Field(..., description="Whether the password matched")
    token: Optional[str] = Field(None, description="New session token (success only)")
    message: Optional[str] = Field(None, description="Failure reason")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"success": True, "token": "1760867200000-5f0c6e0f2b5a4e0c9d3c1b2a7e8f9a10"},
                {"success": False, "message": "Invalid password"}
            ]
        }
    }


class SessionResponse(CamelModel):
    """Response for GET /api/auth/session."""
    valid: bool = Field(..., description="Always true; invalid sessions get a 401")
