"""
Pydantic schemas for settings endpoints (logo and invoice counter).
"""

from typing import Optional

from pydantic import Field, StrictInt, field_validator

from invoicing.schemas import CamelModel


# --- Logo ---

class LogoResponse(CamelModel):
    """Brand logo as a data URI, or null if none is configured."""
    logo: Optional[str] = Field(None, description="data:image/...;base64 URI")


class LogoUpdateRequest(CamelModel):
    """Request for POST /api/settings/logo."""
    logo: str = Field(..., description="data:image/...;base64 URI", min_length=1)

    @field_validator("logo")
    @classmethod
    def validate_data_uri(cls, value: str) -> str:
        if not value.startswith("data:image/") or "," not in value:
            raise ValueError("logo must be a data:image/... URI")
        return value


# --- Invoice counter ---

class LastInvoiceResponse(CamelModel):
    """
    Current state of the invoice counter.

    ``lastInvoiceNumber`` is the highest number issued so far;
    ``nextInvoiceNumber`` is what the next invoice will get.
    """
    last_invoice_number: int = Field(..., description="Highest number issued so far")
    next_invoice_number: int = Field(..., description="Number the next invoice will get")

    model_config = {
        "json_schema_extra": {
            "example": {"lastInvoiceNumber": 2812, "nextInvoiceNumber": 2813}
        }
    }


class UpdateLastInvoiceRequest(CamelModel):
    """
    Request for PATCH /api/settings/last-invoice.

    The counter can only move forward and never below the configured floor.
    """
    invoice_number: StrictInt = Field(..., description="New last-issued number")


class IncrementInvoiceResponse(CamelModel):
    """Response for POST /api/settings/last-invoice/increment."""
    invoice_number: str = Field(..., description="Allocated number, e.g. BLH#2800")
