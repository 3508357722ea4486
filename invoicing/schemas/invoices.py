"""
Pydantic schemas for invoice endpoints.

These models define the request/response contracts for single invoice
creation, history, and bulk processing.
"""

import re
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from invoicing.schemas import CamelModel

_PRE_CODE_PATTERN = re.compile(r"^\d{7}$")

ExportFormat = Literal["pdf", "jpeg"]


# --- Invoice models ---

class InvoiceResponse(CamelModel):
    """A persisted invoice."""
    id: str = Field(..., description="Invoice UUID")
    invoice_number: str = Field(..., description="Formatted number, e.g. BLH#2800")
    date: str = Field(..., description="Display date as entered")
    customer_name: str = Field(..., description="Customer name")
    customer_phone: str = Field(..., description="Customer phone")
    customer_address: str = Field(..., description="Delivery address")
    pre_code: Optional[str] = Field(None, description="7-digit PRE code")
    created_at: Optional[str] = Field(None, description="ISO-8601 creation timestamp")


class InvoiceCreateRequest(CamelModel):
    """
    Request for POST /api/invoices.

    ``invoiceNumber`` is the number the client was shown as next. It is
    claimed only if it is still next; otherwise the request fails with 409.
    When omitted, the server allocates the next number itself.
    """
    invoice_number: Optional[str] = Field(
        None,
        description="Number shown to the user as next, e.g. BLH#2800"
    )
    date: str = Field(..., description="Display date", min_length=1, max_length=50)
    customer_name: str = Field(..., description="Customer name", min_length=1, max_length=200)
    customer_phone: str = Field(..., description="Customer phone", min_length=1, max_length=50)
    customer_address: str = Field(
        ...,
        description="Delivery address (may span several lines)",
        min_length=1,
        max_length=500
    )
    pre_code: Optional[str] = Field(None, description="Optional 7-digit PRE code")

    @field_validator("pre_code")
    @classmethod
    def validate_pre_code(cls, value: Optional[str]) -> Optional[str]:
        """Empty means no PRE code; anything else must be exactly 7 digits."""
        if value is None or value == "":
            return None
        if not _PRE_CODE_PATTERN.match(value):
            raise ValueError("preCode must be exactly 7 digits")
        return value


class InvoiceCreateResponse(CamelModel):
    """Response for POST /api/invoices."""
    invoice: InvoiceResponse
    next_invoice_number: int = Field(..., description="Number the next invoice will get")


# --- Bulk models ---

class BulkProcessRequest(CamelModel):
    """
    Request for POST /api/invoices/bulk-process.

    ``rawData`` holds one customer per line, typically
    ``name:phone:address:PRE<7 digits>``. Blank lines are ignored.
    """
    raw_data: str = Field(..., description="Pasted customer lines")
    include_pre: bool = Field(False, description="Resolve PRE codes for each line")
    date: str = Field(..., description="Display date for every invoice", min_length=1)
    format: ExportFormat = Field("pdf", description="Export format the client will download")


class BulkRowResult(CamelModel):
    """Outcome for one input line. Exactly one of invoice/error is set."""
    line: int = Field(..., description="1-based position among non-blank lines")
    success: bool
    invoice: Optional[InvoiceResponse] = None
    invoice_number: Optional[str] = Field(
        None,
        description="Allocated number; set on failures that happened after allocation"
    )
    error: Optional[str] = None


class BulkProcessResponse(CamelModel):
    """Response for POST /api/invoices/bulk-process."""
    format: ExportFormat
    invoices: List[BulkRowResult]
