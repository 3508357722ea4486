"""
Settings API endpoints.

Covers the brand logo and the invoice counter. The counter is only ever
changed through numbering_service, so administrative edits obey the same
forward-only rules as normal allocation.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from supabase import Client

from invoicing.auth.dependencies import require_session, require_session_for_logo
from invoicing.db.client import get_supabase_client
from invoicing.schemas.settings import (
    IncrementInvoiceResponse,
    LastInvoiceResponse,
    LogoResponse,
    LogoUpdateRequest,
    UpdateLastInvoiceRequest,
)
from invoicing.services import (
    InvoiceNumberConflictError,
    InvoiceNumberValidationError,
    allocate_one,
    get_counter,
    get_logo,
    set_counter,
    set_logo,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get(
    "/logo",
    response_model=LogoResponse,
    status_code=status.HTTP_200_OK,
    summary="Get the brand logo",
    description="""
    Return the brand logo as a data URI (null if none is configured).

    On first read the bundled default logo is stored, if present.
    Public unless LOGO_READ_REQUIRES_SESSION is enabled.
    """
)
async def read_logo(
    session: Annotated[str | None, Depends(require_session_for_logo)],
    supabase_client: Annotated[Client, Depends(get_supabase_client)],
) -> LogoResponse:
    try:
        logo = await get_logo(supabase_client)
    except Exception as e:
        logger.error(f"Failed to fetch logo: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "internal_error", "details": "Failed to fetch logo"}
        )

    return LogoResponse(logo=logo)


@router.post(
    "/logo",
    response_model=LogoResponse,
    status_code=status.HTTP_200_OK,
    summary="Replace the brand logo",
)
async def update_logo(
    request: LogoUpdateRequest,
    session: Annotated[str, Depends(require_session)],
    supabase_client: Annotated[Client, Depends(get_supabase_client)],
) -> LogoResponse:
    """Store a new logo data URI; it is used by every subsequent export."""
    try:
        logo = await set_logo(supabase_client, request.logo)
    except Exception as e:
        logger.error(f"Failed to save logo: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "internal_error", "details": "Failed to save logo"}
        )

    logger.info(f"Logo updated ({len(logo)} characters)")
    return LogoResponse(logo=logo)


@router.get(
    "/last-invoice",
    response_model=LastInvoiceResponse,
    status_code=status.HTTP_200_OK,
    summary="Get the invoice counter",
    description="""
    Return the last issued invoice number and the next one.

    Read-only: calling this never changes the counter.
    """
)
async def read_last_invoice(
    session: Annotated[str, Depends(require_session)],
    supabase_client: Annotated[Client, Depends(get_supabase_client)],
) -> LastInvoiceResponse:
    try:
        current = await get_counter(supabase_client)
    except Exception as e:
        logger.error(f"Failed to read invoice counter: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "internal_error", "details": "Failed to read invoice counter"}
        )

    return LastInvoiceResponse(last_invoice_number=current, next_invoice_number=current + 1)


@router.patch(
    "/last-invoice",
    response_model=LastInvoiceResponse,
    status_code=status.HTTP_200_OK,
    summary="Move the invoice counter forward",
    description="""
    Set the last issued invoice number.

    Rejected with 400 if the value is below the configured floor or below
    the current counter. Setting the current value again is a no-op.
    """
)
async def update_last_invoice(
    request: UpdateLastInvoiceRequest,
    session: Annotated[str, Depends(require_session)],
    supabase_client: Annotated[Client, Depends(get_supabase_client)],
) -> LastInvoiceResponse:
    try:
        value = await set_counter(supabase_client, request.invoice_number)
    except InvoiceNumberValidationError as e:
        logger.warning(f"Rejected counter update to {request.invoice_number}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_invoice_number", "details": str(e)}
        )
    except InvoiceNumberConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "invoice_number_conflict", "details": str(e)}
        )
    except Exception as e:
        logger.error(f"Failed to update invoice counter: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "internal_error", "details": "Failed to update invoice counter"}
        )

    return LastInvoiceResponse(last_invoice_number=value, next_invoice_number=value + 1)


@router.post(
    "/last-invoice/increment",
    response_model=IncrementInvoiceResponse,
    status_code=status.HTTP_200_OK,
    summary="Allocate the next invoice number",
    description="""
    Consume and return the next invoice number without creating an invoice.
    """
)
async def increment_last_invoice(
    session: Annotated[str, Depends(require_session)],
    supabase_client: Annotated[Client, Depends(get_supabase_client)],
) -> IncrementInvoiceResponse:
    try:
        invoice_number = await allocate_one(supabase_client)
    except InvoiceNumberConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "invoice_number_conflict", "details": str(e)}
        )
    except Exception as e:
        logger.error(f"Failed to allocate invoice number: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "internal_error", "details": "Failed to allocate invoice number"}
        )

    return IncrementInvoiceResponse(invoice_number=invoice_number)
