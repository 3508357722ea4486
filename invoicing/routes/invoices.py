"""
Invoice API endpoints.

Flow:
1. POST /api/invoices - Create one invoice with the next number
2. GET /api/invoices - Invoice history, newest first
3. GET /api/invoices/{id}/export - Download a rendered PDF/JPEG
4. POST /api/invoices/bulk-process - Extract, number and save up to
   BULK_MAX_LINES invoices from pasted customer lines
"""

import asyncio
import logging
from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from supabase import Client

from invoicing.agents.extraction import (
    ExtractionConfigError,
    ExtractionError,
    Extractor,
    get_extractor,
)
from invoicing.auth.dependencies import require_session
from invoicing.db.client import get_supabase_client
from invoicing.schemas.invoices import (
    BulkProcessRequest,
    BulkProcessResponse,
    BulkRowResult,
    ExportFormat,
    InvoiceCreateRequest,
    InvoiceCreateResponse,
    InvoiceResponse,
)
from invoicing.services import (
    MEDIA_TYPES,
    BulkInputError,
    InvoiceNumberConflictError,
    InvoiceNumberValidationError,
    allocate_one,
    claim,
    create_invoice,
    export_filename,
    get_invoice_by_id,
    get_logo,
    list_invoices,
    parse_invoice_number,
    peek_next,
    process_bulk_invoices,
    render_invoice,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post(
    "",
    response_model=InvoiceCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an invoice",
    description="""
    Create a single invoice.

    This endpoint:
    - Claims the submitted invoiceNumber if it is still the next number,
      or allocates the next number when none is submitted
    - Advances the counter BEFORE saving, so a failed save leaves a gap,
      never a duplicate
    - Returns the saved invoice and the new next number

    Errors:
    - 400 for invalid fields (including a preCode that is not 7 digits)
    - 409 if the submitted number was already issued
    """
)
async def create_invoice_endpoint(
    request: InvoiceCreateRequest,
    session: Annotated[str, Depends(require_session)],
    supabase_client: Annotated[Client, Depends(get_supabase_client)],
) -> InvoiceCreateResponse:
    # --- Number allocation ---
    try:
        if request.invoice_number:
            requested = parse_invoice_number(request.invoice_number)
            invoice_number = await claim(supabase_client, requested)
        else:
            invoice_number = await allocate_one(supabase_client)
    except InvoiceNumberValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_invoice_number", "details": str(e)}
        )
    except InvoiceNumberConflictError as e:
        logger.warning(f"Invoice number conflict: {e}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": "invoice_number_conflict",
                "details": str(e),
                "next_invoice_number": e.expected_next,
            }
        )
    except Exception as e:
        logger.error(f"Failed to allocate invoice number: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "internal_error", "details": "Failed to allocate invoice number"}
        )

    # --- Persistence ---
    try:
        invoice = await create_invoice(
            supabase_client=supabase_client,
            invoice_number=invoice_number,
            sequence=parse_invoice_number(invoice_number),
            date=request.date,
            customer_name=request.customer_name,
            customer_phone=request.customer_phone,
            customer_address=request.customer_address,
            pre_code=request.pre_code,
        )
    except Exception as e:
        logger.error(
            f"Failed to save invoice {invoice_number} (number stays consumed): {e}",
            exc_info=True
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "internal_error", "details": "Failed to save invoice"}
        )

    # The invoice is saved; a failed counter read must not turn this into an error
    try:
        next_number = await peek_next(supabase_client)
    except Exception as e:
        logger.warning(f"Could not read invoice counter after saving {invoice_number}: {e}")
        next_number = invoice["sequence"] + 1

    return InvoiceCreateResponse(
        invoice=InvoiceResponse.model_validate(invoice),
        next_invoice_number=next_number,
    )


@router.get(
    "",
    response_model=List[InvoiceResponse],
    status_code=status.HTTP_200_OK,
    summary="List recent invoices",
    description="Return the most recent invoices (at most INVOICE_HISTORY_LIMIT), newest first."
)
async def list_invoices_endpoint(
    session: Annotated[str, Depends(require_session)],
    supabase_client: Annotated[Client, Depends(get_supabase_client)],
) -> List[InvoiceResponse]:
    try:
        invoices = await list_invoices(supabase_client)
    except Exception as e:
        logger.error(f"Failed to fetch invoices: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "internal_error", "details": "Failed to fetch invoices"}
        )

    return [InvoiceResponse.model_validate(invoice) for invoice in invoices]


@router.get(
    "/{invoice_id}/export",
    status_code=status.HTTP_200_OK,
    summary="Export an invoice as PDF or JPEG",
    description="""
    Render a saved invoice at print size (70 cm x 50 cm) and return it as a
    download named after the invoice number.
    """,
    responses={
        200: {"content": {"application/pdf": {}, "image/jpeg": {}}},
        404: {"description": "Invoice not found"},
    },
)
async def export_invoice(
    invoice_id: UUID,
    session: Annotated[str, Depends(require_session)],
    supabase_client: Annotated[Client, Depends(get_supabase_client)],
    format: Annotated[ExportFormat, Query(description="Export format")] = "pdf",
) -> Response:
    try:
        invoice = await get_invoice_by_id(supabase_client, str(invoice_id))
        logo = await get_logo(supabase_client) if invoice else None
    except Exception as e:
        logger.error(f"Failed to load invoice {invoice_id} for export: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "internal_error", "details": "Failed to load invoice"}
        )

    if not invoice:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "details": f"Invoice {invoice_id} not found"}
        )

    try:
        # Rendering is CPU-bound; keep it off the event loop
        content = await asyncio.to_thread(render_invoice, invoice, logo, format)
    except Exception as e:
        logger.error(f"Failed to render invoice {invoice_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "render_error", "details": "Failed to render invoice"}
        )

    filename = export_filename(invoice["invoice_number"], format)
    return Response(
        content=content,
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/bulk-process",
    response_model=BulkProcessResponse,
    status_code=status.HTTP_200_OK,
    summary="Create invoices from pasted customer lines",
    description="""
    Turn up to BULK_MAX_LINES pasted customer lines into invoices.

    This endpoint:
    - Rejects empty input and oversized batches BEFORE calling the AI
    - Sends all lines to the extractor in one call
    - Prefers a 7-digit PRE code found in the 4th colon field of each line
      over the AI's answer
    - Numbers and saves each row independently; failed rows are reported
      and do not stop the batch

    Errors:
    - 400 for empty input or too many lines
    - 500 if the AI service is not configured
    - 502 if the AI output is unusable (the raw response is included)
    """
)
async def bulk_process(
    request: BulkProcessRequest,
    session: Annotated[str, Depends(require_session)],
    supabase_client: Annotated[Client, Depends(get_supabase_client)],
    extractor: Annotated[Extractor, Depends(get_extractor)],
) -> BulkProcessResponse:
    try:
        results = await process_bulk_invoices(
            supabase_client=supabase_client,
            raw_data=request.raw_data,
            include_pre=request.include_pre,
            date=request.date,
            extractor=extractor,
        )
    except BulkInputError as e:
        logger.warning(f"Bulk request rejected: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_bulk_input", "details": str(e)}
        )
    except ExtractionConfigError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "ai_not_configured", "details": str(e)}
        )
    except ExtractionError as e:
        logger.error(f"Bulk extraction failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "error": "ai_extraction_failed",
                "details": str(e),
                "raw_response": e.raw_response,
            }
        )
    except Exception as e:
        logger.error(f"Bulk processing failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "internal_error", "details": "Failed to process bulk invoices"}
        )

    rows = [
        BulkRowResult(
            line=result["line"],
            success=result["success"],
            invoice=(
                InvoiceResponse.model_validate(result["invoice"])
                if result.get("invoice") else None
            ),
            invoice_number=result.get("invoice_number"),
            error=result.get("error"),
        )
        for result in results
    ]

    return BulkProcessResponse(format=request.format, invoices=rows)
