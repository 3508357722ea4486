"""
Bulk invoice processing.

Flow for one batch:
1. Split the paste into non-blank lines (1..BULK_MAX_LINES, checked before
   any AI call)
2. Ask the extractor for one record per line
3. Reject the whole batch if the output is unusable or the record count
   does not match the line count
4. Reconcile each record's PRE code against its source line
5. Allocate a number and persist each invoice independently; a failing row
   is reported and the batch carries on

A row that fails after its number was allocated keeps that number consumed.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from supabase import Client

from invoicing.agents.extraction import (
    ExtractedCustomer,
    ExtractionError,
    Extractor,
    normalize_pre_code,
    pre_code_from_line,
    split_bulk_lines,
)
from invoicing.config import settings
from invoicing.services.invoice_service import create_invoice
from invoicing.services.numbering_service import allocate_one, parse_invoice_number

logger = logging.getLogger(__name__)


class BulkInputError(ValueError):
    """Raised when a bulk request is rejected before extraction."""


def reconcile_pre_code(
    line: str,
    ai_pre_code: Optional[str],
    include_pre: bool,
) -> Optional[str]:
    """
    Resolve the PRE code for one customer.

    The 4th colon-delimited field of the source line wins when it strips to
    exactly 7 digits; the AI's value is only a fallback, held to the same
    7-digit rule.
    """
    if not include_pre:
        return None

    from_line = pre_code_from_line(line)
    if from_line is not None:
        return from_line

    return normalize_pre_code(ai_pre_code)


async def process_bulk_invoices(
    supabase_client: Client,
    raw_data: str,
    include_pre: bool,
    date: str,
    extractor: Extractor,
) -> List[Dict[str, Any]]:
    """
    Extract, number and persist a batch of customers.

    Args:
        supabase_client: Supabase client
        raw_data: Pasted customer lines
        include_pre: Whether to resolve PRE codes
        date: Display date shared by every invoice in the batch
        extractor: Extraction capability (Gemini in production)

    Returns:
        One result per input line, in input order:
        ``{"line", "success", "invoice"?, "invoice_number"?, "error"?}``

    Raises:
        BulkInputError: Empty batch or more than BULK_MAX_LINES lines
        ExtractionError: Unusable extractor output (whole batch fails)
        ExtractionConfigError: Extractor not configured
    """
    lines = split_bulk_lines(raw_data)

    if not lines:
        raise BulkInputError("No customer data provided")

    max_lines = settings.BULK_MAX_LINES
    if len(lines) > max_lines:
        raise BulkInputError(
            f"Too many customers: {len(lines)} lines (maximum {max_lines} per batch)"
        )

    logger.info(f"Bulk batch started: {len(lines)} lines, include_pre={include_pre}")

    customers: List[ExtractedCustomer] = await asyncio.to_thread(
        extractor, "\n".join(lines), include_pre
    )

    if len(customers) != len(lines):
        logger.error(
            f"Extraction returned {len(customers)} records for {len(lines)} lines"
        )
        raise ExtractionError(
            f"AI returned {len(customers)} customers for {len(lines)} input lines",
            raw_response=json.dumps(customers),
        )

    results: List[Dict[str, Any]] = []

    for index, (line, customer) in enumerate(zip(lines, customers), start=1):
        name = (customer.get("name") or "").strip()
        if not name:
            logger.warning(f"Bulk row {index}: no customer name extracted")
            results.append({
                "line": index,
                "success": False,
                "error": "Could not extract a customer name from this line",
            })
            continue

        pre_code = reconcile_pre_code(line, customer.get("preCode"), include_pre)
        invoice_number: Optional[str] = None

        try:
            invoice_number = await allocate_one(supabase_client)
            invoice = await create_invoice(
                supabase_client=supabase_client,
                invoice_number=invoice_number,
                sequence=parse_invoice_number(invoice_number),
                date=date,
                customer_name=name,
                customer_phone=(customer.get("phone") or "").strip(),
                customer_address=(customer.get("address") or "").strip(),
                pre_code=pre_code,
            )
            results.append({
                "line": index,
                "success": True,
                "invoice": invoice,
                "invoice_number": invoice_number,
            })
        except Exception as e:
            logger.error(
                f"Bulk row {index} failed (number={invoice_number}): {e}",
                exc_info=True
            )
            results.append({
                "line": index,
                "success": False,
                "invoice_number": invoice_number,
                "error": str(e),
            })

    succeeded = sum(1 for result in results if result["success"])
    logger.info(f"Bulk batch finished: {succeeded}/{len(results)} invoices created")

    return results
