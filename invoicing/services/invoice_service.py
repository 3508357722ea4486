"""
Invoice persistence service.

RULES:
1. Invoices are append-only: created once, never updated or deleted
2. invoice_number is unique; sequence holds its numeric part for ordering
3. Numbers come from numbering_service; this module never mints them
"""

import logging
from typing import Any, Dict, List, Optional, cast

from supabase import Client

from invoicing.config import settings

logger = logging.getLogger(__name__)

INVOICE_TABLE = "invoice"


async def create_invoice(
    supabase_client: Client,
    invoice_number: str,
    sequence: int,
    date: str,
    customer_name: str,
    customer_phone: str,
    customer_address: str,
    pre_code: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create an invoice record in Supabase.

    Args:
        supabase_client: Supabase client
        invoice_number: Formatted number (e.g. "BLH#2800")
        sequence: Numeric part of invoice_number
        date: Display date supplied by the caller (not parsed)
        customer_name: Customer name
        customer_phone: Customer phone number
        customer_address: Delivery address (may span several lines)
        pre_code: Optional 7-digit PRE code

    Returns:
        The created invoice record (includes id and created_at)

    Raises:
        Exception: If the database operation fails or returns no row
    """
    invoice_data = {
        "invoice_number": invoice_number,
        "sequence": sequence,
        "date": date,
        "customer_name": customer_name,
        "customer_phone": customer_phone,
        "customer_address": customer_address,
        "pre_code": pre_code,
    }

    logger.info(f"Creating invoice {invoice_number}")

    result = supabase_client.table(INVOICE_TABLE).insert(invoice_data).execute()

    if not result.data or len(result.data) == 0:
        raise Exception("Failed to create invoice: no data returned")

    created_invoice = cast(Dict[str, Any], result.data[0])

    logger.info(
        f"Invoice created successfully: id={created_invoice.get('id')}, "
        f"number={invoice_number}"
    )

    return created_invoice


async def list_invoices(
    supabase_client: Client,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    Fetch the most recent invoices, highest invoice number first.

    Args:
        supabase_client: Supabase client
        limit: Maximum number of invoices (defaults to INVOICE_HISTORY_LIMIT)
    """
    if limit is None:
        limit = settings.INVOICE_HISTORY_LIMIT

    result = (
        supabase_client.table(INVOICE_TABLE)
        .select("*")
        .order("sequence", desc=True)
        .limit(limit)
        .execute()
    )

    invoices = cast(List[Dict[str, Any]], result.data)

    logger.info(f"Fetched {len(invoices)} invoices")

    return invoices


async def get_invoice_by_id(
    supabase_client: Client,
    invoice_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Fetch a single invoice by its ID.

    Returns:
        Invoice record if found, None otherwise
    """
    result = (
        supabase_client.table(INVOICE_TABLE)
        .select("*")
        .eq("id", invoice_id)
        .execute()
    )

    if not result.data or len(result.data) == 0:
        logger.warning(f"Invoice {invoice_id} not found")
        return None

    return cast(Dict[str, Any], result.data[0])
