"""
Service layer for the invoicing backend.

Contains the business logic that routes call into:
- Settings and session gate persistence
- Invoice number allocation (compare-and-set counter)
- Invoice persistence and listing
- Bulk extraction reconciliation
- Rendering invoices to PDF/JPEG

Services act as the glue between routes (HTTP layer) and agents/database.
"""

from .bulk_service import BulkInputError, process_bulk_invoices, reconcile_pre_code
from .invoice_service import create_invoice, get_invoice_by_id, list_invoices
from .numbering_service import (
    InvoiceNumberConflictError,
    InvoiceNumberValidationError,
    allocate_batch,
    allocate_one,
    claim,
    format_invoice_number,
    get_counter,
    parse_invoice_number,
    peek_next,
    set_counter,
)
from .render_service import MEDIA_TYPES, export_filename, render_invoice
from .session_service import generate_session_token, is_session_valid, verify_password
from .settings_service import (
    compare_and_set_setting,
    ensure_setting,
    get_logo,
    get_setting,
    set_logo,
    set_setting,
)

__all__ = [
    # Settings
    "get_setting",
    "set_setting",
    "ensure_setting",
    "compare_and_set_setting",
    "get_logo",
    "set_logo",
    # Session gate
    "generate_session_token",
    "verify_password",
    "is_session_valid",
    # Numbering
    "format_invoice_number",
    "parse_invoice_number",
    "get_counter",
    "peek_next",
    "allocate_one",
    "allocate_batch",
    "claim",
    "set_counter",
    "InvoiceNumberValidationError",
    "InvoiceNumberConflictError",
    # Invoices
    "create_invoice",
    "list_invoices",
    "get_invoice_by_id",
    # Bulk
    "process_bulk_invoices",
    "reconcile_pre_code",
    "BulkInputError",
    # Rendering
    "render_invoice",
    "export_filename",
    "MEDIA_TYPES",
]
