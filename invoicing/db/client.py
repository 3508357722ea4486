"""
Supabase client factory.

The invoicing backend is the only consumer of its database: there is no
per-user data and no Row Level Security split, so one server-side client is
created lazily and shared by every request.

Tables used (see sql/schema.sql):
- app_setting: key/value settings (password, session, logo, counter)
- invoice: finalized invoices, unique by invoice_number
"""

import logging

from invoicing.config import settings
from supabase import Client, create_client

logger = logging.getLogger(__name__)

_supabase_client: Client | None = None


def get_supabase_client() -> Client:
    """
    Return the shared Supabase client, creating it on first use.

    Used as a FastAPI dependency by every route that touches storage, so
    tests can swap it out through ``app.dependency_overrides``.

    Returns:
        A Supabase client authenticated with SUPABASE_KEY.

    Raises:
        ValueError: If SUPABASE_URL or SUPABASE_KEY is not configured.
    """
    global _supabase_client

    if _supabase_client is None:
        if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_KEY must be configured "
                "to access invoice storage."
            )

        _supabase_client = create_client(
            supabase_url=settings.SUPABASE_URL,
            supabase_key=settings.SUPABASE_KEY
        )
        logger.info("Created Supabase client for invoice storage")

    return _supabase_client
