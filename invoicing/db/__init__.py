"""
Database access layer for the invoicing backend.

Includes:
- Supabase client initialization (shared server-side client)

Table access itself lives in the services package.
"""

from .client import get_supabase_client

__all__ = ["get_supabase_client"]
