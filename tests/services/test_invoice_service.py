"""
Tests for invoice persistence service.
"""

import pytest
from unittest.mock import Mock

from invoicing.services.invoice_service import (
    create_invoice,
    get_invoice_by_id,
    list_invoices,
)
from tests.fakes import FakeDatabaseError, FakeSupabaseClient


def _invoice_kwargs(number: int, **overrides):
    data = {
        "invoice_number": f"BLH#{number}",
        "sequence": number,
        "date": "19/10/2026",
        "customer_name": "Jane Doe",
        "customer_phone": "0908",
        "customer_address": "Lagos",
        "pre_code": None,
    }
    data.update(overrides)
    return data


class TestCreateInvoice:
    """Test invoice creation."""

    @pytest.mark.asyncio
    async def test_create_invoice_inserts_snake_case_row(self):
        """Verify create_invoice builds the row and calls Supabase correctly."""
        mock_client = Mock()
        mock_table = Mock()
        mock_insert = Mock()
        mock_execute = Mock()

        mock_client.table.return_value = mock_table
        mock_table.insert.return_value = mock_insert
        mock_execute.data = [{"id": "invoice-uuid-123", "invoice_number": "BLH#2800"}]
        mock_insert.execute.return_value = mock_execute

        result = await create_invoice(
            supabase_client=mock_client,
            **_invoice_kwargs(2800, pre_code="1234567")
        )

        mock_client.table.assert_called_once_with("invoice")

        inserted_data = mock_table.insert.call_args[0][0]
        assert inserted_data == {
            "invoice_number": "BLH#2800",
            "sequence": 2800,
            "date": "19/10/2026",
            "customer_name": "Jane Doe",
            "customer_phone": "0908",
            "customer_address": "Lagos",
            "pre_code": "1234567",
        }
        assert result["id"] == "invoice-uuid-123"

    @pytest.mark.asyncio
    async def test_create_invoice_raises_on_empty_result(self):
        """Test that create_invoice raises when Supabase returns no data."""
        mock_client = Mock()
        mock_execute = Mock()
        mock_execute.data = []
        mock_client.table.return_value.insert.return_value.execute.return_value = mock_execute

        with pytest.raises(Exception, match="Failed to create invoice"):
            await create_invoice(supabase_client=mock_client, **_invoice_kwargs(2800))

    @pytest.mark.asyncio
    async def test_duplicate_invoice_number_is_rejected(self):
        db = FakeSupabaseClient()
        await create_invoice(supabase_client=db, **_invoice_kwargs(2800))

        with pytest.raises(FakeDatabaseError):
            await create_invoice(supabase_client=db, **_invoice_kwargs(2800))

        assert len(db.rows("invoice")) == 1


class TestListInvoices:
    """Test invoice history."""

    @pytest.mark.asyncio
    async def test_newest_first_by_sequence(self):
        db = FakeSupabaseClient()
        # Inserted out of order on purpose; "BLH#10000" sorts before "BLH#9999" as text
        for number in (9999, 10000, 2800):
            await create_invoice(supabase_client=db, **_invoice_kwargs(number))

        invoices = await list_invoices(db)

        assert [invoice["invoice_number"] for invoice in invoices] == [
            "BLH#10000", "BLH#9999", "BLH#2800"
        ]

    @pytest.mark.asyncio
    async def test_limit_applies(self):
        db = FakeSupabaseClient()
        for number in range(2800, 2805):
            await create_invoice(supabase_client=db, **_invoice_kwargs(number))

        invoices = await list_invoices(db, limit=2)

        assert [invoice["sequence"] for invoice in invoices] == [2804, 2803]

    @pytest.mark.asyncio
    async def test_uses_history_limit_by_default(self):
        mock_client = Mock()
        chain = mock_client.table.return_value.select.return_value.order.return_value
        chain.limit.return_value.execute.return_value = Mock(data=[])

        await list_invoices(mock_client)

        mock_client.table.return_value.select.return_value.order.assert_called_once_with(
            "sequence", desc=True
        )
        chain.limit.assert_called_once_with(100)


class TestGetInvoiceById:

    @pytest.mark.asyncio
    async def test_found_and_missing(self):
        db = FakeSupabaseClient()
        created = await create_invoice(supabase_client=db, **_invoice_kwargs(2800))

        assert (await get_invoice_by_id(db, created["id"]))["invoice_number"] == "BLH#2800"
        assert await get_invoice_by_id(db, "does-not-exist") is None
