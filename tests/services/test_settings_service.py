"""
Tests for the app_setting store.
"""

import base64
from unittest.mock import patch

import pytest

from invoicing.config import settings
from invoicing.services.settings_service import (
    compare_and_set_setting,
    ensure_setting,
    get_logo,
    get_setting,
    set_logo,
    set_setting,
)
from tests.fakes import FakeSupabaseClient


@pytest.mark.asyncio
async def test_get_missing_setting_returns_none():
    db = FakeSupabaseClient()

    assert await get_setting(db, "app_password") is None


@pytest.mark.asyncio
async def test_set_setting_creates_then_overwrites():
    db = FakeSupabaseClient()

    await set_setting(db, "app_logo", "first")
    await set_setting(db, "app_logo", "second")

    assert await get_setting(db, "app_logo") == "second"
    assert len(db.rows("app_setting")) == 1


@pytest.mark.asyncio
async def test_ensure_setting_seeds_only_once():
    db = FakeSupabaseClient()

    assert await ensure_setting(db, "last_invoice_number", "2799") == "2799"
    await set_setting(db, "last_invoice_number", "2805")

    # Existing value wins over the default
    assert await ensure_setting(db, "last_invoice_number", "2799") == "2805"


@pytest.mark.asyncio
async def test_compare_and_set_only_applies_to_expected_value():
    db = FakeSupabaseClient()
    db.seed_setting("last_invoice_number", "2800")

    assert await compare_and_set_setting(db, "last_invoice_number", "2799", "2801") is False
    assert db.setting("last_invoice_number") == "2800"

    assert await compare_and_set_setting(db, "last_invoice_number", "2800", "2801") is True
    assert db.setting("last_invoice_number") == "2801"


class TestLogo:

    @pytest.mark.asyncio
    async def test_no_logo_and_no_default_asset(self):
        db = FakeSupabaseClient()

        with patch.object(settings, "DEFAULT_LOGO_PATH", ""):
            assert await get_logo(db) is None

        assert db.setting("app_logo") is None

    @pytest.mark.asyncio
    async def test_default_asset_is_seeded_on_first_read(self, tmp_path):
        db = FakeSupabaseClient()
        logo_file = tmp_path / "logo.png"
        logo_file.write_bytes(b"\x89PNG fake bytes")

        with patch.object(settings, "DEFAULT_LOGO_PATH", str(logo_file)):
            logo = await get_logo(db)

        expected = "data:image/png;base64," + base64.b64encode(b"\x89PNG fake bytes").decode()
        assert logo == expected
        assert db.setting("app_logo") == expected

    @pytest.mark.asyncio
    async def test_uploaded_logo_wins(self):
        db = FakeSupabaseClient()

        await set_logo(db, "data:image/png;base64,AAAA")

        assert await get_logo(db) == "data:image/png;base64,AAAA"
