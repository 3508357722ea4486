"""
Tests for POST /api/invoices/bulk-process.

The extractor dependency is overridden in conftest with a Mock that
defaults to the rule-based parser.
"""

from invoicing.agents.extraction import ExtractionConfigError, ExtractionError

RAW = "Jane Doe:0908:Lagos:PRE1234567\nJohn Roe:0809:Abuja:PRE7654321"


def _payload(**overrides):
    data = {"rawData": RAW, "includePre": True, "date": "19/10/2026", "format": "pdf"}
    data.update(overrides)
    return data


def test_bulk_process(client, fake_db, session_headers, extractor):
    response = client.post("/api/invoices/bulk-process", json=_payload(), headers=session_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["format"] == "pdf"
    assert [row["line"] for row in body["invoices"]] == [1, 2]
    assert all(row["success"] for row in body["invoices"])
    assert body["invoices"][0]["invoice"]["preCode"] == "1234567"
    assert body["invoices"][1]["invoiceNumber"] == "BLH#2801"
    extractor.assert_called_once_with(RAW, True)


def test_ai_pre_code_does_not_override_line(client, session_headers, extractor):
    extractor.side_effect = None
    extractor.return_value = [
        {"name": "Jane Doe", "phone": "0908", "address": "Lagos", "preCode": "12345"},
        {"name": "John Roe", "phone": "0809", "address": "Abuja", "preCode": "1111111"},
    ]

    response = client.post("/api/invoices/bulk-process", json=_payload(), headers=session_headers)

    codes = [row["invoice"]["preCode"] for row in response.json()["invoices"]]
    assert codes == ["1234567", "7654321"]


def test_partial_failure_reported_per_row(client, fake_db, session_headers):
    fake_db.fail_insert = (
        lambda table, row: table == "invoice" and row["customer_name"] == "Jane Doe"
    )

    response = client.post("/api/invoices/bulk-process", json=_payload(), headers=session_headers)

    assert response.status_code == 200
    first, second = response.json()["invoices"]
    assert first["success"] is False
    assert first["invoiceNumber"] == "BLH#2800"
    assert first["error"]
    assert first["invoice"] is None
    assert second["success"] is True
    assert fake_db.setting("last_invoice_number") == "2801"


def test_more_than_twenty_lines_is_400(client, fake_db, session_headers, extractor):
    raw = "\n".join(f"Customer {i}:080{i}:Lagos" for i in range(21))

    response = client.post(
        "/api/invoices/bulk-process", json=_payload(rawData=raw), headers=session_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "invalid_bulk_input"
    extractor.assert_not_called()
    assert not fake_db.touched("invoice")


def test_empty_input_is_400(client, session_headers, extractor):
    response = client.post(
        "/api/invoices/bulk-process", json=_payload(rawData="\n \n"), headers=session_headers
    )

    assert response.status_code == 400
    extractor.assert_not_called()


def test_unknown_format_is_400(client, session_headers, extractor):
    response = client.post(
        "/api/invoices/bulk-process", json=_payload(format="png"), headers=session_headers
    )

    assert response.status_code == 400
    extractor.assert_not_called()


def test_ai_not_configured_is_500(client, session_headers, extractor):
    extractor.side_effect = ExtractionConfigError("GOOGLE_API_KEY is not configured")

    response = client.post("/api/invoices/bulk-process", json=_payload(), headers=session_headers)

    assert response.status_code == 500
    assert response.json()["detail"]["error"] == "ai_not_configured"


def test_unparseable_ai_output_is_502_with_raw_response(client, fake_db, session_headers, extractor):
    extractor.side_effect = ExtractionError("AI response is not valid JSON", raw_response="oops")

    response = client.post("/api/invoices/bulk-process", json=_payload(), headers=session_headers)

    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["error"] == "ai_extraction_failed"
    assert detail["raw_response"] == "oops"
    assert not fake_db.touched("invoice")


def test_count_mismatch_is_502(client, fake_db, session_headers, extractor):
    extractor.side_effect = None
    extractor.return_value = [
        {"name": "Jane Doe", "phone": "0908", "address": "Lagos", "preCode": None}
    ]

    response = client.post("/api/invoices/bulk-process", json=_payload(), headers=session_headers)

    assert response.status_code == 502
    assert "Jane Doe" in response.json()["detail"]["raw_response"]
    assert fake_db.setting("last_invoice_number") is None


def test_requires_session(client, fake_db, extractor):
    response = client.post("/api/invoices/bulk-process", json=_payload())

    assert response.status_code == 401
    extractor.assert_not_called()
    assert not fake_db.touched("invoice")
