"""
Tests for the Gemini customer extractor.

The google-genai client is mocked; no network calls are made.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from invoicing.agents.extraction import (
    ExtractionConfigError,
    ExtractionError,
    get_extractor,
    parse_extraction_response,
    run_extraction_agent,
)
from invoicing.config import settings

MODEL_OUTPUT = json.dumps([
    {"name": "Jane Doe", "phone": "0908", "address": "Lagos", "preCode": "1234567"},
    {"name": "John Roe", "phone": 8012, "address": None, "preCode": None},
])


@pytest.fixture
def mock_genai():
    with patch("invoicing.agents.extraction.agent.genai") as genai_module:
        yield genai_module


def _set_response(genai_module, text):
    response = MagicMock()
    response.text = text
    genai_module.Client.return_value.models.generate_content.return_value = response


class TestParseExtractionResponse:

    def test_parses_and_normalizes_records(self):
        customers = parse_extraction_response(MODEL_OUTPUT)

        assert customers == [
            {"name": "Jane Doe", "phone": "0908", "address": "Lagos", "preCode": "1234567"},
            {"name": "John Roe", "phone": "8012", "address": "", "preCode": None},
        ]

    def test_strips_markdown_fence(self):
        customers = parse_extraction_response(f"```json\n{MODEL_OUTPUT}\n```")

        assert len(customers) == 2

    @pytest.mark.parametrize("text", ["not json", '{"name": "x"}', '["just a string"]'])
    def test_unusable_output_keeps_raw_response(self, text):
        with pytest.raises(ExtractionError) as exc_info:
            parse_extraction_response(text)

        assert exc_info.value.raw_response == text


class TestRunExtractionAgent:

    def test_calls_gemini_with_json_config(self, mock_genai):
        _set_response(mock_genai, MODEL_OUTPUT)

        customers = run_extraction_agent("Jane Doe:0908:Lagos:PRE1234567\nJohn Roe:8012", True)

        assert [customer["name"] for customer in customers] == ["Jane Doe", "John Roe"]
        mock_genai.Client.assert_called_once_with(api_key=settings.GOOGLE_API_KEY)

        call_kwargs = mock_genai.Client.return_value.models.generate_content.call_args.kwargs
        assert call_kwargs["model"] == settings.EXTRACTION_MODEL
        assert call_kwargs["config"].temperature == 0.0
        assert call_kwargs["config"].response_mime_type == "application/json"
        assert "Jane Doe:0908:Lagos:PRE1234567" in call_kwargs["contents"]

    def test_missing_api_key(self, mock_genai):
        with patch.object(settings, "GOOGLE_API_KEY", ""):
            with pytest.raises(ExtractionConfigError):
                run_extraction_agent("Jane Doe:0908:Lagos", False)

        mock_genai.Client.assert_not_called()

    def test_sdk_failure_becomes_extraction_error(self, mock_genai):
        mock_genai.Client.return_value.models.generate_content.side_effect = RuntimeError("503")

        with pytest.raises(ExtractionError, match="503"):
            run_extraction_agent("Jane Doe:0908:Lagos", False)

    def test_empty_response(self, mock_genai):
        _set_response(mock_genai, None)

        with pytest.raises(ExtractionError, match="empty"):
            run_extraction_agent("Jane Doe:0908:Lagos", False)

    def test_malformed_response_keeps_raw_text(self, mock_genai):
        _set_response(mock_genai, "Sorry, I can't help with that.")

        with pytest.raises(ExtractionError) as exc_info:
            run_extraction_agent("Jane Doe:0908:Lagos", False)

        assert exc_info.value.raw_response == "Sorry, I can't help with that."


def test_default_extractor_is_gemini():
    assert get_extractor() is run_extraction_agent
