"""
Customer Extraction Runner

Single-shot LLM extraction workflow. Sends the pasted bulk customer lines to
Gemini and returns one structured record per line.
"""

import json
import logging
from typing import Any, List

from google import genai
from google.genai import types

from invoicing.agents.extraction.prompts import (
    EXTRACTION_SYSTEM_PROMPT,
    build_extraction_user_prompt,
)
from invoicing.agents.extraction.types import (
    ExtractedCustomer,
    ExtractionConfigError,
    ExtractionError,
    Extractor,
)
from invoicing.config import settings

logger = logging.getLogger(__name__)


def _strip_code_fence(text: str) -> str:
    """Remove a ```json ... ``` wrapper if the model added one anyway."""
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def _as_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def parse_extraction_response(response_text: str) -> List[ExtractedCustomer]:
    """
    Parse the model's JSON output into customer records.

    Raises:
        ExtractionError: If the text is not JSON, not a JSON array, or holds
            something other than objects
    """
    cleaned = _strip_code_fence(response_text.strip())

    try:
        result = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse extraction response as JSON: {e}")
        raise ExtractionError("AI response is not valid JSON", raw_response=response_text)

    if not isinstance(result, list):
        logger.error(f"Extraction response is a {type(result).__name__}, not a list")
        raise ExtractionError("AI response is not a JSON array", raw_response=response_text)

    customers: List[ExtractedCustomer] = []
    for item in result:
        if not isinstance(item, dict):
            raise ExtractionError(
                "AI response contains a non-object entry",
                raw_response=response_text
            )
        pre_code = item.get("preCode")
        customers.append({
            "name": _as_text(item.get("name")),
            "phone": _as_text(item.get("phone")),
            "address": _as_text(item.get("address")),
            "preCode": None if pre_code is None else str(pre_code),
        })

    return customers


def run_extraction_agent(raw_text: str, include_pre: bool) -> List[ExtractedCustomer]:
    """
    Extract structured customer records from bulk pasted text using Gemini.

    Args:
        raw_text: Non-blank customer lines joined by newlines
        include_pre: Whether the lines are expected to carry PRE codes

    Returns:
        One ExtractedCustomer per line, in the order the model returned them

    Raises:
        ExtractionConfigError: If GOOGLE_API_KEY is not configured
        ExtractionError: If the call fails or the output cannot be parsed

    Notes:
        - Blocking call; async callers should run it in a worker thread
        - Does NOT log the customer lines themselves (PII)
    """
    if not settings.GOOGLE_API_KEY:
        logger.error("GOOGLE_API_KEY not configured")
        raise ExtractionConfigError(
            "GOOGLE_API_KEY is not configured. "
            "Please set it in your .env file to use bulk extraction."
        )

    logger.info(f"Extraction invoked for {len(raw_text.splitlines())} lines")

    try:
        client = genai.Client(api_key=settings.GOOGLE_API_KEY)

        config = types.GenerateContentConfig(
            system_instruction=EXTRACTION_SYSTEM_PROMPT,
            temperature=0.0,  # Deterministic for structured extraction
            response_mime_type="application/json"
        )

        response = client.models.generate_content(
            model=settings.EXTRACTION_MODEL,
            contents=build_extraction_user_prompt(raw_text, include_pre),
            config=config
        )
    except Exception as e:
        logger.error(f"Extraction request failed: {e}", exc_info=True)
        raise ExtractionError(f"AI service request failed: {e}") from e

    response_text = (response.text or "").strip()
    if not response_text:
        logger.error("Extraction model returned an empty response")
        raise ExtractionError("AI service returned an empty response", raw_response="")

    customers = parse_extraction_response(response_text)

    logger.info(f"Extraction completed: {len(customers)} records")

    return customers


def get_extractor() -> Extractor:
    """FastAPI dependency returning the extractor used for bulk processing."""
    return run_extraction_agent
