"""
Customer Extraction Package

Turns pasted bulk customer lines into structured delivery records.

Main Components:
- types: TypedDict and error definitions shared by all extractors
- prompts: System prompt and user prompt builder for Gemini
- agent: Gemini runner (single-shot, JSON output)
- rules: Deterministic colon-field parsing (PRE codes, rule-based extractor)

Usage:
    from invoicing.agents.extraction import run_extraction_agent

    customers = run_extraction_agent(
        raw_text="Jane Doe:0908:Lagos:PRE1234567",
        include_pre=True,
    )
"""

from invoicing.agents.extraction.agent import (
    get_extractor,
    parse_extraction_response,
    run_extraction_agent,
)
from invoicing.agents.extraction.rules import (
    normalize_pre_code,
    parse_customer_lines,
    pre_code_from_line,
    split_bulk_lines,
)
from invoicing.agents.extraction.types import (
    ExtractedCustomer,
    ExtractionConfigError,
    ExtractionError,
    Extractor,
)

__all__ = [
    # Runners
    "run_extraction_agent",
    "parse_customer_lines",
    "get_extractor",
    "parse_extraction_response",
    # Rules
    "normalize_pre_code",
    "pre_code_from_line",
    "split_bulk_lines",
    # Types
    "ExtractedCustomer",
    "Extractor",
    "ExtractionConfigError",
    "ExtractionError",
]
