"""
AI Components for the invoicing backend.

1. Customer Extraction (Single-Shot Text Workflow)
   - Uses Gemini to structure pasted bulk customer lines
   - NOT an ADK agent - uses direct Gemini API
   - Has a rule-based twin with the same contract for offline use
"""

from invoicing.agents.extraction import (
    ExtractedCustomer,
    ExtractionConfigError,
    ExtractionError,
    parse_customer_lines,
    run_extraction_agent,
)

__all__ = [
    "run_extraction_agent",
    "parse_customer_lines",
    "ExtractedCustomer",
    "ExtractionConfigError",
    "ExtractionError",
]
