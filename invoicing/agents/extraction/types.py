"""
Customer extraction type definitions.

Input/output contracts shared by the Gemini extractor and the rule-based
extractor. All types are JSON-serializable.
"""

from typing import Callable, List, Optional, TypedDict


class ExtractedCustomer(TypedDict):
    """One customer record, in input-line order."""
    name: str
    phone: str
    address: str
    preCode: Optional[str]  # as returned by the extractor, not yet validated


# extract(text, include_pre) -> one record per non-blank input line
Extractor = Callable[[str, bool], List[ExtractedCustomer]]


class ExtractionConfigError(Exception):
    """Raised when the AI extractor cannot run because it is not configured."""


class ExtractionError(Exception):
    """
    Raised when extraction output cannot be used for the batch.

    Attributes:
        raw_response: The unparsed model output, kept for operator debugging
    """

    def __init__(self, message: str, raw_response: Optional[str] = None):
        super().__init__(message)
        self.raw_response = raw_response
