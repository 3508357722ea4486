"""
Deterministic parsing of colon-delimited customer lines.

Used by the bulk reconciler to read the PRE code straight from the 4th
field of the source line, and as a rule-based extractor with the same
contract as the Gemini extractor.
"""

import re
from typing import List, Optional

from invoicing.agents.extraction.types import ExtractedCustomer

PRE_CODE_LENGTH = 7

_NON_DIGITS = re.compile(r"\D")


def split_bulk_lines(raw_data: str) -> List[str]:
    """Return the stripped, non-blank lines of a bulk paste."""
    return [line.strip() for line in raw_data.splitlines() if line.strip()]


def normalize_pre_code(value: Optional[object]) -> Optional[str]:
    """
    Strip everything but digits; keep the result only if it is exactly
    PRE_CODE_LENGTH digits long.
    """
    if value is None:
        return None
    digits = _NON_DIGITS.sub("", str(value))
    return digits if len(digits) == PRE_CODE_LENGTH else None


def pre_code_from_line(line: str) -> Optional[str]:
    """Read the PRE code from the 4th colon-delimited field of ``line``."""
    fields = line.split(":")
    if len(fields) < 4:
        return None
    return normalize_pre_code(fields[3])


def parse_customer_line(line: str, include_pre: bool) -> ExtractedCustomer:
    fields = [field.strip() for field in line.split(":")]
    fields += [""] * (3 - len(fields))

    return {
        "name": fields[0],
        "phone": fields[1],
        "address": fields[2],
        "preCode": pre_code_from_line(line) if include_pre else None,
    }


def parse_customer_lines(raw_text: str, include_pre: bool) -> List[ExtractedCustomer]:
    """Rule-based extractor: one record per non-blank line, no network."""
    return [parse_customer_line(line, include_pre) for line in split_bulk_lines(raw_text)]
