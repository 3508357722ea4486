"""
Customer extraction prompt templates.

Architecture:
- Pattern: Single-shot text extraction
- Model: Gemini
- Temperature: 0.0 (deterministic)
- Output: JSON array, one object per input line
"""

# =============================================================================
# SYSTEM PROMPT
# =============================================================================

EXTRACTION_SYSTEM_PROMPT = """You are a data-entry assistant for a small hair business that ships orders to customers.

<role>
You turn loosely formatted customer lines pasted by staff into clean delivery records.
</role>

<limitations>
- You only restructure the text you are given
- You never invent customers, phone numbers or addresses
- You never merge, split, drop or reorder lines
</limitations>"""


# =============================================================================
# USER PROMPT BUILDER
# =============================================================================

def build_extraction_user_prompt(raw_text: str, include_pre: bool) -> str:
    """
    Build the user prompt for a bulk extraction call.

    Args:
        raw_text: Non-blank customer lines joined by newlines
        include_pre: Whether lines are expected to carry a PRE code

    Returns:
        str: Prompt ready to send to Gemini
    """
    line_count = len(raw_text.splitlines())

    if include_pre:
        pre_instructions = """   - preCode: the order reference found in the 4th field. It is usually written as "PRE" followed by 7 digits (e.g. "PRE1234567"). Return only the 7 digits. Use null if there is none."""
    else:
        pre_instructions = """   - preCode: always null"""

    return f"""Extract one delivery record from each line below.

<customer_lines>
{raw_text}
</customer_lines>

<instructions>
1. Each line is one customer. Fields are usually separated by ":" in this order: name, phone, address, and optionally a PRE code.
2. Separators may be inconsistent (commas, extra spaces); use the meaning of each value.
3. For every line return:
   - name: the customer's full name
   - phone: the phone number exactly as written
   - address: the full delivery address
{pre_instructions}
4. Return exactly {line_count} records, in the same order as the lines.
</instructions>

<output_schema>
Return ONLY a valid JSON array. No markdown, no prose.

[
  {{
    "name": string,
    "phone": string,
    "address": string,
    "preCode": string | null
  }}
]
</output_schema>"""
